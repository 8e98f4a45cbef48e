"""
Core data structures for Hashiwokakero boards.

Islands and rivers live in flat lists and refer to each other by integer id.
Each island also records the id of the cluster (connected component) it
currently belongs to.
"""

from collections import deque
from dataclasses import dataclass, field, replace
from typing import Dict, List, Optional, Sequence, Set, Tuple, Union
import json
from pathlib import Path

from ..config import MAX_BRIDGES, MIN_TARGET, MAX_TARGET
from .errors import CapacityExceededError, ConstructionError, ContradictionError


HORIZONTAL = 0
VERTICAL = 1


@dataclass
class Island:
    """Represents an island in the puzzle"""
    id: int
    row: int
    col: int
    target: int
    bridges: int = 0
    available: int = 0
    rivers: List[int] = field(default_factory=list)
    live_rivers: List[int] = field(default_factory=list)
    cluster: int = -1

    @property
    def num_needed(self) -> int:
        """Number of bridges still needed"""
        return self.target - self.bridges

    @property
    def is_complete(self) -> bool:
        return self.bridges == self.target

    def copy(self) -> 'Island':
        return replace(self, rivers=list(self.rivers), live_rivers=list(self.live_rivers))

    def __str__(self):
        return f"[{self.bridges}/{self.target}] (r{self.row}, c{self.col}) a{self.available}"

    def __repr__(self):
        return f"Island({self.row}, {self.col}, target={self.target}, bridges={self.bridges})"


@dataclass
class River:
    """Represents the potential bridge(s) between two adjacent islands"""
    id: int
    islands: Tuple[int, int]
    orientation: int
    to_give: int
    bridges: int = 0
    max_bridges: int = MAX_BRIDGES
    crossings: List[int] = field(default_factory=list)

    @property
    def is_horizontal(self) -> bool:
        return self.orientation == HORIZONTAL

    def connects(self, island_id: int) -> bool:
        """Is island_id one of the two endpoints of this river?"""
        return island_id in self.islands

    def neighbor(self, island_id: int) -> int:
        """Endpoint on the other side of island_id"""
        first, second = self.islands
        return second if first == island_id else first

    def crosses(self, river_id: int) -> bool:
        return river_id in self.crossings

    def copy(self) -> 'River':
        return replace(self, crossings=list(self.crossings))

    def __repr__(self):
        return f"River({self.islands[0]}<->{self.islands[1]}, bridges={self.bridges}, to_give={self.to_give})"


class Cluster:
    """A set of islands transitively joined by at least one bridge"""

    def __init__(self, cluster_id: int, members: Optional[Set[int]] = None):
        self.id = cluster_id
        self.members: Set[int] = set(members or ())

    @classmethod
    def singleton(cls, island: Island) -> 'Cluster':
        return cls(island.id, {island.id})

    def absorb(self, other: 'Cluster'):
        """Take over every member of other"""
        self.members |= other.members

    def edges(self, board: 'Board') -> List[Island]:
        """Members with at least one live river leading out of the cluster"""
        result = []
        for island_id in sorted(self.members):
            island = board.islands[island_id]
            for river_id in island.live_rivers:
                if board.rivers[river_id].neighbor(island_id) not in self.members:
                    result.append(island)
                    break
        return result

    def incomplete_islands(self, board: 'Board') -> List[Island]:
        return [board.islands[i] for i in sorted(self.members)
                if not board.islands[i].is_complete]

    def copy(self) -> 'Cluster':
        return Cluster(self.id, self.members)

    def describe(self, board: 'Board') -> str:
        members = ' '.join(str(board.islands[i]) for i in sorted(self.members))
        edges = ', '.join(str(i) for i in self.edges(board))
        return f"Cluster of size {len(self)}: {members} Edges: [{edges}]"

    def __contains__(self, island_id: int) -> bool:
        return island_id in self.members

    def __len__(self):
        return len(self.members)

    def __iter__(self):
        return iter(sorted(self.members))

    def __repr__(self):
        return f"Cluster({self.id}, size={len(self.members)})"


IslandRef = Union[int, Island]
RiverRef = Union[int, River]


class Board:
    """Mutable Hashiwokakero board with incrementally tracked connectivity"""

    def __init__(self, grid: Sequence[Sequence[Optional[int]]]):
        """
        Build a board from a rectangular grid.

        Args:
            grid: Rows of cells; each cell is None/0 for water or a bridge
                target between 1 and 8 for an island.

        Raises:
            ConstructionError: If rows differ in length or a cell is invalid
        """
        rows = [list(row) for row in grid]
        if not rows:
            raise ConstructionError("board has no rows")

        self.rows = len(rows)
        self.cols = len(rows[0])
        self.grid: List[List[Optional[int]]] = []
        self.islands: List[Island] = []
        self.rivers: List[River] = []
        self._clusters: Dict[int, Cluster] = {}

        for ri, row in enumerate(rows):
            if len(row) != self.cols:
                raise ConstructionError(
                    f"board has {self.cols} cols, but row {ri} has {len(row)} cells")
            self.grid.append([None] * self.cols)
            for ci, cell in enumerate(row):
                target = self._parse_cell(cell, ri, ci)
                if target:
                    self._add_island(target, ri, ci)

        self._create_rivers()

    @staticmethod
    def _parse_cell(cell, row: int, col: int) -> int:
        if cell is None:
            return 0
        try:
            value = int(cell)
        except (TypeError, ValueError) as e:
            raise ConstructionError(f"cannot parse cell {cell!r} at ({row}, {col})") from e
        if value != 0 and not (MIN_TARGET <= value <= MAX_TARGET):
            raise ConstructionError(
                f"island at ({row}, {col}) has invalid target {value}")
        return value

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------
    def _add_island(self, target: int, row: int, col: int) -> Island:
        island = Island(id=len(self.islands), row=row, col=col, target=target)
        cluster = Cluster.singleton(island)
        island.cluster = cluster.id
        self.islands.append(island)
        self.grid[row][col] = island.id
        self._clusters[cluster.id] = cluster
        return island

    def _create_river(self, island_a: int, island_b: int, orientation: int) -> River:
        """Create a river between two islands, initializing its capacity"""
        a = self.islands[island_a]
        b = self.islands[island_b]
        river = River(
            id=len(self.rivers),
            islands=(island_a, island_b),
            orientation=orientation,
            to_give=min(a.target, b.target, MAX_BRIDGES),
        )
        self.rivers.append(river)
        a.rivers.append(river.id)
        b.rivers.append(river.id)
        self._refresh(island_a, island_b)
        return river

    def _create_rivers(self):
        # Horizontal rivers first, so crossings are looked up from the vertical ones
        for ri in range(self.rows):
            left = None
            for ci in range(self.cols):
                right = self.grid[ri][ci]
                if right is None:
                    continue
                if left is not None:
                    self._create_river(left, right, HORIZONTAL)
                left = right

        for ci in range(self.cols):
            top = None
            for ri in range(self.rows):
                bottom = self.grid[ri][ci]
                if bottom is None:
                    continue
                if top is not None:
                    river = self._create_river(top, bottom, VERTICAL)
                    for cross_row in range(self.islands[top].row + 1, ri):
                        crossing = self._horizontal_river_through(cross_row, ci)
                        if crossing is not None:
                            river.crossings.append(crossing.id)
                            crossing.crossings.append(river.id)
                top = bottom

    def _horizontal_river_through(self, row: int, col: int) -> Optional[River]:
        """Horizontal river passing over the empty cell (row, col), if any"""
        left = next((self.grid[row][c] for c in range(col - 1, -1, -1)
                     if self.grid[row][c] is not None), None)
        if left is None:
            return None
        right = next((self.grid[row][c] for c in range(col + 1, self.cols)
                      if self.grid[row][c] is not None), None)
        if right is None:
            return None
        return self.river_with(left, right)

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------
    @classmethod
    def from_string(cls, data: str) -> 'Board':
        """
        Create a board from compact text: one line per row, digits 1-8 are
        islands, any other character is water. Blank lines are skipped.
        """
        lines = [line.strip("\r\n") for line in data.split("\n")]
        lines = [line for line in lines if line]
        if not lines:
            raise ConstructionError("puzzle text is empty")
        grid = [[int(ch) if '1' <= ch <= '8' else None for ch in line] for line in lines]
        return cls(grid)

    @classmethod
    def load_from_has(cls, filepath: Union[str, Path]) -> 'Board':
        """
        Load a board from a .has file.

        Expected .has format:
        Line 1: width height [num_islands]
        Following lines: whitespace separated cells, 1-8 are islands, 0 is water
        """
        filepath = Path(filepath)
        with open(filepath, 'r') as f:
            lines = [line.strip() for line in f.readlines() if line.strip()]

        if not lines:
            raise ConstructionError(f"Empty file: {filepath}")

        dimensions = lines[0].split()
        if len(dimensions) < 2:
            raise ConstructionError(
                f"Invalid format in {filepath}: expected at least 'width height' on first line")
        try:
            width = int(dimensions[0])
            height = int(dimensions[1])
        except ValueError as e:
            raise ConstructionError(f"Invalid dimensions in {filepath}: {lines[0]}") from e

        rows = lines[1:1 + height]
        if len(rows) != height:
            raise ConstructionError(f"{filepath} declares {height} rows but has {len(rows)}")

        grid = []
        for row_idx, line in enumerate(rows):
            cells = line.split()
            if len(cells) != width:
                raise ConstructionError(
                    f"board has {width} cols, but row {row_idx} has {len(cells)} cells")
            # '.' and '#' mark water and obstacles
            grid.append([None if cell in ('.', '#') else cell for cell in cells])
        return cls(grid)

    @classmethod
    def load(cls, filepath: Union[str, Path]) -> 'Board':
        """Load a board from disk, choosing the format by file suffix"""
        filepath = Path(filepath)
        if not filepath.exists():
            raise FileNotFoundError(f"File not found: {filepath}")
        if filepath.suffix == '.has':
            return cls.load_from_has(filepath)
        return cls.from_string(filepath.read_text())

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------
    def island(self, ref: IslandRef) -> Island:
        return ref if isinstance(ref, Island) else self.islands[ref]

    def river(self, ref: RiverRef) -> River:
        return ref if isinstance(ref, River) else self.rivers[ref]

    def island_at(self, row: int, col: int) -> Optional[Island]:
        island_id = self.grid[row][col]
        return None if island_id is None else self.islands[island_id]

    def river_with(self, a: IslandRef, b: IslandRef) -> Optional[River]:
        """River joining islands a and b, or None when they aren't adjacent"""
        a = self.island(a)
        b = self.island(b)
        for river_id in a.rivers:
            river = self.rivers[river_id]
            if river.connects(b.id):
                return river
        return None

    def neighbor(self, river: RiverRef, island: IslandRef) -> Island:
        return self.islands[self.river(river).neighbor(self.island(island).id)]

    @property
    def clusters(self) -> List[Cluster]:
        return list(self._clusters.values())

    @property
    def num_clusters(self) -> int:
        return len(self._clusters)

    def cluster_of(self, island: IslandRef) -> Cluster:
        return self._clusters[self.island(island).cluster]

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------
    def _refresh(self, *island_ids: int):
        """
        Recompute bridge counts, river capacities and live rivers.

        Capping a river at an island's remaining need can tighten the other
        endpoint too, so those endpoints are queued until nothing changes.
        """
        queue = deque(island_ids)
        while queue:
            island = self.islands[queue.popleft()]
            island.bridges = sum(self.rivers[r].bridges for r in island.rivers)
            need = max(island.num_needed, 0)
            for river_id in island.rivers:
                river = self.rivers[river_id]
                if river.to_give > need:
                    river.to_give = need
                    queue.append(river.neighbor(island.id))
            island.live_rivers = [r for r in island.rivers if self.rivers[r].to_give > 0]
            island.available = sum(self.rivers[r].to_give for r in island.live_rivers)

    def _join_clusters(self, keep_id: int, gone_id: int) -> bool:
        if keep_id == gone_id:
            return False
        keep = self._clusters[keep_id]
        gone = self._clusters.pop(gone_id)
        keep.absorb(gone)
        for island_id in gone.members:
            self.islands[island_id].cluster = keep.id
        return True

    def add_bridge(self, river: RiverRef):
        """
        Add one bridge to a river.

        Raises:
            CapacityExceededError: If the river has nothing left to give
        """
        river = self.river(river)
        if river.to_give < 1 or river.bridges >= river.max_bridges:
            raise CapacityExceededError(
                f"river {self.describe_river(river)} has no more bridges to give")
        river.bridges += 1
        river.to_give -= 1
        a, b = river.islands
        self._refresh(a, b)
        self._join_clusters(self.islands[a].cluster, self.islands[b].cluster)
        for crossing_id in river.crossings:
            self.set_to_give(crossing_id, 0)

    def add_bridge_between(self, a: IslandRef, b: IslandRef):
        river = self.river_with(a, b)
        if river is None:
            raise CapacityExceededError(
                f"islands {self.island(a)} and {self.island(b)} are not adjacent")
        self.add_bridge(river)

    def set_to_give(self, river: RiverRef, count: int):
        """Shrink a river's remaining capacity and propagate to its endpoints"""
        river = self.river(river)
        if count < 0:
            raise ValueError(
                f"capacity of river {self.describe_river(river)} cannot be negative: {count}")
        if count > river.to_give:
            raise ValueError(
                f"cannot raise capacity of river {self.describe_river(river)} "
                f"from {river.to_give} to {count}")
        river.to_give = count
        self._refresh(*river.islands)

    def cap_to_give(self, river: RiverRef, limit: int) -> bool:
        """Lower a river's capacity to limit; returns True if it changed"""
        river = self.river(river)
        if river.to_give > limit:
            self.set_to_give(river, max(limit, 0))
            return True
        return False

    def copy(self) -> 'Board':
        """Create an independent copy sharing no mutable state"""
        clone = Board.__new__(Board)
        clone.rows = self.rows
        clone.cols = self.cols
        clone.grid = [list(row) for row in self.grid]
        clone.islands = [island.copy() for island in self.islands]
        clone.rivers = [river.copy() for river in self.rivers]
        clone._clusters = {cid: cluster.copy() for cid, cluster in self._clusters.items()}
        return clone

    # ------------------------------------------------------------------
    # Verification
    # ------------------------------------------------------------------
    def _crossing_conflict(self) -> Optional[str]:
        for river in self.rivers:
            if river.bridges == 0:
                continue
            for crossing_id in river.crossings:
                crossing = self.rivers[crossing_id]
                if crossing.bridges > 0:
                    return (f"bridges {self.describe_river(river)} and "
                            f"{self.describe_river(crossing)} cross, but both have bridges "
                            f"({river.bridges} and {crossing.bridges})")
        return None

    def is_solved(self) -> Tuple[bool, Optional[str]]:
        """Check the full solution; returns (solved, diagnostic)"""
        for river in self.rivers:
            if river.bridges > river.max_bridges:
                return False, (f"river {self.describe_river(river)} has {river.bridges} "
                               f"bridges; max is {river.max_bridges}")

        for island in self.islands:
            if island.bridges != island.target:
                return False, (f"island {island} has {island.bridges} bridges; "
                               f"target is {island.target}")

        if len(self._clusters) != 1:
            return False, (f"islands are divided into {len(self._clusters)} clusters; "
                           f"should have 1")
        cluster = self.clusters[0]
        if len(cluster) != len(self.islands):
            return False, (f"cluster has {len(cluster)} islands; "
                           f"should have all {len(self.islands)}")

        conflict = self._crossing_conflict()
        if conflict:
            return False, conflict
        return True, None

    def has_mistakes(self) -> Tuple[bool, Optional[str]]:
        """Detect states that can no longer be completed; returns (mistake, diagnostic)"""
        for river in self.rivers:
            for island_id in river.islands:
                island = self.islands[island_id]
                if river.bridges > island.target:
                    return True, (f"river {self.describe_river(river)} has {river.bridges} "
                                  f"bridges; island {island} needs {island.target}")

        for island in self.islands:
            if island.available < island.num_needed:
                return True, (f"island {island} needs {island.num_needed} bridges, "
                              f"but only {island.available} are available")

        if len(self._clusters) > 1:
            for cluster in self._clusters.values():
                if not cluster.edges(self):
                    return True, (f"cluster {cluster.describe(self)} has no edges and "
                                  f"does not contain all islands")

        conflict = self._crossing_conflict()
        if conflict:
            return True, conflict
        return False, None

    def assert_consistent(self):
        """Raise ContradictionError if the board has a mistake"""
        mistake, reason = self.has_mistakes()
        if mistake:
            raise ContradictionError(reason)

    # ------------------------------------------------------------------
    # Output
    # ------------------------------------------------------------------
    def describe_river(self, river: RiverRef) -> str:
        river = self.river(river)
        a, b = river.islands
        return f"{self.islands[a]} <=> {self.islands[b]}"

    def render(self, show_clusters: bool = False) -> str:
        """Draw the board; islands show their target, bridges use -, =, | and \" """
        grid = [[' '] * self.cols for _ in range(self.rows)]
        for island in self.islands:
            grid[island.row][island.col] = str(island.target)

        for river in self.rivers:
            if river.bridges == 0:
                continue
            a = self.islands[river.islands[0]]
            b = self.islands[river.islands[1]]
            if river.is_horizontal:
                char = _BRIDGE_CHARS[HORIZONTAL].get(river.bridges, ' ')
                for ci in range(min(a.col, b.col) + 1, max(a.col, b.col)):
                    grid[a.row][ci] = _overlay(char, grid[a.row][ci])
            else:
                char = _BRIDGE_CHARS[VERTICAL].get(river.bridges, ' ')
                for ri in range(min(a.row, b.row) + 1, max(a.row, b.row)):
                    grid[ri][a.col] = _overlay(grid[ri][a.col], char)

        out = [''.join(row) for row in grid]
        if show_clusters:
            out.append(f"Clusters ({len(self._clusters)})")
            out.extend(cluster.describe(self) for cluster in self._clusters.values())
        return '\n'.join(out)

    def to_dict(self) -> dict:
        """Convert board state to a dictionary for serialization"""
        return {
            'rows': self.rows,
            'cols': self.cols,
            'islands': [
                {'row': i.row, 'col': i.col, 'target': i.target, 'bridges': i.bridges}
                for i in self.islands
            ],
            'bridges': [
                {
                    'from': [self.islands[r.islands[0]].row, self.islands[r.islands[0]].col],
                    'to': [self.islands[r.islands[1]].row, self.islands[r.islands[1]].col],
                    'count': r.bridges,
                }
                for r in self.rivers if r.bridges > 0
            ],
        }

    def save(self, filepath: Union[str, Path]):
        """Save board state to JSON file"""
        with open(filepath, 'w') as f:
            json.dump(self.to_dict(), f, indent=2)

    def __str__(self):
        return self.render()

    def __repr__(self):
        return (f"Board({self.rows}x{self.cols}, {len(self.islands)} islands, "
                f"{len(self.rivers)} rivers, {len(self._clusters)} clusters)")


_BRIDGE_CHARS = {
    HORIZONTAL: {1: '-', 2: '='},
    VERTICAL: {1: '|', 2: '"'},
}


def _overlay(horizontal: str, vertical: str) -> str:
    """Combine a horizontal and a vertical bridge char drawn on the same cell"""
    if vertical == '|':
        return {'-': '+', '=': 'F'}.get(horizontal, vertical)
    if vertical == '"':
        return {'-': 'H', '=': '#'}.get(horizontal, vertical)
    return horizontal

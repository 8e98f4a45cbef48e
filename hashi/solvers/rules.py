"""
Propagation rules for Hashiwokakero boards.

Every rule inspects the current board, applies only deductions that hold in
every solution, and returns whether it changed anything. Rules accept an
optional trace callback that receives a one-line description of each change.
"""

from collections import OrderedDict
from typing import Callable, Iterable, List, Optional

from ..core.board import Board, River, RiverRef


TraceCallback = Callable[[str], None]


def must_provide(board: Board, rivers: Iterable[RiverRef], count: int,
                 trace: Optional[TraceCallback] = None) -> bool:
    """
    Force bridges onto rivers that together have to carry count bridges.

    Whatever capacity exceeds count is the slack; each river must take at
    least its capacity minus that slack.
    """
    rivers: List[River] = [board.river(r) for r in rivers]
    excess = sum(r.to_give for r in rivers) - count
    changed = False
    for river in rivers:
        to_add = min(river.to_give, river.to_give - excess)
        while to_add > 0 and river.to_give > 0:
            board.add_bridge(river)
            to_add -= 1
            changed = True
            if trace:
                trace(f"must_provide: bridge on {board.describe_river(river)}")
    return changed


def required_fill(board: Board, trace: Optional[TraceCallback] = None) -> bool:
    """Every island must get its remaining need from its live rivers"""
    changed = False
    for island in board.islands:
        if must_provide(board, list(island.live_rivers), island.num_needed, trace):
            changed = True
    return changed


def cap_to_avoid_joined_isolation(board: Board, trace: Optional[TraceCallback] = None) -> bool:
    """
    Don't let two clusters with a single exit each seal each other off.

    If a cluster's only edge island i reaches an island n whose cluster also
    has a single edge, and both need the same number of bridges, filling
    the river between them would complete both and strand the pair.
    """
    changed = False
    if board.num_clusters <= 2:
        return changed

    for cluster in board.clusters:
        edges = cluster.edges(board)
        if len(edges) != 1:
            continue
        island = edges[0]
        for river_id in list(island.live_rivers):
            neighbor = board.neighbor(river_id, island)
            if len(board.cluster_of(neighbor).edges(board)) != 1:
                continue
            if neighbor.num_needed != island.num_needed:
                continue
            if board.cap_to_give(river_id, neighbor.num_needed - 1):
                changed = True
                if trace:
                    trace(f"joined isolation: capped {board.describe_river(river_id)}")
    return changed


def cap_to_avoid_self_isolation(board: Board, trace: Optional[TraceCallback] = None) -> bool:
    """Don't complete a cluster's last two open islands with one river"""
    changed = False
    if board.num_clusters <= 2:
        return changed

    for cluster in board.clusters:
        incomplete = cluster.incomplete_islands(board)
        if len(incomplete) != 2:
            continue
        first, second = incomplete
        river = board.river_with(first, second)
        if river is None:
            continue
        if first.num_needed != second.num_needed or first.num_needed > river.to_give:
            continue
        if board.cap_to_give(river, first.num_needed - 1):
            changed = True
            if trace:
                trace(f"self isolation: capped {board.describe_river(river)}")
    return changed


def bad_corners(board: Board, trace: Optional[TraceCallback] = None) -> bool:
    """
    Limit pairs of empty rivers ("corners") that would starve a third island.

    Take two empty live rivers of an island. Another island whose rivers are
    crossed by both of them may not survive both being bridged: if its
    remaining rivers can't cover its need, at most one of the corner rivers
    can be used, so the corner holds at most max(to_give) bridges and the
    island's other rivers have to provide the rest.
    """
    changed = False
    for island in board.islands:
        if island.is_complete or len(island.live_rivers) < 2:
            continue
        empty = [board.rivers[r] for r in island.live_rivers if board.rivers[r].bridges == 0]
        if len(empty) < 2:
            continue

        for ri in range(len(empty)):
            for rj in range(ri + 1, len(empty)):
                first, second = empty[ri], empty[rj]

                hits = OrderedDict()
                for crossed_id in first.crossings + second.crossings:
                    for hit_id in board.rivers[crossed_id].islands:
                        hits[hit_id] = hits.get(hit_id, 0) + 1

                for hit_id, count in hits.items():
                    if count < 2:
                        continue
                    hit = board.islands[hit_id]
                    left_after_corner = sum(
                        board.rivers[r].to_give for r in hit.live_rivers
                        if not first.crosses(r) and not second.crosses(r))
                    if left_after_corner >= hit.num_needed:
                        continue

                    corner_max = max(first.to_give, second.to_give)
                    others = [r for r in island.live_rivers if r not in (first.id, second.id)]
                    if must_provide(board, others, island.num_needed - corner_max, trace):
                        changed = True
                        if trace:
                            trace(f"bad corner at {island} starves {hit}")
                        break
    return changed


# Non-speculative rules, in the order the fixpoint loop applies them
FIXPOINT_RULES = (
    required_fill,
    cap_to_avoid_joined_isolation,
    cap_to_avoid_self_isolation,
)

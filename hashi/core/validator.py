"""
Validator for Hashiwokakero puzzle constraints.
"""

from typing import List
import networkx as nx

from ..config import MIN_TARGET, MAX_TARGET
from .board import Board


class ValidationResult:
    """Result of puzzle validation"""

    def __init__(self):
        self.is_valid = True
        self.errors: List[str] = []
        self.warnings: List[str] = []

    def add_error(self, error: str):
        """Add an error message"""
        self.errors.append(error)
        self.is_valid = False

    def add_warning(self, warning: str):
        """Add a warning message"""
        self.warnings.append(warning)

    def extend(self, other: 'ValidationResult'):
        for error in other.errors:
            self.add_error(error)
        self.warnings.extend(other.warnings)

    def __bool__(self):
        return self.is_valid

    def __repr__(self):
        status = "Valid" if self.is_valid else "Invalid"
        return f"ValidationResult({status}, {len(self.errors)} errors, {len(self.warnings)} warnings)"


class PuzzleValidator:
    """Validates Hashiwokakero puzzle constraints, reporting every failure"""

    @staticmethod
    def validate_structure(board: Board) -> ValidationResult:
        """Validate basic puzzle structure"""
        result = ValidationResult()

        if board.rows <= 0 or board.cols <= 0:
            result.add_error("Invalid puzzle dimensions")

        if not board.islands:
            result.add_error("Puzzle has no islands")

        for island in board.islands:
            if not (MIN_TARGET <= island.target <= MAX_TARGET):
                result.add_error(f"Island at ({island.row}, {island.col}) has invalid "
                                 f"bridge target: {island.target}")
            if not island.rivers and len(board.islands) > 1:
                result.add_error(f"Island at ({island.row}, {island.col}) has no neighbors")
            capacity = sum(board.rivers[r].max_bridges for r in island.rivers)
            if capacity < island.target:
                result.add_error(f"Island at ({island.row}, {island.col}) needs {island.target} "
                                 f"bridges but can hold at most {capacity}")

        # Handshaking lemma: every bridge has two ends
        total = sum(island.target for island in board.islands)
        if total % 2 != 0:
            result.add_error(f"Total bridge targets ({total}) is odd - impossible to solve")

        return result

    @staticmethod
    def validate_bridges(board: Board) -> ValidationResult:
        """Validate the bridges placed so far"""
        result = ValidationResult()

        for river in board.rivers:
            if not (0 <= river.bridges <= river.max_bridges):
                result.add_error(f"River {board.describe_river(river)} has invalid count: "
                                 f"{river.bridges}")
            if river.bridges == 0:
                continue
            for crossing_id in river.crossings:
                # Report each crossing pair once
                crossing = board.rivers[crossing_id]
                if crossing.bridges > 0 and river.id < crossing.id:
                    result.add_error(f"Bridges {board.describe_river(river)} and "
                                     f"{board.describe_river(crossing)} cross")

        for island in board.islands:
            if island.bridges > island.target:
                result.add_error(f"Island {island} has too many bridges: "
                                 f"{island.bridges} > {island.target}")
            elif island.bridges < island.target:
                result.add_warning(f"Island {island} is incomplete: "
                                   f"{island.bridges} < {island.target}")

        return result

    @staticmethod
    def bridge_graph(board: Board) -> nx.Graph:
        """Graph of islands joined by at least one bridge"""
        graph = nx.Graph()
        graph.add_nodes_from(island.id for island in board.islands)
        for river in board.rivers:
            if river.bridges > 0:
                graph.add_edge(*river.islands, weight=river.bridges)
        return graph

    @staticmethod
    def validate_solution(board: Board) -> ValidationResult:
        """Validate if the board is a complete solution"""
        result = ValidationResult()
        result.extend(PuzzleValidator.validate_structure(board))
        result.extend(PuzzleValidator.validate_bridges(board))

        for island in board.islands:
            if island.bridges != island.target:
                result.add_error(f"Island {island} has {island.bridges} bridges, "
                                 f"requires {island.target}")

        # Connectivity is rebuilt from the bridges, independently of the clusters
        graph = PuzzleValidator.bridge_graph(board)
        if graph.number_of_nodes() and not nx.is_connected(graph):
            result.add_error(f"Not all islands are connected "
                             f"({nx.number_connected_components(graph)} components)")

        if nx.number_connected_components(graph) != board.num_clusters:
            result.add_error(f"Cluster bookkeeping disagrees with bridges: "
                             f"{board.num_clusters} clusters, "
                             f"{nx.number_connected_components(graph)} components")

        return result

"""
Fixpoint driver and speculative search for the propagation engine.
"""

from contextlib import nullcontext
from enum import Enum
from typing import MutableMapping, Optional

from ..core.board import Board
from ..core.errors import CapacityExceededError, ContradictionError
from ..core.utils import Stopwatch
from .rules import FIXPOINT_RULES, TraceCallback, bad_corners


class SolveStatus(Enum):
    """Terminal states of the fixpoint loop"""
    SOLVED = "solved"
    CONTRADICTION = "contradiction"
    STALLED = "stalled"


def _measure(stopwatch: Optional[Stopwatch], label: str):
    return stopwatch.measure(label) if stopwatch is not None else nullcontext()


def auto_solve(board: Board,
               allow_guess: bool = True,
               trace: Optional[TraceCallback] = None,
               stopwatch: Optional[Stopwatch] = None,
               stats: Optional[MutableMapping[str, int]] = None) -> SolveStatus:
    """
    Run the propagation rules on board until none of them changes anything.

    Bad corners are only tried once the cheap rules are stuck, and guesses
    only once bad corners are stuck too. The board is modified in place.

    Args:
        board: Board to solve
        allow_guess: Whether speculative trials may be used
        trace: Optional callback receiving a description of each deduction
        stopwatch: Optional profile collecting guess and copy timings
        stats: Optional mapping that receives per-rule change counts and
            the number of passes

    Returns:
        SOLVED, CONTRADICTION (a mistake was detected) or STALLED
    """
    if stats is None:
        stats = {}

    changed = True
    while changed:
        changed = False
        stats['passes'] = stats.get('passes', 0) + 1

        for rule in FIXPOINT_RULES:
            if rule(board, trace):
                stats[rule.__name__] = stats.get(rule.__name__, 0) + 1
                changed = True

        mistake, reason = board.has_mistakes()
        if mistake:
            if trace:
                trace(f"contradiction: {reason}")
            return SolveStatus.CONTRADICTION

        if not changed and bad_corners(board, trace):
            stats['bad_corners'] = stats.get('bad_corners', 0) + 1
            changed = True

        if not changed and allow_guess:
            with _measure(stopwatch, 'make_a_guess'):
                changed = make_a_guess(board, trace, stopwatch)
            if changed:
                stats['make_a_guess'] = stats.get('make_a_guess', 0) + 1

    solved, _ = board.is_solved()
    return SolveStatus.SOLVED if solved else SolveStatus.STALLED


def speculate(board: Board, river_id: int, saturate: bool,
              stopwatch: Optional[Stopwatch] = None) -> Board:
    """
    Test one hypothesis about a river on a copy of the board.

    The copy gets the river's capacity forced to zero (saturate=False) or
    filled to its current capacity (saturate=True), then the non-speculative
    rules run to fixpoint. The input board is left untouched.

    Returns:
        The trial board after propagation
    """
    with _measure(stopwatch, 'copy'):
        trial = board.copy()
    if saturate:
        while trial.rivers[river_id].to_give > 0:
            trial.add_bridge(river_id)
    else:
        trial.cap_to_give(river_id, 0)
    auto_solve(trial, allow_guess=False)
    return trial


def refutes(board: Board, river_id: int, saturate: bool,
            stopwatch: Optional[Stopwatch] = None) -> bool:
    """Does the hypothesis lead to a contradiction?"""
    try:
        speculate(board, river_id, saturate, stopwatch).assert_consistent()
    except (CapacityExceededError, ContradictionError):
        return True
    return False


def make_a_guess(board: Board,
                 trace: Optional[TraceCallback] = None,
                 stopwatch: Optional[Stopwatch] = None) -> bool:
    """
    Prove one deduction by contradiction and apply it to board.

    For each incomplete island, first try every live river at capacity zero;
    if that fails, the river needs a bridge. Then try filling every live
    river; if that fails, the river loses one unit of capacity. Stops after
    the first deduction.

    Returns:
        True if the board was changed
    """
    for island in board.islands:
        if island.is_complete:
            continue

        for river_id in list(island.live_rivers):
            if refutes(board, river_id, saturate=False, stopwatch=stopwatch):
                board.add_bridge(river_id)
                if trace:
                    trace(f"guess: {board.describe_river(river_id)} can't be empty")
                return True

        for river_id in list(island.live_rivers):
            if refutes(board, river_id, saturate=True, stopwatch=stopwatch):
                river = board.rivers[river_id]
                board.cap_to_give(river, river.to_give - 1)
                if trace:
                    trace(f"guess: {board.describe_river(river)} can't be filled")
                return True
    return False


"""
Constraint propagation solver with a proof-by-contradiction fallback.
"""

from contextlib import nullcontext
from typing import Any, Dict

from ..core.board import Board
from ..core.utils import Stopwatch, calculate_solution_stats, timer
from .base_solver import BaseSolver, SolverResult
from .search import SolveStatus, auto_solve


class PropagationSolver(BaseSolver):
    """
    Solve by running the propagation rules to a fixpoint.

    When the rules stall, single-river hypotheses are tested on copies of
    the board and refuted ones are turned into deductions.
    """

    @timer
    def _solve(self, board: Board) -> SolverResult:
        stats: Dict[str, Any] = {}
        stopwatch = Stopwatch() if self.config.profile else None
        trace = self._trace if self._has_tracing() else None

        with stopwatch.measure('solve') if stopwatch else nullcontext():
            status = auto_solve(
                board,
                allow_guess=self.config.allow_guess,
                trace=trace,
                stopwatch=stopwatch,
                stats=stats,
            )

        self._iterations = stats.pop('passes', 0)

        if status == SolveStatus.SOLVED:
            message = "Puzzle solved successfully"
        elif status == SolveStatus.CONTRADICTION:
            _, reason = board.has_mistakes()
            message = f"Contradiction: {reason}"
        else:
            _, reason = board.is_solved()
            message = f"Stalled: {reason}"

        result_stats = {
            'rules_used': stats,
            'solution': calculate_solution_stats(board),
        }
        if stopwatch:
            result_stats['profile'] = stopwatch.to_dict()

        return SolverResult(
            success=status == SolveStatus.SOLVED,
            status=status,
            solution=board,
            message=message,
            stats=result_stats,
            profile=stopwatch,
        )

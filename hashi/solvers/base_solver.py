"""
Base solver class for Hashiwokakero puzzles.
"""

from abc import ABC, abstractmethod
from typing import Optional, Dict, Any, List, Callable, Union
from dataclasses import dataclass, field, fields
import time
from pathlib import Path
import yaml

from ..core.board import Board
from ..core.validator import PuzzleValidator
from ..core.utils import setup_logger, memory_usage, Stopwatch
from .search import SolveStatus


@dataclass
class SolverConfig:
    """Configuration for puzzle solvers"""
    allow_guess: bool = True  # Allow speculative trials once propagation is stuck
    verbose: bool = False
    log_file: Optional[Path] = None
    trace: bool = False  # Log every deduction at DEBUG level
    profile: bool = False  # Collect a per-phase timing profile
    validate_solution: bool = True

    # Algorithm-specific parameters
    extra_params: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'SolverConfig':
        """Create a config from a mapping; unknown keys end up in extra_params"""
        known = {f.name for f in fields(cls)}
        kwargs = {k: v for k, v in data.items() if k in known}
        extra = dict(kwargs.pop('extra_params', None) or {})
        extra.update({k: v for k, v in data.items() if k not in known})
        if kwargs.get('log_file'):
            kwargs['log_file'] = Path(kwargs['log_file'])
        return cls(extra_params=extra, **kwargs)

    @classmethod
    def from_yaml(cls, filepath: Union[str, Path]) -> 'SolverConfig':
        """Load a config from a YAML file"""
        filepath = Path(filepath)
        if not filepath.exists():
            raise FileNotFoundError(f"Configuration file not found: {filepath}")

        with open(filepath, 'r') as f:
            data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            raise ValueError(f"Configuration in {filepath} must be a mapping")
        return cls.from_dict(data)


@dataclass
class SolverResult:
    """Result from puzzle solver"""
    success: bool
    status: Optional[SolveStatus] = None  # None when the puzzle is rejected before solving
    solution: Optional[Board] = None
    solve_time: float = 0.0
    iterations: int = 0
    memory_used: float = 0.0  # MB
    message: str = ""

    # Additional information
    stats: Dict[str, Any] = field(default_factory=dict)
    profile: Optional[Stopwatch] = None

    def __repr__(self):
        status = "Success" if self.success else "Failed"
        return f"SolverResult({status}, time={self.solve_time:.2f}s, iterations={self.iterations})"


class BaseSolver(ABC):
    """Abstract base class for Hashiwokakero solvers"""

    def __init__(self, config: Optional[SolverConfig] = None):
        """Initialize solver with configuration."""
        self.config = config or SolverConfig()
        self.logger = setup_logger(
            self.__class__.__name__,
            self.config.log_file,
            "DEBUG" if self.config.verbose or self.config.trace else "INFO"
        )

        # Callbacks receiving a description of each deduction
        self._trace_callbacks: List[Callable[[str], None]] = []

        # Statistics tracking
        self._start_time: Optional[float] = None
        self._iterations: int = 0

    def add_trace_callback(self, callback: Callable[[str], None]):
        """Add a callback function receiving every deduction as text."""
        self._trace_callbacks.append(callback)

    def solve(self, board: Board) -> SolverResult:
        """
        Solve a copy of the board.

        The returned result always carries the working board, solved or not.
        """
        self.logger.info(f"Starting {self.__class__.__name__} solver")
        self.logger.info(f"Board: {board!r}")

        validation = PuzzleValidator.validate_structure(board)
        if not validation:
            return SolverResult(
                success=False,
                solution=board.copy(),
                message=f"Invalid puzzle: {'; '.join(validation.errors)}"
            )

        self._start_time = time.time()
        self._iterations = 0
        initial_memory = memory_usage()
        working = board.copy()

        try:
            result = self._solve(working)

            # Validate solution if found
            if result.success and result.solution is not None and self.config.validate_solution:
                validation = PuzzleValidator.validate_solution(result.solution)
                if not validation:
                    result.success = False
                    result.message = f"Invalid solution: {'; '.join(validation.errors)}"

            result.solve_time = time.time() - self._start_time
            result.memory_used = memory_usage() - initial_memory
            result.iterations = self._iterations

            if result.success:
                self.logger.info(f"Solved in {result.solve_time:.2f}s with {result.iterations} iterations")
            else:
                self.logger.warning(f"Failed to solve: {result.message}")

            return result

        except Exception as e:
            self.logger.error(f"Error during solving: {str(e)}", exc_info=True)
            return SolverResult(
                success=False,
                solution=working,
                message=f"Solver error: {str(e)}",
                solve_time=time.time() - self._start_time,
                iterations=self._iterations
            )

    @abstractmethod
    def _solve(self, board: Board) -> SolverResult:
        """Implement the specific solving algorithm on a working copy."""
        pass

    def _has_tracing(self) -> bool:
        return self.config.trace or bool(self._trace_callbacks)

    def _trace(self, message: str):
        """Log a deduction and forward it to the registered callbacks"""
        if self.config.trace:
            self.logger.debug(message)
        for callback in self._trace_callbacks:
            try:
                callback(message)
            except Exception as e:
                self.logger.error(f"Error in trace callback: {e}")

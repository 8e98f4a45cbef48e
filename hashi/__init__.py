"""
Hashiwokakero ("bridges") puzzle engine: constraint propagation over a
board with incrementally tracked connectivity, plus speculative trials.
"""

from .core import Board, ConstructionError, CapacityExceededError, ContradictionError
from .solvers import PropagationSolver, SolverConfig, SolverResult, SolveStatus, auto_solve, get_solver

__version__ = "0.1.0"

__all__ = [
    'Board', 'ConstructionError', 'CapacityExceededError', 'ContradictionError',
    'PropagationSolver', 'SolverConfig', 'SolverResult', 'SolveStatus',
    'auto_solve', 'get_solver',
]

"""
Solvers for Hashiwokakero puzzles.
"""

from .base_solver import BaseSolver, SolverConfig, SolverResult
from .propagation_solver import PropagationSolver
from .search import SolveStatus, auto_solve, make_a_guess, speculate, refutes
from .rules import (
    must_provide, required_fill, cap_to_avoid_joined_isolation,
    cap_to_avoid_self_isolation, bad_corners, FIXPOINT_RULES
)

__all__ = [
    # Base classes
    'BaseSolver',
    'SolverConfig',
    'SolverResult',

    # Solver
    'PropagationSolver',

    # Engine
    'SolveStatus',
    'auto_solve',
    'make_a_guess',
    'speculate',
    'refutes',

    # Rules
    'must_provide',
    'required_fill',
    'cap_to_avoid_joined_isolation',
    'cap_to_avoid_self_isolation',
    'bad_corners',
    'FIXPOINT_RULES',
]


# Solver registry for easy access
SOLVER_REGISTRY = {
    'propagation': PropagationSolver,
}


def get_solver(name: str, config: SolverConfig = None) -> BaseSolver:
    """
    Get a solver by name.

    Args:
        name: Solver name (propagation)
        config: Optional solver configuration

    Returns:
        Solver instance

    Raises:
        ValueError: If solver name is not recognized
    """
    solver_class = SOLVER_REGISTRY.get(name.lower())
    if not solver_class:
        raise ValueError(f"Unknown solver: {name}. Available: {list(SOLVER_REGISTRY.keys())}")
    return solver_class(config or SolverConfig())

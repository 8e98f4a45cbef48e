"""
Core data structures and utilities for the Hashiwokakero engine.
"""

from .board import Board, Island, River, Cluster, HORIZONTAL, VERTICAL
from .errors import HashiError, ConstructionError, CapacityExceededError, ContradictionError
from .validator import PuzzleValidator, ValidationResult
from .utils import (
    setup_logger, timer, memory_usage, Stopwatch,
    BoardConverter, calculate_solution_stats
)

__all__ = [
    # Data structures
    'Board', 'Island', 'River', 'Cluster', 'HORIZONTAL', 'VERTICAL',

    # Errors
    'HashiError', 'ConstructionError', 'CapacityExceededError', 'ContradictionError',

    # Validation
    'PuzzleValidator', 'ValidationResult',

    # Utilities
    'setup_logger', 'timer', 'memory_usage', 'Stopwatch',
    'BoardConverter', 'calculate_solution_stats'
]

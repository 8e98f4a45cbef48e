"""
Utility functions for the Hashiwokakero engine.
"""

import logging
from collections import defaultdict
from contextlib import contextmanager
from pathlib import Path
from typing import Dict, Any, Optional
import time
from functools import wraps
import numpy as np

from ..config import LOG_FORMAT, LOG_DATE_FORMAT, LOG_LEVEL
from .board import Board
from .errors import ConstructionError


def setup_logger(name: str, log_file: Optional[Path] = None, level: str = LOG_LEVEL) -> logging.Logger:
    """
    Set up a logger with console and optional file output.

    Args:
        name: Logger name
        log_file: Optional log file path
        level: Logging level

    Returns:
        Configured logger
    """
    logger = logging.getLogger(name)
    logger.setLevel(getattr(logging, level.upper()))

    # Remove existing handlers
    logger.handlers = []

    console_handler = logging.StreamHandler()
    console_handler.setLevel(getattr(logging, level.upper()))

    formatter = logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(getattr(logging, level.upper()))
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger


def timer(func):
    """Decorator to time function execution"""
    @wraps(func)
    def wrapper(*args, **kwargs):
        start_time = time.time()
        result = func(*args, **kwargs)
        execution_time = time.time() - start_time

        # Try to get logger from first argument (usually self)
        if args and hasattr(args[0], 'logger'):
            args[0].logger.debug(f"{func.__name__} took {execution_time:.3f} seconds")
        else:
            logging.getLogger(func.__module__).debug(
                f"{func.__name__} took {execution_time:.3f} seconds")

        return result
    return wrapper


def memory_usage():
    """Get current memory usage in MB"""
    import psutil
    import os
    process = psutil.Process(os.getpid())
    return process.memory_info().rss / 1024 / 1024


class Stopwatch:
    """Accumulates elapsed wall-clock time and call counts per label"""

    def __init__(self):
        self.totals: Dict[str, float] = defaultdict(float)
        self.counts: Dict[str, int] = defaultdict(int)

    @contextmanager
    def measure(self, label: str):
        start_time = time.time()
        try:
            yield
        finally:
            self.totals[label] += time.time() - start_time
            self.counts[label] += 1

    def to_dict(self) -> Dict[str, Dict[str, float]]:
        return {label: {'seconds': self.totals[label], 'calls': self.counts[label]}
                for label in self.totals}

    def results(self) -> str:
        """Tabular profile, slowest label first"""
        if not self.totals:
            return "No timings recorded"
        width = max(len(label) for label in self.totals)
        lines = [f"{'label':<{width}}  {'calls':>7}  {'seconds':>10}"]
        for label, total in sorted(self.totals.items(), key=lambda kv: -kv[1]):
            lines.append(f"{label:<{width}}  {self.counts[label]:>7}  {total:>10.4f}")
        return '\n'.join(lines)


class BoardConverter:
    """Convert boards to and from numpy grids"""

    @staticmethod
    def to_grid(board: Board) -> np.ndarray:
        """
        Convert board to 2D grid representation.
        0: water, 1-8: island with that bridge target
        """
        grid = np.zeros((board.rows, board.cols), dtype=int)
        for island in board.islands:
            grid[island.row, island.col] = island.target
        return grid

    @staticmethod
    def from_grid(grid: np.ndarray) -> Board:
        """Create board from 2D grid representation"""
        grid = np.asarray(grid)
        if grid.ndim != 2:
            raise ConstructionError(f"expected a 2D grid, got {grid.ndim} dimensions")
        return Board(grid.tolist())

    @staticmethod
    def to_bridge_matrix(board: Board) -> np.ndarray:
        """Island-by-island matrix of bridge counts"""
        matrix = np.zeros((len(board.islands), len(board.islands)), dtype=int)
        for river in board.rivers:
            a, b = river.islands
            matrix[a, b] = matrix[b, a] = river.bridges
        return matrix


def calculate_solution_stats(board: Board) -> Dict[str, Any]:
    """Calculate statistics for a (possibly partial) solution"""
    bridged = [r for r in board.rivers if r.bridges > 0]
    stats = {
        'total_bridges': sum(r.bridges for r in bridged),
        'single_bridges': sum(1 for r in bridged if r.bridges == 1),
        'double_bridges': sum(1 for r in bridged if r.bridges == 2),
        'complete_islands': sum(1 for i in board.islands if i.is_complete),
        'num_islands': len(board.islands),
        'num_clusters': board.num_clusters,
    }

    if bridged:
        lengths = []
        for river in bridged:
            a = board.islands[river.islands[0]]
            b = board.islands[river.islands[1]]
            lengths.append(abs(a.row - b.row) + abs(a.col - b.col))
        stats['avg_bridge_length'] = sum(lengths) / len(lengths)
        stats['max_bridge_length'] = max(lengths)
        stats['min_bridge_length'] = min(lengths)
    else:
        stats['avg_bridge_length'] = 0
        stats['max_bridge_length'] = 0
        stats['min_bridge_length'] = 0

    return stats

"""
Exceptions raised by the board and the solving engine.
"""


class HashiError(Exception):
    """Base class for all engine errors"""


class ConstructionError(HashiError, ValueError):
    """The puzzle grid is malformed; no board is built."""


class CapacityExceededError(HashiError, ValueError):
    """A bridge was requested on a saturated river or a non-adjacent pair."""


class ContradictionError(HashiError, RuntimeError):
    """The board state can no longer lead to a solution."""

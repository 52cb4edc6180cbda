"""Exceptions raised by the grid and the transition engine."""


class InvalidDimension(ValueError):
    """Raised when a grid is created with negative or non-integer dimensions."""


class OutOfBounds(IndexError):
    """Raised when a cell is accessed outside the grid extent."""


class DimensionMismatch(ValueError):
    """Raised when grid storage no longer agrees with its declared dimensions."""

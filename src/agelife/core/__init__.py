"""Core aging Game of Life logic."""

from .errors import InvalidDimension, OutOfBounds, DimensionMismatch
from .config import DEFAULT_MAX_AGE, DEFAULT_MAX_PENDING_NOTIFICATIONS, SPEED_PRESETS, Cadence, CadenceMode, LifeConfig
from .grid import Grid
from .engine import TransitionEngine, compute_next
from .driver import SimulationDriver, DriverState
from .patterns import Pattern, PatternLibrary
from .seeding import load_colony, parse_colony, save_colony, random_grid

__all__ = [
    "InvalidDimension",
    "OutOfBounds",
    "DimensionMismatch",
    "DEFAULT_MAX_AGE",
    "DEFAULT_MAX_PENDING_NOTIFICATIONS",
    "SPEED_PRESETS",
    "Cadence",
    "CadenceMode",
    "LifeConfig",
    "Grid",
    "TransitionEngine",
    "compute_next",
    "SimulationDriver",
    "DriverState",
    "Pattern",
    "PatternLibrary",
    "load_colony",
    "parse_colony",
    "save_colony",
    "random_grid",
]

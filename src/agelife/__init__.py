"""Conway's Game of Life with aging cells."""

__version__ = "0.1.0"

from .core.grid import Grid
from .core.engine import TransitionEngine, compute_next
from .core.driver import SimulationDriver, DriverState
from .core.config import Cadence, CadenceMode, LifeConfig
from .core.patterns import Pattern, PatternLibrary

__all__ = [
    "Grid",
    "TransitionEngine",
    "compute_next",
    "SimulationDriver",
    "DriverState",
    "Cadence",
    "CadenceMode",
    "LifeConfig",
    "Pattern",
    "PatternLibrary",
]

"""Generation transition for the aging Game of Life."""

from typing import Optional
import numpy as np

from .config import DEFAULT_MAX_AGE
from .errors import DimensionMismatch
from .grid import Grid


class TransitionEngine:
    """Computes the next generation of a grid.

    Rules, by number of living neighbors n:
    - n <= 1: the cell is empty in the next generation
    - n == 2: an empty cell stays empty, a live cell survives and ages
    - n == 3: an empty cell is born with age 1, a live cell survives and ages
    - n >= 4: the cell is empty in the next generation

    Ages saturate at ``max_age``. All births and deaths take effect
    simultaneously: the result is written into a separate grid and the
    current grid is never modified.
    """

    def __init__(self, max_age: int = DEFAULT_MAX_AGE) -> None:
        """Initialize the engine.

        Args:
            max_age: Highest age a surviving cell can reach
        """
        if max_age < 1:
            raise ValueError(f"max_age must be at least 1, got {max_age}")
        self.max_age = max_age

    def compute_next(self, current: Grid, out: Optional[Grid] = None) -> Grid:
        """Compute the generation that follows ``current``.

        Args:
            current: Grid holding the present generation (left untouched)
            out: Optional scratch grid to write into; a new grid is
                allocated when omitted. Must not be ``current``.

        Returns:
            The grid holding the next generation

        Raises:
            DimensionMismatch: If a grid's storage disagrees with its
                dimensions or ``out`` has different dimensions
        """
        _check_storage(current)
        if out is None:
            out = Grid(current.rows, current.cols)
        else:
            _check_storage(out)
            if out.shape != current.shape:
                raise DimensionMismatch(f"Output grid {out.shape} doesn't match current grid {current.shape}")
            if out is current:
                raise ValueError("Output grid must be distinct from the current grid")

        cells = current.cells
        neighbor_counts = current.count_all_neighbors()
        alive = cells > 0

        survive_mask = alive & ((neighbor_counts == 2) | (neighbor_counts == 3))
        birth_mask = ~alive & (neighbor_counts == 3)

        next_cells = out.cells
        next_cells.fill(0)
        next_cells[survive_mask] = np.minimum(cells[survive_mask] + 1, self.max_age)
        next_cells[birth_mask] = 1

        return out


def _check_storage(grid: Grid) -> None:
    if grid.cells.shape != grid.dimensions():
        raise DimensionMismatch(f"Grid storage {grid.cells.shape} doesn't match dimensions {grid.dimensions()}")


def compute_next(current: Grid, max_age: int = DEFAULT_MAX_AGE) -> Grid:
    """Return a new grid holding the generation after ``current``."""
    return TransitionEngine(max_age).compute_next(current)

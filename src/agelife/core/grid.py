"""Grid data structure for the aging Game of Life."""

from typing import Tuple
import numpy as np
import torch
import torch.nn.functional as F

from .errors import InvalidDimension, OutOfBounds

# Moore neighborhood kernel, shape (out_channels, in_channels, 3, 3)
_NEIGHBOR_KERNEL = (
    torch.tensor([[1, 1, 1], [1, 0, 1], [1, 1, 1]], dtype=torch.float32).unsqueeze(0).unsqueeze(0)
)

# Characters used by __str__, darkest for newborn cells
_AGE_CHARS = "#@%*+=-:"


class Grid:
    """A bounded 2D grid of cell ages.

    A cell value of 0 means dead, any positive value is the number of
    generations the cell has been alive. Edges do not wrap: positions outside
    the grid are treated as dead when counting neighbors.
    """

    def __init__(self, rows: int, cols: int) -> None:
        """Initialize a new grid with every cell dead.

        Args:
            rows: Number of rows
            cols: Number of columns

        Raises:
            InvalidDimension: If either dimension is negative or not an integer
        """
        self._check_dimensions(rows, cols)
        self.rows = rows
        self.cols = cols
        self._cells = np.zeros((rows, cols), dtype=np.int32)

    @staticmethod
    def _check_dimensions(rows: int, cols: int) -> None:
        for name, value in (("rows", rows), ("cols", cols)):
            if isinstance(value, bool) or not isinstance(value, (int, np.integer)):
                raise InvalidDimension(f"{name} must be an integer, got {value!r}")
            if value < 0:
                raise InvalidDimension(f"{name} must be non-negative, got {value}")

    @property
    def cells(self) -> np.ndarray:
        """Get the underlying (rows, cols) age array."""
        return self._cells

    @property
    def shape(self) -> Tuple[int, int]:
        """Get grid dimensions as (rows, cols)."""
        return (self.rows, self.cols)

    def dimensions(self) -> Tuple[int, int]:
        """Return (rows, cols)."""
        return (self.rows, self.cols)

    def in_bounds(self, row: int, col: int) -> bool:
        """Check whether (row, col) lies inside the grid."""
        return 0 <= row < self.rows and 0 <= col < self.cols

    def _require_in_bounds(self, row: int, col: int) -> None:
        if not self.in_bounds(row, col):
            raise OutOfBounds(f"Coordinates ({row}, {col}) out of bounds for {self.rows}x{self.cols} grid")

    def get(self, row: int, col: int) -> int:
        """Get the age of a cell.

        Args:
            row: Row coordinate
            col: Column coordinate

        Returns:
            Age of the cell, 0 if dead

        Raises:
            OutOfBounds: If coordinates are outside the grid
        """
        self._require_in_bounds(row, col)
        return int(self._cells[row, col])

    def set(self, row: int, col: int, value: int) -> None:
        """Set the age of a cell.

        Args:
            row: Row coordinate
            col: Column coordinate
            value: New age, 0 to kill the cell

        Raises:
            OutOfBounds: If coordinates are outside the grid
            ValueError: If value is negative
        """
        self._require_in_bounds(row, col)
        if value < 0:
            raise ValueError(f"Cell age must be non-negative, got {value}")
        self._cells[row, col] = value

    def is_alive(self, row: int, col: int) -> bool:
        """Check whether a cell is alive."""
        return self.get(row, col) > 0

    def clear(self) -> None:
        """Clear all cells (set all to dead)."""
        self._cells.fill(0)

    def resize(self, rows: int, cols: int) -> None:
        """Reallocate the grid with new dimensions; every cell becomes dead."""
        self._check_dimensions(rows, cols)
        self.rows = rows
        self.cols = cols
        self._cells = np.zeros((rows, cols), dtype=np.int32)

    def copy(self) -> "Grid":
        """Return an independent copy of this grid."""
        clone = Grid(self.rows, self.cols)
        clone._cells[:] = self._cells
        return clone

    def copy_from(self, other: "Grid") -> None:
        """Copy cell states from another grid.

        Args:
            other: Source grid to copy from

        Raises:
            ValueError: If grids have different dimensions
        """
        if other.shape != self.shape:
            raise ValueError(f"Grid dimensions don't match: {other.shape} vs {self.shape}")

        self._cells[:] = other._cells

    @property
    def population(self) -> int:
        """Get the number of living cells."""
        return int(np.sum(self._cells > 0))

    def get_neighbors(self, row: int, col: int) -> int:
        """Count living neighbors of a cell.

        Positions outside the grid count as dead.

        Args:
            row: Row coordinate
            col: Column coordinate

        Returns:
            Number of living neighbors (0-8)
        """
        self._require_in_bounds(row, col)
        count = 0
        for drow in (-1, 0, 1):
            for dcol in (-1, 0, 1):
                if drow == 0 and dcol == 0:
                    continue

                nrow, ncol = row + drow, col + dcol
                if self.in_bounds(nrow, ncol) and self._cells[nrow, ncol] > 0:
                    count += 1

        return count

    def count_all_neighbors(self) -> np.ndarray:
        """Count living neighbors for all cells using a PyTorch convolution.

        Returns:
            (rows, cols) integer array with neighbor counts for each cell
        """
        if self.rows == 0 or self.cols == 0:
            return np.zeros((self.rows, self.cols), dtype=np.int32)

        alive = torch.from_numpy((self._cells > 0).astype(np.float32)).reshape(1, 1, self.rows, self.cols)
        # Zero padding: out-of-bounds neighbors contribute nothing
        neighbors = F.conv2d(alive, _NEIGHBOR_KERNEL, padding=1)
        return neighbors[0, 0].round().numpy().astype(np.int32)

    def to_list(self) -> list:
        """Convert grid to a nested list of ages, one list per row."""
        return self._cells.tolist()

    def from_list(self, data: list) -> None:
        """Load grid from nested list.

        Args:
            data: 2D list of ages, one list per row

        Raises:
            ValueError: If data dimensions don't match grid or ages are negative
        """
        arr = np.array(data, dtype=np.int32)
        if arr.size == 0 and self.rows * self.cols == 0 and len(data) == self.rows:
            arr = arr.reshape(self.shape)
        if arr.shape != self.shape:
            raise ValueError(f"Data shape {arr.shape} doesn't match grid {self.shape}")
        if np.any(arr < 0):
            raise ValueError("Cell ages must be non-negative")

        self._cells[:] = arr

    def __eq__(self, other: object) -> bool:
        """Check if two grids have the same dimensions and ages."""
        if not isinstance(other, Grid):
            return False
        return self.shape == other.shape and np.array_equal(self._cells, other._cells)

    def __repr__(self) -> str:
        return f"Grid(rows={self.rows}, cols={self.cols}, population={self.population})"

    def __str__(self) -> str:
        """Text picture: '.' for dead cells, lighter characters for older cells."""
        result = []
        for row in range(self.rows):
            line = []
            for col in range(self.cols):
                age = int(self._cells[row, col])
                if age == 0:
                    line.append(".")
                else:
                    line.append(_AGE_CHARS[min(age, len(_AGE_CHARS)) - 1])
            result.append("".join(line))
        return "\n".join(result)

"""Initial grid sources: colony files and random seeding."""

import logging
from pathlib import Path
from typing import Optional, Union
import numpy as np

from .config import DEFAULT_MAX_AGE
from .grid import Grid

logger = logging.getLogger(__name__)

DEAD_CHAR = "-"
ALIVE_CHAR = "X"

# Side lengths used when random seeding is not given explicit dimensions
RANDOM_MIN_SIZE = 40
RANDOM_MAX_SIZE = 60


def parse_colony(text: str) -> Grid:
    """Build a grid from colony text.

    The text starts with the row and column counts, followed by one token per
    row. In each row token '-' marks a dead cell and any other character a
    live cell of age 1. Anything after the last row is ignored.

    Args:
        text: Colony description

    Returns:
        The seeded grid

    Raises:
        ValueError: If the header or any row is missing or malformed
    """
    tokens = text.split()
    if len(tokens) < 2:
        raise ValueError("Colony is missing its 'rows cols' header")

    try:
        rows, cols = int(tokens[0]), int(tokens[1])
    except ValueError:
        raise ValueError(f"Invalid colony header '{tokens[0]} {tokens[1]}'")

    grid = Grid(rows, cols)
    lines = tokens[2 : 2 + rows]
    if len(lines) < rows:
        raise ValueError(f"Colony declares {rows} rows but only {len(lines)} are present")

    for row, line in enumerate(lines):
        if len(line) < cols:
            raise ValueError(f"Colony row {row} has {len(line)} cells, expected {cols}")
        for col in range(cols):
            if line[col] != DEAD_CHAR:
                grid.set(row, col, 1)

    return grid


def load_colony(path: Union[str, Path]) -> Grid:
    """Read a colony file.

    A path without a suffix that does not exist is retried with '.txt'.

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValueError: If the file format is invalid
    """
    filepath = Path(path)
    if not filepath.exists() and not filepath.suffix:
        filepath = filepath.with_suffix(".txt")

    with open(filepath, "r") as f:
        grid = parse_colony(f.read())

    logger.info("Loaded %dx%d colony from %s (population %d)", grid.rows, grid.cols, filepath, grid.population)
    return grid


def format_colony(grid: Grid) -> str:
    """Render a grid in colony file format; ages are not preserved."""
    lines = [f"{grid.rows} {grid.cols}"]
    for row in range(grid.rows):
        lines.append("".join(ALIVE_CHAR if grid.is_alive(row, col) else DEAD_CHAR for col in range(grid.cols)))
    return "\n".join(lines) + "\n"


def save_colony(grid: Grid, path: Union[str, Path]) -> None:
    """Write a grid to a colony file."""
    with open(path, "w") as f:
        f.write(format_colony(grid))


def random_grid(
    rows: Optional[int] = None,
    cols: Optional[int] = None,
    probability: float = 0.5,
    max_age: int = DEFAULT_MAX_AGE,
    seed: Optional[int] = None,
) -> Grid:
    """Create a randomly populated grid.

    Args:
        rows: Number of rows, random in [40, 60] when omitted
        cols: Number of columns, random in [40, 60] when omitted
        probability: Chance each cell will be alive (0.0 to 1.0)
        max_age: Live cells get a uniform random age in [1, max_age]
        seed: Seed for reproducible grids

    Returns:
        The seeded grid
    """
    if not 0.0 <= probability <= 1.0:
        raise ValueError(f"Probability must be between 0.0 and 1.0, got {probability}")
    if max_age < 1:
        raise ValueError(f"max_age must be at least 1, got {max_age}")

    rng = np.random.default_rng(seed)
    if rows is None:
        rows = int(rng.integers(RANDOM_MIN_SIZE, RANDOM_MAX_SIZE + 1))
    if cols is None:
        cols = int(rng.integers(RANDOM_MIN_SIZE, RANDOM_MAX_SIZE + 1))

    grid = Grid(rows, cols)
    alive = rng.random((rows, cols)) < probability
    ages = rng.integers(1, max_age + 1, size=(rows, cols))
    grid.cells[alive] = ages[alive]

    logger.info("Seeded %dx%d grid randomly (population %d)", rows, cols, grid.population)
    return grid

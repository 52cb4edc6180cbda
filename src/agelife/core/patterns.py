"""Common Game of Life seed patterns."""

from typing import Dict, List, Tuple, Optional

from .grid import Grid


class Pattern:
    """A named set of live cells, stored as (row, col) offsets."""

    def __init__(self, name: str, cells: List[Tuple[int, int]], description: str = "") -> None:
        """Initialize a pattern.

        Args:
            name: Pattern name
            cells: List of (row, col) coordinates for living cells
            description: Optional description
        """
        self.name = name
        self.cells = cells
        self.description = description

    def apply_to_grid(
        self,
        grid: Grid,
        row_offset: int = 0,
        col_offset: int = 0,
        age: int = 1,
        clear: bool = True,
    ) -> int:
        """Stamp this pattern onto a grid.

        Args:
            grid: Target grid
            row_offset: Vertical offset
            col_offset: Horizontal offset
            age: Age given to every stamped cell
            clear: Whether to clear the grid first

        Returns:
            Number of cells that landed inside the grid
        """
        if clear:
            grid.clear()

        placed = 0
        for row, col in self.cells:
            # Cells falling outside the grid are dropped
            if grid.in_bounds(row + row_offset, col + col_offset):
                grid.set(row + row_offset, col + col_offset, age)
                placed += 1
        return placed

    def get_bounding_box(self) -> Tuple[int, int, int, int]:
        """Get bounding box of the pattern.

        Returns:
            Tuple of (min_row, min_col, max_row, max_col)
        """
        if not self.cells:
            return (0, 0, 0, 0)

        rows, cols = zip(*self.cells)
        return (min(rows), min(cols), max(rows), max(cols))

    def get_size(self) -> Tuple[int, int]:
        """Get pattern size as (rows, cols)."""
        min_row, min_col, max_row, max_col = self.get_bounding_box()
        return (max_row - min_row + 1, max_col - min_col + 1)

    def normalize(self) -> "Pattern":
        """Return a new pattern with coordinates shifted to start at (0, 0)."""
        if not self.cells:
            return Pattern(self.name, [], self.description)

        min_row, min_col, _, _ = self.get_bounding_box()
        normalized_cells = [(row - min_row, col - min_col) for row, col in self.cells]
        return Pattern(self.name, normalized_cells, self.description)

    @classmethod
    def from_grid(cls, grid: Grid, name: str, description: str = "") -> "Pattern":
        """Create a pattern from the live cells of a grid."""
        cells = []
        for row in range(grid.rows):
            for col in range(grid.cols):
                if grid.is_alive(row, col):
                    cells.append((row, col))

        return cls(name, cells, description)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Pattern):
            return False
        return sorted(self.cells) == sorted(other.cells)

    def __repr__(self) -> str:
        return f"Pattern({self.name!r}, {len(self.cells)} cells)"


class PatternLibrary:
    """Built-in seed patterns, addressable by name."""

    def __init__(self) -> None:
        self._patterns: Dict[str, Pattern] = {}
        self._load_builtin_patterns()

    def _load_builtin_patterns(self) -> None:
        # Still life patterns
        self.add_pattern(Pattern("Block", [(0, 0), (0, 1), (1, 0), (1, 1)], "2x2 still life block"))

        self.add_pattern(
            Pattern(
                "Beehive",
                [(0, 1), (0, 2), (1, 0), (1, 3), (2, 1), (2, 2)],
                "Beehive still life",
            )
        )

        # Oscillators
        self.add_pattern(Pattern("Blinker", [(1, 0), (1, 1), (1, 2)], "Period-2 oscillator"))

        self.add_pattern(
            Pattern(
                "Toad",
                [(0, 1), (0, 2), (0, 3), (1, 0), (1, 1), (1, 2)],
                "Period-2 oscillator",
            )
        )

        self.add_pattern(
            Pattern(
                "Beacon",
                [(0, 0), (0, 1), (1, 0), (2, 3), (3, 2), (3, 3)],
                "Period-2 oscillator",
            )
        )

        # Spaceships
        self.add_pattern(
            Pattern(
                "Glider",
                [(0, 1), (1, 2), (2, 0), (2, 1), (2, 2)],
                "Moves one cell diagonally every 4 generations",
            )
        )

        # Methuselahs
        self.add_pattern(
            Pattern(
                "R-pentomino",
                [(0, 1), (0, 2), (1, 0), (1, 1), (2, 1)],
                "Takes 1103 generations to stabilize",
            )
        )

    def add_pattern(self, pattern: Pattern) -> None:
        """Add a pattern to the library, replacing any with the same name."""
        self._patterns[pattern.name] = pattern

    def get_pattern(self, name: str) -> Optional[Pattern]:
        """Get a pattern by name, or None if not found."""
        return self._patterns.get(name)

    def list_patterns(self) -> List[str]:
        """Get list of all pattern names."""
        return list(self._patterns.keys())

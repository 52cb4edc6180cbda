"""Command-line interface for the aging Game of Life."""

import argparse
import logging
import sys
import threading
import time
from dataclasses import replace
from typing import Optional, Tuple, Dict, Any

from ..core.config import DEFAULT_MAX_AGE, SPEED_PRESETS, Cadence, LifeConfig, resolve_cadence
from ..core.driver import SimulationDriver
from ..core.grid import Grid
from ..core.patterns import PatternLibrary
from ..core.seeding import load_colony, random_grid

logger = logging.getLogger(__name__)

DEFAULT_PATTERN_SIZE = 30
QUIT_COMMAND = "quit"
YES_ANSWERS = ("yes", "y")
NO_ANSWERS = ("no", "n")


class CLIGameOfLife:
    """Command-line interface for running aging Game of Life simulations."""

    def __init__(self) -> None:
        self.pattern_library = PatternLibrary()

    def build_grid(
        self,
        colony_file: Optional[str] = None,
        pattern: Optional[str] = None,
        rows: Optional[int] = None,
        cols: Optional[int] = None,
        population_rate: float = 0.5,
        max_age: int = DEFAULT_MAX_AGE,
        seed: Optional[int] = None,
    ) -> Grid:
        """Create the initial grid from a colony file, a pattern or random seeding.

        Args:
            colony_file: Path of a colony file to load
            pattern: Name of a library pattern, centered on the grid
            rows: Grid rows for pattern or random seeding
            cols: Grid columns for pattern or random seeding
            population_rate: Chance each cell is alive when seeding randomly
            max_age: Upper bound for random initial ages
            seed: Random seed for reproducible grids

        Returns:
            The initial grid

        Raises:
            ValueError: If the pattern is unknown or the colony file is invalid
        """
        if colony_file:
            return load_colony(colony_file)

        if pattern:
            loaded_pattern = self.pattern_library.get_pattern(pattern)
            if loaded_pattern is None:
                available = ", ".join(self.pattern_library.list_patterns())
                raise ValueError(f"Pattern '{pattern}' not found. Available patterns: {available}")

            grid = Grid(
                DEFAULT_PATTERN_SIZE if rows is None else rows,
                DEFAULT_PATTERN_SIZE if cols is None else cols,
            )
            pattern_rows, pattern_cols = loaded_pattern.get_size()
            row_offset = max(0, (grid.rows - pattern_rows) // 2)
            col_offset = max(0, (grid.cols - pattern_cols) // 2)
            logger.info("Placing pattern '%s' at (%d, %d)", pattern, row_offset, col_offset)
            loaded_pattern.normalize().apply_to_grid(grid, row_offset, col_offset)
            return grid

        return random_grid(rows, cols, probability=population_rate, max_age=max_age, seed=seed)

    def run_simulation(
        self,
        grid: Grid,
        config: LifeConfig,
        show_grid: bool = False,
    ) -> Tuple[int, Dict[str, Any]]:
        """Run a simulation until it is stopped or reaches config.max_generations.

        Timed cadences are stopped with Ctrl-C. Manual cadence advances one
        generation per line read from standard input and stops on 'quit'.
        The observer always runs inline, so output and prompts stay in order.

        Args:
            grid: Initial grid
            config: Age cap, cadence and generation limit of the run
            show_grid: Print every generation

        Returns:
            Tuple of (final_generation, statistics)
        """
        stepped = threading.Event()

        def observer(snapshot: Grid, generation: int) -> None:
            if show_grid:
                print(f"\nGeneration {generation} (population {snapshot.population}):")
                print(self._format_grid(snapshot))
            stepped.set()

        initial_population = grid.population
        if show_grid:
            print("\nInitial grid:")
            print(self._format_grid(grid))

        config = replace(config, block_on_observer=True)
        driver = SimulationDriver.from_config(grid, config, observer)
        start_time = time.time()

        try:
            driver.start()
            if config.cadence.is_manual:
                self._read_manual_commands(driver, stepped)
            else:
                while not driver.join(0.1):
                    pass
        except KeyboardInterrupt:
            print("\nSimulation stopped by user")
        finally:
            driver.close()

        duration = time.time() - start_time
        final_grid = driver.current
        stats = {
            "generation": driver.generation,
            "grid_size": final_grid.shape,
            "initial_population": initial_population,
            "population": final_grid.population,
            "cadence": str(config.cadence),
            "duration_seconds": duration,
        }
        return driver.generation, stats

    def _read_manual_commands(self, driver: SimulationDriver, stepped: threading.Event) -> None:
        """Advance on every input line until 'quit', end of input or the run ends."""
        while True:
            try:
                command = input(f"Press return to advance [or type '{QUIT_COMMAND}' to end]: ")
            except EOFError:
                command = QUIT_COMMAND

            if command.strip().lower() == QUIT_COMMAND:
                driver.cancel()
                return

            stepped.clear()
            if not driver.advance():
                return
            # Wait for the step so output and prompt don't interleave
            while not stepped.wait(0.05):
                if driver.join(0):
                    return
            if driver.join(0):
                return

    def _format_grid(self, grid: Grid, max_size: int = 80) -> str:
        """Format grid for display, truncating if too large."""
        if grid.rows > max_size or grid.cols > max_size:
            return f"Grid too large to display ({grid.rows}x{grid.cols})"

        return str(grid)

    def list_patterns(self) -> None:
        """List available patterns."""
        print("Available patterns:")
        for name in self.pattern_library.list_patterns():
            pattern = self.pattern_library.get_pattern(name)
            rows, cols = pattern.get_size()
            print(f"  {name:<12} {rows}x{cols}  {pattern.description}")


def create_parser() -> argparse.ArgumentParser:
    """Create command-line argument parser."""
    speeds = "\n".join(f"  {number} = {cadence}" for number, cadence in SPEED_PRESETS.items())
    parser = argparse.ArgumentParser(
        description="Run Conway's Game of Life with aging cells from the command line",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=f"""
Speeds:
{speeds}

Examples:
  # Random 40-60 cell square colony, one generation every 100ms
  agelife-cli --speed 2 --show-grid

  # Load a colony file and advance on every press of return
  agelife-cli --file colonies/glider.txt --cadence manual --show-grid

  # Run the R-pentomino as fast as possible for 500 generations
  agelife-cli --pattern R-pentomino --cadence immediate -m 500
        """,
    )

    source = parser.add_mutually_exclusive_group()
    source.add_argument("-f", "--file", type=str, help="Colony file to load")
    source.add_argument("--pattern", type=str, help="Built-in pattern to center on the grid")

    parser.add_argument("-r", "--rows", type=int, help="Grid rows (default: random 40-60, 30 for patterns)")
    parser.add_argument("-c", "--cols", type=int, help="Grid columns (default: random 40-60, 30 for patterns)")

    parser.add_argument(
        "-p",
        "--population",
        type=float,
        default=0.5,
        help="Initial random population rate 0.0-1.0 (default: 0.5)",
    )

    parser.add_argument("--seed", type=int, help="Random seed for reproducible colonies")

    pacing = parser.add_mutually_exclusive_group()
    pacing.add_argument(
        "-s",
        "--speed",
        type=int,
        choices=sorted(SPEED_PRESETS),
        help="Speed preset (default: 2)",
    )
    pacing.add_argument(
        "--cadence",
        type=str,
        help="Cadence: 'immediate', 'delay:MILLISECONDS' or 'manual'",
    )

    parser.add_argument(
        "--max-age",
        type=int,
        default=DEFAULT_MAX_AGE,
        help=f"Age at which surviving cells stop aging (default: {DEFAULT_MAX_AGE})",
    )

    parser.add_argument(
        "-m",
        "--max-generations",
        type=int,
        help="Stop after this many generations (default: run until stopped)",
    )

    parser.add_argument(
        "-g",
        "--show-grid",
        action="store_true",
        help="Print every generation",
    )

    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Print detailed progress information",
    )

    parser.add_argument(
        "-a",
        "--ask-again",
        action="store_true",
        help="Offer to run another simulation when one stops",
    )

    parser.add_argument(
        "--list-patterns",
        action="store_true",
        help="List all available patterns and exit",
    )

    return parser


def validate_args(args: argparse.Namespace) -> bool:
    """Validate command-line arguments.

    Args:
        args: Parsed arguments

    Returns:
        True if arguments are valid
    """
    errors = []

    if args.rows is not None and args.rows < 0:
        errors.append("Rows must be non-negative")

    if args.cols is not None and args.cols < 0:
        errors.append("Columns must be non-negative")

    if not 0.0 <= args.population <= 1.0:
        errors.append("Population rate must be between 0.0 and 1.0")

    if args.max_age < 1:
        errors.append("Max age must be at least 1")

    if args.max_generations is not None and args.max_generations < 0:
        errors.append("Max generations must be non-negative")

    if args.cadence is not None:
        try:
            Cadence.parse(args.cadence)
        except ValueError as e:
            errors.append(str(e))

    if errors:
        print("Error: Invalid arguments:")
        for error in errors:
            print(f"  - {error}")
        return False

    return True


def print_results(final_generation: int, stats: dict, verbose: bool) -> None:
    """Print simulation results."""
    print(f"\nSimulation stopped after {final_generation} generations")
    print(f"Population: {stats['initial_population']} -> {stats['population']}")

    if verbose:
        duration = stats["duration_seconds"]
        print("\nDetailed Statistics:")
        print(f"  Grid size: {stats['grid_size'][0]}x{stats['grid_size'][1]}")
        print(f"  Cadence: {stats['cadence']}")
        print(f"  Duration: {duration:.3f} seconds")
        if duration > 0:
            print(f"  Speed: {final_generation / duration:.0f} generations/second")


def ask_run_another() -> bool:
    """Ask whether to run another simulation until the answer is yes or no.

    End of input counts as no.
    """
    while True:
        try:
            answer = input("\nWould you like to run another? ").strip().lower()
        except EOFError:
            return False

        if answer in YES_ANSWERS:
            return True
        if answer in NO_ANSWERS:
            return False
        print('Please enter "yes" or "no".')


def main() -> int:
    """Main entry point for CLI interface.

    Returns:
        Exit code (0 for success, 1 for error)
    """
    parser = create_parser()
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    cli = CLIGameOfLife()

    if args.list_patterns:
        cli.list_patterns()
        return 0

    if not validate_args(args):
        return 1

    try:
        if args.cadence is not None:
            cadence = Cadence.parse(args.cadence)
        else:
            cadence = resolve_cadence(args.speed or 2)

        config = LifeConfig(
            max_age=args.max_age,
            cadence=cadence,
            max_generations=args.max_generations,
            block_on_observer=True,
        )

        while True:
            grid = cli.build_grid(
                colony_file=args.file,
                pattern=args.pattern,
                rows=args.rows,
                cols=args.cols,
                population_rate=args.population,
                max_age=config.max_age,
                seed=args.seed,
            )

            if args.verbose:
                print(f"Initial grid: {grid.rows}x{grid.cols}, population {grid.population}, cadence {cadence}")

            final_generation, stats = cli.run_simulation(grid, config, show_grid=args.show_grid)
            print_results(final_generation, stats, args.verbose)

            if not args.ask_again or not ask_run_another():
                return 0

    except KeyboardInterrupt:
        print("\nSimulation interrupted by user")
        return 1
    except Exception as e:
        print(f"Error: {e}")
        if args.verbose:
            import traceback

            traceback.print_exc()
        return 1


if __name__ == "__main__":
    sys.exit(main())

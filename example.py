#!/usr/bin/env python3
"""
Example usage of the agelife package.
"""

from agelife import Grid, SimulationDriver, TransitionEngine, PatternLibrary


def main():
    """Run a glider for a few generations and print every one."""
    grid = Grid(12, 12)

    library = PatternLibrary()
    glider = library.get_pattern("Glider")
    glider.apply_to_grid(grid, row_offset=1, col_offset=1)

    print("Initial state:")
    print(grid)
    print(f"Population: {grid.population}")

    def show(snapshot, generation):
        print(f"\nGeneration {generation}:")
        print(snapshot)
        print(f"Population: {snapshot.population}")

    driver = SimulationDriver(grid, TransitionEngine(max_age=5), observer=show, block_on_observer=True)
    driver.run("immediate", max_generations=8)

    print(f"\nOldest cell: {int(driver.current.cells.max())}")


if __name__ == "__main__":
    main()

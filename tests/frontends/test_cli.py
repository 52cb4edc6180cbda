"""Tests for the CLI frontend."""

import argparse
from unittest.mock import patch
from io import StringIO

import pytest
from agelife.core.config import Cadence, LifeConfig
from agelife.core.driver import SimulationDriver
from agelife.core.grid import Grid
from agelife.frontends.cli import (
    CLIGameOfLife,
    ask_run_another,
    create_parser,
    print_results,
    validate_args,
    main,
)


def _blinker() -> Grid:
    grid = Grid(5, 5)
    grid.set(2, 1, 1)
    grid.set(2, 2, 1)
    grid.set(2, 3, 1)
    return grid


class TestCLIGameOfLife:
    """Test cases for the CLI Game of Life."""

    def test_initialization(self):
        """Test CLI initialization."""
        cli = CLIGameOfLife()
        assert cli.pattern_library is not None
        assert len(cli.pattern_library.list_patterns()) > 0

    def test_build_grid_random(self):
        """Test random seeding with explicit dimensions."""
        cli = CLIGameOfLife()
        grid = cli.build_grid(rows=8, cols=12, population_rate=1.0, max_age=3, seed=1)

        assert grid.dimensions() == (8, 12)
        assert grid.population == 96
        assert int(grid.cells.max()) <= 3

    def test_build_grid_pattern_centered(self):
        """Test that patterns are centered on the grid."""
        cli = CLIGameOfLife()
        grid = cli.build_grid(pattern="Blinker", rows=5, cols=5)

        assert grid.population == 3
        assert grid.get(2, 1) == 1
        assert grid.get(2, 2) == 1
        assert grid.get(2, 3) == 1

    def test_build_grid_pattern_default_size(self):
        cli = CLIGameOfLife()
        grid = cli.build_grid(pattern="Glider")
        assert grid.dimensions() == (30, 30)
        assert grid.population == 5

    def test_build_grid_pattern_empty_grid(self):
        """Test that zero dimensions are kept rather than replaced by the default."""
        cli = CLIGameOfLife()
        grid = cli.build_grid(pattern="Blinker", rows=0, cols=0)
        assert grid.dimensions() == (0, 0)
        assert grid.population == 0

    def test_build_grid_unknown_pattern(self):
        cli = CLIGameOfLife()
        with pytest.raises(ValueError, match="not found"):
            cli.build_grid(pattern="NonExistentPattern")

    def test_build_grid_from_file(self, tmp_path):
        path = tmp_path / "colony.txt"
        path.write_text("3 3\n---\nXXX\n---\n")

        cli = CLIGameOfLife()
        grid = cli.build_grid(colony_file=str(path))
        assert grid.to_list() == [[0, 0, 0], [1, 1, 1], [0, 0, 0]]

    def test_run_simulation_immediate(self):
        """Test running a bounded simulation."""
        cli = CLIGameOfLife()

        final_gen, stats = cli.run_simulation(_blinker(), LifeConfig(cadence=Cadence.immediate(), max_generations=10))

        assert final_gen == 10
        assert stats["generation"] == 10
        assert stats["initial_population"] == 3
        assert stats["population"] == 3
        assert stats["grid_size"] == (5, 5)
        assert stats["cadence"] == "immediate"
        assert "duration_seconds" in stats

    def test_run_simulation_uses_config(self):
        """Test that the age cap and generation limit come from the config."""
        cli = CLIGameOfLife()
        grid = _blinker()

        with patch.object(SimulationDriver, "from_config", wraps=SimulationDriver.from_config) as from_config:
            final_gen, stats = cli.run_simulation(grid, LifeConfig(max_age=2, max_generations=6))

        assert final_gen == 6
        assert stats["cadence"] == "immediate"

        config = from_config.call_args[0][1]
        assert config.max_age == 2
        assert config.block_on_observer is True
        # The caller's grid is copied, not advanced
        assert grid.get(2, 2) == 1

    @patch("sys.stdout", new_callable=StringIO)
    def test_run_simulation_show_grid(self, mock_stdout):
        """Test that every generation is printed."""
        cli = CLIGameOfLife()
        cli.run_simulation(_blinker(), LifeConfig(max_generations=2), show_grid=True)

        output = mock_stdout.getvalue()
        assert "Initial grid:" in output
        assert "Generation 1 (population 3):" in output
        assert "Generation 2 (population 3):" in output
        assert "Generation 3" not in output

    @patch("builtins.input", side_effect=["", "", "quit"])
    def test_run_simulation_manual(self, mock_input):
        """Test manual advance until 'quit'."""
        cli = CLIGameOfLife()

        final_gen, stats = cli.run_simulation(_blinker(), LifeConfig(cadence=Cadence.manual()))

        assert final_gen == 2
        assert mock_input.call_count == 3

    @patch("builtins.input", side_effect=["", EOFError()])
    def test_run_simulation_manual_end_of_input(self, mock_input):
        """Test that end of input stops a manual run."""
        cli = CLIGameOfLife()

        final_gen, _ = cli.run_simulation(_blinker(), LifeConfig(cadence=Cadence.manual()))
        assert final_gen == 1

    @patch("builtins.input", return_value="")
    def test_run_simulation_manual_limit(self, mock_input):
        """Test that a manual run ends at max_generations."""
        cli = CLIGameOfLife()

        final_gen, _ = cli.run_simulation(_blinker(), LifeConfig(cadence="manual", max_generations=3))
        assert final_gen == 3

    def test_format_grid_small(self):
        """Test grid formatting for small grids."""
        cli = CLIGameOfLife()
        grid = Grid(5, 5)
        grid.set(2, 2, 1)

        formatted = cli._format_grid(grid)
        assert "#" in formatted
        assert "....." in formatted

    def test_format_grid_large(self):
        """Test grid formatting for large grids."""
        cli = CLIGameOfLife()
        grid = Grid(100, 100)
        formatted = cli._format_grid(grid, max_size=50)
        assert "too large to display" in formatted

    @patch("sys.stdout", new_callable=StringIO)
    def test_list_patterns(self, mock_stdout):
        """Test pattern listing."""
        cli = CLIGameOfLife()
        cli.list_patterns()

        output = mock_stdout.getvalue()
        assert "Available patterns:" in output
        assert "Block" in output
        assert "Glider" in output


class TestArgumentParsing:
    """Test command-line argument parsing."""

    def test_create_parser(self):
        """Test parser creation and defaults."""
        parser = create_parser()
        assert isinstance(parser, argparse.ArgumentParser)

        args = parser.parse_args([])
        assert args.file is None
        assert args.pattern is None
        assert args.rows is None
        assert args.cols is None
        assert args.population == 0.5
        assert args.speed is None
        assert args.cadence is None
        assert args.max_age == 12
        assert args.max_generations is None

    def test_parse_args(self):
        parser = create_parser()
        args = parser.parse_args(["-r", "20", "-c", "30", "--speed", "3", "-m", "100", "-g", "-v"])

        assert args.rows == 20
        assert args.cols == 30
        assert args.speed == 3
        assert args.max_generations == 100
        assert args.show_grid is True
        assert args.verbose is True

    def test_speed_choices(self):
        parser = create_parser()
        with pytest.raises(SystemExit):
            parser.parse_args(["--speed", "5"])

    def test_speed_and_cadence_exclusive(self):
        parser = create_parser()
        with pytest.raises(SystemExit):
            parser.parse_args(["--speed", "1", "--cadence", "manual"])

    def test_file_and_pattern_exclusive(self):
        parser = create_parser()
        with pytest.raises(SystemExit):
            parser.parse_args(["--file", "a.txt", "--pattern", "Glider"])


class TestValidation:
    """Test argument validation."""

    def _args(self, *argv):
        return create_parser().parse_args(list(argv))

    def test_valid_args(self):
        assert validate_args(self._args("--cadence", "delay:50"))

    @patch("sys.stdout", new_callable=StringIO)
    def test_invalid_args(self, mock_stdout):
        invalid = [
            ("-r", "-1"),
            ("-c", "-1"),
            ("-p", "1.5"),
            ("--max-age", "0"),
            ("-m", "-3"),
            ("--cadence", "sometimes"),
        ]
        for argv in invalid:
            assert not validate_args(self._args(*argv)), argv

        assert "Error: Invalid arguments:" in mock_stdout.getvalue()


class TestOutput:
    """Test result printing."""

    @patch("sys.stdout", new_callable=StringIO)
    def test_print_results(self, mock_stdout):
        stats = {
            "generation": 10,
            "grid_size": (5, 5),
            "initial_population": 3,
            "population": 3,
            "cadence": "immediate",
            "duration_seconds": 0.5,
        }
        print_results(10, stats, verbose=True)

        output = mock_stdout.getvalue()
        assert "Simulation stopped after 10 generations" in output
        assert "Population: 3 -> 3" in output
        assert "Grid size: 5x5" in output
        assert "Speed: 20 generations/second" in output


class TestRestartPrompt:
    """Test the prompt offered when a simulation stops."""

    @patch("builtins.input", side_effect=["Yes"])
    def test_yes(self, mock_input):
        assert ask_run_another() is True

    @patch("builtins.input", side_effect=["n"])
    def test_no(self, mock_input):
        assert ask_run_another() is False

    @patch("sys.stdout", new_callable=StringIO)
    @patch("builtins.input", side_effect=["maybe", "", "y"])
    def test_repeats_until_answered(self, mock_input, mock_stdout):
        assert ask_run_another() is True
        assert mock_input.call_count == 3
        assert mock_stdout.getvalue().count('Please enter "yes" or "no".') == 2

    @patch("builtins.input", side_effect=EOFError())
    def test_end_of_input(self, mock_input):
        assert ask_run_another() is False


class TestMain:
    """Test the main entry point."""

    @patch("sys.stdout", new_callable=StringIO)
    def test_main_list_patterns(self, mock_stdout):
        with patch("sys.argv", ["agelife-cli", "--list-patterns"]):
            assert main() == 0
        assert "Glider" in mock_stdout.getvalue()

    @patch("sys.stdout", new_callable=StringIO)
    def test_main_pattern_run(self, mock_stdout):
        argv = ["agelife-cli", "--pattern", "Blinker", "-r", "5", "-c", "5", "--cadence", "immediate", "-m", "4"]
        with patch("sys.argv", argv):
            assert main() == 0
        assert "Simulation stopped after 4 generations" in mock_stdout.getvalue()

    @patch("sys.stdout", new_callable=StringIO)
    def test_main_invalid_args(self, mock_stdout):
        with patch("sys.argv", ["agelife-cli", "--cadence", "bogus"]):
            assert main() == 1

    @patch("sys.stdout", new_callable=StringIO)
    def test_main_unknown_pattern(self, mock_stdout):
        with patch("sys.argv", ["agelife-cli", "--pattern", "InvalidPattern"]):
            assert main() == 1
        assert "not found" in mock_stdout.getvalue()

    @patch("sys.stdout", new_callable=StringIO)
    def test_main_missing_file(self, mock_stdout, tmp_path):
        with patch("sys.argv", ["agelife-cli", "--file", str(tmp_path / "nope.txt")]):
            assert main() == 1
        assert "Error:" in mock_stdout.getvalue()

    @patch("sys.stdout", new_callable=StringIO)
    def test_main_colony_file(self, mock_stdout, tmp_path):
        path = tmp_path / "colony.txt"
        path.write_text("4 4\n----\n-XX-\n-XX-\n----\n")

        argv = ["agelife-cli", "--file", str(path), "--speed", "1", "-m", "3", "-v"]
        with patch("sys.argv", argv):
            assert main() == 0

        output = mock_stdout.getvalue()
        assert "Simulation stopped after 3 generations" in output
        assert "Population: 4 -> 4" in output

    @patch("sys.stdout", new_callable=StringIO)
    def test_main_runs_again_on_yes(self, mock_stdout):
        argv = [
            "agelife-cli", "--pattern", "Blinker", "-r", "5", "-c", "5", "--cadence", "immediate", "-m", "2",
            "--ask-again",
        ]
        with patch("sys.argv", argv), patch("builtins.input", side_effect=["yes", "no"]) as mock_input:
            assert main() == 0

        assert mock_input.call_count == 2
        assert mock_stdout.getvalue().count("Simulation stopped after 2 generations") == 2

    @patch("sys.stdout", new_callable=StringIO)
    def test_main_does_not_ask_by_default(self, mock_stdout):
        argv = ["agelife-cli", "--pattern", "Blinker", "-r", "5", "-c", "5", "--cadence", "immediate", "-m", "2"]
        with patch("sys.argv", argv), patch("builtins.input") as mock_input:
            assert main() == 0
        mock_input.assert_not_called()

"""User interface frontends for the aging Game of Life."""

from .cli import CLIGameOfLife

__all__ = ["CLIGameOfLife"]

"""Output formatting."""

from .console import ConsoleOutput, format_lap_time

__all__ = ["ConsoleOutput", "format_lap_time"]

"""CLI commands for keycast."""

from .check import check
from .midi import midi_group
from .run import run

__all__ = ["check", "midi_group", "run"]

"""Outbound wire encoding for CSV, OSC and UDP targets."""

from .broadcaster import Broadcaster, format_value, osc_arguments

__all__ = ["Broadcaster", "format_value", "osc_arguments"]

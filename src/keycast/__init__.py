"""keycast: route control surface events and timed pulses to network and MIDI targets."""

__version__ = "0.1.0"

# Event pipeline
from .engine import Pipeline

# Application
from .orchestration import Orchestrator

__all__ = [
    "Orchestrator",
    "Pipeline",
]

"""Application orchestration layer.

The orchestrator builds devices and the pipeline from a configuration and
manages their lifecycle.
"""

from .orchestrator import Orchestrator

__all__ = ["Orchestrator"]

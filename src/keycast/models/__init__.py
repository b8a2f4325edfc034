"""Data models for keycast."""

from .config import FEEDBACK_SUFFIX, BindingSpec, PulseSpec, RouterConfig
from .enums import DataKind, DeviceKind, TargetProtocol
from .target import Target, parse_target, parse_targets

__all__ = [
    "FEEDBACK_SUFFIX",
    # Config
    "BindingSpec",
    "PulseSpec",
    "RouterConfig",
    # Enums
    "DataKind",
    "DeviceKind",
    "TargetProtocol",
    # Targets
    "Target",
    "parse_target",
    "parse_targets",
]

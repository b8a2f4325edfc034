"""Key mapping and broadcast pipeline."""

from .bindings import Binding, BindingStore, KeyState
from .classifier import TYPE_ALIASES, classify, is_known_type
from .evaluator import Evaluator, ShapeHandle
from .feedback import FeedbackController, led_level
from .mapper import Mapper, control_points, interpolate, string_index
from .pipeline import Pipeline
from .router import RouteObserver, Router, switch_messages
from .shaper import Shaped, Shaper, script_name

__all__ = [
    # Bindings
    "Binding",
    "BindingStore",
    "KeyState",
    # Classification
    "TYPE_ALIASES",
    "classify",
    "is_known_type",
    # Scripts
    "Evaluator",
    "ShapeHandle",
    "Shaped",
    "Shaper",
    "script_name",
    # Mapping and routing
    "Mapper",
    "control_points",
    "interpolate",
    "string_index",
    "RouteObserver",
    "Router",
    "switch_messages",
    "FeedbackController",
    "led_level",
    # Pipeline
    "Pipeline",
]

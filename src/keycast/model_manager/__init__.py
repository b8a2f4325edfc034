"""Generic model management: YAML persistence and the observer manager."""

from keycast.model_manager.observer import ObserverManager
from keycast.model_manager.persistence import YamlPersistence

__all__ = [
    "ObserverManager",
    "YamlPersistence",
]

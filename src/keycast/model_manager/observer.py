"""Typed observer list used to publish routing events."""

import logging
from threading import Lock
from typing import Any, Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=object)


class ObserverManager(Generic[T]):
    """
    Holds observers of one protocol type and calls them by method name.

    The list is replaced rather than mutated, so ``notify`` iterates a
    snapshot and observers may (un)register from inside a callback.
    A failing observer is logged and does not stop the others.

    Example:
        ```python
        observers = ObserverManager[RouteObserver](observer_type_name="route")
        observers.register(feedback)
        observers.notify("on_key_routed", "pad", 5, DataKind.TOGGLE, True)
        ```
    """

    def __init__(self, observer_type_name: str = "observer"):
        self._observers: tuple[T, ...] = ()
        self._lock = Lock()
        self._label = observer_type_name

    def register(self, observer: T) -> None:
        """Add an observer; registering twice has no effect."""
        with self._lock:
            if observer in self._observers:
                return
            self._observers = self._observers + (observer,)
        logger.debug(f"Registered {self._label} observer: {observer}")

    def unregister(self, observer: T) -> None:
        with self._lock:
            if observer not in self._observers:
                logger.warning(f"Attempted to unregister unknown {self._label} observer: {observer}")
                return
            self._observers = tuple(o for o in self._observers if o is not observer)
        logger.debug(f"Unregistered {self._label} observer: {observer}")

    def notify(self, callback_name: str, *args: Any, **kwargs: Any) -> None:
        for observer in self._observers:
            callback = getattr(observer, callback_name, None)
            if callback is None:
                logger.error(f"{self._label} observer {observer} has no method '{callback_name}'")
                continue
            try:
                callback(*args, **kwargs)
            except Exception as e:
                logger.error(
                    f"Error in {self._label} observer {observer}.{callback_name}: {e}",
                    exc_info=True,
                )

    def __contains__(self, observer: T) -> bool:
        return observer in self._observers

    def __len__(self) -> int:
        return len(self._observers)

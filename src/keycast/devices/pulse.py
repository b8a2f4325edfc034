"""Synthetic pulse device firing on a timer."""

import logging
import threading
from typing import Optional

from keycast.models import DeviceKind

from .protocols import EventCallback, MidiMessageKind

logger = logging.getLogger(__name__)


class PulseDevice:
    """
    Fires an event on key 0 every ``period`` seconds.

    The event value is a running tick count wrapped into 0-127, so shape
    scripts can derive phases from it.
    """

    kind = DeviceKind.PULSE

    def __init__(self, name: str, period: float):
        """
        Args:
            name: Device name
            period: Seconds between pulses
        """
        self.name = name
        self.period = period
        self._on_event: Optional[EventCallback] = None
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._ticks = 0

    def open_input(self, on_event: EventCallback) -> None:
        if self._thread and self._thread.is_alive():
            logger.warning(f"Pulse {self.name} is already running")
            return

        self._on_event = on_event
        self._stop_event.clear()
        self._thread = threading.Thread(target=self._run, name=f"pulse-{self.name}", daemon=True)
        self._thread.start()
        logger.info(f"Pulse {self.name} started ({self.period * 1000:.1f} ms)")

    def open_output(self) -> None:
        pass

    def send(self, kind: MidiMessageKind, key: int = 0, value: float = 0) -> bool:
        return False

    def stop(self) -> None:
        self._stop_event.set()
        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=1.0)
        self._thread = None
        logger.debug(f"Pulse stopped: {self.name}")

    def tick(self) -> None:
        """Fire one pulse."""
        if self._on_event is None:
            return
        value = self._ticks % 128
        self._ticks += 1
        self._on_event(self.name, 0, value)

    def _run(self) -> None:
        # wait() returns True once stop() is called
        while not self._stop_event.wait(self.period):
            try:
                self.tick()
            except Exception as e:
                logger.error(f"Error in pulse {self.name}: {e}")

    def __repr__(self) -> str:
        return f"PulseDevice({self.name!r}, period={self.period})"

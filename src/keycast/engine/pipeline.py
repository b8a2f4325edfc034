"""Event pipeline: lookup, shape, map, route."""

import logging
import threading
from queue import Empty, Full, Queue
from typing import Optional

from .bindings import BindingStore
from .mapper import Mapper
from .shaper import Shaper

logger = logging.getLogger(__name__)


class Pipeline:
    """
    Runs one event at a time through the binding store, shaper and mapper.

    Device threads call ``submit``; a single worker drains the queue, so
    binding state has one writer. ``process`` runs an event synchronously
    and is safe to call from any thread.
    """

    def __init__(self, store: BindingStore, shaper: Shaper, mapper: Mapper, queue_size: int = 1024):
        self.store = store
        self.shaper = shaper
        self.mapper = mapper
        self._queue: Queue[Optional[tuple[str, int, float]]] = Queue(maxsize=queue_size)
        self._lock = threading.RLock()
        self._worker: Optional[threading.Thread] = None
        self._running = False

    def process(self, device: str, key: int, value: float) -> bool:
        """
        Handle one raw event.

        Returns:
            True when the event was mapped and routed; False when the key is
            unbound, a script failed or gated it, or routing failed
        """
        with self._lock:
            binding = self.store.lookup(device, key)
            if binding is None:
                logger.debug(f"{device}: key {key} not bound")
                return False

            shaped = self.shaper.shape(binding, device, binding.spec.type or "", key, value)
            if not shaped.ok:
                return False
            if not shaped.proceed:
                return True

            return self.mapper.map(binding, device, key, shaped.value)

    def submit(self, device: str, key: int, value: float) -> None:
        """
        Queue an event for the worker.

        Safe to call from any thread (MIDI callbacks, pulse timers).
        """
        try:
            self._queue.put_nowait((device, key, value))
        except Full:
            logger.warning(f"Event queue full, dropped {device}[{key}]={value}")

    def start(self) -> None:
        """Start the worker thread."""
        if self._running:
            logger.warning("Pipeline already running")
            return

        self._running = True
        self._worker = threading.Thread(target=self._drain, name="keycast-pipeline", daemon=True)
        self._worker.start()
        logger.info("Pipeline started")

    def stop(self, timeout: float = 2.0) -> None:
        """Stop the worker once queued events are processed."""
        if not self._running:
            return

        self._running = False
        self._queue.put(None)
        if self._worker:
            self._worker.join(timeout=timeout)
            self._worker = None
        logger.info("Pipeline stopped")

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def pending(self) -> int:
        """Events waiting in the queue."""
        return self._queue.qsize()

    def _drain(self) -> None:
        while True:
            try:
                event = self._queue.get(timeout=0.5)
            except Empty:
                if not self._running:
                    break
                continue

            if event is None:
                break

            device, key, value = event
            try:
                self.process(device, key, value)
            except Exception as e:
                logger.error(f"Error processing {device}[{key}]={value}: {e}", exc_info=True)

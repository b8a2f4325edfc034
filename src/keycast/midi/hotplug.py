"""Hot-plug MIDI ports.

A manager keeps one port open on whichever device matches its filter. It
polls the port list, drops the port when the device goes away and opens it
again when it comes back. Output managers can fall back to a virtual port
that other software connects to.
"""

import logging
import threading
from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import Optional

import mido

logger = logging.getLogger(__name__)


class BaseMidiManager(ABC):
    """Polls for a matching port and keeps it open."""

    direction = "port"

    def __init__(
        self,
        device_filter: Callable[[str], bool],
        poll_interval: float = 5.0,
        virtual_name: Optional[str] = None,
    ):
        """
        Args:
            device_filter: Returns True for port names that belong to the device
            poll_interval: Seconds between port list checks
            virtual_name: Open a virtual port with this name when nothing matches
        """
        self._matches = device_filter
        self._poll_interval = poll_interval
        self._virtual_name = virtual_name
        self._port: Optional[mido.ports.BasePort] = None
        self._virtual = False
        self._lock = threading.Lock()
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._warned_missing = False

    @abstractmethod
    def _list_ports(self) -> list[str]:
        """Names of the ports currently available in this direction."""

    @abstractmethod
    def _open(self, name: str, virtual: bool) -> mido.ports.BasePort:
        """Open a port; may raise whatever the backend raises."""

    def start(self) -> None:
        """Start polling in a background thread."""
        if self._thread and self._thread.is_alive():
            logger.warning(f"MIDI {self.direction} manager already running")
            return

        self._stop_event.clear()
        self._thread = threading.Thread(target=self._watch, name=f"midi-{self.direction}", daemon=True)
        self._thread.start()

    def stop(self) -> None:
        """Stop polling and close the port."""
        self._stop_event.set()
        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=1.0)
        self._thread = None

        with self._lock:
            self._close()

    def poll(self) -> None:
        """One hot-plug check: forget a vanished port, then open a matching one."""
        available = self._list_ports()

        with self._lock:
            if self._port is not None and not self._virtual and self._port.name not in available:
                logger.warning(f"MIDI {self.direction} disconnected: {self._port.name}")
                self._close()

            if self._port is not None:
                return

            name = next((p for p in available if self._matches(p)), None)
            if name is not None:
                self._connect(name, virtual=False)
            elif self._virtual_name:
                self._connect(self._virtual_name, virtual=True)
            elif not self._warned_missing:
                logger.warning(f"No matching MIDI {self.direction} found")
                self._warned_missing = True

    @property
    def is_connected(self) -> bool:
        with self._lock:
            return self._port is not None

    @property
    def current_port(self) -> Optional[str]:
        with self._lock:
            return self._port.name if self._port else None

    def _watch(self) -> None:
        while not self._stop_event.is_set():
            try:
                self.poll()
            except Exception as e:
                logger.error(f"Error polling MIDI {self.direction} ports: {e}")
            self._stop_event.wait(self._poll_interval)

    def _connect(self, name: str, virtual: bool) -> None:
        # caller holds _lock
        try:
            self._port = self._open(name, virtual)
        except Exception as e:
            logger.error(f"Could not open MIDI {self.direction} {name}: {e}")
            self._port = None
            return
        self._virtual = virtual
        self._warned_missing = False
        logger.info(f"Opened {'virtual ' if virtual else ''}MIDI {self.direction}: {name}")

    def _close(self) -> None:
        # caller holds _lock
        if self._port is None:
            return
        try:
            self._port.close()
        except Exception as e:
            logger.debug(f"Error closing MIDI {self.direction} {self._port.name}: {e}")
        self._port = None
        self._virtual = False


class MidiInputManager(BaseMidiManager):
    """Input side: incoming messages go to the ``on_message`` callback."""

    direction = "input"

    def __init__(self, device_filter: Callable[[str], bool], poll_interval: float = 5.0):
        super().__init__(device_filter, poll_interval)
        self._callback: Optional[Callable[[mido.Message], None]] = None

    def on_message(self, callback: Callable[[mido.Message], None]) -> None:
        """
        Set the message callback.

        Runs on mido's I/O thread, so it should return quickly.
        """
        self._callback = callback

    def _list_ports(self) -> list[str]:
        return mido.get_input_names()

    def _open(self, name: str, virtual: bool) -> mido.ports.BaseInput:
        return mido.open_input(name, virtual=virtual, callback=self._dispatch)

    def _dispatch(self, msg: mido.Message) -> None:
        if self._callback is None:
            return
        try:
            self._callback(msg)
        except Exception as e:
            logger.error(f"Error handling MIDI message {msg}: {e}")


class MidiOutputManager(BaseMidiManager):
    """Output side."""

    direction = "output"

    def send(self, message: mido.Message) -> bool:
        """
        Send a message.

        Returns:
            False when no port is open or the backend refused the message
        """
        with self._lock:
            if self._port is None:
                return False
            try:
                self._port.send(message)
                return True
            except Exception as e:
                logger.error(f"Error sending MIDI {message}: {e}")
                return False

    def _list_ports(self) -> list[str]:
        return mido.get_output_names()

    def _open(self, name: str, virtual: bool) -> mido.ports.BaseOutput:
        return mido.open_output(name, virtual=virtual)

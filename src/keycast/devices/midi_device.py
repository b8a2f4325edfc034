"""Physical MIDI control surface."""

import logging
from typing import Optional

import mido

from keycast.midi import MidiInputManager, MidiOutputManager, port_matcher
from keycast.models import DeviceKind

from .protocols import EventCallback, MidiMessageKind, build_message

logger = logging.getLogger(__name__)


class MidiDevice:
    """
    A control surface: events in on its input port, LED feedback out on its output port.

    Notes and controllers are both turned into (key, value) events: note on
    gives (note, velocity), note off gives (note, 0), control change gives
    (control, value). Clock and other realtime messages are ignored.
    """

    kind = DeviceKind.MIDI

    def __init__(self, name: str, poll_interval: float = 2.0):
        """
        Args:
            name: Device name from the config; matched as a substring of port names
            poll_interval: How often to check for device changes (seconds)
        """
        self.name = name
        self._input = MidiInputManager(port_matcher(name), poll_interval)
        self._output = MidiOutputManager(port_matcher(name), poll_interval)
        self._on_event: Optional[EventCallback] = None
        self._input.on_message(self._handle_message)

    def open_input(self, on_event: EventCallback) -> None:
        self._on_event = on_event
        self._input.start()

    def open_output(self) -> None:
        self._output.start()

    def send(self, kind: MidiMessageKind, key: int = 0, value: float = 0) -> bool:
        return self._output.send(build_message(kind, key, value))

    def stop(self) -> None:
        self._input.stop()
        self._output.stop()
        logger.debug(f"MIDI device stopped: {self.name}")

    def _handle_message(self, msg: mido.Message) -> None:
        """Called from mido's internal I/O thread."""
        if self._on_event is None:
            return

        if msg.type == "note_on":
            self._on_event(self.name, msg.note, msg.velocity)
        elif msg.type == "note_off":
            self._on_event(self.name, msg.note, 0)
        elif msg.type == "control_change":
            self._on_event(self.name, msg.control, msg.value)
        elif msg.type != "clock":
            logger.debug(f"Unhandled message from {self.name}: {msg}")

    def __repr__(self) -> str:
        return f"MidiDevice({self.name!r})"

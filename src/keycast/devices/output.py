"""Output-only MIDI device used as a routing target."""

import logging

from keycast.midi import MidiOutputManager, port_matcher
from keycast.models import DeviceKind

from .protocols import EventCallback, MidiMessageKind, build_message

logger = logging.getLogger(__name__)


class MidiOutputDevice:
    """
    MIDI output target.

    Connects to a matching hardware port when one exists, otherwise
    publishes a virtual port under the same name.
    """

    kind = DeviceKind.OUTPUT

    def __init__(self, name: str, poll_interval: float = 2.0):
        self.name = name
        self._output = MidiOutputManager(port_matcher(name), poll_interval, virtual_name=name)

    def open_input(self, on_event: EventCallback) -> None:
        pass

    def open_output(self) -> None:
        self._output.start()

    def send(self, kind: MidiMessageKind, key: int = 0, value: float = 0) -> bool:
        return self._output.send(build_message(kind, key, value))

    def stop(self) -> None:
        self._output.stop()

    def __repr__(self) -> str:
        return f"MidiOutputDevice({self.name!r})"

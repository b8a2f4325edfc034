"""Device protocol shared by every device kind."""

from __future__ import annotations

from enum import Enum
from typing import Callable, Protocol, runtime_checkable

import mido

from keycast.models import DeviceKind

# (device_name, key, raw_value)
EventCallback = Callable[[str, int, float], None]


class MidiMessageKind(str, Enum):
    """Outbound MIDI messages the router and feedback controller emit."""

    NOTE_ON = "note_on"
    NOTE_OFF = "note_off"
    CONTROLLER_CHANGE = "control_change"
    TIMING_TICK = "clock"


def _data_byte(value: float) -> int:
    return max(0, min(127, int(value)))


def build_message(kind: MidiMessageKind, key: int = 0, value: float = 0) -> mido.Message:
    """
    Build a mido message.

    Args:
        kind: Message kind
        key: Note or controller number
        value: Velocity or controller value, clamped to 0-127
    """
    if kind == MidiMessageKind.NOTE_ON:
        return mido.Message("note_on", note=_data_byte(key), velocity=_data_byte(value))
    if kind == MidiMessageKind.NOTE_OFF:
        return mido.Message("note_off", note=_data_byte(key), velocity=0)
    if kind == MidiMessageKind.CONTROLLER_CHANGE:
        return mido.Message("control_change", control=_data_byte(key), value=_data_byte(value))
    return mido.Message("clock")


@runtime_checkable
class Device(Protocol):
    """
    Uniform capability set over heterogeneous devices.

    Physical controllers, pulse generators and output-only ports all expose
    the same four operations; a device that cannot do something treats the
    call as a no-op (open) or a failure (send returns False).
    """

    name: str
    kind: DeviceKind

    def open_input(self, on_event: EventCallback) -> None:
        """Start delivering (device, key, value) events to ``on_event``."""
        ...

    def open_output(self) -> None:
        """Open the outbound side of the device."""
        ...

    def send(self, kind: MidiMessageKind, key: int = 0, value: float = 0) -> bool:
        """Send a message; True if it was handed to the port."""
        ...

    def stop(self) -> None:
        """Close ports and stop threads."""
        ...

"""Enumerations for keycast."""

from enum import Enum


class DataKind(str, Enum):
    """Semantic kind of a bound key, derived from its declared type."""

    BUTTON = "button"  # on while held, off on release
    TOGGLE = "toggle"  # flips on every nonzero input
    STRING = "string"  # categorical lookup into the map
    NUMBER = "number"  # scalar, interpolated over the map
    VECTOR = "vector"  # 3 components, interpolated component-wise
    COLOR = "color"  # 4 components, interpolated component-wise
    MIDI_NOTE = "midi_note"
    MIDI_CONTROLLER_CHANGE = "midi_controller_change"
    MIDI_TIMING_TICK = "midi_timing_tick"

    @property
    def is_stateful(self) -> bool:
        """Kinds whose state is reflected back to the device as LED feedback."""
        return self in (DataKind.BUTTON, DataKind.TOGGLE)

    @property
    def is_midi(self) -> bool:
        """Kinds forwarded to MIDI output targets instead of being broadcast."""
        return self in (
            DataKind.MIDI_NOTE,
            DataKind.MIDI_CONTROLLER_CHANGE,
            DataKind.MIDI_TIMING_TICK,
        )


class TargetProtocol(str, Enum):
    """Wire protocol of an output target."""

    UNKNOWN = "unknown"
    CSV = "csv"  # "property,value" lines on stdout
    OSC = "osc"
    UDP = "udp"  # "property,value" datagrams
    MIDI = "midi"  # a MIDI output port


class DeviceKind(str, Enum):
    """Kind of device owned by the registry."""

    MIDI = "midi"  # physical controller: input plus LED feedback output
    PULSE = "pulse"  # synthetic timer source
    OUTPUT = "output"  # MIDI output target only

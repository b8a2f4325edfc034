"""Devices: MIDI controllers, pulse generators and MIDI output targets."""

from .midi_device import MidiDevice
from .output import MidiOutputDevice
from .protocols import Device, EventCallback, MidiMessageKind, build_message
from .pulse import PulseDevice
from .registry import DeviceRegistry

__all__ = [
    "Device",
    "DeviceRegistry",
    "EventCallback",
    "MidiDevice",
    "MidiMessageKind",
    "MidiOutputDevice",
    "PulseDevice",
    "build_message",
]

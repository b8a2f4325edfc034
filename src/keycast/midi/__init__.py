"""MIDI port handling with hot-plug support."""

from .hotplug import BaseMidiManager, MidiInputManager, MidiOutputManager
from .ports import list_ports, port_matcher

__all__ = ["BaseMidiManager", "MidiInputManager", "MidiOutputManager", "list_ports", "port_matcher"]

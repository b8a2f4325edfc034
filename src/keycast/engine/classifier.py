"""Declared type name to data kind."""

from typing import Optional

from keycast.models import DataKind

TYPE_ALIASES: dict[str, DataKind] = {
    "button": DataKind.BUTTON,
    "toggle": DataKind.TOGGLE,
    "state": DataKind.STRING,
    "enum": DataKind.STRING,
    "strings": DataKind.STRING,
    "scalar": DataKind.NUMBER,
    "number": DataKind.NUMBER,
    "float": DataKind.NUMBER,
    "int": DataKind.NUMBER,
    "vec2": DataKind.VECTOR,
    "vec3": DataKind.VECTOR,
    "vector": DataKind.VECTOR,
    "vec4": DataKind.COLOR,
    "color": DataKind.COLOR,
    "note": DataKind.MIDI_NOTE,
    "cc": DataKind.MIDI_CONTROLLER_CHANGE,
    "tick": DataKind.MIDI_TIMING_TICK,
}


def classify(type_name: Optional[str]) -> DataKind:
    """
    Classify a declared type name.

    Absent or unrecognized names fall back to NUMBER.

    Examples:
        >>> classify("toggle")
        <DataKind.TOGGLE: 'toggle'>
        >>> classify("vec4")
        <DataKind.COLOR: 'color'>
        >>> classify(None)
        <DataKind.NUMBER: 'number'>
    """
    if type_name is None:
        return DataKind.NUMBER
    return TYPE_ALIASES.get(type_name, DataKind.NUMBER)


def is_known_type(type_name: Optional[str]) -> bool:
    """True when the name is absent or one of the recognized aliases."""
    return type_name is None or type_name in TYPE_ALIASES

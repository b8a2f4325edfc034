"""MIDI port discovery."""

import mido


def list_ports() -> dict:
    """
    List all available MIDI ports.

    Returns:
        Dictionary with 'input' and 'output' lists of port names
    """
    return {
        'input': mido.get_input_names(),
        'output': mido.get_output_names()
    }


def port_matcher(device_name: str):
    """
    Build a device filter matching ports whose name contains ``device_name``.

    Backends decorate port names ("nanoKONTROL2 SLIDER/KNOB" becomes
    "nanoKONTROL2:nanoKONTROL2 _ CTRL 20:0" under ALSA), so configs name
    devices by a substring.
    """
    return lambda port_name: device_name in port_name

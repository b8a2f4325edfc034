"""Device and shape script errors."""

from typing import Optional

from .base import KeycastError


class DeviceError(KeycastError):
    """A MIDI device could not be opened or used."""

    def __init__(self, user_message: str, device_name: Optional[str] = None, **kwargs):
        super().__init__(user_message, **kwargs)
        self.device_name = device_name


class DeviceNotFoundError(DeviceError):
    """No MIDI port matches the requested device name."""

    def __init__(self, device_name: str, available: Optional[list[str]] = None):
        hint = "Run 'keycast midi list' to see available devices."
        if available:
            hint += "\nAvailable: " + ", ".join(available)
        super().__init__(f"MIDI device '{device_name}' not found.", device_name=device_name, recovery_hint=hint)


class ShapeScriptError(KeycastError):
    """
    A shape script failed to compile or raised while running.

    Args:
        script_name: Registration name of the script, e.g. "nanoKONTROL2_16"
        error: The underlying error message
    """

    def __init__(self, script_name: str, error: str):
        super().__init__(
            user_message=f"Shape script '{script_name}' failed: {error}",
            technical_message=f"Shape script {script_name}: {error}",
            recovery_hint="Scripts are Python: a single expression, or a body that uses 'return'.",
        )
        self.script_name = script_name
        self.error = error

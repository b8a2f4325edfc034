"""LED feedback to MIDI controllers."""

import logging
from typing import Any

from keycast.devices import DeviceRegistry, MidiMessageKind
from keycast.models import DataKind, DeviceKind

logger = logging.getLogger(__name__)

LED_ON = 127
LED_OFF = 0


def led_level(value: Any) -> int:
    """
    Controller value for an LED.

    Booleans and "on"/"off" give 127/0, numbers are clamped to 0-127.
    """
    if isinstance(value, bool):
        return LED_ON if value else LED_OFF
    if isinstance(value, str):
        return LED_ON if value.lower() in ("on", "true", "1") else LED_OFF
    if isinstance(value, (int, float)):
        return max(LED_OFF, min(LED_ON, int(value)))
    return LED_ON if value else LED_OFF


class FeedbackController:
    """
    Reflects button and toggle state back onto the controller that sent it.

    Subscribes to the router's ``on_key_routed`` events and is also called
    directly for explicit LED control from shape scripts.
    """

    def __init__(self, registry: DeviceRegistry):
        self.registry = registry

    def reflect(self, device: str, key: int, led_value: Any) -> bool:
        """
        Send a control change carrying the LED level.

        Returns:
            False when the device is not a MIDI controller or the send failed
        """
        target = self.registry.get(device)
        if target is None or target.kind != DeviceKind.MIDI:
            return False

        level = led_level(led_value)
        logger.debug(f"{device}: LED {key} -> {level}")
        return target.send(MidiMessageKind.CONTROLLER_CHANGE, key, level)

    def on_key_routed(self, device: str, key: int, kind: DataKind, value: Any) -> None:
        """Router callback."""
        if kind.is_stateful:
            self.reflect(device, key, value)

"""Single owner of every device in the process."""

import logging
from typing import Iterator, Optional

from keycast.models import DeviceKind

from .protocols import Device, EventCallback

logger = logging.getLogger(__name__)


class DeviceRegistry:
    """
    Holds input devices (controllers, pulses) and output devices (MIDI targets).

    Inputs and outputs live in separate namespaces: a controller named
    ``nanoKONTROL2`` and a MIDI target ``midi://nanoKONTROL2`` can coexist.
    Teardown is explicit through ``stop_all``.
    """

    def __init__(self) -> None:
        self._inputs: dict[str, Device] = {}
        self._outputs: dict[str, Device] = {}

    def add(self, device: Device) -> None:
        """Register a device; output-only devices go to the output namespace."""
        table = self._outputs if device.kind == DeviceKind.OUTPUT else self._inputs
        if device.name in table:
            raise ValueError(f"Device already registered: {device.name}")
        table[device.name] = device
        logger.debug(f"Registered {device.kind.value} device: {device.name}")

    def get(self, name: str) -> Optional[Device]:
        """Look up an input device (controller or pulse)."""
        return self._inputs.get(name)

    def get_output(self, name: str) -> Optional[Device]:
        """Look up an output device (MIDI target)."""
        return self._outputs.get(name)

    def kind_of(self, name: str) -> Optional[DeviceKind]:
        device = self._inputs.get(name)
        return device.kind if device else None

    @property
    def input_names(self) -> list[str]:
        """Input device names in registration order."""
        return list(self._inputs)

    @property
    def output_names(self) -> list[str]:
        """Output device names in registration order."""
        return list(self._outputs)

    def __iter__(self) -> Iterator[Device]:
        yield from self._inputs.values()
        yield from self._outputs.values()

    def __len__(self) -> int:
        return len(self._inputs) + len(self._outputs)

    def start_all(self, on_event: EventCallback) -> None:
        """Open outputs first so feedback has somewhere to go, then inputs."""
        for device in self._outputs.values():
            device.open_output()
        for device in self._inputs.values():
            device.open_output()
            device.open_input(on_event)
        logger.info(f"Started {len(self._inputs)} input and {len(self._outputs)} output device(s)")

    def stop_all(self) -> None:
        """Stop every device and forget them."""
        for device in list(self):
            try:
                device.stop()
            except Exception as e:
                logger.error(f"Error stopping device {device.name}: {e}")
        self._inputs.clear()
        self._outputs.clear()
        logger.info("All devices stopped")

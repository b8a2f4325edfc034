"""Pytest fixtures for tests."""

from pathlib import Path
from tempfile import TemporaryDirectory
from typing import Any, Optional

import pytest

from keycast.devices import DeviceRegistry, MidiMessageKind
from keycast.models import DeviceKind, RouterConfig, Target
from keycast.orchestration import Orchestrator


class FakeDevice:
    """Device that records what is sent to it instead of touching MIDI ports."""

    def __init__(self, name: str, kind: DeviceKind = DeviceKind.MIDI):
        self.name = name
        self.kind = kind
        self.sent: list[tuple[MidiMessageKind, int, float]] = []
        self.on_event = None
        self.opened = False
        self.stopped = False

    def open_input(self, on_event) -> None:
        self.on_event = on_event

    def open_output(self) -> None:
        self.opened = True

    def send(self, kind: MidiMessageKind, key: int = 0, value: float = 0) -> bool:
        self.sent.append((kind, key, value))
        return True

    def stop(self) -> None:
        self.stopped = True


class RecordingBroadcaster:
    """Broadcaster stand-in keeping every (target, property, value) it is given."""

    def __init__(self):
        self.sent: list[tuple[Target, str, Any]] = []
        self.closed = False

    def broadcast(self, target: Target, prop: str, value: Any) -> bool:
        self.sent.append((target, prop, value))
        return True

    def close(self) -> None:
        self.closed = True

    def pairs(self) -> list[tuple[str, Any]]:
        """(property, value) pairs, ignoring targets."""
        return [(prop, value) for _, prop, value in self.sent]


@pytest.fixture
def temp_dir():
    """Create a temporary directory that gets cleaned up."""
    with TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def broadcaster():
    return RecordingBroadcaster()


@pytest.fixture
def make_orchestrator(broadcaster):
    """
    Build an initialized orchestrator from a config mapping.

    Input devices and MIDI targets are FakeDevices, reachable through
    ``orchestrator.registry``.
    """

    def _make(data: dict, outputs: Optional[list[str]] = None) -> Orchestrator:
        config = RouterConfig.model_validate(data)
        registry = DeviceRegistry()
        for name in config.inputs:
            registry.add(FakeDevice(name, DeviceKind.MIDI))
        for pulse in config.pulses:
            registry.add(FakeDevice(pulse.name, DeviceKind.PULSE))

        orchestrator = Orchestrator(config, broadcaster=broadcaster, registry=registry)
        for target in orchestrator.midi_targets():
            registry.add(FakeDevice(target.address, DeviceKind.OUTPUT))
        for name in outputs or []:
            registry.add(FakeDevice(name, DeviceKind.OUTPUT))

        orchestrator.initialize()
        return orchestrator

    return _make

"""Resolve targets and broadcast mapped values."""

import logging
from typing import Any, Optional, Protocol

from keycast.broadcast import Broadcaster
from keycast.devices import DeviceRegistry, MidiMessageKind
from keycast.model_manager import ObserverManager
from keycast.models import DataKind, Target, TargetProtocol

from .bindings import Binding, BindingStore

logger = logging.getLogger(__name__)


class RouteObserver(Protocol):
    """Receives an event after a button or toggle has been routed."""

    def on_key_routed(self, device: str, key: int, kind: DataKind, value: Any) -> None:
        ...


def switch_messages(entry: Any, default_property: str) -> list[tuple[str, Any]]:
    """
    Resolve an on/off map entry into (property, message) pairs.

    An entry is a message string, a ``"property,message"`` string, a
    ``[property, message]`` pair, or a list of any of those.

    Examples:
        >>> switch_messages("go", "pad")
        [('pad', 'go')]
        >>> switch_messages("scene,2", "pad")
        [('scene', '2')]
        >>> switch_messages(["scene", 2], "pad")
        [('scene', 2)]
        >>> switch_messages([["a", 1], "b,2"], "pad")
        [('a', 1), ('b', '2')]
    """
    if entry is None:
        return []
    if isinstance(entry, str):
        if "," in entry:
            prop, message = entry.split(",", 1)
            return [(prop.strip(), message.strip())]
        return [(default_property, entry)]
    if isinstance(entry, (list, tuple)):
        if _is_pair(entry):
            return [(entry[0], entry[1])]
        messages = []
        for item in entry:
            messages.extend(switch_messages(item, default_property))
        return messages
    return [(default_property, entry)]


def _is_pair(entry: list | tuple) -> bool:
    return (
        len(entry) == 2
        and isinstance(entry[0], str)
        and "," not in entry[0]
        and not isinstance(entry[1], (list, tuple))
    )


class Router:
    """
    Sends a mapped binding to its effective targets.

    Effective targets are the binding's ``out`` override when present,
    otherwise the process-wide defaults, in configured order. Buttons and
    toggles publish ``on_key_routed`` once they have been broadcast.
    """

    def __init__(
        self,
        broadcaster: Broadcaster,
        default_targets: list[Target],
        registry: Optional[DeviceRegistry] = None,
        store: Optional[BindingStore] = None,
    ):
        self.broadcaster = broadcaster
        self.default_targets = list(default_targets)
        self.registry = registry
        self.store = store
        self._observers = ObserverManager[RouteObserver](observer_type_name="route")

    def register_observer(self, observer: RouteObserver) -> None:
        self._observers.register(observer)

    def unregister_observer(self, observer: RouteObserver) -> None:
        self._observers.unregister(observer)

    def targets_for(self, binding: Binding) -> list[Target]:
        """Effective targets of a binding."""
        override = binding.spec.targets
        return override if override is not None else self.default_targets

    def route(self, binding: Binding, device: str, key: int) -> bool:
        """
        Broadcast the binding's current value.

        Returns:
            False when the binding has no value, the kind is unhandled or a send failed
        """
        value = binding.state.value
        if value is None:
            logger.debug(f"{device}[{key}] {binding.name}: no value to route")
            return False

        targets = self.targets_for(binding)
        kind = binding.kind

        if kind.is_stateful:
            ok = self._route_switch(binding, targets, bool(value))
            self._observers.notify("on_key_routed", device, key, kind, value)
            return ok

        if kind in (DataKind.STRING, DataKind.NUMBER, DataKind.VECTOR, DataKind.COLOR):
            return self._broadcast(targets, binding.name, value)

        if kind.is_midi:
            return self._forward_midi(targets, kind, key, value)

        logger.warning(f"{device}[{key}] {binding.name}: cannot route kind {kind}")
        return False

    def route_initial(self, device: str) -> int:
        """
        Route every binding of ``device`` that already has a value.

        Used at startup so configured initial values reach listeners and LEDs.

        Returns:
            Number of bindings routed
        """
        if self.store is None:
            return 0

        routed = 0
        for binding in self.store.bindings(device):
            if binding.state.value is None:
                continue
            keys = binding.spec.keys(binding.index)
            if self.route(binding, device, keys[0]):
                routed += 1
        if routed:
            logger.info(f"{device}: sent {routed} initial value(s)")
        return routed

    def _route_switch(self, binding: Binding, targets: list[Target], on: bool) -> bool:
        state = "on" if on else "off"
        table = binding.spec.map

        if table is None:
            messages = [(binding.name, state)]
        elif isinstance(table, dict):
            messages = switch_messages(table.get(state), binding.name)
        else:
            messages = []
        if not messages:
            logger.debug(f"{binding.name}: no '{state}' entry in map")

        ok = True
        for prop, message in messages:
            ok = self._broadcast(targets, prop, message) and ok
        return ok

    def _broadcast(self, targets: list[Target], prop: str, value: Any) -> bool:
        ok = True
        for target in targets:
            if target.protocol == TargetProtocol.MIDI:
                continue
            ok = self.broadcaster.broadcast(target, prop, value) and ok
        return ok

    def _forward_midi(self, targets: list[Target], kind: DataKind, key: int, value: int) -> bool:
        if kind == DataKind.MIDI_NOTE:
            message = MidiMessageKind.NOTE_ON if value else MidiMessageKind.NOTE_OFF
        elif kind == DataKind.MIDI_CONTROLLER_CHANGE:
            message = MidiMessageKind.CONTROLLER_CHANGE
        else:
            message = MidiMessageKind.TIMING_TICK

        ok = True
        for target in targets:
            if target.protocol != TargetProtocol.MIDI:
                continue
            output = self.registry.get_output(target.address) if self.registry else None
            if output is None:
                logger.warning(f"No MIDI output open for {target}")
                ok = False
                continue
            ok = output.send(message, key, value) and ok
        return ok

"""Binding store: immutable binding config plus mutable per-binding state."""

import logging
from dataclasses import dataclass, field
from typing import Any, Iterator, Optional

from keycast.models import BindingSpec, DataKind, PulseSpec, RouterConfig

from .classifier import classify, is_known_type

logger = logging.getLogger(__name__)


@dataclass
class KeyState:
    """Live state of one binding, shared by every key aliased to it."""

    value: Any = None
    value_raw: Optional[float] = None


@dataclass(frozen=True)
class Binding:
    """
    One logical control on one device.

    ``spec`` is the loaded configuration and never changes; ``state`` is
    mutated in place by the mapper.
    """

    device: str
    index: int
    spec: BindingSpec
    kind: DataKind
    state: KeyState = field(default_factory=KeyState, compare=False)

    @property
    def name(self) -> str:
        return self.spec.display_name

    @property
    def value(self) -> Any:
        return self.state.value

    @property
    def value_raw(self) -> Optional[float]:
        return self.state.value_raw

    def snapshot(self) -> dict[str, Any]:
        """Plain-data view of the binding handed to shape scripts as ``data``."""
        data = self.spec.model_dump(exclude_none=True)
        data["name"] = self.name
        data["value"] = self.state.value
        data["value_raw"] = self.state.value_raw
        return data


class BindingStore:
    """
    Per-device key to binding lookup.

    Several raw keys may resolve to the same binding; they share its state.
    State is keyed by (device, binding index) and lives as long as the store.
    """

    def __init__(self) -> None:
        self._bindings: dict[str, list[Binding]] = {}
        self._key_maps: dict[str, dict[int, int]] = {}

    @classmethod
    def from_config(cls, config: RouterConfig) -> "BindingStore":
        """Build a store holding every input device section and pulse."""
        store = cls()
        for device, specs in config.inputs.items():
            store.add_device(device, specs)
        for pulse in config.pulses:
            store.add_pulse(pulse)
        return store

    def add_device(self, device: str, specs: list[BindingSpec]) -> None:
        """
        Register a device section.

        Args:
            device: Device name
            specs: Binding specs in configuration order
        """
        if device in self._bindings:
            raise ValueError(f"Device already in binding store: {device}")

        bindings: list[Binding] = []
        key_map: dict[int, int] = {}

        for index, spec in enumerate(specs):
            if not is_known_type(spec.type):
                logger.warning(
                    f"{device}[{index}] '{spec.display_name}': unknown type {spec.type!r}, treating as number"
                )
            binding = Binding(device=device, index=index, spec=spec, kind=classify(spec.type))
            if binding.kind.is_stateful and isinstance(spec.map, list):
                logger.warning(
                    f"{device}[{index}] '{spec.display_name}': {binding.kind.value} map must be an on/off table, "
                    "the list sends nothing"
                )
            if spec.value is not None:
                binding.state.value = spec.value
            bindings.append(binding)

            for key in spec.keys(index):
                if key in key_map:
                    logger.warning(f"{device}: key {key} bound twice, binding {index} wins")
                key_map[key] = index
                logger.debug(f"{device}: key {key} -> '{binding.name}' ({binding.kind.value})")

        self._bindings[device] = bindings
        self._key_maps[device] = key_map

    def add_pulse(self, spec: PulseSpec) -> None:
        """A pulse is a device with a single binding on key 0."""
        self.add_device(spec.name, [spec.model_copy(update={"key": 0})])

    def lookup(self, device: str, key: int) -> Optional[Binding]:
        """Find the binding for a raw key, or None."""
        key_map = self._key_maps.get(device)
        if key_map is None:
            return None
        index = key_map.get(key)
        if index is None:
            return None
        return self._bindings[device][index]

    def bindings(self, device: str) -> list[Binding]:
        """Bindings of a device in configuration order."""
        return list(self._bindings.get(device, []))

    def keys(self, binding: Binding) -> list[int]:
        """Raw keys resolving to ``binding``."""
        key_map = self._key_maps.get(binding.device, {})
        return [k for k, i in key_map.items() if i == binding.index]

    @property
    def devices(self) -> list[str]:
        return list(self._bindings)

    def __contains__(self, device: str) -> bool:
        return device in self._bindings

    def __iter__(self) -> Iterator[Binding]:
        for bindings in self._bindings.values():
            yield from bindings

    def export_config(self, config: RouterConfig) -> dict[str, Any]:
        """
        Dump ``config`` with each binding's live value written into its ``value`` field.

        Returns:
            Plain mapping ready for YAML serialization
        """
        data = config.model_dump(by_alias=True, exclude_none=True)

        for device, entries in data.get("in", {}).items():
            for index, entry in enumerate(entries):
                self._export_value(device, index, entry)

        for entry in data.get("pulse", []):
            self._export_value(entry["name"], 0, entry)

        return data

    def _export_value(self, device: str, index: int, entry: dict[str, Any]) -> None:
        bindings = self._bindings.get(device, [])
        if index >= len(bindings):
            return
        value = bindings[index].state.value
        if value is None:
            return
        entry["value"] = list(value) if isinstance(value, tuple) else value

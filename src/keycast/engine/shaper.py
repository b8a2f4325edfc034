"""Optional script pass ahead of default mapping."""

import logging
from numbers import Real
from typing import Any, NamedTuple, Optional

from keycast.devices import DeviceRegistry, MidiMessageKind
from keycast.exceptions import ShapeScriptError
from keycast.models import FEEDBACK_SUFFIX, DeviceKind

from .bindings import Binding, BindingStore
from .evaluator import Evaluator, ShapeHandle
from .feedback import FeedbackController
from .mapper import Mapper

logger = logging.getLogger(__name__)


class Shaped(NamedTuple):
    """Result of the shaping step."""

    value: float  # raw value, possibly replaced by the script
    proceed: bool  # continue with default mapping
    ok: bool


def script_name(device: str, binding: Binding) -> str:
    """Registration name of a binding's script: ``<device>_<first key>``."""
    return f"{device}_{binding.spec.keys(binding.index)[0]}"


class Shaper:
    """
    Runs a binding's shape script and acts on what it returns.

    ==========================  ==============================================
    Script result               Effect
    ==========================  ==============================================
    None                        map the original value
    bool                        gate: map the original value only if True
    number                      map the returned value instead
    [[key, value], ...]         map each pair with this binding, skip this event
    {device: [[k, v], ...]}     map each pair on that device, skip this event
    {device_FEEDBACKLEDS: ...}  set button/toggle LEDs on that device
    {midi output: ...}          send note on k/v to that MIDI output
    anything else               warning, nothing mapped
    ==========================  ==============================================

    Script errors are logged and reported as failure.
    """

    def __init__(
        self,
        evaluator: Evaluator,
        store: BindingStore,
        mapper: Mapper,
        feedback: Optional[FeedbackController] = None,
        registry: Optional[DeviceRegistry] = None,
    ):
        self.evaluator = evaluator
        self.store = store
        self.mapper = mapper
        self.feedback = feedback
        self.registry = registry
        self._handles: dict[tuple[str, int], ShapeHandle] = {}

    def register(self, binding: Binding) -> Optional[ShapeHandle]:
        """
        Compile a binding's script, once per binding.

        Raises:
            ShapeScriptError: If the script does not compile
        """
        if not binding.spec.shape:
            return None
        slot = (binding.device, binding.index)
        if slot not in self._handles:
            self._handles[slot] = self.evaluator.register(
                script_name(binding.device, binding), binding.spec.shape
            )
        return self._handles[slot]

    def handle_for(self, binding: Binding) -> Optional[ShapeHandle]:
        return self._handles.get((binding.device, binding.index))

    def shape(self, binding: Binding, device: str, type_name: str, key: int, raw_value: float) -> Shaped:
        """
        Run the binding's script, if any.

        Args:
            binding: Binding the event resolved to
            device: Source device name
            type_name: Declared type string, as written in the config
            key: Raw key of the event
            raw_value: Raw value of the event
        """
        handle = self.handle_for(binding)
        if handle is None:
            return Shaped(raw_value, True, True)

        try:
            result = self.evaluator.call(
                handle,
                device=device,
                type=type_name,
                key=key,
                value=raw_value,
                data=binding.snapshot(),
            )
        except ShapeScriptError as e:
            logger.warning(e.technical_message)
            return Shaped(raw_value, False, False)

        if result is None:
            return Shaped(raw_value, True, True)

        if isinstance(result, bool):
            return Shaped(raw_value, result, result)

        if isinstance(result, Real):
            return Shaped(float(result), True, True)

        if isinstance(result, (list, tuple)):
            ok = self._map_through(binding, device, result)
            return Shaped(raw_value, False, ok)

        if isinstance(result, dict):
            ok = self._dispatch(result)
            return Shaped(raw_value, False, ok)

        logger.warning(f"{handle.name}: unsupported script result {type(result).__name__}: {result!r}")
        return Shaped(raw_value, False, False)

    def _map_through(self, binding: Binding, device: str, pairs: Any) -> bool:
        """Map every pair with the scripted binding, under the key the script chose."""
        ok = True
        for key, value in self._pairs(device, pairs):
            ok = self.mapper.map(binding, device, key, value) and ok
        return ok

    def _map_pairs(self, device: str, pairs: Any) -> bool:
        ok = True
        for key, value in self._pairs(device, pairs):
            target = self.store.lookup(device, key)
            if target is None:
                logger.debug(f"{device}: no binding for key {key}")
                ok = False
                continue
            ok = self.mapper.map(target, device, key, value) and ok
        return ok

    def _dispatch(self, result: dict) -> bool:
        ok = True
        for name, pairs in result.items():
            name = str(name)
            if name.endswith(FEEDBACK_SUFFIX):
                ok = self._reflect(name[: -len(FEEDBACK_SUFFIX)], pairs) and ok
            elif name in self.store:
                ok = self._map_pairs(name, pairs) and ok
            elif self.registry is not None and self.registry.get_output(name) is not None:
                ok = self._send_notes(name, pairs) and ok
            else:
                logger.warning(f"Script result names unknown device '{name}'")
                ok = False
        return ok

    def _reflect(self, device: str, pairs: Any) -> bool:
        if self.feedback is None or self.registry is None:
            return False
        if self.registry.kind_of(device) != DeviceKind.MIDI:
            logger.debug(f"{device}: LED feedback only applies to MIDI controllers")
            return False

        ok = True
        for key, value in self._pairs(device, pairs):
            binding = self.store.lookup(device, key)
            if binding is None or not binding.kind.is_stateful:
                continue
            ok = self.feedback.reflect(device, key, value) and ok
        return ok

    def _send_notes(self, name: str, pairs: Any) -> bool:
        output = self.registry.get_output(name)
        ok = True
        for key, value in self._pairs(name, pairs):
            ok = output.send(MidiMessageKind.NOTE_ON, key, value) and ok
        return ok

    @staticmethod
    def _pairs(device: str, pairs: Any) -> list[tuple[int, float]]:
        """Valid ``[key, value]`` pairs; malformed entries are logged and skipped."""
        if not isinstance(pairs, (list, tuple)):
            logger.warning(f"{device}: expected a list of [key, value] pairs, got {pairs!r}")
            return []
        valid = []
        for pair in pairs:
            try:
                key, value = pair
                valid.append((int(key), float(value)))
            except (TypeError, ValueError):
                logger.warning(f"{device}: ignoring malformed pair {pair!r}")
        return valid

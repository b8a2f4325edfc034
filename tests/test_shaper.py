"""Tests for the shaping step and its result table."""

import logging
from unittest.mock import patch

import pytest

from keycast.devices import MidiMessageKind


def config_with(shape, extra=None):
    bindings = [
        {"key": 3, "name": "trigger", "type": "scalar", "shape": shape},
        {"key": 5, "name": "level", "type": "scalar", "map": [0, 127]},
        {"key": 6, "name": "mute", "type": "toggle"},
    ]
    data = {"out": ["csv"], "in": {"pad": bindings}}
    data.update(extra or {})
    return data


@pytest.mark.unit
class TestShapeResults:

    def test_no_script_passes_through(self, make_orchestrator):
        orchestrator = make_orchestrator(config_with(None))
        binding = orchestrator.store.lookup("pad", 5)
        shaped = orchestrator.shaper.shape(binding, "pad", "scalar", 5, 42)
        assert tuple(shaped) == (42, True, True)

    def test_none_continues(self, make_orchestrator, broadcaster):
        orchestrator = make_orchestrator(config_with("None"))
        assert orchestrator.pipeline.process("pad", 3, 20)
        assert broadcaster.pairs() == [("trigger", 20)]

    def test_number_overrides_value(self, make_orchestrator, broadcaster):
        orchestrator = make_orchestrator(config_with("value * 2"))
        assert orchestrator.pipeline.process("pad", 3, 20)
        assert broadcaster.pairs() == [("trigger", 40.0)]
        assert orchestrator.store.lookup("pad", 3).value_raw == 40.0

    def test_true_gates_open(self, make_orchestrator, broadcaster):
        orchestrator = make_orchestrator(config_with("value > 10"))
        assert orchestrator.pipeline.process("pad", 3, 20)
        assert broadcaster.pairs() == [("trigger", 20)]

    def test_false_gates_closed(self, make_orchestrator, broadcaster):
        orchestrator = make_orchestrator(config_with("value > 10"))
        assert orchestrator.pipeline.process("pad", 3, 5) is False
        assert broadcaster.sent == []
        assert orchestrator.store.lookup("pad", 3).value_raw is None

    def test_pairs_map_through_current_binding(self, make_orchestrator, broadcaster):
        orchestrator = make_orchestrator(config_with("[[5, 80]]"))
        with patch.object(orchestrator.mapper, "map", wraps=orchestrator.mapper.map) as map_spy:
            assert orchestrator.pipeline.process("pad", 3, 20)

        trigger = orchestrator.store.lookup("pad", 3)
        map_spy.assert_called_once_with(trigger, "pad", 5, 80.0)
        assert broadcaster.pairs() == [("trigger", pytest.approx(80.0))]
        assert trigger.value_raw == 80
        assert orchestrator.store.lookup("pad", 5).value_raw is None

    def test_each_pair_is_mapped(self, make_orchestrator, broadcaster):
        orchestrator = make_orchestrator(config_with("[[42, 7], [43, 9]]"))
        orchestrator.pipeline.process("pad", 3, 20)
        assert broadcaster.pairs() == [("trigger", 7.0), ("trigger", 9.0)]
        assert orchestrator.store.lookup("pad", 3).value_raw == 9

    def test_dict_maps_on_named_device(self, make_orchestrator, broadcaster):
        extra = {"pulse": [{"name": "beat", "bpm": 120, "shape": "{'pad': [[5, 127], [6, 1]]}"}]}
        orchestrator = make_orchestrator(config_with(None, extra))

        assert orchestrator.pipeline.process("beat", 0, 3)
        assert broadcaster.pairs() == [("level", pytest.approx(127.0)), ("mute", "on")]

    def test_dict_feedback_leds(self, make_orchestrator, broadcaster):
        orchestrator = make_orchestrator(config_with("{'pad_FEEDBACKLEDS': [[6, 127], [5, 127]]}"))
        assert orchestrator.pipeline.process("pad", 3, 20)

        pad = orchestrator.registry.get("pad")
        # key 5 is a scalar, only the toggle gets an LED
        assert pad.sent == [(MidiMessageKind.CONTROLLER_CHANGE, 6, 127)]
        assert broadcaster.sent == []

    def test_dict_sends_notes_to_midi_output(self, make_orchestrator):
        orchestrator = make_orchestrator(config_with("{'synth': [[60, 100]]}"), outputs=["synth"])
        assert orchestrator.pipeline.process("pad", 3, 20)

        synth = orchestrator.registry.get_output("synth")
        assert synth.sent == [(MidiMessageKind.NOTE_ON, 60, 100.0)]

    def test_dict_unknown_device_fails(self, make_orchestrator, caplog):
        orchestrator = make_orchestrator(config_with("{'nowhere': [[1, 1]]}"))
        with caplog.at_level(logging.WARNING):
            assert orchestrator.pipeline.process("pad", 3, 20) is False
        assert "nowhere" in caplog.text

    def test_string_result_fails_without_mapping(self, make_orchestrator, broadcaster, caplog):
        orchestrator = make_orchestrator(config_with("'oops'"))
        with caplog.at_level(logging.WARNING):
            assert orchestrator.pipeline.process("pad", 3, 20) is False
        assert broadcaster.sent == []
        assert "unsupported" in caplog.text
        assert orchestrator.store.lookup("pad", 3).value is None

    def test_script_error_fails(self, make_orchestrator, broadcaster, caplog):
        orchestrator = make_orchestrator(config_with("value / 0"))
        with caplog.at_level(logging.WARNING):
            assert orchestrator.pipeline.process("pad", 3, 20) is False
        assert broadcaster.sent == []
        assert "pad_3" in caplog.text

    def test_malformed_pairs_skipped(self, make_orchestrator, broadcaster):
        orchestrator = make_orchestrator(config_with("[[5, 80], 'x', [1, 2, 3]]"))
        orchestrator.pipeline.process("pad", 3, 20)
        assert broadcaster.pairs() == [("level", pytest.approx(80.0))]


@pytest.mark.unit
class TestShapeInputs:

    def test_script_sees_event_and_snapshot(self, make_orchestrator, broadcaster):
        source = "shared['seen'] = (device, type, key, value, data['name'])\nreturn None"
        orchestrator = make_orchestrator(config_with(source))
        orchestrator.pipeline.process("pad", 3, 20)
        assert orchestrator.evaluator.shared["seen"] == ("pad", "scalar", 3, 20, "trigger")

    def test_globals_shared(self, make_orchestrator, broadcaster):
        orchestrator = make_orchestrator(config_with("value * shared['gain']", {"global": {"gain": 3}}))
        orchestrator.pipeline.process("pad", 3, 10)
        assert broadcaster.pairs() == [("trigger", 30.0)]

    def test_aliased_keys_share_one_script(self, make_orchestrator):
        data = {"in": {"pad": [{"key": [1, 2], "type": "scalar", "shape": "value"}]}}
        orchestrator = make_orchestrator(data)
        assert len(orchestrator.evaluator) == 1
        handle = orchestrator.shaper.handle_for(orchestrator.store.lookup("pad", 2))
        assert handle.name == "pad_1"

"""Tests for the binding store."""

import logging

import pytest

from keycast.engine import BindingStore
from keycast.models import BindingSpec, DataKind, PulseSpec, RouterConfig


@pytest.fixture
def store():
    store = BindingStore()
    store.add_device(
        "pad",
        [
            BindingSpec(key=[3, 4], name="mute", type="toggle"),
            BindingSpec(name="fader", type="scalar", value=10),
            BindingSpec(key=9, name="mystery", type="buton"),
        ],
    )
    return store


@pytest.mark.unit
class TestBindingStore:

    def test_lookup(self, store):
        binding = store.lookup("pad", 3)
        assert binding.name == "mute"
        assert binding.kind == DataKind.TOGGLE

    def test_aliased_keys_share_state(self, store):
        a = store.lookup("pad", 3)
        b = store.lookup("pad", 4)
        a.state.value = True
        assert b.value is True

    def test_index_used_when_key_missing(self, store):
        assert store.lookup("pad", 1).name == "fader"

    def test_initial_value(self, store):
        assert store.lookup("pad", 1).value == 10

    def test_unknown_key_and_device(self, store):
        assert store.lookup("pad", 99) is None
        assert store.lookup("other", 3) is None

    def test_unknown_type_warns_and_defaults(self, caplog):
        store = BindingStore()
        with caplog.at_level(logging.WARNING):
            store.add_device("pad", [BindingSpec(key=1, type="buton")])
        assert "unknown type" in caplog.text
        assert store.lookup("pad", 1).kind == DataKind.NUMBER

    def test_list_map_on_switch_warns(self, caplog):
        store = BindingStore()
        with caplog.at_level(logging.WARNING):
            store.add_device("pad", [BindingSpec(key=1, type="toggle", map=[0, 1])])
        assert "on/off table" in caplog.text

    def test_keys_for_binding(self, store):
        assert store.keys(store.lookup("pad", 4)) == [3, 4]

    def test_duplicate_device_rejected(self, store):
        with pytest.raises(ValueError):
            store.add_device("pad", [])

    def test_pulse_binding_on_key_zero(self):
        store = BindingStore()
        store.add_pulse(PulseSpec(name="beat", bpm=120, type="tick"))
        binding = store.lookup("beat", 0)
        assert binding.kind == DataKind.MIDI_TIMING_TICK
        assert "beat" in store

    def test_iteration_order(self, store):
        assert [b.name for b in store] == ["mute", "fader", "mystery"]

    def test_snapshot(self, store):
        binding = store.lookup("pad", 3)
        binding.state.value = True
        binding.state.value_raw = 127
        data = binding.snapshot()
        assert data["name"] == "mute"
        assert data["type"] == "toggle"
        assert data["value"] is True
        assert data["value_raw"] == 127


@pytest.mark.unit
class TestExportConfig:

    def test_live_values_written(self):
        config = RouterConfig.model_validate(
            {
                "out": ["csv"],
                "in": {"pad": [{"key": 1, "name": "mute", "type": "toggle"}]},
                "pulse": [{"name": "beat", "bpm": 60}],
            }
        )
        store = BindingStore.from_config(config)
        store.lookup("pad", 1).state.value = True
        store.lookup("beat", 0).state.value = 5

        data = store.export_config(config)
        assert data["in"]["pad"][0]["value"] is True
        assert data["pulse"][0]["value"] == 5
        assert data["out"] == ["csv"]

    def test_vector_values_become_lists(self):
        config = RouterConfig.model_validate({"in": {"pad": [{"key": 0, "type": "vec3"}]}})
        store = BindingStore.from_config(config)
        store.lookup("pad", 0).state.value = (1.0, 2.0, 3.0)
        assert store.export_config(config)["in"]["pad"][0]["value"] == [1.0, 2.0, 3.0]

    def test_untouched_bindings_have_no_value(self):
        config = RouterConfig.model_validate({"in": {"pad": [{"key": 0}]}})
        store = BindingStore.from_config(config)
        assert "value" not in store.export_config(config)["in"]["pad"][0]

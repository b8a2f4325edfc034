"""Tests for the event pipeline and its worker queue."""

import time

import pytest


def wait_for(predicate, timeout=2.0):
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.01)
    return predicate()


@pytest.fixture
def orchestrator(make_orchestrator):
    return make_orchestrator(
        {
            "out": ["csv"],
            "in": {"pad": [{"key": 1, "name": "mute", "type": "toggle"}]},
        }
    )


@pytest.mark.unit
class TestProcess:

    def test_unbound_key(self, orchestrator, broadcaster):
        assert orchestrator.pipeline.process("pad", 99, 127) is False
        assert orchestrator.pipeline.process("other", 1, 127) is False
        assert broadcaster.sent == []

    def test_toggle_release_not_routed(self, orchestrator, broadcaster):
        assert orchestrator.pipeline.process("pad", 1, 127)
        assert orchestrator.pipeline.process("pad", 1, 0) is False
        assert broadcaster.pairs() == [("mute", "on")]


@pytest.mark.unit
class TestWorker:

    def test_submitted_events_processed_in_order(self, orchestrator, broadcaster):
        pipeline = orchestrator.pipeline
        pipeline.start()
        try:
            for _ in range(3):
                pipeline.submit("pad", 1, 127)
            assert wait_for(lambda: len(broadcaster.sent) == 3)
        finally:
            pipeline.stop()

        assert broadcaster.pairs() == [("mute", "on"), ("mute", "off"), ("mute", "on")]
        assert not pipeline.is_running

    def test_full_queue_drops(self, make_orchestrator, broadcaster):
        from keycast.engine import Pipeline

        orchestrator = make_orchestrator({"in": {"pad": [{"key": 1}]}})
        pipeline = Pipeline(orchestrator.store, orchestrator.shaper, orchestrator.mapper, queue_size=2)
        for value in range(5):
            pipeline.submit("pad", 1, value)
        assert pipeline.pending == 2

    def test_start_twice_is_harmless(self, orchestrator):
        pipeline = orchestrator.pipeline
        pipeline.start()
        pipeline.start()
        pipeline.stop()
        pipeline.stop()
        assert not pipeline.is_running

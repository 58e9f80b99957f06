from naukri_agent.events import EventBus, QueueSink, RunState
from naukri_agent.models import Severity


def test_emit_records_and_publishes():
    bus = EventBus()
    seen = []
    unsubscribe = bus.subscribe(seen.append)
    state = RunState(bus)

    state.info("one")
    state.success("two")
    unsubscribe()
    state.warning("three")

    assert [e.message for e in state.logs] == ["one", "two", "three"]
    assert [e.message for e in seen] == ["one", "two"]
    assert seen[1].severity is Severity.SUCCESS
    assert state.logs[0].to_dict()["type"] == "info"


def test_broken_sink_does_not_break_the_run():
    bus = EventBus()

    def explode(_entry):
        raise RuntimeError("ui gone")

    good = []
    bus.subscribe(explode)
    bus.subscribe(good.append)
    RunState(bus).error("still delivered")

    assert [e.message for e in good] == ["still delivered"]


def test_queue_sink_drops_oldest_when_full():
    sink = QueueSink(maxsize=2)
    state = RunState()
    state.bus.subscribe(sink)
    for i in range(4):
        state.info(f"m{i}")

    assert [e.message for e in sink.drain()] == ["m2", "m3"]
    assert sink.dropped == 2
    assert sink.drain() == []


def test_stop_flag_and_summary_counts():
    state = RunState()
    assert not state.stop_requested
    state.request_stop()
    assert state.stop_requested

    summary = state.summary(success=False, error="boom")
    assert summary.to_dict()["error"] == "boom"
    assert summary.to_dict()["totalProcessed"] == 0

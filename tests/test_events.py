import pytest

from bbmp_launcher.core.events import DOWNLOAD_PROGRESS, PROCESS_LOG, EventBus


def test_subscribers_called_in_order():
    bus = EventBus()
    calls = []
    bus.subscribe(PROCESS_LOG, lambda p: calls.append(("a", p)))
    bus.subscribe(PROCESS_LOG, lambda p: calls.append(("b", p)))

    bus.emit(PROCESS_LOG, "line")

    assert calls == [("a", "line"), ("b", "line")]


def test_unknown_channel_is_rejected():
    with pytest.raises(ValueError):
        EventBus().subscribe("progress", print)


def test_emit_without_subscribers():
    EventBus().emit(DOWNLOAD_PROGRESS, 0.5)


def test_failing_subscriber_does_not_block_others():
    bus = EventBus()
    received = []

    def broken(_):
        raise RuntimeError("ui gone")

    bus.subscribe(DOWNLOAD_PROGRESS, broken)
    bus.subscribe(DOWNLOAD_PROGRESS, received.append)

    bus.emit(DOWNLOAD_PROGRESS, 0.25)

    assert received == [0.25]


def test_unsubscribe_and_sink():
    bus = EventBus()
    received = []
    unsubscribe = bus.subscribe(DOWNLOAD_PROGRESS, received.append)
    sink = bus.sink(DOWNLOAD_PROGRESS)

    sink(0.1)
    unsubscribe()
    sink(0.2)
    unsubscribe()

    assert received == [0.1]

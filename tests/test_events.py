import pytest
from loguru import logger

from collectionview.core.events import ObserverEvent


def test_observer_subscribe_emit():
    event = ObserverEvent("test_evt")
    results = []

    def callback(payload):
        results.append(payload)

    event.connect(callback)
    event.emit("hello")

    assert results == ["hello"]


def test_observer_connect_is_idempotent():
    event = ObserverEvent("test_evt")
    callback = lambda: None
    event.connect(callback)
    event.connect(callback)
    assert event.subscriber_count == 1


def test_observer_disconnect():
    event = ObserverEvent("test_evt")
    results = []

    def callback():
        results.append(1)

    event.connect(callback)
    event.disconnect(callback)
    event.emit()

    assert len(results) == 0


def test_observer_error_safety():
    """Ensure error in one subscriber doesnt block others"""
    event = ObserverEvent("err_evt")
    results = []
    messages = []
    sink_id = logger.add(messages.append, level="ERROR", format="{message}")

    def buggy_callback():
        raise ValueError("Bug")

    def worker_callback():
        results.append("ok")

    event.connect(buggy_callback)
    event.connect(worker_callback)
    try:
        event.emit()
    finally:
        logger.remove(sink_id)

    assert results == ["ok"]
    assert any("Bug" in message for message in messages)


def test_observer_connect_as_decorator():
    event = ObserverEvent("deco_evt")
    results = []

    @event.connect
    def on_event(value):
        results.append(value)

    event.emit(3)
    assert results == [3]


def test_observer_holds_bound_methods_weakly():
    event = ObserverEvent("weak_evt")
    results = []

    class Listener:
        def on_event(self, value):
            results.append(value)

    listener = Listener()
    event.connect(listener.on_event)
    event.emit(1)
    assert event.subscriber_count == 1

    del listener
    event.emit(2)

    assert results == [1]
    assert event.subscriber_count == 0

"""Tests for the event bus and its slots."""

import time

import pytest

from core.constants.events import PlaybackEvent, PomodoroEvent
from core.event import DefaultEvent, Event
from core.event_bus import EventBus
from core.event_debugger import EventDebugger
from fakes import EventLog


class Listener:
    def __init__(self):
        self.received = []

    def on_event(self, payload):
        self.received.append(payload)


class TestDefaultEvent:
    def test_priority_order(self):
        event = DefaultEvent()
        order = []

        def first(payload):
            order.append("high")

        def second(payload):
            order.append("low")

        event.connect(second, priority=0)
        event.connect(first, priority=5)
        event.emit(1)
        assert order == ["high", "low"]

    def test_dead_bound_method_is_dropped(self):
        event = DefaultEvent()
        listener = Listener()
        event.connect(listener.on_event)
        assert len(event) == 1
        del listener
        assert len(event) == 0

    def test_slot_errors_are_contained(self):
        event = DefaultEvent()
        listener = Listener()

        def broken(payload):
            raise ValueError("bad slot")

        event.connect(broken, priority=1)
        event.connect(listener.on_event)
        event.emit("payload")
        assert listener.received == ["payload"]

    def test_disconnect(self):
        event = DefaultEvent()
        listener = Listener()
        event.connect(listener.on_event)
        event.disconnect(listener.on_event)
        event.emit("payload")
        assert listener.received == []

    def test_builtin_slot(self):
        event = DefaultEvent()
        received = []
        event.connect(received.append)
        event.emit(3)
        assert received == [3]

    def test_builtin_slot_stays_connected(self):
        event = DefaultEvent()
        received = []
        event.connect(received.append)
        assert len(event) == 1
        event.emit(1)
        event.emit(2)
        assert received == [1, 2]
        event.disconnect(received.append)
        assert len(event) == 0


class TestThrottledEvent:
    def test_type_validation(self):
        event = Event(dict)
        with pytest.raises(TypeError, match="expected dict"):
            event.emit("not a dict")

    def test_trailing_emit_delivers_latest(self):
        event = Event(dict, interval_sec=0.05)
        listener = Listener()
        event.connect(listener.on_event)
        event.emit({"n": 1})
        event.emit({"n": 2})
        event.emit({"n": 3})
        time.sleep(0.2)
        assert listener.received == [{"n": 1}, {"n": 3}]


class TestEventBus:
    def test_publish_and_subscribe(self, bus):
        log = EventLog(bus, PomodoroEvent.RUNNING_CHANGED)
        bus.publish(PomodoroEvent.RUNNING_CHANGED, True)
        bus.emit(PomodoroEvent.RUNNING_CHANGED, False)
        assert log.of(PomodoroEvent.RUNNING_CHANGED) == [True, False]

    def test_unsubscribe(self, bus):
        listener = Listener()
        bus.subscribe(PlaybackEvent.VOLUME_CHANGED, listener.on_event)
        assert bus.subscriber_count(PlaybackEvent.VOLUME_CHANGED) == 1
        bus.unsubscribe(PlaybackEvent.VOLUME_CHANGED, listener.on_event)
        assert bus.subscriber_count(PlaybackEvent.VOLUME_CHANGED) == 0

    def test_progress_is_throttled(self):
        bus = EventBus()
        listener = Listener()
        bus.subscribe(PlaybackEvent.PROGRESS, listener.on_event)
        for second in range(5):
            bus.publish(PlaybackEvent.PROGRESS, {"elapsed": second, "total": 10, "track_id": "a"})
        assert len(listener.received) == 1
        time.sleep(0.4)
        assert listener.received[-1]["elapsed"] == 4

    def test_debugger_sees_traffic(self, bus):
        debugger = EventDebugger()
        seen = []
        debugger.print_event_log = lambda context, event_type, *args, **kwargs: seen.append((context, event_type))
        bus.add_event_debugger(debugger)
        listener = Listener()
        bus.subscribe(PomodoroEvent.RUNNING_CHANGED, listener.on_event)
        bus.publish(PomodoroEvent.RUNNING_CHANGED, True)
        assert seen == [("Subscribe", PomodoroEvent.RUNNING_CHANGED), ("Publish", PomodoroEvent.RUNNING_CHANGED)]

"""Tests for EventCenter: the three keyspaces and their isolation."""

from __future__ import annotations

from unittest.mock import Mock

import pytest

from eventcenter.config import EventCenterConfig
from eventcenter.domain.center import EventCenter
from eventcenter.domain.errors import InvalidEventKeyError
from eventcenter.domain.events import Event


class SampleEvent(Event):
    code: int
    message: str


class OtherEvent(Event):
    pass


class DerivedSampleEvent(SampleEvent):
    pass


@pytest.fixture()
def center() -> EventCenter:
    return EventCenter()


# ---------------------------------------------------------------------------
# Structural events
# ---------------------------------------------------------------------------


def test_type_event_delivers_instance(center):
    handler = Mock()
    center.on(SampleEvent, handler)

    event = SampleEvent(code=10, message="Test")
    center.emit(event)

    handler.assert_called_once_with(event)
    assert handler.call_args.args[0] is event


def test_type_event_off_stops_delivery(center):
    handler = Mock()
    center.on(SampleEvent, handler)
    center.emit(SampleEvent(code=10, message="Test"))
    center.emit(SampleEvent(code=10, message="Test"))

    center.off(SampleEvent, handler)
    center.emit(SampleEvent(code=10, message="Test"))

    assert handler.call_count == 2


def test_type_event_once(center):
    handler = Mock()
    center.once(SampleEvent, handler)

    center.emit(SampleEvent(code=1, message="a"))
    center.emit(SampleEvent(code=2, message="b"))

    handler.assert_called_once_with(SampleEvent(code=1, message="a"))


def test_type_event_off_all(center):
    first, second = Mock(), Mock()
    center.on(SampleEvent, first)
    center.once(SampleEvent, second)

    center.off(SampleEvent)
    center.emit(SampleEvent(code=1, message="a"))

    first.assert_not_called()
    second.assert_not_called()


def test_type_event_keyed_by_exact_class(center):
    parent, other = Mock(), Mock()
    center.on(SampleEvent, parent)
    center.on(OtherEvent, other)

    center.emit(DerivedSampleEvent(code=1, message="derived"))
    center.emit(OtherEvent())

    parent.assert_not_called()
    other.assert_called_once()


def test_type_event_rejects_extra_args(center):
    with pytest.raises(TypeError):
        center.emit(OtherEvent(), 1)


def test_emit_event_class_is_rejected(center):
    with pytest.raises(InvalidEventKeyError):
        center.emit(SampleEvent)


def test_non_event_class_is_rejected(center):
    with pytest.raises(InvalidEventKeyError):
        center.on(dict, Mock())


# ---------------------------------------------------------------------------
# String events
# ---------------------------------------------------------------------------


def test_string_event_receives_args_as_one_list(center):
    handler = Mock()
    center.on("test", handler)

    center.emit("test", "123", 798, "321")
    center.emit("test", "123", 798, "321")

    assert handler.call_count == 2
    handler.assert_called_with(["123", 798, "321"])


def test_string_event_without_args_delivers_empty_list(center):
    handler = Mock()
    center.on("ping", handler)

    center.emit("ping")

    handler.assert_called_once_with([])


def test_string_event_off_and_once(center):
    calls: list[list] = []

    def callback(args):
        calls.append(args)

    center.on("test", callback)
    center.emit("test", "123", 798, "321")
    center.off("test", callback)
    center.emit("test", "123", 798, "321")
    center.once("test", callback)
    center.emit("test", "123", 798, "321")
    center.emit("test", "123", 798, "321")

    assert calls == [["123", 798, "321"], ["123", 798, "321"]]


def test_all_subscribers_share_the_same_args_list(center):
    received: list[list] = []
    center.on("shared", received.append)
    center.on("shared", received.append)

    center.emit("shared", 1)

    assert received[0] is received[1]


# ---------------------------------------------------------------------------
# Integer events
# ---------------------------------------------------------------------------


def test_int_event_once_fires_once(center):
    handler = Mock()
    center.once(1, handler)

    center.emit(1, "000", 123, "000")
    center.emit(1, "000", 123, "000")

    handler.assert_called_once_with(["000", 123, "000"])


def test_int_event_persistent_then_off(center):
    handler = Mock()
    center.on(1, handler)
    center.emit(1, "000", 123, "000")
    center.emit(1, "000", 123, "000")

    center.off(1, handler)
    center.emit(1, "000", 123, "000")

    assert handler.call_count == 2


def test_bool_key_is_rejected(center):
    with pytest.raises(InvalidEventKeyError):
        center.on(True, Mock())


def test_unsupported_key_is_rejected(center):
    with pytest.raises(InvalidEventKeyError):
        center.emit(1.5)


# ---------------------------------------------------------------------------
# Isolation, reset, config
# ---------------------------------------------------------------------------


def test_keyspaces_are_isolated(center):
    by_name, by_number = Mock(), Mock()
    center.on("1", by_name)
    center.on(1, by_number)

    center.emit("1", "a")

    by_name.assert_called_once_with(["a"])
    by_number.assert_not_called()

    center.emit(1, "b")
    by_number.assert_called_once_with(["b"])
    assert by_name.call_count == 1


def test_type_name_and_string_key_are_unrelated(center):
    by_type, by_name = Mock(), Mock()
    center.on(OtherEvent, by_type)
    center.on("OtherEvent", by_name)

    center.emit(OtherEvent())

    by_type.assert_called_once()
    by_name.assert_not_called()


def test_reset_clears_all_keyspaces(center):
    handler = Mock()
    center.on(OtherEvent, handler)
    center.on("name", handler)
    center.once(7, handler)

    center.reset()
    center.emit(OtherEvent())
    center.emit("name")
    center.emit(7)

    handler.assert_not_called()
    assert len(center.types) == len(center.strings) == len(center.numbers) == 0


def test_handler_exception_propagates_to_emitter(center):
    after = Mock()
    center.on("fail", Mock(side_effect=ValueError("bad")))
    center.on("fail", after)

    with pytest.raises(ValueError, match="bad"):
        center.emit("fail")

    after.assert_not_called()


def test_handlers_may_reenter_center(center):
    seen: list[str] = []

    def relay(args):
        seen.append(f"relay:{args[0]}")
        center.emit(2, args[0])

    center.on(1, relay)
    center.on(2, lambda args: seen.append(f"sink:{args[0]}"))

    center.emit(1, "x")

    assert seen == ["relay:x", "sink:x"]


def test_thread_safe_config_is_applied():
    center = EventCenter(EventCenterConfig(thread_safe=True, logger_name="app.events"))
    handler = Mock()
    center.on("k", handler)
    center.emit("k", 1)

    handler.assert_called_once_with([1])
    assert center.types._lock is not None
    assert center.strings._logger.name == "app.events.strings"

"""Facade over the three keyed registries: by event type, by name, by number."""

from __future__ import annotations

import logging
from typing import Any, Callable, Hashable

from eventcenter.config import EventCenterConfig
from eventcenter.domain.errors import InvalidEventKeyError
from eventcenter.domain.events import Event
from eventcenter.domain.models import BindMode
from eventcenter.domain.registry import KeyedRegistry
from eventcenter.services.binder import ReflectiveBinder

EventKey = type[Event] | str | int


class EventCenter:
    """In-process publish/subscribe hub.

    Three independent keyspaces share one API and the key's kind picks the
    registry:

    * an ``Event`` subclass: handlers receive the emitted event instance;
    * a ``str`` name or an ``int`` number: handlers receive a single list
      holding the positional arguments given to ``emit``.

    The keyspaces never interact, so ``"1"`` and ``1`` are unrelated keys.
    Delivery is synchronous; a handler's exception propagates out of
    ``emit`` and stops the remaining handlers of that emit.
    """

    def __init__(self, config: EventCenterConfig | None = None) -> None:
        self.config = config if config is not None else EventCenterConfig()
        self._logger = logging.getLogger(self.config.logger_name)
        thread_safe = self.config.thread_safe
        self._types: KeyedRegistry[type[Event]] = KeyedRegistry(
            thread_safe=thread_safe, logger=self._logger.getChild("types")
        )
        self._strings: KeyedRegistry[str] = KeyedRegistry(
            thread_safe=thread_safe, logger=self._logger.getChild("strings")
        )
        self._numbers: KeyedRegistry[int] = KeyedRegistry(
            thread_safe=thread_safe, logger=self._logger.getChild("numbers")
        )

    @property
    def types(self) -> KeyedRegistry[type[Event]]:
        return self._types

    @property
    def strings(self) -> KeyedRegistry[str]:
        return self._strings

    @property
    def numbers(self) -> KeyedRegistry[int]:
        return self._numbers

    # ------------------------------------------------------------------
    # Subscription
    # ------------------------------------------------------------------

    def on(self, key: EventKey, handler: Callable) -> None:
        self._select(key).on(key, handler)

    def once(self, key: EventKey, handler: Callable) -> None:
        self._select(key).once(key, handler)

    def off(self, key: EventKey, handler: Callable | None = None) -> None:
        """Remove *handler* from *key*, or everything under *key* if omitted."""
        self._select(key).off(key, handler)

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    def emit(self, event: Event | str | int, *args: Any) -> None:
        """Deliver *event* to its subscribers.

        Structural events are emitted as instances and keyed by their exact
        class. Names and numbers are emitted with any number of positional
        arguments, which handlers receive together as one list.
        """
        if isinstance(event, Event):
            if args:
                raise TypeError(
                    f"{type(event).__name__} is delivered alone; "
                    f"got {len(args)} extra argument(s)"
                )
            self._types.emit(type(event), event)
            return

        registry = self._select(event)
        if registry is self._types:
            raise InvalidEventKeyError(
                f"emit an instance of {event.__name__}, not the class itself"
            )
        registry.emit(event, list(args))

    def reset(self) -> None:
        self._types.reset()
        self._strings.reset()
        self._numbers.reset()

    # ------------------------------------------------------------------
    # Bulk binding
    # ------------------------------------------------------------------

    def on_by_object(self, target: object, base: type[Event] = Event) -> list[type[Event]]:
        return ReflectiveBinder(self).bind_all(target, base=base, mode=BindMode.ON)

    def off_by_object(self, target: object, base: type[Event] = Event) -> list[type[Event]]:
        return ReflectiveBinder(self).bind_all(target, base=base, mode=BindMode.OFF)

    def once_by_object(self, target: object, base: type[Event] = Event) -> list[type[Event]]:
        return ReflectiveBinder(self).bind_all(target, base=base, mode=BindMode.ONCE)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _select(self, key: Hashable) -> KeyedRegistry:
        if isinstance(key, type):
            if issubclass(key, Event):
                return self._types
            raise InvalidEventKeyError(
                f"{key.__name__} is not an Event subclass and cannot be used as a key"
            )
        if isinstance(key, str):
            return self._strings
        # bool is an int subclass but True/1 must not alias.
        if isinstance(key, int) and not isinstance(key, bool):
            return self._numbers
        raise InvalidEventKeyError(
            f"unsupported event key {key!r} ({type(key).__name__}); "
            "expected an Event subclass, a str or an int"
        )

"""Wires an object's typed handler methods to an EventCenter in bulk."""

from __future__ import annotations

import inspect
import logging
import typing
from types import FunctionType
from typing import TYPE_CHECKING, Any, Callable

from eventcenter.domain.errors import HandlerBindingError, InvalidEventKeyError
from eventcenter.domain.events import Event
from eventcenter.domain.models import BindMode

if TYPE_CHECKING:
    from eventcenter.domain.center import EventCenter

_POSITIONAL = (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD)


class ReflectiveBinder:
    """Finds handler methods on an object by parameter type and (un)subscribes them.

    A handler is an instance method declared directly on the target's class
    that takes exactly one positional argument annotated with a strict
    subclass of ``base``::

        class Hud:
            def on_damage(self, event: DamageTaken) -> None: ...

        ReflectiveBinder(center).bind_all(hud)    # center.on(DamageTaken, hud.on_damage)

    The first failure aborts the scan; methods bound before it stay bound.
    """

    def __init__(self, center: EventCenter) -> None:
        self.center = center
        self._logger = logging.getLogger(center.config.logger_name).getChild("binder")

    def bind_all(
        self,
        target: object,
        base: type[Event] = Event,
        mode: BindMode | str = BindMode.ON,
    ) -> list[type[Event]]:
        """Apply *mode* to every handler method of *target*.

        Returns the event types that were passed to the center, in method
        definition order.
        """
        if not (isinstance(base, type) and issubclass(base, Event)):
            raise InvalidEventKeyError(f"base must be an Event subclass, got {base!r}")
        mode = BindMode(mode)
        operation = self._operation(mode)

        bound: list[type[Event]] = []
        for name, function in vars(type(target)).items():
            if not isinstance(function, FunctionType):
                continue
            event_type = self._handled_type(function, base)
            if event_type is None:
                continue
            try:
                operation(event_type, getattr(target, name))
            except Exception as exc:
                raise HandlerBindingError(
                    f"could not {mode} {type(target).__qualname__}.{name} "
                    f"for {event_type.__qualname__}"
                ) from exc
            self._logger.debug(
                "%s %s.%s for %s", mode, type(target).__qualname__, name, event_type.__qualname__
            )
            bound.append(event_type)
        return bound

    def _operation(self, mode: BindMode) -> Callable[[type[Event], Callable], None]:
        if mode is BindMode.ON:
            return self.center.on
        if mode is BindMode.ONCE:
            return self.center.once
        return self.center.off

    @staticmethod
    def _handled_type(function: FunctionType, base: type[Event]) -> type[Event] | None:
        """Return the event type *function* handles, or None if it is not a handler."""
        params = list(inspect.signature(function).parameters.values())
        # Drop self; what remains is the handler's own signature.
        if not params or params[0].kind not in _POSITIONAL:
            return None
        params = params[1:]
        if len(params) != 1 or params[0].kind not in _POSITIONAL:
            return None

        try:
            hints: dict[str, Any] = typing.get_type_hints(function)
        except Exception as exc:
            raise HandlerBindingError(
                f"cannot resolve annotations of {function.__qualname__}"
            ) from exc

        annotation = hints.get(params[0].name)
        if not isinstance(annotation, type) or annotation is base:
            return None
        try:
            handles = issubclass(annotation, base)
        except TypeError:  # parameterized generics such as list[int]
            return None
        return annotation if handles else None

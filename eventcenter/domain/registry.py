"""Keyed callback registry with persistent and fire-once subscriptions."""

from __future__ import annotations

import logging
import threading
from contextlib import nullcontext
from types import MethodType
from typing import Any, Callable, ContextManager, Generic, Hashable, Iterator, TypeVar

from eventcenter.domain.models import SubscriptionSummary

K = TypeVar("K", bound=Hashable)

_module_logger = logging.getLogger(__name__)


def same_callback(a: Callable, b: Callable) -> bool:
    """Return True when *a* and *b* denote the same subscription.

    Bound methods are recreated on every attribute access, so two of them
    match when they wrap the same function on the same instance.
    """
    if a is b:
        return True
    if isinstance(a, MethodType) and isinstance(b, MethodType):
        return a.__self__ is b.__self__ and a.__func__ is b.__func__
    return False


def describe_key(key: Hashable) -> str:
    if isinstance(key, type):
        return f"{key.__module__}.{key.__qualname__}"
    return str(key)


class CallbackSet:
    """Ordered composition of callbacks sharing a key and a lifecycle.

    Calling the set calls every callback in the order it was added. The
    same callback may appear more than once and then fires once per entry.
    """

    def __init__(self, callbacks: list[Callable] | None = None) -> None:
        self._callbacks: list[Callable] = list(callbacks or [])

    def __len__(self) -> int:
        return len(self._callbacks)

    def __iter__(self) -> Iterator[Callable]:
        return iter(self._callbacks)

    def __contains__(self, callback: object) -> bool:
        return callable(callback) and any(
            same_callback(c, callback) for c in self._callbacks
        )

    def __repr__(self) -> str:
        return f"CallbackSet({self._callbacks!r})"

    def combine(self, callback: Callable) -> None:
        self._callbacks.append(callback)

    def remove(self, callback: Callable) -> bool:
        """Drop the last entry matching *callback*. Returns whether one was found."""
        for index in range(len(self._callbacks) - 1, -1, -1):
            if same_callback(self._callbacks[index], callback):
                del self._callbacks[index]
                return True
        return False

    def snapshot(self) -> list[Callable]:
        return list(self._callbacks)

    def discard_consumed(self, consumed: list[Callable]) -> None:
        """Drop the earliest entry that is each of *consumed*, compared by object identity.

        Entries added after *consumed* was snapshotted sit behind it and are kept.
        """
        for callback in consumed:
            for index, existing in enumerate(self._callbacks):
                if existing is callback:
                    del self._callbacks[index]
                    break

    def __call__(self, *args: Any) -> None:
        # Iterate a copy so callbacks may subscribe/unsubscribe while running.
        for callback in self.snapshot():
            callback(*args)


class KeyedRegistry(Generic[K]):
    """Maps keys to persistent and once-only callback sets.

    The two maps are independent: a key may hold persistent callbacks, once
    callbacks, both, or neither. Emitting fires the persistent set and then
    consumes the once set. Callbacks run synchronously on the caller's
    thread and their exceptions propagate to the emitter.
    """

    def __init__(
        self,
        *,
        thread_safe: bool = False,
        logger: logging.Logger | None = None,
    ) -> None:
        self._persistent: dict[K, CallbackSet] = {}
        self._once: dict[K, CallbackSet] = {}
        self._lock = threading.RLock() if thread_safe else None
        self._logger: logging.Logger = logger if logger is not None else _module_logger

    def _guard(self) -> ContextManager[Any]:
        return self._lock if self._lock is not None else nullcontext()

    # ------------------------------------------------------------------
    # Subscription
    # ------------------------------------------------------------------

    def on(self, key: K, callback: Callable) -> None:
        self._add(self._persistent, key, callback)
        self._logger.debug("on %s -> %r", describe_key(key), callback)

    def once(self, key: K, callback: Callable) -> None:
        self._add(self._once, key, callback)
        self._logger.debug("once %s -> %r", describe_key(key), callback)

    def off(self, key: K, callback: Callable | None = None) -> None:
        """Unsubscribe *callback* from *key*, or every callback when omitted.

        Unknown keys and callbacks are ignored.
        """
        with self._guard():
            if callback is None:
                self._persistent.pop(key, None)
                self._once.pop(key, None)
            else:
                self._discard(self._persistent, key, callback)
                self._discard(self._once, key, callback)
        self._logger.debug(
            "off %s -> %r", describe_key(key), "*" if callback is None else callback
        )

    def reset(self) -> None:
        with self._guard():
            self._persistent.clear()
            self._once.clear()
        self._logger.debug("reset")

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    def emit(self, key: K, *args: Any) -> None:
        with self._guard():
            persistent = self._persistent.get(key)
            callbacks = persistent.snapshot() if persistent is not None else []
            once = self._once.get(key)
            consumed = once.snapshot() if once is not None else []

        for callback in callbacks:
            callback(*args)
        if not consumed:
            return
        for callback in consumed:
            callback(*args)

        # Only a fully delivered once set is consumed. Callbacks registered
        # while it ran stay for the next emit.
        with self._guard():
            if self._once.get(key) is once:
                once.discard_consumed(consumed)
                if not once:
                    del self._once[key]

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    def keys(self) -> list[K]:
        with self._guard():
            found = list(self._persistent)
            found.extend(k for k in self._once if k not in self._persistent)
        return found

    def __contains__(self, key: object) -> bool:
        with self._guard():
            return key in self._persistent or key in self._once

    def __len__(self) -> int:
        return len(self.keys())

    def describe(self, key: K) -> SubscriptionSummary:
        with self._guard():
            persistent = self._persistent.get(key)
            once = self._once.get(key)
            return SubscriptionSummary(
                key=describe_key(key),
                persistent=len(persistent) if persistent is not None else 0,
                once=len(once) if once is not None else 0,
            )

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _add(self, table: dict[K, CallbackSet], key: K, callback: Callable) -> None:
        if not callable(callback):
            raise TypeError(f"callback must be callable, got {type(callback).__name__}")
        with self._guard():
            callbacks = table.get(key)
            if callbacks is None:
                callbacks = table[key] = CallbackSet()
            callbacks.combine(callback)

    @staticmethod
    def _discard(table: dict[K, CallbackSet], key: K, callback: Callable) -> None:
        callbacks = table.get(key)
        if callbacks is None:
            return
        callbacks.remove(callback)
        if not callbacks:
            del table[key]

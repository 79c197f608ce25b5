"""Exceptions raised by the event center."""

from __future__ import annotations


class EventCenterError(Exception):
    """Base class for event center errors."""


class InvalidEventKeyError(EventCenterError, TypeError):
    """Raised when a key cannot select any of the registries."""


class HandlerBindingError(EventCenterError):
    """Raised when the binder cannot wire one of a target's handler methods."""

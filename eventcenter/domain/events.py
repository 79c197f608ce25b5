"""Marker base for structural events."""

from __future__ import annotations

from pydantic import BaseModel


class Event(BaseModel):
    """Base class for payloads delivered by type.

    Subclass it to declare an event; the subclass itself is the key that
    handlers subscribe to.
    """

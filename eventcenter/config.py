"""Runtime configuration for EventCenter instances."""

from __future__ import annotations

import os

from pydantic import BaseModel, Field

_TRUTHY = {"1", "true", "yes", "on"}


class EventCenterConfig(BaseModel):
    thread_safe: bool = False
    logger_name: str = Field(default="eventcenter", min_length=1)

    @classmethod
    def from_env(cls) -> EventCenterConfig:
        """Build a config from ``EVENTCENTER_*`` environment variables."""
        values: dict[str, object] = {}
        thread_safe = os.environ.get("EVENTCENTER_THREAD_SAFE")
        if thread_safe is not None:
            values["thread_safe"] = thread_safe.strip().lower() in _TRUTHY
        logger_name = os.environ.get("EVENTCENTER_LOGGER_NAME")
        if logger_name:
            values["logger_name"] = logger_name
        return cls(**values)

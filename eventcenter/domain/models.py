"""Value types shared by the registries and the binder."""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, Field


class BindMode(StrEnum):
    ON = "on"
    OFF = "off"
    ONCE = "once"


class SubscriptionSummary(BaseModel):
    """Callback counts currently registered under one key."""

    key: str
    persistent: int = Field(default=0, ge=0)
    once: int = Field(default=0, ge=0)

    @property
    def total(self) -> int:
        return self.persistent + self.once

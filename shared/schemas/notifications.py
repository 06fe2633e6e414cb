"""Normalized notification schemas shared by analyzers, the dispatcher and channels."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class NotificationField(BaseModel):
    """A single label/value fact shown in a notification."""

    label: str
    value: str


class NotificationLink(BaseModel):
    """A related URL shown in a notification."""

    label: str
    url: str


class NotificationPayload(BaseModel):
    """Channel-agnostic notification.

    ``fields`` and ``links`` are rendered in the order given.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    title: str
    emoji: str = ""
    fields: list[NotificationField] = []
    links: list[NotificationLink] = []
    payload_url: str = ""

    # Routing / AI metadata
    source: str | None = None
    event_type: str | None = None
    summary: str | None = None  # AI generated one-liner
    repository: str | None = None
    service: str | None = None
    raw_payload: Any = None


class ChannelResult(BaseModel):
    """Outcome of one delivery attempt on one channel."""

    channel: str
    name: str | None = None
    success: bool
    error: str | None = None
    status_code: int | None = None
    detail: str | None = None  # truncated response body, for diagnostics


class DispatchResult(BaseModel):
    """Per-channel outcomes of a single dispatch."""

    results: list[ChannelResult] = []
    skipped_reason: str | None = None

    @property
    def delivered(self) -> bool:
        """True if at least one channel accepted the notification."""
        return any(r.success for r in self.results)

"""Inbound webhook log. Also backs the public "view full payload" links."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

from sqlalchemy import JSON, DateTime, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from shared.models.base import Base

SOURCE_MAX_CHARS = 64
EVENT_MAX_CHARS = 128


class WebhookEvent(Base):
    __tablename__ = "webhook_events"

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    source: Mapped[str] = mapped_column(String(SOURCE_MAX_CHARS))
    event: Mapped[str] = mapped_column(String(EVENT_MAX_CHARS))
    payload: Mapped[dict | None] = mapped_column(JSON, default=None)

    # Lifecycle
    status: Mapped[str] = mapped_column(String(16), default="pending")  # pending | processed | failed | ignored
    error: Mapped[str | None] = mapped_column(Text, default=None)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )

    __table_args__ = (Index("ix_webhook_events_created_at", "created_at"),)

"""Persistence of inbound webhook payloads."""

from __future__ import annotations

import uuid
from typing import Any

import structlog
from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from shared.models import WebhookEvent
from shared.models.webhook_event import EVENT_MAX_CHARS, SOURCE_MAX_CHARS

logger = structlog.get_logger()


class WebhookEventStore:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    async def record(self, source: str, event: str, payload: Any) -> str:
        """Store *payload* as ``pending`` and return its id."""
        if not isinstance(payload, dict):
            payload = {"data": payload}
        # Sender-controlled values, clipped to the column widths
        source, event = source[:SOURCE_MAX_CHARS], event[:EVENT_MAX_CHARS]
        record = WebhookEvent(id=uuid.uuid4(), source=source, event=event, payload=payload)
        async with self.session_factory() as session:
            session.add(record)
            await session.commit()
        return str(record.id)

    async def mark(self, event_id: str, status: str, error: str | None = None) -> None:
        async with self.session_factory() as session:
            await session.execute(
                update(WebhookEvent)
                .where(WebhookEvent.id == uuid.UUID(event_id))
                .values(status=status, error=error)
            )
            await session.commit()

    async def get_payload(self, event_id: str) -> dict | None:
        try:
            uid = uuid.UUID(event_id)
        except ValueError:
            return None
        async with self.session_factory() as session:
            record = await session.get(WebhookEvent, uid)
        return record.payload if record else None

"""GitHub App installation lifecycle."""

from __future__ import annotations

import uuid
from typing import Any, Mapping

import structlog
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from shared.models import Installation

logger = structlog.get_logger()


# Installation ids are stored as BIGINT
_MAX_ID = 2**63 - 1


def parse_installation_id(value: Any) -> int | None:
    """GitHub ids are positive integers; anything else is treated as absent."""
    if isinstance(value, bool):
        return None
    if isinstance(value, str) and value.strip().isdigit():
        value = int(value)
    if isinstance(value, int) and 0 < value <= _MAX_ID:
        return value
    return None


class InstallationService:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    async def handle_event(self, payload: Mapping[str, Any], user_id: str | None = None) -> str | None:
        """Apply an ``installation`` webhook; returns the action taken, if any."""
        installation = payload.get("installation")
        if not isinstance(installation, Mapping):
            return None
        raw_id = installation.get("id")
        installation_id = parse_installation_id(raw_id)
        if installation_id is None:
            if raw_id is not None:
                logger.warning("installation_id_invalid", installation_id=str(raw_id))
            return None

        action = payload.get("action")
        if action == "created":
            await self._create(installation_id, installation, user_id)
            return "created"
        if action == "deleted":
            await self._delete(installation_id)
            return "deleted"
        return None

    async def _create(
        self, installation_id: int, installation: Mapping[str, Any], user_id: str | None
    ) -> None:
        account = installation.get("account")
        if not isinstance(account, Mapping):
            account = {}
        login = account.get("login")
        account_type = account.get("type")
        owner: uuid.UUID | None = None
        if user_id:
            try:
                owner = uuid.UUID(user_id)
            except ValueError:
                logger.warning("installation_user_id_invalid", user_id=user_id)

        async with self.session_factory() as session:
            result = await session.execute(
                select(Installation).where(Installation.installation_id == installation_id)
            )
            record = result.scalar_one_or_none()
            if record is None:
                record = Installation(installation_id=installation_id)
                session.add(record)

            record.account_login = login if isinstance(login, str) and login else "unknown"
            record.account_id = parse_installation_id(account.get("id"))
            record.account_type = account_type if isinstance(account_type, str) else None
            selection = installation.get("repository_selection")
            record.repository_selection = selection if isinstance(selection, str) else None
            if owner is not None:
                record.user_id = owner
            await session.commit()

        logger.info(
            "installation_created",
            installation_id=installation_id,
            account=record.account_login,
            linked=owner is not None,
        )

    async def _delete(self, installation_id: int) -> None:
        async with self.session_factory() as session:
            await session.execute(
                delete(Installation).where(Installation.installation_id == installation_id)
            )
            await session.commit()
        logger.info("installation_deleted", installation_id=installation_id)

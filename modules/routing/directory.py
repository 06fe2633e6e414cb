"""User lookups and chat linking backed by the relational store."""

from __future__ import annotations

import uuid

import structlog
from pydantic import ValidationError
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.orm import selectinload

from shared.models import Channel, Installation, User
from shared.schemas.channels import Preferences, UserChannel, UserProfile

logger = structlog.get_logger()


def _parse_uuid(value: str) -> uuid.UUID | None:
    try:
        return uuid.UUID(str(value))
    except ValueError:
        return None


def to_profile(user: User) -> UserProfile:
    """Build a ``UserProfile``; channels with unusable config are skipped."""
    channels: list[UserChannel] = []
    for channel in user.channels:
        try:
            channels.append(
                UserChannel(
                    id=str(channel.id),
                    type=channel.type,
                    name=channel.name,
                    enabled=channel.enabled,
                    config=channel.config or {},
                    webhook_rules=channel.webhook_rules,
                )
            )
        except ValidationError as e:
            logger.warning(
                "channel_config_invalid",
                user_id=str(user.id),
                channel_id=str(channel.id),
                error=str(e),
            )

    try:
        preferences = Preferences.model_validate(user.preferences or {})
    except ValidationError as e:
        logger.warning("user_preferences_invalid", user_id=str(user.id), error=str(e))
        preferences = Preferences()

    return UserProfile(
        id=str(user.id),
        email=user.email,
        telegram_chat_id=user.telegram_chat_id,
        telegram_bot_token=user.telegram_bot_token,
        channels=channels,
        preferences=preferences,
    )


class UserDirectory:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    async def get_profile(self, user_id: str) -> UserProfile | None:
        uid = _parse_uuid(user_id)
        if uid is None:
            logger.warning("user_id_invalid", user_id=user_id)
            return None

        async with self.session_factory() as session:
            result = await session.execute(
                select(User).options(selectinload(User.channels)).where(User.id == uid)
            )
            user = result.scalar_one_or_none()
        return to_profile(user) if user else None

    async def get_profile_for_installation(self, installation_id: int) -> UserProfile | None:
        """Profile of the user who claimed *installation_id*, if any."""
        async with self.session_factory() as session:
            result = await session.execute(
                select(User)
                .join(Installation, Installation.user_id == User.id)
                .options(selectinload(User.channels))
                .where(Installation.installation_id == installation_id)
            )
            user = result.scalar_one_or_none()
        return to_profile(user) if user else None

    async def link_telegram_chat(
        self, user_id: str, chat_id: str, bot_token: str | None = None
    ) -> bool:
        """Point the user's legacy Telegram destination at *chat_id*.

        *bot_token* (the bot the user talked to) is stored only when the user
        has no bot of their own.
        """
        uid = _parse_uuid(user_id)
        if uid is None:
            return False

        async with self.session_factory() as session:
            user = await session.get(User, uid)
            if user is None:
                return False
            user.telegram_chat_id = chat_id
            if bot_token and not user.telegram_bot_token:
                user.telegram_bot_token = bot_token
            await session.commit()

        logger.info("telegram_chat_linked", user_id=user_id)
        return True

    async def link_slack_channel(
        self,
        user_id: str,
        channel_index: int,
        slack_channel_id: str,
        slack_user_id: str | None = None,
    ) -> str | None:
        """Store *slack_channel_id* on the user's n-th channel (oldest first).

        Returns the linked channel's display name, or None if not found.
        """
        uid = _parse_uuid(user_id)
        if uid is None:
            return None

        async with self.session_factory() as session:
            result = await session.execute(
                select(Channel).where(Channel.user_id == uid).order_by(Channel.created_at)
            )
            channels = list(result.scalars().all())
            if not 0 <= channel_index < len(channels):
                return None

            target = channels[channel_index]
            # Reassign so the JSON column is flagged dirty
            target.config = {
                **(target.config or {}),
                "channelId": slack_channel_id,
                "slackUserId": slack_user_id,
            }
            await session.commit()
            name = target.name or "Channel"

        logger.info("slack_channel_linked", user_id=user_id, channel_index=channel_index)
        return name

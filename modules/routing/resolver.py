"""Decides who receives an inbound webhook."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Literal, Mapping

import structlog

from modules.routing.directory import UserDirectory
from modules.routing.installations import parse_installation_id
from modules.summary.summarizer import EventSummarizer
from shared.config import Settings
from shared.schemas.channels import UserProfile
from shared.schemas.notifications import NotificationPayload

logger = structlog.get_logger()


@dataclass(frozen=True)
class Recipient:
    user: UserProfile
    via: Literal["installation", "user_id", "global"]


class RecipientResolver:
    """Resolution order: GitHub installation owner, ``?userId=``, global bot.

    The first source that yields a user wins.
    """

    def __init__(
        self,
        directory: UserDirectory,
        settings: Settings,
        summarizer: EventSummarizer | None = None,
    ):
        self.directory = directory
        self.settings = settings
        self.summarizer = summarizer

    async def resolve(self, payload: Any, user_id: str | None = None) -> Recipient | None:
        installation = payload.get("installation") if isinstance(payload, Mapping) else None
        raw_id = installation.get("id") if isinstance(installation, Mapping) else None
        installation_id = parse_installation_id(raw_id)
        if installation_id is None and raw_id is not None:
            logger.warning("installation_id_invalid", installation_id=str(raw_id))

        if installation_id is not None:
            user = await self.directory.get_profile_for_installation(installation_id)
            if user is not None:
                return Recipient(user=user, via="installation")
            logger.info("installation_not_linked", installation_id=installation_id)

        if user_id:
            user = await self.directory.get_profile(user_id)
            if user is not None:
                return Recipient(user=user, via="user_id")
            logger.info("webhook_user_not_found", user_id=user_id)

        if self.settings.telegram_chat_id and self.settings.telegram_bot_token:
            return Recipient(
                user=UserProfile(
                    telegram_chat_id=self.settings.telegram_chat_id,
                    telegram_bot_token=self.settings.telegram_bot_token,
                ),
                via="global",
            )

        logger.warning("webhook_no_recipient")
        return None

    async def add_summary(
        self, recipient: Recipient, notification: NotificationPayload, payload: Any
    ) -> None:
        """Attach an AI summary when the recipient opted in. Never raises."""
        if self.summarizer is None or not recipient.user.preferences.ai_summary:
            return
        try:
            summary = await self.summarizer.summarize(
                notification.source or "webhook", notification.event_type, payload
            )
        except Exception as e:
            logger.warning("event_summary_error", error=str(e))
            return
        if summary:
            notification.summary = summary

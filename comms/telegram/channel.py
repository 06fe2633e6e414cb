"""Telegram notification channel."""

from __future__ import annotations

import structlog

from comms.base import ChannelAdapter
from comms.telegram.client import send_telegram_message
from comms.telegram.formatter import format_notification
from shared.config import Settings
from shared.schemas.channels import ChannelConfig
from shared.schemas.notifications import ChannelResult, NotificationPayload

logger = structlog.get_logger()


class TelegramChannel(ChannelAdapter):
    type = "telegram"
    name = "Telegram"

    def __init__(self, settings: Settings):
        self.settings = settings

    async def send(
        self, config: ChannelConfig, notification: NotificationPayload
    ) -> ChannelResult:
        config = self.typed_config(config)
        if not config.enabled:
            return self.failure("Channel disabled")

        # Fall back to the global bot/chat when the channel doesn't bring its own
        chat_id = config.chat_id or self.settings.telegram_chat_id
        bot_token = config.bot_token or self.settings.telegram_bot_token
        if not chat_id or not bot_token:
            logger.warning("telegram_channel_missing_credentials")
            return self.failure("Missing Telegram chat ID or bot token")

        return await send_telegram_message(
            bot_token,
            chat_id,
            format_notification(notification),
            timeout=self.settings.http_timeout_seconds,
        )

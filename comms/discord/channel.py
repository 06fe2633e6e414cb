"""Discord notification channel (webhook based)."""

from __future__ import annotations

import structlog

from comms.base import ChannelAdapter
from comms.discord.embed_builder import build_embed
from comms.http import post_json
from shared.config import Settings
from shared.schemas.channels import ChannelConfig
from shared.schemas.notifications import ChannelResult, NotificationPayload

logger = structlog.get_logger()


class DiscordChannel(ChannelAdapter):
    type = "discord"
    name = "Discord"

    def __init__(self, settings: Settings):
        self.settings = settings

    async def send(
        self, config: ChannelConfig, notification: NotificationPayload
    ) -> ChannelResult:
        config = self.typed_config(config)
        if not config.enabled:
            return self.failure("Channel disabled")
        if not config.webhook_url:
            logger.warning("discord_channel_missing_webhook_url")
            return self.failure("Missing Discord webhook URL")

        return await post_json(
            config.webhook_url,
            {"embeds": [build_embed(notification)]},
            channel=self.type,
            timeout=self.settings.http_timeout_seconds,
            error_prefix="Discord API error",
        )

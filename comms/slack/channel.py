"""Slack notification channel."""

from __future__ import annotations

import structlog

from comms.base import ChannelAdapter
from comms.slack.block_builder import BlockBuilder
from comms.slack.client import post_slack_message, send_slack_webhook
from shared.config import Settings
from shared.schemas.channels import ChannelConfig
from shared.schemas.notifications import ChannelResult, NotificationPayload

logger = structlog.get_logger()


class SlackChannel(ChannelAdapter):
    """Posts Block Kit notifications.

    Incoming webhooks are preferred; a channel with a channel ID but no webhook
    URL is delivered through ``chat.postMessage`` as its own bot or the app bot.
    """

    type = "slack"
    name = "Slack"

    def __init__(self, settings: Settings):
        self.settings = settings

    async def send(
        self, config: ChannelConfig, notification: NotificationPayload
    ) -> ChannelResult:
        config = self.typed_config(config)
        if not config.enabled:
            return self.failure("Channel disabled")

        blocks = BlockBuilder.notification_blocks(notification)
        fallback = BlockBuilder.fallback_text(notification)
        timeout = self.settings.http_timeout_seconds

        if config.webhook_url:
            return await send_slack_webhook(
                config.webhook_url, blocks=blocks, text=fallback, timeout=timeout
            )

        # Channels linked from Slack carry only a channel ID and use the app bot
        bot_token = config.bot_token or self.settings.slack_bot_token
        if bot_token and config.channel_id:
            return await post_slack_message(
                bot_token,
                config.channel_id,
                fallback,
                blocks=blocks,
                timeout=timeout,
            )

        logger.warning("slack_channel_missing_webhook_url")
        return self.failure("Missing Slack webhook URL")

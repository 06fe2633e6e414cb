"""Generic outgoing webhook channel.

Posts the normalized notification verbatim (camelCase keys, as stored) plus a
dispatch timestamp.
"""

from __future__ import annotations

from datetime import datetime, timezone

import structlog

from comms.base import ChannelAdapter
from comms.http import post_json
from shared.config import Settings
from shared.schemas.channels import ChannelConfig
from shared.schemas.notifications import ChannelResult, NotificationPayload

logger = structlog.get_logger()


class WebhookChannel(ChannelAdapter):
    type = "webhook"
    name = "Webhook"

    def __init__(self, settings: Settings):
        self.settings = settings

    async def send(
        self, config: ChannelConfig, notification: NotificationPayload
    ) -> ChannelResult:
        config = self.typed_config(config)
        if not config.enabled:
            return self.failure("Channel disabled")
        if not config.webhook_url:
            return self.failure("Missing webhookUrl")

        body = notification.model_dump(mode="json", by_alias=True)
        body["timestamp"] = datetime.now(timezone.utc).isoformat()

        return await post_json(
            config.webhook_url,
            body,
            channel=self.type,
            timeout=self.settings.http_timeout_seconds,
            error_prefix="Webhook failed",
        )

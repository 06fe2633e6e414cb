"""Fan a notification out to every channel a user has configured."""

from __future__ import annotations

import asyncio

import structlog

from comms.base import ChannelAdapter, ChannelRegistry
from modules.notifications.rules import matches_webhook_rules
from shared.config import Settings
from shared.schemas.channels import ChannelConfig, TelegramConfig, UserProfile
from shared.schemas.notifications import ChannelResult, DispatchResult, NotificationPayload

logger = structlog.get_logger()

LEGACY_TELEGRAM_NAME = "Telegram (legacy)"


class NotificationService:
    """Delivers notifications through the channel adapters in *registry*.

    Every eligible channel is attempted exactly once and concurrently; one
    channel failing (or raising) never prevents the others from being tried.
    """

    def __init__(self, registry: ChannelRegistry, settings: Settings):
        self.registry = registry
        self.settings = settings

    async def send(self, user: UserProfile, notification: NotificationPayload) -> bool:
        """Dispatch and report whether any channel accepted the notification."""
        result = await self.dispatch(user, notification)
        return result.delivered

    async def dispatch(
        self, user: UserProfile, notification: NotificationPayload
    ) -> DispatchResult:
        allowed = user.preferences.allowed_sources
        if allowed and notification.source and notification.source not in allowed:
            logger.info(
                "notification_source_not_allowed",
                user_id=user.id,
                source=notification.source,
            )
            return DispatchResult(skipped_reason="source_not_allowed")

        deliveries = []

        # Legacy single-channel setup ignores channel flags and webhook rules
        if user.has_legacy_telegram:
            adapter = self.registry.get("telegram")
            if adapter is not None:
                config = TelegramConfig(
                    enabled=True,
                    chat_id=user.telegram_chat_id,
                    bot_token=user.telegram_bot_token,
                )
                deliveries.append(
                    self._deliver(adapter, config, notification, LEGACY_TELEGRAM_NAME)
                )

        for channel in user.channels:
            if not channel.enabled:
                continue
            if not matches_webhook_rules(channel.webhook_rules, notification):
                logger.debug(
                    "notification_filtered_by_rules",
                    channel=channel.type,
                    channel_name=channel.label,
                    source=notification.source,
                )
                continue
            adapter = self.registry.get(channel.type)
            if adapter is None:
                logger.warning("unknown_channel_type", channel=channel.type, user_id=user.id)
                continue
            deliveries.append(
                self._deliver(adapter, channel.config, notification, channel.label)
            )

        if not deliveries:
            logger.info("notification_no_channels", user_id=user.id)
            return DispatchResult(skipped_reason="no_channels")

        results = list(await asyncio.gather(*deliveries))
        logger.info(
            "notification_dispatched",
            user_id=user.id,
            source=notification.source,
            attempted=len(results),
            delivered=sum(1 for r in results if r.success),
        )
        return DispatchResult(results=results)

    async def _deliver(
        self,
        adapter: ChannelAdapter,
        config: ChannelConfig,
        notification: NotificationPayload,
        name: str,
    ) -> ChannelResult:
        try:
            result = await adapter.send(config, notification)
        except Exception as e:
            logger.error("channel_send_failed", channel=adapter.type, channel_name=name, error=str(e))
            return ChannelResult(channel=adapter.type, name=name, success=False, error=str(e))

        result.name = result.name or name
        if result.success:
            logger.info("notification_sent", channel=adapter.type, channel_name=name)
        else:
            logger.warning(
                "notification_failed", channel=adapter.type, channel_name=name, error=result.error
            )
        return result

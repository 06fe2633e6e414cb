"""Channel adapter interface and registry.

Every adapter turns a ``NotificationPayload`` into one destination's wire
format and delivers it. Adapters report problems through ``ChannelResult``;
configuration gaps and transport failures never raise.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Iterable

import structlog

from shared.schemas.channels import ChannelConfig, parse_channel_config
from shared.schemas.notifications import ChannelResult, NotificationPayload

logger = structlog.get_logger()


class ChannelAdapter(ABC):
    """Delivers notifications to one type of channel."""

    type: str
    name: str

    @abstractmethod
    async def send(
        self, config: ChannelConfig, notification: NotificationPayload
    ) -> ChannelResult:
        """Deliver *notification* using *config*."""

    def typed_config(self, config: ChannelConfig) -> ChannelConfig:
        """Return *config* validated as this adapter's config type."""
        return parse_channel_config(self.type, config)

    def failure(self, error: str, **kwargs) -> ChannelResult:
        return ChannelResult(channel=self.type, success=False, error=error, **kwargs)

    def success(self, **kwargs) -> ChannelResult:
        return ChannelResult(channel=self.type, success=True, **kwargs)


class ChannelRegistry:
    """Lookup of adapters keyed by channel type tag."""

    def __init__(self, adapters: Iterable[ChannelAdapter] = ()):
        self._adapters: dict[str, ChannelAdapter] = {}
        for adapter in adapters:
            self.register(adapter)

    def register(self, adapter: ChannelAdapter) -> None:
        if adapter.type in self._adapters:
            logger.warning("channel_adapter_replaced", channel=adapter.type)
        self._adapters[adapter.type] = adapter

    def get(self, channel_type: str) -> ChannelAdapter | None:
        return self._adapters.get(channel_type)

    def __contains__(self, channel_type: str) -> bool:
        return channel_type in self._adapters

    @property
    def types(self) -> list[str]:
        return sorted(self._adapters)


def build_default_registry(settings) -> ChannelRegistry:
    """Registry with every built-in adapter."""
    from comms.discord.channel import DiscordChannel
    from comms.slack.channel import SlackChannel
    from comms.telegram.channel import TelegramChannel
    from comms.webhook.channel import WebhookChannel

    return ChannelRegistry(
        [
            TelegramChannel(settings),
            SlackChannel(settings),
            DiscordChannel(settings),
            WebhookChannel(settings),
        ]
    )

"""User channel configuration schemas.

Channel configs are stored as free-form JSON (camelCase keys, e.g.
``{"chatId": ..., "botToken": ...}``). They are validated into one typed
config per channel type when a channel is loaded, so adapters never have to
dig through untyped dicts.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, SerializeAsAny, ValidationInfo, field_validator
from pydantic.alias_generators import to_camel

ChannelType = Literal["telegram", "discord", "whatsapp", "slack", "email", "webhook"]


class _CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        coerce_numbers_to_str=True,
    )


class ChannelConfig(_CamelModel):
    """Base config. Unknown channel types keep their raw keys as extras."""

    model_config = ConfigDict(extra="allow")

    enabled: bool = True


class TelegramConfig(ChannelConfig):
    model_config = ConfigDict(extra="ignore")

    # Either may fall back to the global bot/chat from settings
    chat_id: str | None = None
    bot_token: str | None = None


class SlackConfig(ChannelConfig):
    model_config = ConfigDict(extra="ignore")

    webhook_url: str | None = None
    # Bot API path, used when no incoming webhook is configured
    bot_token: str | None = None
    channel_id: str | None = None


class DiscordConfig(ChannelConfig):
    model_config = ConfigDict(extra="ignore")

    webhook_url: str | None = None


class WebhookConfig(ChannelConfig):
    model_config = ConfigDict(extra="ignore")

    webhook_url: str | None = None


CONFIG_TYPES: dict[str, type[ChannelConfig]] = {
    "telegram": TelegramConfig,
    "slack": SlackConfig,
    "discord": DiscordConfig,
    "webhook": WebhookConfig,
}


def parse_channel_config(channel_type: str, raw: Any) -> ChannelConfig:
    """Validate a raw config dict into the typed config for *channel_type*."""
    config_cls = CONFIG_TYPES.get(channel_type, ChannelConfig)
    if isinstance(raw, config_cls):
        return raw
    if isinstance(raw, BaseModel):
        raw = raw.model_dump()
    return config_cls.model_validate(raw or {})


# ---------------------------------------------------------------------------
# Webhook rules
# ---------------------------------------------------------------------------


class SourceFilters(_CamelModel):
    repositories: list[str] = []
    event_types: list[str] = []
    services: list[str] = []


class SourceRule(_CamelModel):
    type: str
    enabled: bool = True
    filters: SourceFilters = SourceFilters()


class WebhookRules(_CamelModel):
    """Per-channel allow-list of inbound sources.

    No sources means everything is allowed.
    """

    sources: list[SourceRule] = []


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------


class UserChannel(_CamelModel):
    id: str | None = None
    type: ChannelType
    name: str | None = None
    enabled: bool = True
    config: SerializeAsAny[ChannelConfig] = ChannelConfig()
    webhook_rules: WebhookRules | None = None

    @field_validator("config", mode="before")
    @classmethod
    def _typed_config(cls, v: Any, info: ValidationInfo) -> ChannelConfig:
        return parse_channel_config(info.data.get("type", ""), v)

    @property
    def label(self) -> str:
        return self.name or self.type


class Preferences(_CamelModel):
    ai_summary: bool = False
    allowed_sources: list[str] = []


class UserProfile(_CamelModel):
    """Everything the dispatcher needs to know about a recipient."""

    id: str | None = None
    email: str | None = None
    # Legacy single-channel Telegram setup, always honoured when both are set
    telegram_chat_id: str | None = None
    telegram_bot_token: str | None = None
    channels: list[UserChannel] = []
    preferences: Preferences = Preferences()

    @property
    def has_legacy_telegram(self) -> bool:
        return bool(self.telegram_chat_id and self.telegram_bot_token)

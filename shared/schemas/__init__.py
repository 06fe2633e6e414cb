"""Pydantic schemas for the relay."""

from shared.schemas.channels import (
    ChannelConfig,
    DiscordConfig,
    Preferences,
    SlackConfig,
    TelegramConfig,
    UserChannel,
    UserProfile,
    WebhookConfig,
    WebhookRules,
)
from shared.schemas.common import HealthResponse
from shared.schemas.notifications import (
    ChannelResult,
    DispatchResult,
    NotificationField,
    NotificationLink,
    NotificationPayload,
)
from shared.schemas.tasks import DevflowRequest, TaskMapping, TaskUpdate

__all__ = [
    "ChannelConfig",
    "ChannelResult",
    "DevflowRequest",
    "DiscordConfig",
    "DispatchResult",
    "HealthResponse",
    "NotificationField",
    "NotificationLink",
    "NotificationPayload",
    "Preferences",
    "SlackConfig",
    "TaskMapping",
    "TaskUpdate",
    "TelegramConfig",
    "UserChannel",
    "UserProfile",
    "WebhookConfig",
    "WebhookRules",
]

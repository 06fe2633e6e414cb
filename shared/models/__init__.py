"""SQLAlchemy models."""

from shared.models.base import Base
from shared.models.installation import Installation
from shared.models.user import Channel, User
from shared.models.webhook_event import WebhookEvent

__all__ = [
    "Base",
    "Channel",
    "Installation",
    "User",
    "WebhookEvent",
]

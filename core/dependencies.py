"""Service wiring shared by the HTTP routers."""

from __future__ import annotations

import hmac
from dataclasses import dataclass

import redis.asyncio as aioredis
import structlog
from fastapi import Depends, Header, HTTPException, Request
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from comms.base import ChannelRegistry, build_default_registry
from core.events import WebhookEventStore
from modules.devflow.chat import DevflowChatHandler
from modules.devflow.forwarder import DevflowForwarder
from modules.notifications.service import NotificationService
from modules.routing.directory import UserDirectory
from modules.routing.installations import InstallationService
from modules.routing.resolver import RecipientResolver
from modules.summary.summarizer import EventSummarizer
from modules.tasks.relay import TaskUpdateRelay
from modules.tasks.store import build_task_store
from shared.config import Settings

logger = structlog.get_logger()


@dataclass
class Services:
    settings: Settings
    registry: ChannelRegistry
    notifications: NotificationService
    events: WebhookEventStore
    directory: UserDirectory
    installations: InstallationService
    resolver: RecipientResolver
    relay: TaskUpdateRelay
    forwarder: DevflowForwarder
    devflow: DevflowChatHandler


def build_services(
    settings: Settings,
    session_factory: async_sessionmaker[AsyncSession],
    redis_client: aioredis.Redis | None = None,
) -> Services:
    registry = build_default_registry(settings)
    directory = UserDirectory(session_factory)
    relay = TaskUpdateRelay(build_task_store(settings, redis_client), settings)
    forwarder = DevflowForwarder(relay, settings)
    return Services(
        settings=settings,
        registry=registry,
        notifications=NotificationService(registry, settings),
        events=WebhookEventStore(session_factory),
        directory=directory,
        installations=InstallationService(session_factory),
        resolver=RecipientResolver(directory, settings, EventSummarizer(settings)),
        relay=relay,
        forwarder=forwarder,
        devflow=DevflowChatHandler(forwarder),
    )


# Set on startup
_services: Services | None = None


def set_services(services: Services | None) -> None:
    global _services
    _services = services


def get_services() -> Services:
    if _services is None:
        raise RuntimeError("Services not initialized")
    return _services


async def require_api_secret(
    request: Request,
    x_api_secret: str | None = Header(default=None),
    services: Services = Depends(get_services),
) -> None:
    """Validates ``X-API-Secret`` against ``DEVFLOW_API_SECRET``.

    Skips validation when no secret is configured (development mode).
    """
    expected = services.settings.devflow_api_secret
    if not expected:
        logger.warning(
            "api_secret_auth_disabled",
            path=request.url.path,
            hint="Set DEVFLOW_API_SECRET in .env for production",
        )
        return

    if not x_api_secret or not hmac.compare_digest(x_api_secret.encode(), expected.encode()):
        logger.warning(
            "api_secret_auth_failed",
            path=request.url.path,
            remote=request.client.host if request.client else "unknown",
        )
        raise HTTPException(status_code=401, detail="Unauthorized")

"""Shared test fixtures for the relay test suite.

Provides mock database sessions, Redis clients, settings and factory
helpers so tests can run without Postgres, Redis or any chat platform.
"""

from __future__ import annotations

import uuid
from contextlib import asynccontextmanager
from unittest.mock import AsyncMock, MagicMock

import pytest

from shared.config import Settings
from shared.schemas.channels import Preferences, UserChannel, UserProfile
from shared.schemas.notifications import (
    NotificationField,
    NotificationLink,
    NotificationPayload,
)


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------


@pytest.fixture
def settings():
    """Settings isolated from the environment and any local ``.env``."""
    return Settings(
        _env_file=None,
        database_url="sqlite+aiosqlite:///:memory:",
        public_base_url="https://relay.example.com",
        telegram_bot_token="global-bot-token",
        telegram_chat_id="1000",
        slack_bot_token="xoxb-global",
        slack_signing_secret="",
        github_webhook_secret="",
        devflow_api_secret="devflow-secret",
        agent_host_url="http://agent-host:3001",
        summary_api_key="",
        task_store_backend="memory",
    )


# ---------------------------------------------------------------------------
# Database mocks
# ---------------------------------------------------------------------------


@pytest.fixture
def mock_db_session():
    """Mock async SQLAlchemy session.

    Supports the common patterns used in service code:
        session.execute(stmt) -> result
        session.get(Model, pk)
        session.add(obj)
        session.commit()
    """
    session = AsyncMock()
    default_result = MagicMock()
    default_result.scalar_one_or_none.return_value = None
    default_result.scalars.return_value.all.return_value = []
    session.execute = AsyncMock(return_value=default_result)
    session.get = AsyncMock(return_value=None)
    session.add = MagicMock()
    return session


@pytest.fixture
def mock_session_factory(mock_db_session):
    """Mock async session factory compatible with ``async with factory() as session:``."""

    @asynccontextmanager
    async def _session_ctx():
        yield mock_db_session

    factory = MagicMock(side_effect=lambda: _session_ctx())
    return factory


# ---------------------------------------------------------------------------
# Redis mock
# ---------------------------------------------------------------------------


@pytest.fixture
def mock_redis():
    """Mock async Redis client with common operations."""
    redis = AsyncMock()
    redis.get = AsyncMock(return_value=None)
    redis.set = AsyncMock()
    redis.delete = AsyncMock()
    return redis


# ---------------------------------------------------------------------------
# Factories
# ---------------------------------------------------------------------------


@pytest.fixture
def make_notification():
    """Factory for NotificationPayload instances."""

    def _make(**overrides) -> NotificationPayload:
        data = dict(
            title="Push to main",
            emoji="📤",
            fields=[
                NotificationField(label="📦 Repo", value="octo/app"),
                NotificationField(label="🌿 Branch", value="main"),
            ],
            links=[NotificationLink(label="Compare", url="https://github.com/octo/app/compare/a...b")],
            payload_url="https://relay.example.com/payloads/abc",
            source="github",
            event_type="push",
            repository="octo/app",
        )
        data.update(overrides)
        return NotificationPayload(**data)

    return _make


@pytest.fixture
def make_user():
    """Factory for UserProfile instances.

    ``channels`` accepts raw dicts in the stored (camelCase) shape.
    """

    def _make(
        channels: list[dict] | None = None,
        telegram_chat_id: str | None = None,
        telegram_bot_token: str | None = None,
        allowed_sources: list[str] | None = None,
        ai_summary: bool = False,
    ) -> UserProfile:
        return UserProfile(
            id=str(uuid.uuid4()),
            email="dev@example.com",
            telegram_chat_id=telegram_chat_id,
            telegram_bot_token=telegram_bot_token,
            channels=[UserChannel.model_validate(c) for c in channels or []],
            preferences=Preferences(
                ai_summary=ai_summary, allowed_sources=allowed_sources or []
            ),
        )

    return _make


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def make_execute_side_effect(*results):
    """Create an execute side_effect that returns different results per call.

    Usage::

        session.execute = AsyncMock(
            side_effect=make_execute_side_effect(result1, result2)
        )
    """
    call_idx = 0

    async def _side_effect(stmt, *args, **kwargs):
        nonlocal call_idx
        if call_idx < len(results):
            r = results[call_idx]
            call_idx += 1
            return r
        fallback = MagicMock()
        fallback.scalar_one_or_none.return_value = None
        fallback.scalars.return_value.all.return_value = []
        return fallback

    return _side_effect


def scalar_result(value):
    """Execute result whose ``scalar_one_or_none()`` returns *value*."""
    result = MagicMock()
    result.scalar_one_or_none.return_value = value
    result.scalars.return_value.all.return_value = [value] if value is not None else []
    return result

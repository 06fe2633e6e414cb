"""Devflow task schemas exchanged with the agent host."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

TaskChannel = Literal["telegram", "slack"]
DevflowIntent = Literal["fix-bug", "feature", "explain", "review-pr", "deploy"]


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class TaskMapping(_CamelModel):
    """Where progress for a task should be reported."""

    task_id: str
    chat_id: str
    channel: TaskChannel
    token: str | None = None
    thread_ts: str | None = None  # Slack thread of the originating message


class TaskUpdate(_CamelModel):
    """Progress update posted by the agent host."""

    task_id: str
    status: Literal["in_progress", "completed", "failed"]
    step: str
    progress: float = 0.0  # 0..1, clamped when rendered
    details: str | None = None
    error: str | None = None
    timestamp: int | None = None


class CommandSource(_CamelModel):
    channel: TaskChannel
    chat_id: str
    message_id: str | None = None


class CommandPayload(_CamelModel):
    intent: DevflowIntent
    repo: str
    branch: str | None = None
    natural_language: str
    context: dict[str, Any] | None = None


class DevflowRequest(_CamelModel):
    """Command forwarded to the agent host."""

    task_id: str
    source: CommandSource
    payload: CommandPayload

"""Relays devflow task progress back to the chat a command came from."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Callable, Literal

import structlog
from telegram.constants import ParseMode
from telegram.helpers import escape_markdown

from comms.slack.block_builder import escape_slack
from comms.slack.client import post_slack_message
from comms.telegram.client import send_telegram_message
from modules.tasks.store import TaskMappingStore
from shared.config import Settings
from shared.schemas.notifications import ChannelResult
from shared.schemas.tasks import TaskChannel, TaskMapping, TaskUpdate

logger = structlog.get_logger()

PROGRESS_BAR_WIDTH = 10


def _clamp(progress: float) -> float:
    if math.isnan(progress):
        return 0.0
    return min(max(progress, 0.0), 1.0)


def generate_progress_bar(progress: float) -> str:
    """``0.55`` -> ``[██████░░░░]``. Rounds half up."""
    filled = math.floor(_clamp(progress) * PROGRESS_BAR_WIDTH + 0.5)
    return "[" + "█" * filled + "░" * (PROGRESS_BAR_WIDTH - filled) + "]"


def progress_percent(progress: float) -> int:
    return math.floor(_clamp(progress) * 100 + 0.5)


def format_task_update(update: TaskUpdate, escape: Callable[[str], str] = lambda s: s) -> str:
    """Render *update* as a chat message.

    *escape* is applied to the free text coming from the agent host; the
    surrounding ``*bold*`` and backtick markup is shared by Telegram's legacy
    Markdown and Slack mrkdwn.
    """
    step = escape(update.step)
    task_line = f"Task ID: `{update.task_id.replace('`', '')}`"

    if update.status == "in_progress":
        parts = [
            f"⏳ *{step}*",
            f"{generate_progress_bar(update.progress)} {progress_percent(update.progress)}%",
        ]
        if update.details:
            parts.append(f"📝 {escape(update.details)}")
    elif update.status == "completed":
        parts = ["✅ *Task Completed!*", step]
        if update.details:
            parts.append(f"📊 {escape(update.details)}")
    else:
        parts = ["❌ *Task Failed*", step, f"Error: {escape(update.error or 'Unknown error')}"]

    parts.append(task_line)
    return "\n\n".join(parts)


@dataclass(frozen=True)
class RelayOutcome:
    status: Literal["delivered", "not_found", "failed"]
    error: str | None = None


def _telegram_escape(text: str) -> str:
    return escape_markdown(text, version=1)


class TaskUpdateRelay:
    """Remembers where each task came from and forwards its progress there."""

    def __init__(self, store: TaskMappingStore, settings: Settings):
        self.store = store
        self.settings = settings

    async def store_task_mapping(
        self,
        task_id: str,
        chat_id: str,
        channel: TaskChannel,
        token: str | None = None,
        thread_ts: str | None = None,
    ) -> TaskMapping:
        """Record (or overwrite) the destination for *task_id*."""
        mapping = TaskMapping(
            task_id=task_id,
            chat_id=chat_id,
            channel=channel,
            token=token,
            thread_ts=thread_ts,
        )
        await self.store.put(mapping)
        logger.info("task_mapping_stored", task_id=task_id, channel=channel)
        return mapping

    async def receive_update(self, update: TaskUpdate) -> RelayOutcome:
        mapping = await self.store.get(update.task_id)
        if mapping is None:
            logger.warning("task_mapping_not_found", task_id=update.task_id)
            return RelayOutcome(status="not_found")

        logger.info(
            "task_update_received",
            task_id=update.task_id,
            status=update.status,
            channel=mapping.channel,
        )

        if mapping.channel == "telegram":
            result = await self._send_telegram(mapping, update)
        else:
            result = await self._send_slack(mapping, update)

        if not result.success:
            logger.warning("task_update_delivery_failed", task_id=update.task_id, error=result.error)
            return RelayOutcome(status="failed", error=result.error)
        return RelayOutcome(status="delivered")

    async def _send_telegram(self, mapping: TaskMapping, update: TaskUpdate) -> ChannelResult:
        token = mapping.token or self.settings.telegram_bot_token
        if not token:
            return ChannelResult(channel="telegram", success=False, error="Missing Telegram bot token")
        return await send_telegram_message(
            token,
            mapping.chat_id,
            format_task_update(update, _telegram_escape),
            parse_mode=ParseMode.MARKDOWN,
            timeout=self.settings.http_timeout_seconds,
        )

    async def _send_slack(self, mapping: TaskMapping, update: TaskUpdate) -> ChannelResult:
        token = mapping.token or self.settings.slack_bot_token
        if not token:
            return ChannelResult(channel="slack", success=False, error="Missing Slack bot token")
        return await post_slack_message(
            token,
            mapping.chat_id,
            format_task_update(update, escape_slack),
            thread_ts=mapping.thread_ts,
            timeout=self.settings.http_timeout_seconds,
        )

"""Handles ``!devflow`` messages arriving from a chat platform."""

from __future__ import annotations

import uuid
from typing import Any, Awaitable, Callable

import structlog

from modules.devflow.forwarder import AgentHostError, DevflowForwarder
from modules.devflow.parser import devflow_help_text, parse_devflow_command
from shared.schemas.tasks import CommandPayload, CommandSource, DevflowRequest, TaskChannel

logger = structlog.get_logger()

Reply = Callable[[str], Awaitable[Any]]


def _identity(text: str) -> str:
    return text


class DevflowChatHandler:
    """Parses a chat message and, when it is a devflow command, starts a task.

    Replies (help, validation errors, task started) are sent through the
    *reply* callback so this class stays independent of the chat platform.
    """

    def __init__(self, forwarder: DevflowForwarder):
        self.forwarder = forwarder

    async def handle(
        self,
        text: str,
        *,
        channel: TaskChannel,
        chat_id: str,
        reply: Reply,
        message_id: str | None = None,
        escape: Callable[[str], str] = _identity,
    ) -> bool:
        """Return True when *text* was a devflow command (and was answered)."""
        command = parse_devflow_command(text)
        if not command.is_devflow:
            return False

        if command.intent is None:
            await reply(devflow_help_text())
            return True

        if not command.repo:
            await reply(
                "❌ Please specify a repository!\n\nExample:\n"
                f"`!devflow {command.intent} owner/repo {command.description or 'description'}`"
            )
            return True

        request = DevflowRequest(
            task_id=str(uuid.uuid4()),
            source=CommandSource(channel=channel, chat_id=chat_id, message_id=message_id),
            payload=CommandPayload(
                intent=command.intent,
                repo=command.repo,
                branch=command.branch,
                natural_language=command.description,
            ),
        )

        try:
            await self.forwarder.forward(request)
        except AgentHostError as e:
            logger.error("devflow_forward_failed", task_id=request.task_id, error=str(e))
            await reply("❌ Failed to process Devflow command. Please try again later.")
            return True

        lines = [
            "🚀 *Devflow Task Started!*",
            "",
            f"Intent: {command.intent}",
            f"Repository: {escape(command.repo)}",
        ]
        if command.branch:
            lines.append(f"Branch: {escape(command.branch)}")
        lines += [
            f"Request: {escape(command.description)}",
            "",
            "⏳ Processing... You'll receive updates here.",
            "",
            f"Task ID: `{request.task_id}`",
        ]
        await reply("\n".join(lines))
        return True

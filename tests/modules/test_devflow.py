"""Tests for devflow command parsing, forwarding and chat handling."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from modules.devflow.chat import DevflowChatHandler
from modules.devflow.forwarder import AgentHostError, DevflowForwarder
from modules.devflow.parser import INVALID_FORMAT, devflow_help_text, parse_devflow_command
from modules.tasks.relay import TaskUpdateRelay
from modules.tasks.store import InMemoryTaskMappingStore
from shared.schemas.tasks import CommandPayload, CommandSource, DevflowRequest


# ---------------------------------------------------------------------------
# parse_devflow_command
# ---------------------------------------------------------------------------


class TestParseDevflowCommand:
    def test_full_command(self):
        cmd = parse_devflow_command("!devflow fix owner/repo main Fix the bug")

        assert cmd.is_devflow is True
        assert cmd.intent == "fix-bug"
        assert cmd.repo == "owner/repo"
        assert cmd.branch == "main"
        assert cmd.description == "Fix the bug"

    def test_without_branch_first_word_taken_as_branch(self):
        """A branch-shaped word after the repo is always read as the branch."""
        cmd = parse_devflow_command("!devflow feature owner/repo Add CSV export")

        assert cmd.intent == "feature"
        assert cmd.branch == "Add"
        assert cmd.description == "CSV export"

    def test_branch_requires_simple_token(self):
        cmd = parse_devflow_command("!devflow explain owner/repo how does auth work?")

        assert cmd.branch == "how"
        cmd = parse_devflow_command("!devflow explain owner/repo auth.flow please")
        assert cmd.branch is None
        assert cmd.description == "auth.flow please"

    def test_case_insensitive(self):
        cmd = parse_devflow_command("  !DevFlow REVIEW-PR owner/repo dev Check PR #12")

        assert cmd.intent == "review-pr"
        assert cmd.branch == "dev"

    def test_no_repo(self):
        cmd = parse_devflow_command("!devflow explain the login flow")

        assert cmd.intent == "explain"
        assert cmd.repo is None
        assert cmd.description == "the login flow"

    def test_repo_only_keeps_remainder_as_description(self):
        cmd = parse_devflow_command("!devflow deploy owner/repo")

        assert cmd.repo == "owner/repo"
        assert cmd.description == "owner/repo"

    def test_invalid_format(self):
        cmd = parse_devflow_command("!devflow dance owner/repo")

        assert cmd.is_devflow is True
        assert cmd.intent is None
        assert cmd.description == INVALID_FORMAT

    def test_not_devflow(self):
        cmd = parse_devflow_command("hello there")

        assert cmd.is_devflow is False
        assert cmd.raw_text == "hello there"

    def test_help_text_mentions_intents(self):
        text = devflow_help_text()
        for intent in ("fix", "feature", "explain", "review-pr"):
            assert f"!devflow {intent} owner/repo" in text


# ---------------------------------------------------------------------------
# DevflowForwarder
# ---------------------------------------------------------------------------


def _request(channel: str = "slack") -> DevflowRequest:
    return DevflowRequest(
        task_id="task-1",
        source=CommandSource(channel=channel, chat_id="C1", message_id="171.5"),
        payload=CommandPayload(intent="fix-bug", repo="owner/repo", natural_language="Fix it"),
    )


def _response(status: int) -> httpx.Response:
    return httpx.Response(status, json={}, request=httpx.Request("POST", "http://agent-host:3001/command"))


class TestDevflowForwarder:
    @pytest.fixture
    def store(self):
        return InMemoryTaskMappingStore()

    @pytest.fixture
    def forwarder(self, store, settings):
        return DevflowForwarder(TaskUpdateRelay(store, settings), settings)

    @pytest.mark.asyncio
    async def test_stores_mapping_then_posts(self, forwarder, store):
        with patch("httpx.AsyncClient.post", new=AsyncMock(return_value=_response(202))) as post:
            await forwarder.forward(_request())

        mapping = await store.get("task-1")
        assert mapping.chat_id == "C1"
        assert mapping.thread_ts == "171.5"

        url = post.call_args.args[0]
        body = post.call_args.kwargs["json"]
        assert url == "http://agent-host:3001/command"
        assert body["taskId"] == "task-1"
        assert body["payload"]["naturalLanguage"] == "Fix it"
        assert body["source"]["chatId"] == "C1"

    @pytest.mark.asyncio
    async def test_telegram_mapping_not_threaded(self, forwarder, store):
        with patch("httpx.AsyncClient.post", new=AsyncMock(return_value=_response(200))):
            await forwarder.forward(_request("telegram"))

        assert (await store.get("task-1")).thread_ts is None

    @pytest.mark.asyncio
    async def test_agent_host_error_status(self, forwarder):
        with patch("httpx.AsyncClient.post", new=AsyncMock(return_value=_response(503))):
            with pytest.raises(AgentHostError) as exc_info:
                await forwarder.forward(_request())

        assert exc_info.value.status_code == 503
        assert str(exc_info.value) == "Agent Host error: 503"

    @pytest.mark.asyncio
    async def test_agent_host_unreachable(self, forwarder):
        with patch("httpx.AsyncClient.post", new=AsyncMock(side_effect=httpx.ConnectError("refused"))):
            with pytest.raises(AgentHostError):
                await forwarder.forward(_request())


# ---------------------------------------------------------------------------
# DevflowChatHandler
# ---------------------------------------------------------------------------


class TestDevflowChatHandler:
    @pytest.fixture
    def forwarder(self):
        forwarder = MagicMock()
        forwarder.forward = AsyncMock()
        return forwarder

    @pytest.mark.asyncio
    async def test_ignores_normal_messages(self, forwarder):
        reply = AsyncMock()
        handled = await DevflowChatHandler(forwarder).handle(
            "good morning", channel="slack", chat_id="C1", reply=reply
        )

        assert handled is False
        reply.assert_not_called()

    @pytest.mark.asyncio
    async def test_invalid_command_gets_help(self, forwarder):
        reply = AsyncMock()
        handled = await DevflowChatHandler(forwarder).handle(
            "!devflow", channel="slack", chat_id="C1", reply=reply
        )

        assert handled is True
        reply.assert_awaited_once_with(devflow_help_text())
        forwarder.forward.assert_not_called()

    @pytest.mark.asyncio
    async def test_missing_repo(self, forwarder):
        reply = AsyncMock()
        await DevflowChatHandler(forwarder).handle(
            "!devflow fix the login bug", channel="telegram", chat_id="42", reply=reply
        )

        assert "Please specify a repository" in reply.call_args.args[0]
        forwarder.forward.assert_not_called()

    @pytest.mark.asyncio
    async def test_starts_task(self, forwarder):
        reply = AsyncMock()
        await DevflowChatHandler(forwarder).handle(
            "!devflow fix owner/repo main Fix the bug",
            channel="slack",
            chat_id="C1",
            reply=reply,
            message_id="171.5",
        )

        request = forwarder.forward.call_args.args[0]
        assert request.source.channel == "slack"
        assert request.source.message_id == "171.5"
        assert request.payload.intent == "fix-bug"
        assert request.payload.branch == "main"

        text = reply.call_args.args[0]
        assert text.startswith("🚀 *Devflow Task Started!*")
        assert "Branch: main" in text
        assert f"Task ID: `{request.task_id}`" in text

    @pytest.mark.asyncio
    async def test_forward_failure_reported(self, forwarder):
        forwarder.forward = AsyncMock(side_effect=AgentHostError("Agent Host error: 500", 500))
        reply = AsyncMock()
        handled = await DevflowChatHandler(forwarder).handle(
            "!devflow fix owner/repo Fix it", channel="slack", chat_id="C1", reply=reply
        )

        assert handled is True
        assert reply.call_args.args[0].startswith("❌ Failed to process Devflow command")

"""Tests for the Discord and generic webhook channels and the shared JSON POST helper."""

from __future__ import annotations

from datetime import datetime, timezone
from unittest.mock import AsyncMock, patch

import httpx
import pytest

from comms.discord.channel import DiscordChannel
from comms.discord.embed_builder import EMBED_COLOR, MAX_FIELDS, build_embed
from comms.http import ERROR_DETAIL_MAX_CHARS, post_json
from comms.webhook.channel import WebhookChannel
from shared.schemas.channels import DiscordConfig, WebhookConfig
from shared.schemas.notifications import ChannelResult, NotificationField


def _response(status: int, text: str = "") -> httpx.Response:
    return httpx.Response(status, text=text, request=httpx.Request("POST", "https://example.com"))


# ---------------------------------------------------------------------------
# build_embed
# ---------------------------------------------------------------------------


class TestBuildEmbed:
    def test_embed_shape(self, make_notification):
        now = datetime(2026, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
        embed = build_embed(make_notification(), now=now)

        assert embed["title"] == "📤 Push to main"
        assert embed["color"] == EMBED_COLOR == 5814783
        assert embed["url"] == "https://relay.example.com/payloads/abc"
        assert embed["footer"] == {"text": "Source: github"}
        assert embed["timestamp"] == "2026-01-02T03:04:05+00:00"
        assert "description" not in embed

    def test_fields_inline_and_links_field(self, make_notification):
        embed = build_embed(make_notification())

        assert embed["fields"][0] == {"name": "📦 Repo", "value": "octo/app", "inline": True}
        links = embed["fields"][-1]
        assert links["name"] == "Links"
        assert links["inline"] is False
        assert "[Compare](https://github.com/octo/app/compare/a...b)" in links["value"]

    def test_summary_is_description(self, make_notification):
        embed = build_embed(make_notification(summary="🚀 shipped"))

        assert embed["description"] == "🚀 shipped"

    def test_system_footer_without_source(self, make_notification):
        embed = build_embed(make_notification(source=None))

        assert embed["footer"]["text"] == "Source: System"

    def test_field_count_within_limit(self, make_notification):
        fields = [NotificationField(label=f"f{i}", value="v") for i in range(40)]
        embed = build_embed(make_notification(fields=fields))

        assert len(embed["fields"]) == MAX_FIELDS
        assert embed["fields"][-1]["name"] == "Links"


# ---------------------------------------------------------------------------
# post_json
# ---------------------------------------------------------------------------


class TestPostJson:
    @pytest.mark.asyncio
    async def test_success(self):
        with patch("httpx.AsyncClient.post", new=AsyncMock(return_value=_response(204))):
            result = await post_json(
                "https://example.com", {}, channel="discord", timeout=5, error_prefix="Discord API error"
            )

        assert result.success is True
        assert result.status_code == 204

    @pytest.mark.asyncio
    async def test_failure_keeps_truncated_body(self):
        body = "x" * 600
        with patch("httpx.AsyncClient.post", new=AsyncMock(return_value=_response(500, body))):
            result = await post_json(
                "https://example.com", {}, channel="webhook", timeout=5, error_prefix="Webhook failed"
            )

        assert result.success is False
        assert result.error == "Webhook failed: 500 Internal Server Error"
        assert result.detail == "x" * ERROR_DETAIL_MAX_CHARS + "..."

    @pytest.mark.asyncio
    async def test_transport_error(self):
        with patch(
            "httpx.AsyncClient.post", new=AsyncMock(side_effect=httpx.ConnectTimeout("timed out"))
        ):
            result = await post_json(
                "https://example.com", {}, channel="webhook", timeout=5, error_prefix="Webhook failed"
            )

        assert result.success is False
        assert result.error.startswith("Webhook failed: ConnectTimeout")


# ---------------------------------------------------------------------------
# Channels
# ---------------------------------------------------------------------------


class TestDiscordChannel:
    @pytest.mark.asyncio
    async def test_posts_single_embed(self, settings, make_notification):
        ok = ChannelResult(channel="discord", success=True)
        with patch("comms.discord.channel.post_json", new=AsyncMock(return_value=ok)) as post:
            result = await DiscordChannel(settings).send(
                DiscordConfig(webhook_url="https://discord.com/api/webhooks/1/x"), make_notification()
            )

        assert result.success is True
        url, body = post.call_args.args
        assert url == "https://discord.com/api/webhooks/1/x"
        assert len(body["embeds"]) == 1

    @pytest.mark.asyncio
    async def test_missing_url(self, settings, make_notification):
        result = await DiscordChannel(settings).send(DiscordConfig(), make_notification())

        assert result.success is False
        assert result.error == "Missing Discord webhook URL"


class TestWebhookChannel:
    @pytest.mark.asyncio
    async def test_posts_notification_with_timestamp(self, settings, make_notification):
        ok = ChannelResult(channel="webhook", success=True)
        with patch("comms.webhook.channel.post_json", new=AsyncMock(return_value=ok)) as post:
            await WebhookChannel(settings).send(
                WebhookConfig(webhook_url="https://hooks.example.com/in"), make_notification()
            )

        body = post.call_args.args[1]
        assert body["title"] == "Push to main"
        assert body["payloadUrl"] == "https://relay.example.com/payloads/abc"
        assert body["fields"][0] == {"label": "📦 Repo", "value": "octo/app"}
        assert "timestamp" in body

    @pytest.mark.asyncio
    async def test_missing_url(self, settings, make_notification):
        result = await WebhookChannel(settings).send(WebhookConfig(), make_notification())

        assert result.success is False
        assert result.error == "Missing webhookUrl"

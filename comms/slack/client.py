"""Slack delivery paths: incoming webhooks and the ``chat.postMessage`` bot API."""

from __future__ import annotations

import asyncio
from typing import Any

import aiohttp
import structlog
from slack_sdk.errors import SlackApiError
from slack_sdk.web.async_client import AsyncWebClient
from slack_sdk.webhook.async_client import AsyncWebhookClient

from comms.http import truncate_detail
from shared.schemas.notifications import ChannelResult

logger = structlog.get_logger()

_TRANSPORT_ERRORS = (aiohttp.ClientError, asyncio.TimeoutError)


async def send_slack_webhook(
    webhook_url: str,
    *,
    blocks: list[dict[str, Any]] | None = None,
    text: str | None = None,
    timeout: float = 10.0,
) -> ChannelResult:
    """Post a message to a Slack incoming webhook URL."""
    client = AsyncWebhookClient(webhook_url, timeout=int(timeout))
    try:
        resp = await client.send(text=text, blocks=blocks)
    except _TRANSPORT_ERRORS as e:
        logger.warning("slack_webhook_failed", error=str(e))
        return ChannelResult(
            channel="slack", success=False, error=f"Slack webhook error: {type(e).__name__}: {e}"
        )

    if 200 <= resp.status_code < 300:
        return ChannelResult(channel="slack", success=True, status_code=resp.status_code)

    detail = truncate_detail(resp.body or "")
    logger.warning("slack_webhook_rejected", status_code=resp.status_code, detail=detail)
    return ChannelResult(
        channel="slack",
        success=False,
        error=f"Slack API error: {resp.status_code} {detail}",
        status_code=resp.status_code,
        detail=detail,
    )


async def post_slack_message(
    token: str,
    channel: str,
    text: str,
    *,
    thread_ts: str | None = None,
    blocks: list[dict[str, Any]] | None = None,
    timeout: float = 10.0,
) -> ChannelResult:
    """Post a message as the bot via ``chat.postMessage``."""
    client = AsyncWebClient(token=token, timeout=int(timeout))
    try:
        await client.chat_postMessage(
            channel=channel,
            text=text,
            thread_ts=thread_ts,
            blocks=blocks,
        )
    except SlackApiError as e:
        error = e.response.get("error", "unknown_error") if e.response is not None else str(e)
        logger.warning("slack_post_failed", channel_id=channel, error=error)
        return ChannelResult(channel="slack", success=False, error=f"Slack API error: {error}")
    except _TRANSPORT_ERRORS as e:
        logger.warning("slack_post_failed", channel_id=channel, error=str(e))
        return ChannelResult(
            channel="slack", success=False, error=f"Slack API error: {type(e).__name__}: {e}"
        )

    logger.info("slack_message_sent", channel_id=channel)
    return ChannelResult(channel="slack", success=True)

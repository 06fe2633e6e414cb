"""Slack Events API endpoint."""

from __future__ import annotations

import json
import re

import structlog
from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from slack_sdk.signature import SignatureVerifier

from comms.slack.block_builder import escape_slack
from comms.slack.client import post_slack_message
from core.dependencies import Services, get_services

logger = structlog.get_logger()

router = APIRouter(prefix="/webhook", tags=["slack"])

# "link channel_<userId>_<index>" as shown on the dashboard
_LINK_RE = re.compile(r"channel_([0-9a-fA-F-]+)_(\d+)")


@router.post("/slack")
async def slack_events(request: Request, services: Services = Depends(get_services)):
    settings = services.settings
    body = await request.body()

    if settings.slack_signing_secret:
        verifier = SignatureVerifier(settings.slack_signing_secret)
        if not verifier.is_valid_request(body, dict(request.headers)):
            logger.warning("slack_signature_invalid")
            return JSONResponse(status_code=401, content={"error": "Invalid signature"})
    else:
        logger.warning("slack_signature_check_disabled", hint="Set SLACK_SIGNING_SECRET in .env")

    try:
        data = json.loads(body)
    except ValueError:
        return JSONResponse(status_code=400, content={"error": "Invalid JSON"})

    if data.get("type") == "url_verification":
        logger.info("slack_url_verification")
        return {"challenge": data.get("challenge")}

    if data.get("type") != "event_callback":
        return {"ok": True}

    event = data.get("event") or {}
    # Never react to bot messages, including our own replies
    if event.get("bot_id") or event.get("subtype") == "bot_message":
        return {"ok": True}
    if event.get("type") not in ("message", "app_mention"):
        return {"ok": True}

    text = event.get("text") or ""
    channel_id = event.get("channel")
    if not channel_id:
        return {"ok": True}

    async def reply(message: str):
        return await post_slack_message(
            settings.slack_bot_token,
            channel_id,
            message,
            timeout=settings.http_timeout_seconds,
        )

    try:
        handled = await services.devflow.handle(
            text,
            channel="slack",
            chat_id=channel_id,
            reply=reply,
            message_id=event.get("ts"),
            escape=escape_slack,
        )
        if not handled and "link channel_" in text.lower():
            await _link_channel(services, text, channel_id, event.get("user"), reply)
    except Exception as e:
        logger.error("slack_event_failed", channel_id=channel_id, error=str(e))
        return JSONResponse(status_code=500, content={"error": "Internal Server Error"})

    return {"ok": True}


async def _link_channel(services: Services, text: str, channel_id: str, slack_user_id, reply) -> None:
    match = _LINK_RE.search(text)
    if not match:
        return
    user_id, index = match.group(1), int(match.group(2))
    name = await services.directory.link_slack_channel(user_id, index, channel_id, slack_user_id)
    if name is None:
        await reply(
            "❌ Could not find the channel to link.\n\nPlease check your dashboard and try again."
        )
        return
    await reply(
        "✅ *Channel Connected Successfully!*\n\n"
        f'"{escape_slack(name)}" is now linked to this Slack channel.\n\n'
        "🔔 You'll receive notifications here."
    )

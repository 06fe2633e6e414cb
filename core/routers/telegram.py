"""Telegram bot webhook (updates pushed by Telegram via ``setWebhook``)."""

from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from telegram.constants import ParseMode
from telegram.helpers import escape_markdown

from comms.telegram.client import send_telegram_message
from core.dependencies import Services, get_services

logger = structlog.get_logger()

router = APIRouter(prefix="/webhook", tags=["telegram"])

LINKED_TEXT = (
    "✅ Successfully connected your Telegram account! You will now receive notifications here."
)
LINK_FAILED_TEXT = "❌ Could not find a user account to link. Please try again from the dashboard."
GREETING_TEXT = (
    "👋 Hello! To connect your account, please use the link provided in your dashboard."
)


def _escape(text: str) -> str:
    return escape_markdown(text, version=1)


@router.post("/telegram")
async def telegram_update(request: Request, services: Services = Depends(get_services)):
    settings = services.settings
    try:
        update = await request.json()
        message = update.get("message") or {}
        text = message.get("text")
        chat_id = (message.get("chat") or {}).get("id")
        if not text or chat_id is None:
            return {"ok": True}
        chat_id = str(chat_id)

        async def reply(reply_text: str):
            return await send_telegram_message(
                settings.telegram_bot_token,
                chat_id,
                reply_text,
                parse_mode=ParseMode.MARKDOWN,
                timeout=settings.http_timeout_seconds,
            )

        if text.startswith("/start"):
            parts = text.split()
            if len(parts) < 2:
                await reply(GREETING_TEXT)
            elif await services.directory.link_telegram_chat(
                parts[1], chat_id, settings.telegram_bot_token or None
            ):
                logger.info("telegram_chat_linked_via_start", chat_id=chat_id)
                await reply(LINKED_TEXT)
            else:
                await reply(LINK_FAILED_TEXT)
            return {"ok": True}

        await services.devflow.handle(
            text,
            channel="telegram",
            chat_id=chat_id,
            reply=reply,
            message_id=str(message.get("message_id")) if message.get("message_id") else None,
            escape=_escape,
        )
    except Exception as e:
        logger.error("telegram_update_failed", error=str(e))
        return JSONResponse(status_code=500, content={"ok": False})

    return {"ok": True}

"""Thin wrapper around the Telegram Bot API ``sendMessage`` call."""

from __future__ import annotations

import structlog
from telegram import Bot
from telegram.constants import ParseMode
from telegram.error import TelegramError
from telegram.request import HTTPXRequest

from shared.schemas.notifications import ChannelResult

logger = structlog.get_logger()


async def send_telegram_message(
    bot_token: str,
    chat_id: str,
    text: str,
    *,
    parse_mode: str | None = ParseMode.MARKDOWN_V2,
    timeout: float = 10.0,
) -> ChannelResult:
    """Send *text* to *chat_id* with a short-lived bot client.

    The bot is not initialized (no ``getMe``), so this is exactly one request.
    """
    request = HTTPXRequest(
        connect_timeout=timeout,
        read_timeout=timeout,
        write_timeout=timeout,
        pool_timeout=timeout,
    )
    bot = Bot(token=bot_token, request=request, get_updates_request=request)
    try:
        await request.initialize()
        await bot.send_message(
            chat_id=chat_id,
            text=text,
            parse_mode=parse_mode,
            disable_web_page_preview=True,
        )
    except TelegramError as e:
        logger.warning("telegram_send_failed", chat_id=chat_id, error=str(e))
        return ChannelResult(
            channel="telegram",
            success=False,
            error=f"Telegram API error: {type(e).__name__}: {e}",
        )
    finally:
        await request.shutdown()

    logger.info("telegram_message_sent", chat_id=chat_id)
    return ChannelResult(channel="telegram", success=True)

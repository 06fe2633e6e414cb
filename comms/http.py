"""JSON POST helper for webhook-style channels (Discord, generic webhooks)."""

from __future__ import annotations

import httpx
import structlog

from shared.schemas.notifications import ChannelResult

logger = structlog.get_logger()

# Response bodies kept on failure results are cut to this many characters
ERROR_DETAIL_MAX_CHARS = 500


def truncate_detail(text: str, limit: int = ERROR_DETAIL_MAX_CHARS) -> str:
    if len(text) <= limit:
        return text
    return text[:limit] + "..."


async def post_json(
    url: str,
    body: dict,
    *,
    channel: str,
    timeout: float,
    error_prefix: str,
) -> ChannelResult:
    """POST *body* as JSON and convert the outcome to a ``ChannelResult``."""
    try:
        async with httpx.AsyncClient(timeout=timeout) as client:
            resp = await client.post(url, json=body)
    except httpx.HTTPError as e:
        logger.warning("channel_post_failed", channel=channel, error=str(e))
        return ChannelResult(
            channel=channel,
            success=False,
            error=f"{error_prefix}: {type(e).__name__}: {e}",
        )

    if resp.is_success:
        return ChannelResult(channel=channel, success=True, status_code=resp.status_code)

    detail = truncate_detail(resp.text or "")
    logger.warning(
        "channel_post_rejected",
        channel=channel,
        status_code=resp.status_code,
        detail=detail,
    )
    return ChannelResult(
        channel=channel,
        success=False,
        error=f"{error_prefix}: {resp.status_code} {resp.reason_phrase}",
        status_code=resp.status_code,
        detail=detail,
    )

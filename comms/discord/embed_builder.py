"""Discord embed rendering."""

from __future__ import annotations

from datetime import datetime, timezone

from shared.schemas.notifications import NotificationPayload

# #5865F2 (Discord Blurple)
EMBED_COLOR = 5814783

# Discord embed limits
TITLE_MAX_CHARS = 256
FIELD_VALUE_MAX_CHARS = 1024
MAX_FIELDS = 25

# Discord rejects empty field names/values
_BLANK = "\u200b"


def _clip(text: str, limit: int) -> str:
    return text if len(text) <= limit else text[: limit - 1] + "…"


def build_embed(notification: NotificationPayload, now: datetime | None = None) -> dict:
    """Map a notification onto a single Discord embed."""
    field_limit = MAX_FIELDS - 1 if notification.links else MAX_FIELDS
    fields = [
        {
            "name": _clip(f.label, TITLE_MAX_CHARS) or _BLANK,
            "value": _clip(f.value, FIELD_VALUE_MAX_CHARS) or _BLANK,
            "inline": True,
        }
        for f in notification.fields[:field_limit]
    ]

    # Links are folded into one trailing field
    if notification.links:
        links_text = "\n".join(f"[{link.label}]({link.url})" for link in notification.links)
        fields.append(
            {
                "name": "Links",
                "value": _clip(links_text, FIELD_VALUE_MAX_CHARS),
                "inline": False,
            }
        )

    embed: dict = {
        "title": _clip(f"{notification.emoji} {notification.title}".strip(), TITLE_MAX_CHARS),
        "color": EMBED_COLOR,
        "fields": fields,
        "footer": {"text": f"Source: {notification.source or 'System'}"},
        "timestamp": (now or datetime.now(timezone.utc)).isoformat(),
    }
    if notification.summary:
        embed["description"] = notification.summary
    if notification.payload_url:
        embed["url"] = notification.payload_url
    return embed

"""Render notifications as Telegram MarkdownV2 text."""

from __future__ import annotations

from telegram.helpers import escape_markdown

from shared.schemas.notifications import NotificationPayload

# Telegram message limit is 4096
MESSAGE_MAX_CHARS = 4096
_TRUNCATED = "\n\\.\\.\\."


def esc(text: str) -> str:
    """Escape MarkdownV2 special characters in plain text."""
    return escape_markdown(text or "", version=2)


def esc_url(url: str) -> str:
    """Escape a URL for use inside a MarkdownV2 ``(...)`` link target."""
    return escape_markdown(url or "", version=2, entity_type="text_link")


def format_notification(notification: NotificationPayload) -> str:
    """Build the MarkdownV2 message for a notification.

    With a summary the message is just the summary plus links; without one it
    is the title followed by every field.
    """
    lines: list[str] = []

    if notification.summary:
        lines.append(esc(notification.summary))
        lines.append("")
    else:
        lines.append(f"{notification.emoji} *{esc(notification.title)}*".lstrip())
        lines.append("")
        for field in notification.fields:
            lines.append(f"{esc(field.label)}: {esc(field.value)}")

    if notification.links:
        lines.append("")
        lines.append("🔗 *Links:*")
        for link in notification.links:
            lines.append(f"  • [{esc(link.label)}]({esc_url(link.url)})")

    lines.append("")
    lines.append(f"📄 [View Full Payload]({esc_url(notification.payload_url)})")

    message = "\n".join(lines)
    if len(message) > MESSAGE_MAX_CHARS:
        # Never leave a dangling escape backslash at the cut
        message = message[: MESSAGE_MAX_CHARS - len(_TRUNCATED)].rstrip("\\") + _TRUNCATED
    return message

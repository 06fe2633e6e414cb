import re
from typing import Any, Dict, List

from shared.schemas.notifications import NotificationPayload

# Slack sections accept at most 10 fields
SECTION_FIELD_LIMIT = 10
# plain_text limit for header blocks
HEADER_CHAR_LIMIT = 150


def escape_slack(text: str) -> str:
    """Escape the three characters Slack mrkdwn treats as control characters.

    https://api.slack.com/reference/surfaces/formatting#escaping
    """
    if not text:
        return ""
    return text.replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;")


class BlockBuilder:
    """Convert notifications to Slack Block Kit payloads.

    https://api.slack.com/block-kit
    """

    @staticmethod
    def notification_blocks(notification: NotificationPayload) -> List[Dict[str, Any]]:
        """Header, summary or fields, links context and a payload button."""
        blocks: List[Dict[str, Any]] = []

        header = f"{notification.emoji or '🔔'} {notification.title}"
        if len(header) > HEADER_CHAR_LIMIT:
            header = header[: HEADER_CHAR_LIMIT - 1] + "…"
        blocks.append(
            {
                "type": "header",
                "text": {"type": "plain_text", "text": header, "emoji": True},
            }
        )

        if notification.summary:
            blocks.append(
                {
                    "type": "section",
                    "text": {"type": "mrkdwn", "text": escape_slack(notification.summary)},
                }
            )
        elif notification.fields:
            fields = [
                {
                    "type": "mrkdwn",
                    "text": f"*{escape_slack(f.label)}*\n{escape_slack(f.value)}",
                }
                for f in notification.fields[:SECTION_FIELD_LIMIT]
            ]
            blocks.append({"type": "section", "fields": fields})

        if notification.links:
            link_texts = "  |  ".join(
                f"<{link.url}|{escape_slack(link.label)}>" for link in notification.links
            )
            blocks.append(
                {
                    "type": "context",
                    "elements": [{"type": "mrkdwn", "text": f"🔗 {link_texts}"}],
                }
            )

        if notification.payload_url:
            blocks.append(
                {
                    "type": "actions",
                    "elements": [
                        {
                            "type": "button",
                            "text": {
                                "type": "plain_text",
                                "text": "View Full Payload",
                                "emoji": True,
                            },
                            "url": notification.payload_url,
                        }
                    ],
                }
            )

        return blocks

    @staticmethod
    def fallback_text(notification: NotificationPayload, max_len: int = 200) -> str:
        """Plain-text notification fallback shown by clients that can't render blocks."""
        text = notification.summary or f"{notification.emoji} {notification.title}".strip()
        return BlockBuilder._plain_text_fallback(text, max_len)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _plain_text_fallback(text: str, max_len: int = 200) -> str:
        """Strip markdown formatting for the plain-text notification fallback."""
        if not text:
            return ""
        plain = text
        # Convert links to just the label
        plain = re.sub(r"\[(.*?)\]\(.*?\)", r"\1", plain)
        # Strip bold/italic markers
        plain = re.sub(r"\*{1,2}(.*?)\*{1,2}", r"\1", plain)
        # Collapse whitespace
        plain = re.sub(r"\n{2,}", "\n", plain).strip()
        if len(plain) > max_len:
            plain = plain[: max_len - 1] + "…"
        return plain

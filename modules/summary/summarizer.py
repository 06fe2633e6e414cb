"""One-line AI summaries of webhook events."""

from __future__ import annotations

import json
from typing import Any

import structlog
from openai import AsyncOpenAI, OpenAIError

from shared.config import Settings

logger = structlog.get_logger()

SYSTEM_PROMPT = """You are a technical assistant for a developer notification tool.
Your job is to summarize a webhook event into a SINGLE, concise line of text.
Start with an appropriate emoji.
Focus on the "what" and "who".
Do not use markdown bold/italic, just plain text with an emoji.

Examples:
- 🚀 Deploy "web-app" successful by @user
- 🐛 Issue #123 "Fix login bug" opened by @user
- ⭐️ Starred by @user

Return ONLY the summary line, nothing else."""


class EventSummarizer:
    """Summarizes events through any OpenAI-compatible chat completions API."""

    def __init__(self, settings: Settings, client: AsyncOpenAI | None = None):
        self.settings = settings
        self._client = client

    @property
    def enabled(self) -> bool:
        return bool(self._client or self.settings.summary_api_key)

    def _get_client(self) -> AsyncOpenAI:
        if self._client is None:
            self._client = AsyncOpenAI(
                api_key=self.settings.summary_api_key,
                base_url=self.settings.summary_base_url,
                timeout=self.settings.http_timeout_seconds,
            )
        return self._client

    def build_prompt(self, source: str, event_type: str, payload: Any) -> str:
        payload_json = json.dumps(payload, indent=2, default=str)
        return (
            f"Event Source: {source}\n"
            f"Event Type: {event_type}\n"
            f"Payload: {payload_json[: self.settings.summary_payload_max_chars]}"
        )

    async def summarize(self, source: str, event_type: str | None, payload: Any) -> str | None:
        """Return the summary line, or None when disabled or on any failure."""
        if not self.enabled:
            logger.debug("event_summary_disabled")
            return None

        try:
            response = await self._get_client().chat.completions.create(
                model=self.settings.summary_model,
                messages=[
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": self.build_prompt(source, event_type or "unknown", payload)},
                ],
                temperature=0.3,
            )
        except OpenAIError as e:
            logger.warning("event_summary_failed", source=source, error=str(e))
            return None

        content = response.choices[0].message.content if response.choices else None
        summary = (content or "").strip()
        return summary or None

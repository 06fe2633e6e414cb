"""Analyzer interface and text helpers shared by all analyzers."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Mapping

from shared.schemas.notifications import NotificationPayload

# Chat messages stay short: free text from payloads is cut to this length
TEXT_MAX_CHARS = 50


@dataclass(frozen=True)
class AnalyzerResult:
    source: str
    notification: NotificationPayload


class WebhookAnalyzer(ABC):
    """Classifies an inbound webhook into a normalized notification.

    Implementations must be pure: the same payload and headers always give
    the same result.
    """

    name: str

    @abstractmethod
    def can_handle(self, payload: Any, headers: Mapping[str, str]) -> bool:
        """Whether this analyzer recognises the request."""

    @abstractmethod
    def analyze(self, payload: Any, headers: Mapping[str, str]) -> AnalyzerResult:
        """Build the notification. Must not raise on unexpected payload shapes."""


def truncate(text: Any, limit: int = TEXT_MAX_CHARS) -> str:
    """Cut *text* to *limit* characters, ending in ``...`` when shortened."""
    text = as_text(text)
    if len(text) <= limit:
        return text
    return text[: limit - 3] + "..."


def humanize(event_type: str) -> str:
    """``workflow_job`` -> ``Workflow Job``."""
    return " ".join(word[:1].upper() + word[1:] for word in event_type.replace("_", " ").split(" "))


def as_text(value: Any) -> str:
    """Payload value as display text. ``None`` is empty, non-strings are ``str()``-ed."""
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


def as_mapping(value: Any) -> Mapping:
    return value if isinstance(value, Mapping) else {}


def as_list(value: Any) -> list:
    return value if isinstance(value, list) else []


def dig(data: Any, *keys: str) -> Any:
    """Safe nested lookup: ``dig(p, "repository", "full_name")``."""
    current = data
    for key in keys:
        if not isinstance(current, Mapping):
            return None
        current = current.get(key)
    return current

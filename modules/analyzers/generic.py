"""Fallback analyzer for sources without a dedicated analyzer."""

from __future__ import annotations

from typing import Any, Mapping

from modules.analyzers.base import AnalyzerResult, WebhookAnalyzer, humanize, truncate
from shared.schemas.notifications import NotificationField, NotificationLink, NotificationPayload

MAX_FIELDS = 10
_LINK_KEYS = ("url", "html_url")


class GenericAnalyzer(WebhookAnalyzer):
    """Lists the top-level scalar values of any JSON payload."""

    name = "generic"

    def __init__(self, source: str = "webhook"):
        self.source = source

    def can_handle(self, payload: Any, headers: Mapping[str, str]) -> bool:
        return True

    def analyze(self, payload: Any, headers: Mapping[str, str]) -> AnalyzerResult:
        p = payload if isinstance(payload, Mapping) else {}

        fields: list[NotificationField] = []
        links: list[NotificationLink] = []
        for key, value in p.items():
            if key in _LINK_KEYS and isinstance(value, str) and value:
                links.append(NotificationLink(label=humanize(key), url=value))
                continue
            if len(fields) >= MAX_FIELDS:
                continue
            if isinstance(value, (str, int, float, bool)):
                fields.append(NotificationField(label=humanize(str(key)), value=truncate(str(value))))

        event_type = p.get("event") or p.get("type") or p.get("action")
        notification = NotificationPayload(
            title=f"{humanize(self.source)} Event",
            emoji="📡",
            fields=fields,
            links=links,
            source=self.source,
            event_type=event_type if isinstance(event_type, str) else None,
            service=_service_name(p),
        )
        return AnalyzerResult(source=self.source, notification=notification)


def _service_name(p: Mapping) -> str | None:
    service = p.get("service")
    if isinstance(service, Mapping):
        service = service.get("name")
    return service if isinstance(service, str) else None

"""Webhook analyzers: turn raw developer-platform webhooks into notifications."""

from __future__ import annotations

from typing import Any, Mapping

from modules.analyzers.base import AnalyzerResult, WebhookAnalyzer
from modules.analyzers.generic import GenericAnalyzer
from modules.analyzers.github import GitHubAnalyzer

ANALYZERS: list[WebhookAnalyzer] = [GitHubAnalyzer()]


def analyze_webhook(
    payload: Any, headers: Mapping[str, str], source_hint: str = "webhook"
) -> AnalyzerResult:
    """Run the first analyzer that recognises the request.

    Header names are matched lower-cased. Requests no analyzer claims are
    described by ``GenericAnalyzer`` under *source_hint*.
    """
    lowered = {k.lower(): v for k, v in headers.items()}
    for analyzer in ANALYZERS:
        if analyzer.can_handle(payload, lowered):
            return analyzer.analyze(payload, lowered)
    return GenericAnalyzer(source_hint or "webhook").analyze(payload, lowered)


__all__ = ["ANALYZERS", "AnalyzerResult", "WebhookAnalyzer", "analyze_webhook"]

"""Per-channel webhook allow-list."""

from __future__ import annotations

from shared.schemas.channels import SourceRule, WebhookRules
from shared.schemas.notifications import NotificationPayload


def _rule_matches(rule: SourceRule, notification: NotificationPayload) -> bool:
    if not rule.enabled or rule.type != notification.source:
        return False
    filters = rule.filters
    if filters.repositories and notification.repository not in filters.repositories:
        return False
    if filters.event_types and notification.event_type not in filters.event_types:
        return False
    if filters.services and notification.service not in filters.services:
        return False
    return True


def matches_webhook_rules(
    rules: WebhookRules | None, notification: NotificationPayload
) -> bool:
    """Whether a channel with *rules* should receive *notification*.

    A channel without rules (or with an empty source list) receives
    everything. Otherwise at least one enabled source rule must name the
    notification's source, and each non-empty filter list on that rule must
    contain the matching notification attribute.
    """
    if rules is None or not rules.sources:
        return True
    return any(_rule_matches(rule, notification) for rule in rules.sources)

"""Inbound developer-platform webhooks."""

from __future__ import annotations

import json

import structlog
from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import JSONResponse

from core.dependencies import Services, get_services
from core.signatures import verify_github_signature
from modules.analyzers import analyze_webhook
from shared.schemas.notifications import DispatchResult

logger = structlog.get_logger()

router = APIRouter(prefix="/webhook", tags=["webhooks"])


@router.post("/{source}")
async def receive_webhook(
    source: str,
    request: Request,
    user_id: str | None = Query(default=None, alias="userId"),
    services: Services = Depends(get_services),
):
    """Analyze, store, route and dispatch one webhook.

    Internal failures are reported as a generic 500 so no details leak to
    the sender.
    """
    settings = services.settings
    body = await request.body()
    headers = {k.lower(): v for k, v in request.headers.items()}

    is_github = source == "github" or "x-github-event" in headers
    if is_github and settings.github_webhook_secret:
        if not verify_github_signature(
            settings.github_webhook_secret, body, headers.get("x-hub-signature-256")
        ):
            logger.warning("webhook_signature_invalid", source=source)
            return JSONResponse(status_code=401, content={"error": "Invalid signature"})

    event_id: str | None = None
    try:
        payload = json.loads(body)

        result = analyze_webhook(payload, headers, source)
        notification = result.notification
        event_type = notification.event_type or source

        event_id = await services.events.record(result.source, event_type, payload)
        payload_url = f"{settings.public_base_url.rstrip('/')}/payloads/{event_id}"
        notification.payload_url = payload_url

        logger.info(
            "webhook_received",
            source=result.source,
            source_hint=source,
            event_type=event_type,
            payload_id=event_id,
        )

        if result.source == "github" and headers.get("x-github-event") == "installation":
            await services.installations.handle_event(payload, user_id)

        recipient = await services.resolver.resolve(payload, user_id)
        if recipient is None:
            dispatch = DispatchResult(skipped_reason="no_recipient")
        else:
            await services.resolver.add_summary(recipient, notification, payload)
            dispatch = await services.notifications.dispatch(recipient.user, notification)

        await services.events.mark(event_id, "processed" if dispatch.results else "ignored")

        return {
            "success": True,
            "source": result.source,
            "source_hint": source,
            "payload_id": event_id,
            "payload_url": payload_url,
            "sent": dispatch.delivered,
            "channels": [r.model_dump(exclude_none=True) for r in dispatch.results],
        }
    except Exception as e:
        logger.error("webhook_processing_failed", source=source, error=str(e))
        if event_id is not None:
            try:
                await services.events.mark(event_id, "failed", str(e))
            except Exception as mark_error:
                logger.error("webhook_event_mark_failed", payload_id=event_id, error=str(mark_error))
        return JSONResponse(status_code=500, content={"error": "Failed to process webhook"})

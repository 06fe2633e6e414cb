"""FastAPI application for the webhook relay service."""

from __future__ import annotations

import structlog
from fastapi import FastAPI

from core.dependencies import build_services, set_services
from core.routers import copilot, payloads, slack, telegram, webhooks
from modules.tasks.store import connect_task_redis
from shared.config import get_settings
from shared.database import get_engine, get_session_factory, init_models
from shared.schemas.common import HealthResponse

structlog.configure(
    processors=[
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.JSONRenderer(),
    ],
)

logger = structlog.get_logger()

app = FastAPI(title="Hookrelay", version="1.0.0")

# Chat platform endpoints must be registered before the /webhook/{source} catch-all
app.include_router(slack.router)
app.include_router(telegram.router)
app.include_router(webhooks.router)
app.include_router(payloads.router)
app.include_router(copilot.router)

settings = get_settings()


@app.on_event("startup")
async def startup():
    """Initialize storage and services on startup."""
    logger.info("starting_relay")

    await init_models(get_engine())

    redis_client = connect_task_redis(settings) if settings.task_store_backend == "redis" else None
    app.state.redis = redis_client
    services = build_services(settings, get_session_factory(), redis_client)
    set_services(services)

    logger.info(
        "relay_started",
        channels=services.registry.types,
        task_store=settings.task_store_backend,
    )


@app.on_event("shutdown")
async def shutdown():
    set_services(None)
    redis_client = getattr(app.state, "redis", None)
    if redis_client is not None:
        await redis_client.aclose()
        app.state.redis = None
    await get_engine().dispose()


@app.get("/health", response_model=HealthResponse)
async def health():
    """Health check endpoint."""
    return HealthResponse(status="ok")

"""Devflow endpoints used by the agent host."""

from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from core.dependencies import Services, get_services, require_api_secret
from modules.devflow.forwarder import AgentHostError
from shared.schemas.tasks import DevflowRequest, TaskUpdate

logger = structlog.get_logger()

router = APIRouter(
    prefix="/copilot",
    tags=["copilot"],
    dependencies=[Depends(require_api_secret)],
)


@router.post("/command")
async def forward_command(request: DevflowRequest, services: Services = Depends(get_services)):
    """Record where the command came from and hand it to the agent host."""
    try:
        await services.forwarder.forward(request)
    except AgentHostError as e:
        return JSONResponse(status_code=502, content={"error": str(e)})

    return {
        "ok": True,
        "taskId": request.task_id,
        "message": "Command forwarded to Agent Host",
    }


@router.post("/task-update")
async def task_update(update: TaskUpdate, services: Services = Depends(get_services)):
    logger.info(
        "task_update",
        task_id=update.task_id,
        status=update.status,
        step=update.step,
    )
    outcome = await services.relay.receive_update(update)
    if outcome.status == "not_found":
        return JSONResponse(status_code=404, content={"error": "Task not found"})
    if outcome.status == "failed":
        return JSONResponse(status_code=502, content={"ok": False, "error": outcome.error})
    return {"ok": True}

"""Forwards devflow commands to the agent host."""

from __future__ import annotations

import httpx
import structlog

from modules.tasks.relay import TaskUpdateRelay
from shared.config import Settings
from shared.schemas.tasks import DevflowRequest

logger = structlog.get_logger()


class AgentHostError(Exception):
    """The agent host rejected the command or could not be reached."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class DevflowForwarder:
    def __init__(self, relay: TaskUpdateRelay, settings: Settings):
        self.relay = relay
        self.settings = settings

    @property
    def command_url(self) -> str:
        return f"{self.settings.agent_host_url.rstrip('/')}/command"

    async def forward(self, request: DevflowRequest, token: str | None = None) -> None:
        """Remember where *request* came from, then hand it to the agent host.

        The mapping is stored first so that progress posted back by a fast
        agent host can always be routed.
        """
        source = request.source
        await self.relay.store_task_mapping(
            request.task_id,
            source.chat_id,
            source.channel,
            token=token,
            thread_ts=source.message_id if source.channel == "slack" else None,
        )

        logger.info(
            "devflow_command_forwarding",
            task_id=request.task_id,
            intent=request.payload.intent,
            repo=request.payload.repo,
        )
        try:
            async with httpx.AsyncClient(timeout=self.settings.http_timeout_seconds) as client:
                resp = await client.post(
                    self.command_url,
                    json=request.model_dump(mode="json", by_alias=True, exclude_none=True),
                )
        except httpx.HTTPError as e:
            logger.error("agent_host_unreachable", task_id=request.task_id, error=str(e))
            raise AgentHostError(f"Agent Host unreachable: {type(e).__name__}") from e

        if resp.is_error:
            logger.error(
                "agent_host_rejected_command",
                task_id=request.task_id,
                status_code=resp.status_code,
            )
            raise AgentHostError(f"Agent Host error: {resp.status_code}", resp.status_code)

        logger.info("devflow_command_accepted", task_id=request.task_id)

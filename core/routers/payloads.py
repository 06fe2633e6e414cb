"""Stored payload viewer (target of "View Full Payload" links)."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from core.dependencies import Services, get_services

router = APIRouter(prefix="/payloads", tags=["payloads"])


@router.get("/{payload_id}")
async def get_payload(payload_id: str, services: Services = Depends(get_services)) -> dict:
    payload = await services.events.get_payload(payload_id)
    if payload is None:
        raise HTTPException(status_code=404, detail="Payload not found")
    return payload

from __future__ import annotations
from fastapi import APIRouter, HTTPException, Depends, status, Query
from .models import (
    ConnectionResult, ErrorResponse, HealthResponse, ReloadResult,
    SliderMoveEvent, SliderValue,
)
from typing import List
from .service import SliderService


router = APIRouter()
svc: SliderService | None = None


def get_service() -> SliderService:
    global svc
    if svc is None:
        svc = SliderService()
    return svc


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health check",
    description="Returns service health status, operation mode (sim or real) and connection state",
    tags=["Health"]
)
def health(service: SliderService = Depends(get_service)) -> HealthResponse:
    """Health check endpoint."""
    return HealthResponse(status="ok", mode=service.mode, connected=service.connected)


@router.get(
    "/sliders",
    response_model=List[SliderValue],
    summary="List sliders",
    description="Returns the last reported value of every slider (null if not observed yet)",
    tags=["Sliders"]
)
def list_sliders(service: SliderService = Depends(get_service)) -> List[SliderValue]:
    return service.list_sliders()


@router.post(
    "/connection/start",
    response_model=ConnectionResult,
    status_code=status.HTTP_200_OK,
    summary="Start polling",
    responses={
        200: {"description": "Connection started"},
        409: {"model": ErrorResponse, "description": "Connection already active"},
    },
    tags=["Connection"]
)
def start_connection(service: SliderService = Depends(get_service)) -> ConnectionResult:
    """Start polling the slider device."""
    ok, msg = service.start()
    if not ok:
        raise HTTPException(status_code=409, detail=msg)
    return ConnectionResult(ok=True, message=msg)


@router.post(
    "/connection/stop",
    response_model=ConnectionResult,
    summary="Stop polling",
    description="Stops polling and waits for the poll loop to exit. Does nothing when not connected.",
    tags=["Connection"]
)
def stop_connection(service: SliderService = Depends(get_service)) -> ConnectionResult:
    ok, msg = service.stop()
    return ConnectionResult(ok=ok, message=msg)


@router.get(
    "/events",
    response_model=List[SliderMoveEvent],
    summary="Pending slider move events",
    description="Drains slider move events received since the last call",
    tags=["Sliders"]
)
def get_events(
    limit: int = Query(default=100, ge=1, le=1000, description="Maximum number of events to return"),
    service: SliderService = Depends(get_service),
) -> List[SliderMoveEvent]:
    return service.recent_events(limit)


@router.post(
    "/config/reload",
    response_model=ReloadResult,
    summary="Reload slider config",
    responses={
        200: {"description": "Config reloaded, sliders will be re-sent"},
        400: {"model": ErrorResponse, "description": "Config file missing, unreadable or invalid"},
    },
    tags=["Config"]
)
def reload_config(service: SliderService = Depends(get_service)) -> ReloadResult:
    """Re-read the slider config file."""
    if not service.reload_config():
        raise HTTPException(status_code=400, detail="slider config could not be reloaded")
    return ReloadResult(ok=True, slider_count=service.config_store.current.slider_count)

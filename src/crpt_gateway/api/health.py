import logging

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field

from crpt_gateway.services.submission_gateway import GatewayMisconfigured, get_gateway

logger = logging.getLogger(__name__)
router = APIRouter(tags=["service"])


class HealthResponse(BaseModel):
    status: str = Field(
        ...,
        json_schema_extra={"example": "ok"},
    )


class LimiterHealthResponse(BaseModel):
    status: str = Field(..., json_schema_extra={"example": "ok"})
    capacity: int = Field(..., description="Permits per window.", json_schema_extra={"example": 10})
    available: int = Field(..., description="Permits left in the current window.", json_schema_extra={"example": 7})
    window_s: float = Field(..., description="Window length in seconds.", json_schema_extra={"example": 60.0})
    waiting: int = Field(..., description="Callers blocked waiting for a permit.", json_schema_extra={"example": 0})
    windows_elapsed: int = Field(..., json_schema_extra={"example": 3})


@router.get("/health", response_model=HealthResponse, summary="Service health")
def health() -> HealthResponse:
    return HealthResponse(status="ok")


@router.get(
    "/health/limiter",
    response_model=LimiterHealthResponse,
    summary="Submission rate limiter state",
    description="Reports the current fixed window of the CRPT submission limiter.",
    responses={
        500: {"description": "Service misconfiguration (invalid rate limit settings)."},
    },
)
def health_limiter() -> LimiterHealthResponse:
    try:
        snap = get_gateway().limiter.snapshot()
    except GatewayMisconfigured as exc:
        logger.exception("Service misconfiguration")
        raise HTTPException(status_code=500, detail=str(exc)) from exc

    return LimiterHealthResponse(
        status="shutdown" if snap.closed else "ok",
        capacity=snap.capacity,
        available=snap.available,
        window_s=snap.window_s,
        waiting=snap.waiting,
        windows_elapsed=snap.windows_elapsed,
    )

"""Health check."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from src.api.dependencies import get_registry
from src.api.registry import ServiceRegistry

router = APIRouter(prefix="/api/v1", tags=["health"])

VERSION = "0.1.0"


class HealthResponse(BaseModel):
    status: str
    version: str
    uptime_sec: int
    rpc_endpoints: int
    tokens_listed: int
    enriching: bool


@router.get("/health", response_model=HealthResponse)
async def health_check(reg: ServiceRegistry = Depends(get_registry)) -> HealthResponse:
    """Report whether services are bound and how many endpoints rotate."""
    ready = reg.pool is not None and reg.profiles is not None and reg.board is not None
    return HealthResponse(
        status="ok" if ready else "starting",
        version=VERSION,
        uptime_sec=reg.uptime_sec,
        rpc_endpoints=len(reg.pool) if reg.pool is not None else 0,
        tokens_listed=len(reg.board.listings) if reg.board is not None else 0,
        enriching=reg.board.enriching if reg.board is not None else False,
    )

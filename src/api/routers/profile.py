"""Wallet profile endpoint: holdings, trade history, created tokens, stats."""

from fastapi import APIRouter, Depends, HTTPException, Request, status

from config.settings import settings
from src.api.dependencies import get_profiles, valid_address
from src.api.limiter import limiter
from src.parsers.launchpad.models import ProfileSnapshot
from src.parsers.profile import ProfileFetcher

router = APIRouter(prefix="/api/v1/profile", tags=["profile"])


@router.get("/{address}", response_model=ProfileSnapshot)
@limiter.limit(settings.profile_rate_limit)
async def get_profile(
    request: Request,
    address: str = Depends(valid_address),
    profiles: ProfileFetcher = Depends(get_profiles),
) -> ProfileSnapshot:
    """Run one full profile cycle for ``address``.

    Upstream failure of the curve listing or trade history comes back as a
    snapshot with ``error`` set and empty derived fields.
    """
    snapshot = await profiles.fetch(address)
    if snapshot is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Profile fetch cancelled",
        )
    return snapshot

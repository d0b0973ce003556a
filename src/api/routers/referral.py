"""Referral stats for a wallet."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status
from loguru import logger
from pydantic import BaseModel

from config.settings import settings
from src.api.dependencies import get_pool, valid_address
from src.parsers.launchpad.client import get_referral_stats
from src.parsers.launchpad.pda import referral_pda
from src.parsers.rpc.exceptions import RpcError
from src.parsers.rpc.pool import RpcPool

router = APIRouter(prefix="/api/v1/referral", tags=["referral"])


class ReferralResponse(BaseModel):
    referrer: str
    referral_account: str
    registered: bool
    total_earned_sol: float = 0.0
    trade_count: int = 0
    claimable_sol: float = 0.0


@router.get("/{address}", response_model=ReferralResponse)
async def referral_stats(
    address: str = Depends(valid_address),
    pool: RpcPool = Depends(get_pool),
) -> ReferralResponse:
    program_id = settings.launchpad_program_id
    try:
        referral = await get_referral_stats(pool, address, program_id)
    except RpcError as e:
        logger.warning(f"[REFERRAL] Lookup failed for {address[:12]}: {e}")
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Upstream RPC unavailable",
        ) from e

    if referral is None:
        return ReferralResponse(
            referrer=address,
            referral_account=referral_pda(address, program_id),
            registered=False,
        )
    return ReferralResponse(
        referrer=address,
        referral_account=referral.address,
        registered=True,
        total_earned_sol=referral.total_earned_sol,
        trade_count=referral.trade_count,
        claimable_sol=referral.claimable_sol,
    )

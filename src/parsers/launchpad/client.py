"""Account reads for the launchpad program on top of the pooled RPC client."""

from loguru import logger

from src.parsers.launchpad.constants import (
    BONDING_CURVE_DISCRIMINATOR,
    LAMPORTS_PER_SOL,
    PROGRAM_ID,
    REFERRAL_SIZE,
)
from src.parsers.launchpad.decoder import (
    decode_bonding_curve,
    decode_referral,
    decode_token_account,
)
from src.parsers.launchpad.models import CurveSnapshot, ReferralAccount, TokenBalance
from src.parsers.launchpad.pda import referral_pda
from src.parsers.rpc.pool import RpcPool


class LaunchpadReader:
    """Reads curve, referral and balance state. RPC errors propagate to the caller."""

    def __init__(self, pool: RpcPool, program_id: str = PROGRAM_ID) -> None:
        self._pool = pool
        self.program_id = program_id

    async def list_bonding_curves(self) -> list[CurveSnapshot]:
        """Every BondingCurve account owned by the program."""
        accounts = await self._pool.next().get_program_accounts(
            self.program_id, discriminator=BONDING_CURVE_DISCRIMINATOR
        )
        curves = []
        for acc in accounts:
            curve = decode_bonding_curve(acc.pubkey, acc.data)
            if curve is not None:
                curves.append(curve)
        if len(curves) < len(accounts):
            logger.debug(f"[CURVE] {len(accounts) - len(curves)} undecodable curve accounts")
        return curves

    async def get_token_balances(self, owner: str) -> list[TokenBalance]:
        """Non-zero SPL balances of ``owner`` (all mints)."""
        accounts = await self._pool.next().get_token_accounts_by_owner(owner)
        balances = []
        for acc in accounts:
            bal = decode_token_account(acc.data)
            if bal is not None and bal.amount_raw > 0:
                balances.append(bal)
        return balances

    async def get_sol_balance(self, address: str) -> float:
        lamports = await self._pool.next().get_balance(address)
        return lamports / LAMPORTS_PER_SOL

    async def get_referral(self, referrer: str) -> ReferralAccount | None:
        """Referral account for a wallet, or None if it never registered."""
        address = referral_pda(referrer, self.program_id)
        account = await self._pool.next().get_account_info(address)
        if account is None:
            return None
        return decode_referral(address, account.data)

    async def referral_rent_lamports(self) -> int:
        """Rent-exempt deposit needed to register a referral account."""
        return await self._pool.next().get_minimum_balance_for_rent_exemption(REFERRAL_SIZE)

    async def referral_claimable_lamports(self, referral: ReferralAccount) -> int:
        """Lamports the referrer can withdraw: PDA balance minus the rent deposit."""
        balance = await self._pool.next().get_balance(referral.address)
        return max(0, balance - await self.referral_rent_lamports())


async def get_referral_stats(
    pool: RpcPool, referrer: str, program_id: str = PROGRAM_ID
) -> ReferralAccount | None:
    """Earnings, trade count and claimable balance of ``referrer``, None if not registered."""
    reader = LaunchpadReader(pool, program_id)
    referral = await reader.get_referral(referrer)
    if referral is None:
        return None

    claimable = await reader.referral_claimable_lamports(referral)
    logger.debug(
        f"[REFERRAL] {referrer[:12]}: {referral.trade_count} trades, "
        f"{referral.total_earned_sol:.4f} SOL earned, {claimable} lamports claimable"
    )
    return referral.model_copy(update={"claimable": claimable})

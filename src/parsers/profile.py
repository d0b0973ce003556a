"""Wallet profile: one fetch cycle plus the pure snapshot builder.

The cycle reads everything first, then ``compute_snapshot`` derives the
visible profile in one step. Only the curve listing and the trade-history
reads are essential; token balances, native balance and metadata degrade
to empty defaults.
"""

import time
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field

from loguru import logger

from config.settings import Settings
from src.parsers.activity import build_activity_map
from src.parsers.launchpad.client import LaunchpadReader
from src.parsers.launchpad.constants import GRADUATION_THRESHOLD_LAMPORTS
from src.parsers.launchpad.decoder import decode_trade_events
from src.parsers.launchpad.models import (
    CurveSnapshot,
    ProfileSnapshot,
    ProfileTrade,
    TokenBalance,
    TokenMetadata,
    TradeEvent,
)
from src.parsers.launchpad.pda import bonding_curve_pda
from src.parsers.metadata import display_name, display_symbol, fetch_batch_metadata
from src.parsers.portfolio import aggregate, build_created_tokens, native_holding
from src.parsers.rpc.exceptions import RpcError
from src.parsers.rpc.pool import RpcPool
from src.parsers.signatures import collect_signatures
from src.parsers.task_context import CycleCancelled, TaskContext
from src.parsers.tx_fetcher import fetch_all

PROFILE_ERROR = "Failed to load profile data"


@dataclass
class ProfileReads:
    """Raw inputs of one profile cycle."""

    curves: list[CurveSnapshot]
    events: list[TradeEvent]
    balances: list[TokenBalance] = field(default_factory=list)
    sol_balance: float = 0.0
    metadata: dict[str, TokenMetadata] = field(default_factory=dict)


def enrich_trades(
    events: Sequence[TradeEvent], metadata: Mapping[str, TokenMetadata]
) -> list[ProfileTrade]:
    trades = []
    for event in events:
        meta = metadata.get(event.mint)
        trades.append(
            ProfileTrade(
                **event.model_dump(),
                token_name=display_name(event.mint, meta),
                token_symbol=display_symbol(event.mint, meta),
                token_image=meta.image if meta else None,
            )
        )
    return trades


def compute_snapshot(
    address: str,
    reads: ProfileReads,
    *,
    now: int | None = None,
    threshold_lamports: int = GRADUATION_THRESHOLD_LAMPORTS,
) -> ProfileSnapshot:
    """Derive the full profile for ``address`` from one cycle's reads."""
    curves_by_mint = {c.mint: c for c in reads.curves}
    launchpad_balances = [b for b in reads.balances if b.mint in curves_by_mint]

    holdings, stats = aggregate(
        reads.events,
        curves_by_mint,
        launchpad_balances,
        creator=address,
        metadata=reads.metadata,
    )
    if reads.sol_balance > 0:
        holdings.insert(0, native_holding(reads.sol_balance))

    return ProfileSnapshot(
        address=address,
        holdings=holdings,
        trades=enrich_trades(reads.events, reads.metadata),
        created_tokens=build_created_tokens(
            reads.curves, address, reads.metadata, threshold_lamports=threshold_lamports
        ),
        stats=stats,
        activity_map=build_activity_map(reads.events, now=now),
    )


def error_snapshot(address: str, message: str = PROFILE_ERROR) -> ProfileSnapshot:
    return ProfileSnapshot(address=address, error=message)


class ProfileFetcher:
    """Runs profile cycles against a shared RPC pool."""

    def __init__(self, pool: RpcPool, settings: Settings) -> None:
        self._pool = pool
        self._settings = settings
        self._reader = LaunchpadReader(pool, settings.launchpad_program_id)

    async def _token_balances(self, address: str) -> list[TokenBalance]:
        try:
            return await self._reader.get_token_balances(address)
        except RpcError as e:
            logger.warning(f"[PROFILE] Token accounts unavailable for {address[:12]}: {e}")
            return []

    async def _sol_balance(self, address: str) -> float:
        try:
            return await self._reader.get_sol_balance(address)
        except RpcError as e:
            logger.warning(f"[PROFILE] SOL balance unavailable for {address[:12]}: {e}")
            return 0.0

    async def read(self, address: str, ctx: TaskContext) -> ProfileReads:
        """Collect every input of a profile cycle. Essential reads propagate errors."""
        ctx.check()
        s = self._settings
        curves = await self._reader.list_bonding_curves()
        ctx.check()
        logger.debug(f"[PROFILE] {len(curves)} bonding curves listed")

        pdas = [bonding_curve_pda(c.mint, self._reader.program_id) for c in curves]
        signatures = await collect_signatures(
            self._pool,
            pdas,
            page_size=s.signature_page_size,
            max_pages=s.profile_max_pages,
            ctx=ctx,
        )
        transactions = await fetch_all(
            self._pool, signatures, batch_size=s.tx_batch_size, ctx=ctx
        )
        events = decode_trade_events(transactions, trader_filter=address)
        ctx.check()

        curve_mints = {c.mint for c in curves}
        balances = [b for b in await self._token_balances(address) if b.mint in curve_mints]
        ctx.check()

        mints = [e.mint for e in events]
        mints += [b.mint for b in balances]
        mints += [c.mint for c in curves if c.creator == address]
        metadata = await fetch_batch_metadata(self._pool, mints, ctx=ctx)

        sol_balance = await self._sol_balance(address)
        ctx.check()

        return ProfileReads(
            curves=curves,
            events=events,
            balances=balances,
            sol_balance=sol_balance,
            metadata=metadata,
        )

    async def fetch(self, address: str, ctx: TaskContext | None = None) -> ProfileSnapshot | None:
        """Run one cycle. None if the cycle was cancelled before completing."""
        if ctx is None:
            ctx = TaskContext(label=f"profile:{address[:8]}")
        started = time.monotonic()
        try:
            reads = await self.read(address, ctx)
        except CycleCancelled:
            logger.debug(f"[PROFILE] Cycle for {address[:12]} cancelled")
            return None
        except Exception:
            if ctx.cancelled:
                return None
            logger.exception(f"[PROFILE] Failed to load {address[:12]}")
            return error_snapshot(address)

        if ctx.cancelled:
            return None

        snapshot = compute_snapshot(
            address, reads, threshold_lamports=self._settings.graduation_threshold_lamports
        )
        logger.info(
            f"[PROFILE] {address[:12]}: {snapshot.stats.trades} trades, "
            f"{len(snapshot.holdings)} holdings, {len(snapshot.created_tokens)} created "
            f"in {time.monotonic() - started:.1f}s"
        )
        return snapshot

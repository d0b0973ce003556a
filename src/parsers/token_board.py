"""Launchpad token board: every listed curve with price, status and recent activity.

Listings are published as soon as curves and metadata are read. A throttled
enrichment pass then fills in volume, price change and sparkline per token.
A new refresh cancels the enrichment of the previous one.
"""

import asyncio
from collections.abc import Mapping, Sequence
from enum import Enum

from loguru import logger
from pydantic import BaseModel

from config.settings import Settings
from src.parsers.activity import PriceHistory, build_price_history
from src.parsers.enrichment import EnrichmentScheduler
from src.parsers.launchpad.client import LaunchpadReader
from src.parsers.launchpad.constants import GRADUATION_THRESHOLD_LAMPORTS, PROGRAM_ID
from src.parsers.launchpad.decoder import decode_trade_events
from src.parsers.launchpad.models import CurveSnapshot, TokenMetadata
from src.parsers.launchpad.pda import bonding_curve_pda
from src.parsers.metadata import display_name, display_symbol, fetch_batch_metadata
from src.parsers.portfolio import round_half_up
from src.parsers.rpc.client import SolanaRpcClient
from src.parsers.rpc.exceptions import RpcError
from src.parsers.rpc.models import TransactionLogs
from src.parsers.rpc.pool import RpcPool
from src.parsers.task_context import CycleCancelled, TaskContext

GRADUATING_ABOVE_PCT = 75
NEW_BELOW_PCT = 10


class TokenStatus(str, Enum):
    NEW = "new"
    ACTIVE = "active"
    GRADUATING = "graduating"
    GRADUATED = "graduated"


class BoardFilter(str, Enum):
    TRENDING = "trending"
    NEW = "new"
    GRADUATING = "graduating"
    GRADUATED = "graduated"


class BoardSort(str, Enum):
    MCAP = "mcap"
    VOLUME = "volume"
    NEWEST = "newest"
    GRADUATING = "graduating"


class TokenListing(BaseModel):
    mint: str
    name: str
    symbol: str
    image: str | None = None
    creator: str
    price: float
    market_cap: float
    graduation_progress: int
    status: TokenStatus
    volume_24h: float = 0.0
    price_change_24h: float = 0.0
    spark_data: list[float] = []

    model_config = {"frozen": True}


def curve_progress_pct(
    curve: CurveSnapshot, threshold_lamports: int = GRADUATION_THRESHOLD_LAMPORTS
) -> float:
    """Unrounded graduation progress, capped at 100."""
    if threshold_lamports <= 0:
        return 100.0
    return min(100.0, curve.real_sol_reserves / threshold_lamports * 100)


def classify_status(curve: CurveSnapshot, progress_pct: float) -> TokenStatus:
    if curve.completed:
        return TokenStatus.GRADUATED
    if progress_pct > GRADUATING_ABOVE_PCT:
        return TokenStatus.GRADUATING
    if progress_pct < NEW_BELOW_PCT:
        return TokenStatus.NEW
    return TokenStatus.ACTIVE


def build_listing(
    curve: CurveSnapshot,
    meta: TokenMetadata | None,
    *,
    threshold_lamports: int = GRADUATION_THRESHOLD_LAMPORTS,
) -> TokenListing:
    progress = curve_progress_pct(curve, threshold_lamports)
    return TokenListing(
        mint=curve.mint,
        name=display_name(curve.mint, meta),
        symbol=display_symbol(curve.mint, meta),
        image=meta.image if meta else None,
        creator=curve.creator,
        price=curve.current_price,
        market_cap=curve.market_cap,
        graduation_progress=int(round_half_up(progress)),
        status=classify_status(curve, progress),
    )


def build_listings(
    curves: Sequence[CurveSnapshot],
    metadata: Mapping[str, TokenMetadata],
    *,
    threshold_lamports: int = GRADUATION_THRESHOLD_LAMPORTS,
) -> list[TokenListing]:
    """One listing per curve whose mint has a metadata URI; others are test or broken mints."""
    listings = []
    for curve in curves:
        meta = metadata.get(curve.mint)
        if meta is None or not meta.uri:
            continue
        listings.append(build_listing(curve, meta, threshold_lamports=threshold_lamports))
    return listings


def query_listings(
    listings: Sequence[TokenListing],
    *,
    search: str = "",
    status_filter: BoardFilter = BoardFilter.TRENDING,
    sort: BoardSort = BoardSort.MCAP,
) -> list[TokenListing]:
    """Search by name/symbol, filter by status, then sort (stable)."""
    result = list(listings)

    if search:
        q = search.lower()
        result = [t for t in result if q in t.name.lower() or q in t.symbol.lower()]

    if status_filter is not BoardFilter.TRENDING:
        wanted = TokenStatus(status_filter.value)
        result = [t for t in result if t.status is wanted]

    if sort is BoardSort.MCAP:
        result.sort(key=lambda t: t.market_cap, reverse=True)
    elif sort is BoardSort.VOLUME:
        result.sort(key=lambda t: t.volume_24h, reverse=True)
    elif sort is BoardSort.NEWEST:
        # Least progressed first
        result.sort(key=lambda t: t.graduation_progress)
    elif sort is BoardSort.GRADUATING:
        result.sort(key=lambda t: t.graduation_progress, reverse=True)

    return result


async def fetch_recent_trades(
    client: SolanaRpcClient,
    mint: str,
    *,
    limit: int = 10,
    program_id: str = PROGRAM_ID,
    now: int | None = None,
) -> PriceHistory:
    """Price history from the latest ``limit`` transactions on the token's curve.

    Events of every trader count. A failed transaction is left out; a failed
    signature read propagates to the caller.
    """
    pda = bonding_curve_pda(mint, program_id)
    signatures = await client.get_signatures_for_address(pda, limit=limit)
    if not signatures:
        return PriceHistory()

    results = await asyncio.gather(
        *[client.get_transaction(sig.signature) for sig in signatures],
        return_exceptions=True,
    )
    transactions: list[TransactionLogs] = []
    for sig, result in zip(signatures, results):
        if isinstance(result, TransactionLogs):
            transactions.append(result)
        elif isinstance(result, BaseException):
            logger.debug(f"[TOKENS] {sig.signature[:16]} skipped for {mint[:8]}: {result}")
    events = decode_trade_events(transactions)
    return build_price_history(events, now=now)


def merge_price_history(listing: TokenListing, history: PriceHistory) -> TokenListing:
    """Apply enrichment only when it produced a sparkline."""
    if not history.spark_data:
        return listing
    return listing.model_copy(
        update={
            "volume_24h": history.volume_24h,
            "price_change_24h": history.price_change_24h,
            "spark_data": list(history.spark_data),
        }
    )


class TokenBoard:
    """Holds the current listing and runs refresh and enrichment cycles."""

    def __init__(self, pool: RpcPool, settings: Settings) -> None:
        self._pool = pool
        self._settings = settings
        self._reader = LaunchpadReader(pool, settings.launchpad_program_id)
        self._scheduler = EnrichmentScheduler(
            pool,
            warmup_sec=settings.enrich_warmup_sec,
            item_delay_sec=settings.enrich_item_delay_sec,
        )
        self._listings: list[TokenListing] = []
        self._ctx: TaskContext | None = None
        self._enrich_task: asyncio.Task | None = None
        self._cycle = 0
        self.loading = False

    @property
    def listings(self) -> list[TokenListing]:
        return list(self._listings)

    @property
    def enriching(self) -> bool:
        return self._enrich_task is not None and not self._enrich_task.done()

    def query(
        self,
        *,
        search: str = "",
        status_filter: BoardFilter = BoardFilter.TRENDING,
        sort: BoardSort = BoardSort.MCAP,
    ) -> list[TokenListing]:
        return query_listings(self._listings, search=search, status_filter=status_filter, sort=sort)

    def _start_cycle(self) -> TaskContext:
        if self._ctx is not None:
            self._ctx.cancel()
        self._cycle += 1
        self._ctx = TaskContext(label=f"tokens#{self._cycle}")
        return self._ctx

    async def refresh(self, *, enrich: bool = True) -> list[TokenListing]:
        """Re-read curves and metadata, publish listings, then start enrichment.

        A listing failure empties the board. Returns the published listings.
        """
        ctx = self._start_cycle()
        self.loading = True
        try:
            curves = await self._reader.list_bonding_curves()
            ctx.check()
            metadata = await fetch_batch_metadata(self._pool, [c.mint for c in curves], ctx=ctx)
        except CycleCancelled:
            return self.listings
        except RpcError as e:
            if not ctx.cancelled:
                logger.error(f"[TOKENS] Failed to fetch tokens: {e}")
                self._listings = []
            return self.listings
        finally:
            if self._ctx is ctx:
                self.loading = False

        if ctx.cancelled:
            return self.listings

        self._listings = build_listings(
            curves, metadata, threshold_lamports=self._settings.graduation_threshold_lamports
        )
        logger.info(f"[TOKENS] {len(self._listings)}/{len(curves)} curves listed ({ctx.label})")

        if enrich and self._listings:
            self._enrich_task = asyncio.create_task(self._enrich(ctx))
        return self.listings

    async def _enrich(self, ctx: TaskContext) -> None:
        limit = self._settings.enrich_trades_per_token
        program_id = self._reader.program_id

        async def _fetch(client: SolanaRpcClient, listing: TokenListing) -> PriceHistory:
            return await fetch_recent_trades(
                client, listing.mint, limit=limit, program_id=program_id
            )

        merged = await self._scheduler.run(self._listings, _fetch, merge_price_history, ctx)
        if merged is None or ctx.cancelled or self._ctx is not ctx:
            logger.debug(f"[TOKENS] Enrichment for {ctx.label} discarded")
            return
        self._listings = merged

    async def wait_enriched(self) -> None:
        if self._enrich_task is not None:
            await self._enrich_task

    async def close(self) -> None:
        if self._ctx is not None:
            self._ctx.cancel()
        if self._enrich_task is not None and not self._enrich_task.done():
            self._enrich_task.cancel()
            try:
                await self._enrich_task
            except asyncio.CancelledError:
                pass

"""Activity calendar and compact price history from trade events."""

import time
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field

from src.parsers.launchpad.constants import SECONDS_PER_DAY
from src.parsers.launchpad.models import ACTIVITY_DAYS, TradeEvent

SPARKLINE_POINTS = 20


def build_activity_map(
    events: Iterable[TradeEvent], *, now: int | None = None, days: int = ACTIVITY_DAYS
) -> list[int]:
    """Trades per day for the trailing window; the last bucket is today.

    Events older than the window, or in the future, are ignored.
    """
    now = int(time.time()) if now is None else now
    buckets = [0] * days
    for event in events:
        days_ago = (now - event.timestamp) // SECONDS_PER_DAY
        if 0 <= days_ago < days:
            buckets[days - 1 - days_ago] += 1
    return buckets


def downsample(values: Sequence[float], target: int = SPARKLINE_POINTS) -> list[float]:
    """Keep every ``stride``-th point; may return slightly more than ``target``."""
    stride = max(1, len(values) // target)
    return [v for i, v in enumerate(values) if i % stride == 0]


def price_change_pct(prices: Sequence[float]) -> float:
    """First-to-last change over the fetched window, not a rolling 24h figure."""
    if not prices or prices[0] <= 0:
        return 0.0
    return (prices[-1] - prices[0]) / prices[0] * 100


@dataclass
class PriceHistory:
    volume_24h: float = 0.0
    price_change_24h: float = 0.0
    spark_data: list[float] = field(default_factory=list)


def build_price_history(
    events: Iterable[TradeEvent], *, now: int | None = None
) -> PriceHistory:
    """Volume over the last day plus window price change and sparkline."""
    now = int(time.time()) if now is None else now
    day_ago = now - SECONDS_PER_DAY

    ordered = sorted(events, key=lambda e: e.timestamp)
    if not ordered:
        return PriceHistory()

    prices = [e.price for e in ordered]
    volume_24h = sum(e.sol_amount for e in ordered if e.timestamp >= day_ago)

    return PriceHistory(
        volume_24h=volume_24h,
        price_change_24h=price_change_pct(prices),
        spark_data=downsample(prices),
    )

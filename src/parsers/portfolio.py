"""Portfolio aggregation: holdings, PnL, win rate and volume from trade events.

Current holding size comes from a live token-balance read, not from summing
trade deltas, so tokens received or sent outside the launchpad are valued
correctly.

Per mint:
    avg_buy_price = total_buy_sol / total_buy_tokens        (0 if no buys)
    holding_value = live_balance * current_price
    pnl           = total_sell_sol + holding_value - total_buy_sol   (win if > 0)
"""

import math
from collections import defaultdict
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass

from src.parsers.launchpad.constants import GRADUATION_THRESHOLD_LAMPORTS, WSOL_MINT
from src.parsers.launchpad.models import (
    CreatedToken,
    CurveSnapshot,
    Holding,
    PortfolioStats,
    TokenBalance,
    TokenMetadata,
    TradeEvent,
)
from src.parsers.metadata import display_name, display_symbol


def round_half_up(value: float, digits: int = 0) -> float:
    """Round like a UI would (0.5 always up), not banker's rounding."""
    factor = 10**digits
    return math.floor(value * factor + 0.5) / factor


@dataclass
class MintPnL:
    """PnL breakdown for one traded mint."""

    mint: str
    total_buy_sol: float
    total_buy_tokens: float
    total_sell_sol: float
    total_sell_tokens: float
    current_price: float
    live_balance: float

    @property
    def avg_buy_price(self) -> float:
        if self.total_buy_tokens > 0:
            return self.total_buy_sol / self.total_buy_tokens
        return 0.0

    @property
    def holding_value(self) -> float:
        return self.live_balance * self.current_price

    @property
    def pnl(self) -> float:
        return self.total_sell_sol + self.holding_value - self.total_buy_sol

    @property
    def is_win(self) -> bool:
        return self.pnl > 0

    @property
    def realized_pnl(self) -> float:
        """Sell proceeds minus the weighted-average cost of the tokens sold."""
        return self.total_sell_sol - self.avg_buy_price * self.total_sell_tokens

    @property
    def unrealized_pnl(self) -> float:
        """Mark-to-market of the live balance against the average cost."""
        return self.holding_value - self.avg_buy_price * self.live_balance


def group_by_mint(events: Iterable[TradeEvent]) -> dict[str, list[TradeEvent]]:
    by_mint: dict[str, list[TradeEvent]] = defaultdict(list)
    for event in events:
        by_mint[event.mint].append(event)
    return dict(by_mint)


def compute_mint_pnl(
    mint: str,
    events: Iterable[TradeEvent],
    *,
    current_price: float,
    live_balance: float,
) -> MintPnL:
    buy_sol = buy_tokens = sell_sol = sell_tokens = 0.0
    for event in events:
        if event.is_buy:
            buy_sol += event.sol_amount
            buy_tokens += event.token_amount
        else:
            sell_sol += event.sol_amount
            sell_tokens += event.token_amount

    return MintPnL(
        mint=mint,
        total_buy_sol=buy_sol,
        total_buy_tokens=buy_tokens,
        total_sell_sol=sell_sol,
        total_sell_tokens=sell_tokens,
        current_price=current_price,
        live_balance=live_balance,
    )


def graduation_pct(
    curve: CurveSnapshot, threshold_lamports: int = GRADUATION_THRESHOLD_LAMPORTS
) -> int:
    if threshold_lamports <= 0:
        return 100
    return int(min(100, round_half_up(curve.real_sol_reserves / threshold_lamports * 100)))


def _current_prices(curves: Mapping[str, CurveSnapshot]) -> dict[str, float]:
    return {mint: curve.current_price for mint, curve in curves.items()}


def compute_pnl_by_mint(
    events: Sequence[TradeEvent],
    curves: Mapping[str, CurveSnapshot],
    live_balances: Mapping[str, float],
) -> list[MintPnL]:
    """One MintPnL per traded mint, in first-traded order."""
    prices = _current_prices(curves)
    return [
        compute_mint_pnl(
            mint,
            mint_events,
            current_price=prices.get(mint, 0.0),
            live_balance=live_balances.get(mint, 0.0),
        )
        for mint, mint_events in group_by_mint(events).items()
    ]


def created_curves(curves: Iterable[CurveSnapshot], creator: str) -> list[CurveSnapshot]:
    return [c for c in curves if c.creator == creator]


def compute_stats(
    events: Sequence[TradeEvent],
    curves: Mapping[str, CurveSnapshot],
    live_balances: Mapping[str, float],
    *,
    creator: str | None = None,
) -> PortfolioStats:
    """Roll up PnL, win rate, trade count and volume. Fully recomputed every call."""
    per_mint = compute_pnl_by_mint(events, curves, live_balances)

    total_pnl = sum(m.pnl for m in per_mint)
    wins = sum(1 for m in per_mint if m.is_win)
    win_rate = int(round_half_up(wins / len(per_mint) * 100)) if per_mint else 0
    volume = sum(e.sol_amount for e in events)

    created = created_curves(curves.values(), creator) if creator else []

    return PortfolioStats(
        pnl=round_half_up(total_pnl, 2),
        win_rate=win_rate,
        trades=len(events),
        volume=round_half_up(volume, 2),
        tokens_created=len(created),
        tokens_graduated=sum(1 for c in created if c.graduated),
    )


def build_holdings(
    balances: Sequence[TokenBalance],
    curves: Mapping[str, CurveSnapshot],
    events: Sequence[TradeEvent],
    metadata: Mapping[str, TokenMetadata] | None = None,
) -> list[Holding]:
    """Launchpad token holdings valued at the current curve price."""
    metadata = metadata or {}
    by_mint = group_by_mint(events)
    holdings: list[Holding] = []

    for bal in balances:
        curve = curves.get(bal.mint)
        price = curve.current_price if curve else 0.0
        amount = bal.amount

        mint_pnl = compute_mint_pnl(
            bal.mint, by_mint.get(bal.mint, []), current_price=price, live_balance=amount
        )
        avg_cost = mint_pnl.avg_buy_price
        pnl_pct = (price - avg_cost) / avg_cost * 100 if avg_cost > 0 else 0.0

        total_supply = curve.total_supply_ui if curve else 1.0
        pct_supply = amount / total_supply * 100 if total_supply > 0 else 0.0

        meta = metadata.get(bal.mint)
        holdings.append(
            Holding(
                mint=bal.mint,
                name=display_name(bal.mint, meta),
                symbol=display_symbol(bal.mint, meta),
                image=meta.image if meta else None,
                balance=amount,
                value_sol=amount * price,
                pnl_percent=round_half_up(pnl_pct, 1),
                pct_supply=round_half_up(pct_supply, 2),
                realized_pnl=round_half_up(mint_pnl.realized_pnl, 4),
                unrealized_pnl=round_half_up(mint_pnl.unrealized_pnl, 4),
            )
        )

    return holdings


def native_holding(sol_balance: float) -> Holding:
    return Holding(
        mint=WSOL_MINT,
        name="Solana",
        symbol="SOL",
        balance=sol_balance,
        value_sol=sol_balance,
        pnl_percent=0.0,
        pct_supply=0.0,
        is_native=True,
    )


def build_created_tokens(
    curves: Iterable[CurveSnapshot],
    creator: str,
    metadata: Mapping[str, TokenMetadata] | None = None,
    *,
    threshold_lamports: int = GRADUATION_THRESHOLD_LAMPORTS,
) -> list[CreatedToken]:
    metadata = metadata or {}
    created: list[CreatedToken] = []
    for curve in created_curves(curves, creator):
        meta = metadata.get(curve.mint)
        created.append(
            CreatedToken(
                mint=curve.mint,
                name=display_name(curve.mint, meta),
                symbol=display_symbol(curve.mint, meta),
                image=meta.image if meta else None,
                virtual_sol=curve.virtual_sol_ui,
                graduation_pct=graduation_pct(curve, threshold_lamports),
                graduated=curve.graduated,
                completed=curve.completed,
            )
        )
    return created


def aggregate(
    events: Sequence[TradeEvent],
    curves: Mapping[str, CurveSnapshot],
    balances: Sequence[TokenBalance],
    *,
    creator: str | None = None,
    metadata: Mapping[str, TokenMetadata] | None = None,
) -> tuple[list[Holding], PortfolioStats]:
    """Join trade events with curve snapshots and live balances."""
    live_balances: dict[str, float] = defaultdict(float)
    for bal in balances:
        live_balances[bal.mint] += bal.amount

    holdings = build_holdings(balances, curves, events, metadata)
    stats = compute_stats(events, curves, live_balances, creator=creator)
    return holdings, stats

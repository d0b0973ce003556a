"""Pydantic v2 models for decoded launchpad data and derived profile analytics.

Every model is frozen: a fetch cycle builds a new snapshot instead of
patching the previous one.
"""

from enum import Enum

from pydantic import BaseModel, Field

from src.parsers.launchpad.constants import LAMPORTS_PER_SOL, TOKEN_DECIMALS_DIVISOR

ACTIVITY_DAYS = 91


class TradeDirection(str, Enum):
    BUY = "buy"
    SELL = "sell"


class TradeEvent(BaseModel):
    """Decoded TradeEvent log. Amounts are UI units (SOL, whole tokens)."""

    signature: str
    mint: str
    trader: str
    direction: TradeDirection
    sol_amount: float
    token_amount: float
    price: float  # sol_amount / token_amount, 0 when token_amount == 0
    timestamp: int

    model_config = {"frozen": True}

    @property
    def is_buy(self) -> bool:
        return self.direction is TradeDirection.BUY


class CurveSnapshot(BaseModel):
    """Point-in-time read of a BondingCurve account (raw integer units)."""

    address: str = ""
    mint: str
    creator: str
    virtual_sol: int
    virtual_token: int
    real_token: int = 0
    real_sol_reserves: int
    total_supply: int
    start_time: int = 0
    completed: bool = False
    migrated: bool = False

    model_config = {"frozen": True}

    @property
    def current_price(self) -> float:
        """Spot price in SOL per token from virtual reserves."""
        virtual_token = self.virtual_token / TOKEN_DECIMALS_DIVISOR
        if virtual_token <= 0:
            return 0.0
        return (self.virtual_sol / LAMPORTS_PER_SOL) / virtual_token

    @property
    def total_supply_ui(self) -> float:
        return self.total_supply / TOKEN_DECIMALS_DIVISOR

    @property
    def virtual_sol_ui(self) -> float:
        return self.virtual_sol / LAMPORTS_PER_SOL

    @property
    def market_cap(self) -> float:
        return self.current_price * self.total_supply_ui

    @property
    def graduated(self) -> bool:
        return self.completed or self.migrated


class TokenBalance(BaseModel):
    """Decoded SPL token account."""

    mint: str
    owner: str
    amount_raw: int

    model_config = {"frozen": True}

    @property
    def amount(self) -> float:
        return self.amount_raw / TOKEN_DECIMALS_DIVISOR


class ReferralAccount(BaseModel):
    """Decoded Referral account, one per referrer wallet."""

    address: str = ""
    referrer: str
    total_earned: int  # lamports
    trade_count: int
    claimable: int = 0  # lamports above the rent-exempt minimum

    model_config = {"frozen": True}

    @property
    def total_earned_sol(self) -> float:
        return self.total_earned / LAMPORTS_PER_SOL

    @property
    def claimable_sol(self) -> float:
        return self.claimable / LAMPORTS_PER_SOL


class TokenMetadata(BaseModel):
    name: str = ""
    symbol: str = ""
    image: str | None = None
    uri: str = ""

    model_config = {"frozen": True}


class Holding(BaseModel):
    mint: str
    name: str
    symbol: str
    image: str | None = None
    balance: float
    value_sol: float
    pnl_percent: float
    pct_supply: float
    realized_pnl: float = 0.0  # SOL
    unrealized_pnl: float = 0.0  # SOL
    is_native: bool = False

    model_config = {"frozen": True}


class ProfileTrade(TradeEvent):
    """Trade event joined with token metadata for display."""

    token_name: str
    token_symbol: str
    token_image: str | None = None


class CreatedToken(BaseModel):
    mint: str
    name: str
    symbol: str
    image: str | None = None
    virtual_sol: float
    graduation_pct: int
    graduated: bool
    completed: bool

    model_config = {"frozen": True}


class PortfolioStats(BaseModel):
    pnl: float = 0.0
    win_rate: int = 0  # 0-100
    trades: int = 0
    volume: float = 0.0
    tokens_created: int = 0
    tokens_graduated: int = 0

    model_config = {"frozen": True}


class ProfileSnapshot(BaseModel):
    """Everything the presentation layer shows for one address."""

    address: str
    holdings: list[Holding] = []
    trades: list[ProfileTrade] = []
    created_tokens: list[CreatedToken] = []
    stats: PortfolioStats = PortfolioStats()
    activity_map: list[int] = Field(default_factory=lambda: [0] * ACTIVITY_DAYS)
    loading: bool = False
    error: str | None = None

    model_config = {"frozen": True}

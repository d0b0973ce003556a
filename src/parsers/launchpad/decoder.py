"""Decode launchpad program data: TradeEvent log lines and account blobs.

TradeEvent payload (base64 after the "Program data: " prefix):
  0:8    discriminator
  8:40   mint (Pubkey)
  40:72  trader (Pubkey)
  72     is_buy (u8): 1 is buy, anything else is read as sell
  73:81  sol_amount (u64 LE, lamports)
  81:89  token_amount (u64 LE, 6 decimals)

BondingCurve account:
  8:40 mint, 40:72 creator, 72:112 virtual_sol/virtual_token/real_token/
  real_sol_reserves/token_total_supply (u64 LE), 112:120 start_time (i64),
  120 completed, 121 migrated, 122 bump

All decoders return None on malformed input and never raise.
"""

import base64
import binascii
import struct
from collections.abc import Iterable

import base58
from loguru import logger

from src.parsers.launchpad.constants import (
    BONDING_CURVE_DISCRIMINATOR,
    BONDING_CURVE_SIZE,
    LAMPORTS_PER_SOL,
    LOG_DATA_PREFIX,
    REFERRAL_DISCRIMINATOR,
    REFERRAL_SIZE,
    TOKEN_ACCOUNT_MIN_SIZE,
    TOKEN_DECIMALS_DIVISOR,
    TRADE_EVENT_DISCRIMINATOR,
    TRADE_EVENT_MIN_SIZE,
)
from src.parsers.launchpad.models import (
    CurveSnapshot,
    ReferralAccount,
    TokenBalance,
    TradeDirection,
    TradeEvent,
)
from src.parsers.rpc.models import TransactionLogs


def _pubkey(data: bytes, start: int) -> str:
    return base58.b58encode(data[start : start + 32]).decode()


def decode_trade_event(
    log_line: str,
    signature: str,
    block_time: int,
    trader_filter: str | None = None,
) -> TradeEvent | None:
    """Decode one log line into a TradeEvent, or None if it is not one.

    ``trader_filter`` keeps only events whose trader matches the given address.
    """
    if not log_line.startswith(LOG_DATA_PREFIX):
        return None

    try:
        data = base64.b64decode(log_line[len(LOG_DATA_PREFIX) :])
    except (binascii.Error, ValueError):
        return None

    if len(data) < TRADE_EVENT_MIN_SIZE:
        return None
    if data[:8] != TRADE_EVENT_DISCRIMINATOR:
        return None

    mint = _pubkey(data, 8)
    trader = _pubkey(data, 40)
    if trader_filter is not None and trader != trader_filter:
        return None

    direction = TradeDirection.BUY if data[72] == 1 else TradeDirection.SELL
    sol_raw, token_raw = struct.unpack_from("<QQ", data, 73)

    sol_amount = sol_raw / LAMPORTS_PER_SOL
    token_amount = token_raw / TOKEN_DECIMALS_DIVISOR
    price = sol_amount / token_amount if token_amount > 0 else 0.0

    return TradeEvent(
        signature=signature,
        mint=mint,
        trader=trader,
        direction=direction,
        sol_amount=sol_amount,
        token_amount=token_amount,
        price=price,
        timestamp=block_time or 0,
    )


def decode_trade_events(
    transactions: Iterable[TransactionLogs],
    trader_filter: str | None = None,
) -> list[TradeEvent]:
    """Decode every TradeEvent in a sequence of fetched transactions, in order."""
    events: list[TradeEvent] = []
    for tx in transactions:
        for line in tx.log_lines:
            event = decode_trade_event(line, tx.signature, tx.block_time, trader_filter)
            if event is not None:
                events.append(event)
    return events


def decode_bonding_curve(address: str, data: bytes) -> CurveSnapshot | None:
    if len(data) < BONDING_CURVE_SIZE:
        logger.debug(f"[CURVE] Data too short: {len(data)} < {BONDING_CURVE_SIZE} for {address[:12]}")
        return None
    if data[:8] != BONDING_CURVE_DISCRIMINATOR:
        logger.debug(f"[CURVE] Wrong discriminator for {address[:12]}")
        return None

    (
        virtual_sol,
        virtual_token,
        real_token,
        real_sol_reserves,
        total_supply,
        start_time,
    ) = struct.unpack_from("<5Qq", data, 72)

    return CurveSnapshot(
        address=address,
        mint=_pubkey(data, 8),
        creator=_pubkey(data, 40),
        virtual_sol=virtual_sol,
        virtual_token=virtual_token,
        real_token=real_token,
        real_sol_reserves=real_sol_reserves,
        total_supply=total_supply,
        start_time=start_time,
        completed=data[120] != 0,
        migrated=data[121] != 0,
    )


def decode_token_account(data: bytes) -> TokenBalance | None:
    """SPL token account: mint [0:32), owner [32:64), amount u64 LE [64:72)."""
    if len(data) < TOKEN_ACCOUNT_MIN_SIZE:
        return None
    (amount_raw,) = struct.unpack_from("<Q", data, 64)
    return TokenBalance(mint=_pubkey(data, 0), owner=_pubkey(data, 32), amount_raw=amount_raw)


def decode_referral(address: str, data: bytes) -> ReferralAccount | None:
    if len(data) < REFERRAL_SIZE or data[:8] != REFERRAL_DISCRIMINATOR:
        return None
    total_earned, trade_count = struct.unpack_from("<QQ", data, 40)
    return ReferralAccount(
        address=address,
        referrer=_pubkey(data, 8),
        total_earned=total_earned,
        trade_count=trade_count,
    )

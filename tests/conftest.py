"""Shared test fixtures: address factory, wire-format builders and an in-memory RPC stub."""

import base64
import struct

import base58
import pytest

from src.parsers.launchpad.constants import (
    BONDING_CURVE_DISCRIMINATOR,
    LOG_DATA_PREFIX,
    REFERRAL_DISCRIMINATOR,
    TRADE_EVENT_DISCRIMINATOR,
)
from src.parsers.rpc.exceptions import RpcError, RpcHttpError
from src.parsers.rpc.models import RawAccount, SignatureInfo, TransactionLogs


def make_address(seed: int) -> str:
    """Deterministic base58 address: 32 copies of ``seed``."""
    return base58.b58encode(bytes([seed]) * 32).decode()


def trade_event_bytes(
    mint: str,
    trader: str,
    *,
    flag: int = 1,
    sol_raw: int = 500_000_000,
    token_raw: int = 1_000_000,
) -> bytes:
    return (
        TRADE_EVENT_DISCRIMINATOR
        + base58.b58decode(mint)
        + base58.b58decode(trader)
        + bytes([flag])
        + struct.pack("<QQ", sol_raw, token_raw)
        + struct.pack("<Q", 0)  # fee
    )


def trade_log(mint: str, trader: str, **kwargs) -> str:
    """A ``Program data:`` log line carrying one TradeEvent."""
    return LOG_DATA_PREFIX + base64.b64encode(trade_event_bytes(mint, trader, **kwargs)).decode()


def curve_data(
    mint: str,
    creator: str,
    *,
    virtual_sol: int = 30_000_000_000,
    virtual_token: int = 1_000_000_000_000,
    real_token: int = 800_000_000_000_000,
    real_sol_reserves: int = 0,
    total_supply: int = 1_000_000_000_000_000,
    start_time: int = 1_700_000_000,
    completed: bool = False,
    migrated: bool = False,
) -> bytes:
    """Raw BondingCurve account bytes (123)."""
    return (
        BONDING_CURVE_DISCRIMINATOR
        + base58.b58decode(mint)
        + base58.b58decode(creator)
        + struct.pack(
            "<5Qq",
            virtual_sol,
            virtual_token,
            real_token,
            real_sol_reserves,
            total_supply,
            start_time,
        )
        + bytes([int(completed), int(migrated), 254])
    )


def token_account_data(mint: str, owner: str, amount_raw: int) -> bytes:
    return (
        base58.b58decode(mint)
        + base58.b58decode(owner)
        + struct.pack("<Q", amount_raw)
        + bytes(93)  # rest of the 165-byte SPL layout
    )


def referral_data(referrer: str, total_earned: int, trade_count: int) -> bytes:
    return (
        REFERRAL_DISCRIMINATOR
        + base58.b58decode(referrer)
        + struct.pack("<QQ", total_earned, trade_count)
        + bytes([253])
    )


class FakeRpcClient:
    """In-memory stand-in for ``SolanaRpcClient``.

    ``history`` maps address -> signatures newest-first; ``transactions`` maps
    signature -> logs. ``fail`` maps RPC method name -> exception to raise.
    Clients made by ``clone`` share all data but keep their own label.
    """

    def __init__(self, label: str = "fake#1") -> None:
        self.label = label
        self.history: dict[str, list[SignatureInfo]] = {}
        self.transactions: dict[str, TransactionLogs] = {}
        self.failing_signatures: set[str] = set()
        self.program_accounts: list[RawAccount] = []
        self.token_accounts: list[RawAccount] = []
        self.accounts: dict[str, RawAccount] = {}
        self.assets: dict[str, dict] = {}
        self.lamports = 0
        self.rent_lamports = 1_287_600
        self.fail: dict[str, Exception] = {}
        self.calls: list[tuple[str, str]] = []
        self.closed = False

    def clone(self, label: str) -> "FakeRpcClient":
        other = FakeRpcClient(label)
        other.__dict__.update({k: v for k, v in self.__dict__.items() if k != "label"})
        other.label = label
        return other

    def _record(self, method: str, arg: str = "") -> None:
        self.calls.append((method, arg))
        if method in self.fail:
            raise self.fail[method]

    def add_history(self, address: str, signatures: list[str], block_time: int = 0) -> None:
        self.history[address] = [
            SignatureInfo(signature=s, block_time=block_time) for s in signatures
        ]

    def add_transaction(self, signature: str, log_lines: list[str], block_time: int = 0) -> None:
        self.transactions[signature] = TransactionLogs(
            signature=signature, log_lines=log_lines, block_time=block_time
        )

    async def get_signatures_for_address(
        self, address: str, *, limit: int = 100, before: str | None = None
    ) -> list[SignatureInfo]:
        self._record("getSignaturesForAddress", address)
        sigs = self.history.get(address, [])
        start = 0
        if before is not None:
            names = [s.signature for s in sigs]
            start = names.index(before) + 1
        return sigs[start : start + limit]

    async def get_transaction(self, signature: str) -> TransactionLogs | None:
        self._record("getTransaction", signature)
        if signature in self.failing_signatures:
            raise RpcHttpError(500, "getTransaction")
        return self.transactions.get(signature)

    async def get_program_accounts(self, program_id: str, **kwargs) -> list[RawAccount]:
        self._record("getProgramAccounts", program_id)
        return list(self.program_accounts)

    async def get_token_accounts_by_owner(self, owner: str, **kwargs) -> list[RawAccount]:
        self._record("getTokenAccountsByOwner", owner)
        return list(self.token_accounts)

    async def get_balance(self, address: str) -> int:
        self._record("getBalance", address)
        return self.lamports

    async def get_account_info(self, address: str) -> RawAccount | None:
        self._record("getAccountInfo", address)
        return self.accounts.get(address)

    async def get_minimum_balance_for_rent_exemption(self, size: int) -> int:
        self._record("getMinimumBalanceForRentExemption", str(size))
        return self.rent_lamports

    async def get_asset(self, asset_id: str) -> dict | None:
        self._record("getAsset", asset_id)
        if asset_id not in self.assets:
            raise RpcError(f"asset {asset_id} not found")
        return self.assets[asset_id]

    async def close(self) -> None:
        self.closed = True


def das_asset(name: str, symbol: str, *, image: str | None = None, uri: str = "") -> dict:
    """Minimal DAS ``getAsset`` result."""
    return {
        "content": {
            "json_uri": uri,
            "metadata": {"name": name, "symbol": symbol},
            "links": {"image": image} if image else {},
        }
    }


@pytest.fixture
def address():
    return make_address


@pytest.fixture
def fake_client() -> FakeRpcClient:
    return FakeRpcClient()


@pytest.fixture
def builders():
    """Wire-format builders as one namespace for tests."""

    class _Builders:
        trade_log = staticmethod(trade_log)
        trade_event_bytes = staticmethod(trade_event_bytes)
        curve_data = staticmethod(curve_data)
        token_account_data = staticmethod(token_account_data)
        referral_data = staticmethod(referral_data)
        das_asset = staticmethod(das_asset)

    return _Builders

"""Print a wallet's launchpad profile: stats, holdings, created tokens, recent trades.

Runs one full profile cycle against the configured RPC endpoints.

Usage:
    python scripts/profile_report.py <WALLET_ADDRESS> [--trades 20] [--json]
"""

import argparse
import asyncio
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from config.settings import settings  # noqa: E402
from src.parsers.launchpad.models import ProfileSnapshot  # noqa: E402
from src.parsers.launchpad.pda import is_valid_address  # noqa: E402
from src.parsers.profile import ProfileFetcher  # noqa: E402
from src.parsers.rpc.pool import RpcPool  # noqa: E402
from src.utils.logger import setup_logger  # noqa: E402


def print_report(snapshot: ProfileSnapshot, max_trades: int) -> None:
    s = snapshot.stats
    print(f"\n=== Profile {snapshot.address} ===")
    if snapshot.error:
        print(f"ERROR: {snapshot.error}")
        return

    print(
        f"PnL: {s.pnl:+.2f} SOL | Win rate: {s.win_rate}% | Trades: {s.trades} | "
        f"Volume: {s.volume:.2f} SOL"
    )
    print(f"Tokens created: {s.tokens_created} ({s.tokens_graduated} graduated)")
    print(f"Active days (91d): {sum(1 for n in snapshot.activity_map if n > 0)}")

    print(f"\n--- Holdings ({len(snapshot.holdings)}) ---")
    for h in snapshot.holdings:
        pnl = "" if h.is_native else f" | PnL {h.pnl_percent:+.1f}% | {h.pct_supply:.2f}% supply"
        print(f"  {h.symbol:<8} {h.balance:>16,.4f} | {h.value_sol:.4f} SOL{pnl}")

    if snapshot.created_tokens:
        print(f"\n--- Created ({len(snapshot.created_tokens)}) ---")
        for t in snapshot.created_tokens:
            state = "graduated" if t.graduated else f"{t.graduation_pct}%"
            print(f"  {t.symbol:<8} {t.mint} | {t.virtual_sol:.2f} vSOL | {state}")

    print(f"\n--- Recent trades (max {max_trades}) ---")
    for t in snapshot.trades[:max_trades]:
        print(
            f"  {t.timestamp} {t.direction.value.upper():<4} {t.token_symbol:<8} "
            f"{t.sol_amount:.4f} SOL @ {t.price:.10f}"
        )


async def main() -> None:
    parser = argparse.ArgumentParser(description="Print a launchpad wallet profile")
    parser.add_argument("address", help="Wallet address (base58)")
    parser.add_argument("--trades", type=int, default=20, help="Trades to list")
    parser.add_argument("--json", action="store_true", help="Dump the raw snapshot as JSON")
    args = parser.parse_args()

    if not is_valid_address(args.address):
        parser.error(f"invalid address: {args.address}")

    setup_logger(level="WARNING")
    pool = RpcPool.from_settings(settings)
    try:
        snapshot = await ProfileFetcher(pool, settings).fetch(args.address)
    finally:
        await pool.close()

    if snapshot is None:
        print("Profile fetch cancelled")
        sys.exit(1)
    if args.json:
        print(snapshot.model_dump_json(indent=2))
    else:
        print_report(snapshot, args.trades)
    if snapshot.error:
        sys.exit(1)


if __name__ == "__main__":
    asyncio.run(main())

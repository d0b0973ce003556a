"""Launchpad (bonding-curve) program constants: account layouts and event tags."""

PROGRAM_ID = "GzXpRdSJRrd9qqbigtawUFAqjf39inX5Zju7sZDSpdJx"

# Emitted events arrive as "Program data: <base64>" log lines
LOG_DATA_PREFIX = "Program data: "

# Anchor discriminators (first 8 bytes)
TRADE_EVENT_DISCRIMINATOR = bytes([189, 219, 127, 211, 78, 230, 97, 238])
BONDING_CURVE_DISCRIMINATOR = bytes([23, 183, 248, 55, 96, 216, 172, 96])
REFERRAL_DISCRIMINATOR = bytes([30, 235, 136, 224, 106, 107, 49, 64])

# TradeEvent: disc(8) + mint(32) + trader(32) + is_buy(1) + sol(8) + token(8) [+ fee(8)]
TRADE_EVENT_MIN_SIZE = 89

# BondingCurve: disc(8) + mint(32) + creator(32) + 5 x u64 + start_time(i64)
#               + completed(1) + migrated(1) + bump(1)
BONDING_CURVE_SIZE = 123

# Referral: disc(8) + referrer(32) + total_earned(u64) + trade_count(u64) + bump(1)
REFERRAL_SIZE = 57

# SPL token account: mint(32) + owner(32) + amount(u64) + ...
TOKEN_ACCOUNT_MIN_SIZE = 72

BONDING_CURVE_SEED = b"bonding-curve"
REFERRAL_SEED = b"referral"

LAMPORTS_PER_SOL = 1_000_000_000
TOKEN_DECIMALS_DIVISOR = 1_000_000  # launchpad tokens use 6 decimals

# Real SOL reserves at which a curve completes (85 SOL)
GRADUATION_THRESHOLD_LAMPORTS = 85_000_000_000

WSOL_MINT = "So11111111111111111111111111111111111111112"

SECONDS_PER_DAY = 86_400

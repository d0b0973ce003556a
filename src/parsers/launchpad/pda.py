"""Program-derived addresses for launchpad accounts."""

from solders.pubkey import Pubkey  # type: ignore[import-untyped]

from src.parsers.launchpad.constants import BONDING_CURVE_SEED, PROGRAM_ID, REFERRAL_SEED


def bonding_curve_pda(mint: str, program_id: str = PROGRAM_ID) -> str:
    """Bonding curve account for a mint. Every trade on the token touches it."""
    pda, _bump = Pubkey.find_program_address(
        [BONDING_CURVE_SEED, bytes(Pubkey.from_string(mint))],
        Pubkey.from_string(program_id),
    )
    return str(pda)


def referral_pda(referrer: str, program_id: str = PROGRAM_ID) -> str:
    pda, _bump = Pubkey.find_program_address(
        [REFERRAL_SEED, bytes(Pubkey.from_string(referrer))],
        Pubkey.from_string(program_id),
    )
    return str(pda)


def is_valid_address(address: str) -> bool:
    try:
        Pubkey.from_string(address)
    except ValueError:
        return False
    return True

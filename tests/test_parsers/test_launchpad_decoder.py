"""Tests for launchpad TradeEvent / account decoders and PDAs."""

import base64

import pytest

from src.parsers.launchpad.constants import BONDING_CURVE_SIZE, LOG_DATA_PREFIX
from src.parsers.launchpad.decoder import (
    decode_bonding_curve,
    decode_referral,
    decode_token_account,
    decode_trade_event,
    decode_trade_events,
)
from src.parsers.launchpad.models import TradeDirection
from src.parsers.launchpad.pda import bonding_curve_pda, is_valid_address, referral_pda
from src.parsers.rpc.models import TransactionLogs


class TestDecodeTradeEvent:
    def test_buy_example(self, address, builders) -> None:
        """0.5 SOL for 1 token decodes to a buy at price 0.5."""
        mint, trader = address(10), address(1)
        line = builders.trade_log(mint, trader, flag=1, sol_raw=500_000_000, token_raw=1_000_000)

        event = decode_trade_event(line, "sig1", 1_700_000_000)

        assert event is not None
        assert event.direction is TradeDirection.BUY
        assert event.sol_amount == 0.5
        assert event.token_amount == 1.0
        assert event.price == 0.5
        assert event.mint == mint
        assert event.trader == trader
        assert event.signature == "sig1"
        assert event.timestamp == 1_700_000_000

    @pytest.mark.parametrize("flag", [0, 2, 255])
    def test_any_non_one_flag_is_sell(self, address, builders, flag) -> None:
        line = builders.trade_log(address(10), address(1), flag=flag)
        event = decode_trade_event(line, "sig", 0)
        assert event is not None
        assert event.direction is TradeDirection.SELL
        assert not event.is_buy

    def test_zero_tokens_gives_zero_price(self, address, builders) -> None:
        line = builders.trade_log(address(10), address(1), sol_raw=1_000, token_raw=0)
        event = decode_trade_event(line, "sig", 0)
        assert event is not None
        assert event.price == 0.0

    def test_price_is_sol_over_tokens(self, address, builders) -> None:
        line = builders.trade_log(
            address(10), address(1), sol_raw=1_234_567_890, token_raw=98_765_432_100
        )
        event = decode_trade_event(line, "sig", 0)
        assert event is not None
        assert event.price == pytest.approx(event.sol_amount / event.token_amount)

    def test_trader_filter(self, address, builders) -> None:
        line = builders.trade_log(address(10), address(1))
        assert decode_trade_event(line, "sig", 0, trader_filter=address(2)) is None
        assert decode_trade_event(line, "sig", 0, trader_filter=address(1)) is not None

    @pytest.mark.parametrize(
        "line",
        [
            "",
            "Program log: Instruction: Buy",
            "Program data:",
            LOG_DATA_PREFIX,
            LOG_DATA_PREFIX + "!!!not base64!!!",
            LOG_DATA_PREFIX + "QUJD",  # "ABC"
            LOG_DATA_PREFIX + base64.b64encode(bytes(200)).decode(),  # wrong discriminator
        ],
    )
    def test_garbage_returns_none(self, line) -> None:
        assert decode_trade_event(line, "sig", 0) is None

    def test_truncated_payload_returns_none(self, address, builders) -> None:
        data = builders.trade_event_bytes(address(10), address(1))[:88]
        line = LOG_DATA_PREFIX + base64.b64encode(data).decode()
        assert decode_trade_event(line, "sig", 0) is None

    def test_decode_many_keeps_order_and_skips_noise(self, address, builders) -> None:
        txs = [
            TransactionLogs(
                signature="a",
                block_time=100,
                log_lines=[
                    "Program log: Instruction: Buy",
                    builders.trade_log(address(10), address(1), flag=1),
                ],
            ),
            TransactionLogs(
                signature="b",
                block_time=200,
                log_lines=[
                    builders.trade_log(address(11), address(1), flag=0),
                    builders.trade_log(address(11), address(2), flag=1),
                ],
            ),
        ]

        events = decode_trade_events(txs, trader_filter=address(1))

        assert [(e.signature, e.direction) for e in events] == [
            ("a", TradeDirection.BUY),
            ("b", TradeDirection.SELL),
        ]
        assert events[1].timestamp == 200


class TestAccountDecoders:
    def test_bonding_curve(self, address, builders) -> None:
        data = builders.curve_data(
            address(10),
            address(3),
            virtual_sol=40_000_000_000,
            virtual_token=800_000_000_000,
            real_sol_reserves=10_000_000_000,
            completed=True,
        )
        assert len(data) == BONDING_CURVE_SIZE

        curve = decode_bonding_curve("curve1", data)

        assert curve is not None
        assert curve.mint == address(10)
        assert curve.creator == address(3)
        assert curve.real_sol_reserves == 10_000_000_000
        assert curve.start_time == 1_700_000_000
        assert curve.completed is True
        assert curve.migrated is False
        assert curve.graduated is True
        assert curve.current_price == pytest.approx(40.0 / 800_000.0)

    def test_bonding_curve_rejects_short_or_foreign(self, address, builders) -> None:
        data = builders.curve_data(address(10), address(3))
        assert decode_bonding_curve("c", data[:100]) is None
        assert decode_bonding_curve("c", bytes(8) + data[8:]) is None

    def test_token_account(self, address, builders) -> None:
        bal = decode_token_account(builders.token_account_data(address(10), address(1), 2_500_000))
        assert bal is not None
        assert bal.mint == address(10)
        assert bal.owner == address(1)
        assert bal.amount == 2.5
        assert decode_token_account(bytes(71)) is None

    def test_referral(self, address, builders) -> None:
        ref = decode_referral("pda", builders.referral_data(address(1), 1_500_000_000, 7))
        assert ref is not None
        assert ref.referrer == address(1)
        assert ref.total_earned_sol == 1.5
        assert ref.trade_count == 7
        assert decode_referral("pda", bytes(57)) is None


class TestPda:
    def test_pdas_are_deterministic_and_distinct(self, address) -> None:
        mint = address(10)
        assert bonding_curve_pda(mint) == bonding_curve_pda(mint)
        assert bonding_curve_pda(mint) != bonding_curve_pda(address(11))
        assert referral_pda(mint) != bonding_curve_pda(mint)
        assert is_valid_address(bonding_curve_pda(mint))

    def test_is_valid_address(self, address) -> None:
        assert is_valid_address(address(1))
        assert not is_valid_address("not-an-address")
        assert not is_valid_address("")

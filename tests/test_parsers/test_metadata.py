"""Tests for DAS metadata parsing and batched lookup."""

import pytest

from src.parsers.launchpad.models import TokenMetadata
from src.parsers.metadata import display_name, display_symbol, fetch_batch_metadata, parse_asset
from src.parsers.rpc.pool import RpcPool


class TestParseAsset:
    def test_full_asset(self, builders) -> None:
        meta = parse_asset(
            builders.das_asset(" Doge Moon ", "DGM", image="https://img/x.png", uri="https://meta/x.json")
        )
        assert meta.name == "Doge Moon"
        assert meta.symbol == "DGM"
        assert meta.image == "https://img/x.png"
        assert meta.uri == "https://meta/x.json"

    def test_empty_asset(self) -> None:
        meta = parse_asset({})
        assert meta == TokenMetadata()

    def test_display_fallbacks(self) -> None:
        mint = "7xKXtg2CW87d97TXJSDpbD5jBkheTqA83TZRuJosgAsU"
        assert display_name(mint, None) == "Token 7xKXtg"
        assert display_symbol(mint, None) == "7XKX"
        assert display_name(mint, TokenMetadata(name="", symbol="")) == "Token 7xKXtg"
        assert display_name(mint, TokenMetadata(name="Real")) == "Real"


class TestFetchBatchMetadata:
    @pytest.mark.asyncio
    async def test_failures_are_dropped(self, fake_client, builders) -> None:
        fake_client.assets = {
            "MintA": builders.das_asset("Alpha", "ALP", uri="u1"),
            "MintC": builders.das_asset("Gamma", "GAM"),
        }
        pool = RpcPool([fake_client])

        metadata = await fetch_batch_metadata(pool, ["MintA", "MintB", "MintC", "MintA"])

        assert set(metadata) == {"MintA", "MintC"}
        assert metadata["MintA"].uri == "u1"
        # Duplicates are looked up once
        assert [arg for _, arg in fake_client.calls].count("MintA") == 1

    @pytest.mark.asyncio
    async def test_empty_input(self, fake_client) -> None:
        assert await fetch_batch_metadata(RpcPool([fake_client]), []) == {}
        assert fake_client.calls == []

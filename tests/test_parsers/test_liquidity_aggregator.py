"""Tests for liquidity per trading pair."""

from decimal import Decimal

import pytest
from conftest import TOKEN, pair

from tokenscan.parsers.exceptions import FetchError, UpstreamError, ValidationError


class TestLiquidityAggregator:
    @pytest.mark.asyncio
    async def test_keeps_positive_liquidity_sorted_descending(self, make_services) -> None:
        payload = {
            "pairs": [
                pair("pulsex", liquidity=100),
                pair("pulsexv2", liquidity=500),
                pair("9inch", liquidity=-5),
            ]
        }
        services = make_services(dex_payload=payload)

        result = await services.liquidity.get_pairs_data(TOKEN)

        assert [p.dexId for p in result.pairs] == ["pulsexv2", "pulsex"]
        assert [p.liquidity_usd for p in result.pairs] == [Decimal(500), Decimal(100)]
        assert result.total_liquidity_usd == Decimal(600)
        assert len(result.warnings) == 1
        assert result.warnings[0].source == "liquidity"

    @pytest.mark.asyncio
    async def test_pairs_without_liquidity_are_dropped(self, make_services) -> None:
        payload = {"pairs": [pair("pulsex", liquidity=10.5), pair("sparkswap"), pair("zero", liquidity=0)]}
        services = make_services(dex_payload=payload)

        result = await services.liquidity.get_pairs_data(TOKEN)

        assert [p.dexId for p in result.pairs] == ["pulsex"]
        assert result.pairs[0].liquidity_usd == Decimal("10.5")

    @pytest.mark.asyncio
    async def test_malformed_pairs_are_skipped(self, make_services) -> None:
        broken = pair("pulsex", liquidity=300)
        del broken["baseToken"]
        payload = {"pairs": [broken, pair("pulsexv2", liquidity=200), "garbage"]}
        services = make_services(dex_payload=payload)

        result = await services.liquidity.get_pairs_data(TOKEN)

        assert [p.dexId for p in result.pairs] == ["pulsexv2"]
        assert {w.source for w in result.warnings} == {"dexscreener"}
        assert len(result.warnings) == 2

    @pytest.mark.asyncio
    async def test_null_pairs_is_upstream_error(self, make_services) -> None:
        services = make_services(dex_payload={"schemaVersion": "1.0.0", "pairs": None})

        with pytest.raises(UpstreamError, match="No pairs found"):
            await services.liquidity.get_pairs_data(TOKEN)

    @pytest.mark.asyncio
    async def test_non_object_response_is_upstream_error(self, make_services) -> None:
        services = make_services(dex_payload=["not", "an", "object"])

        with pytest.raises(UpstreamError, match="Invalid API response format"):
            await services.liquidity.get_pairs_data(TOKEN)

    @pytest.mark.asyncio
    async def test_no_valid_pairs_is_upstream_error(self, make_services) -> None:
        services = make_services(dex_payload={"pairs": [pair("pulsex", liquidity=0)]})

        with pytest.raises(UpstreamError, match="No valid liquidity pairs"):
            await services.liquidity.get_pairs_data(TOKEN)

    @pytest.mark.asyncio
    async def test_http_failure_is_fetch_error(self, make_services) -> None:
        services = make_services(dex_status=500)

        with pytest.raises(FetchError) as exc_info:
            await services.liquidity.get_pairs_data(TOKEN)
        assert exc_info.value.attempts == 3

    @pytest.mark.asyncio
    async def test_invalid_address_is_validation_error(self, make_services) -> None:
        services = make_services(dex_payload={"pairs": []})

        with pytest.raises(ValidationError):
            await services.liquidity.get_pairs_data("")

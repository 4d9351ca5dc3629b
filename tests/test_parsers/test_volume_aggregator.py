"""Tests for 24h volume share per pair."""

from decimal import Decimal
from unittest.mock import AsyncMock

import pytest
from conftest import TOKEN, pair
from eth_utils import to_checksum_address

from tokenscan.parsers.dexscreener.models import DexScreenerPair
from tokenscan.parsers.exceptions import UpstreamError
from tokenscan.parsers.volume_aggregator import VolumeAggregator, volume_share


class TestVolumeAggregator:
    @pytest.mark.asyncio
    async def test_shares_of_active_pairs(self, make_services) -> None:
        payload = {
            "pairs": [
                pair("pulsex", volume=100),
                pair("pulsexv2", volume=300),
                pair("idle", volume=0),
            ]
        }
        services = make_services(dex_payload=payload)

        result = await services.volume.get_volume_data(TOKEN)

        assert [p.dexId for p in result.pairs] == ["pulsexv2", "pulsex"]
        assert [p.percentage for p in result.pairs] == [Decimal("75.00"), Decimal("25.00")]
        assert result.total_volume == Decimal(400)
        assert result.dex_count == 2
        # idle pools are not a data problem
        assert result.warnings == []

    @pytest.mark.asyncio
    async def test_shares_sum_to_roughly_100(self, make_services) -> None:
        payload = {"pairs": [pair(f"dex{i}", volume=1) for i in range(3)]}
        services = make_services(dex_payload=payload)

        result = await services.volume.get_volume_data(TOKEN)

        assert all(p.percentage == Decimal("33.33") for p in result.pairs)
        total = sum(p.percentage for p in result.pairs)
        assert abs(total - 100) <= Decimal("0.01") * len(result.pairs)

    @pytest.mark.asyncio
    async def test_total_is_sum_of_pair_volumes(self, make_services) -> None:
        payload = {"pairs": [pair("a", volume="1234.56"), pair("b", volume="0.44"), pair("c")]}
        services = make_services(dex_payload=payload)

        result = await services.volume.get_volume_data(TOKEN)

        assert result.total_volume == sum(p.volume for p in result.pairs)
        assert result.total_volume == Decimal("1235.00")

    @pytest.mark.asyncio
    async def test_no_active_pairs_is_upstream_error(self, make_services) -> None:
        services = make_services(dex_payload={"pairs": [pair("idle", volume=0), pair("none")]})

        with pytest.raises(UpstreamError, match="No volume data"):
            await services.volume.get_volume_data(TOKEN)


def test_volume_share_rounds_half_up() -> None:
    assert volume_share(Decimal(1), Decimal(8)) == Decimal("12.50")
    assert volume_share(Decimal(1), Decimal(3)) == Decimal("33.33")
    assert volume_share(Decimal(2), Decimal(3)) == Decimal("66.67")


@pytest.mark.asyncio
async def test_passes_checksummed_address_to_client() -> None:
    dexscreener = AsyncMock()
    dexscreener.get_token_pairs.return_value = [
        DexScreenerPair.model_validate(pair("pulsex", volume=10))
    ]
    aggregator = VolumeAggregator(dexscreener)

    result = await aggregator.get_volume_data(TOKEN)

    assert result.pairs[0].percentage == Decimal("100.00")
    called_address = dexscreener.get_token_pairs.call_args.args[0]
    assert called_address == to_checksum_address(TOKEN)

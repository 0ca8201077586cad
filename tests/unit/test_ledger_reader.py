"""Tests for the HTTP and in-memory ledger readers."""
from datetime import UTC, datetime

import httpx
import pytest

from src.pm_common.enums import MarketStatus
from src.pm_common.errors import InvalidInputError, LedgerUnavailableError
from src.pm_market.domain.models import Market, Stake
from src.pm_market.infrastructure.ledger_reader import (
    HttpLedgerReader,
    market_from_payload,
    stake_from_payload,
)
from src.pm_market.infrastructure.memory_reader import InMemoryLedgerReader

MARKET_PAYLOAD = {
    "id": 1,
    "title": "HOME_v_AWAY",
    "start_time": 1777593600,
    "status": ["Active"],
    "reserves": ["300000000", 300000000, 300000000],
    "initial_odds": [400000, 300000, 290000],
    "staker_count": 4,
}
STAKE_PAYLOAD = {
    "id": 9,
    "staker": "GSTAKER",
    "market_id": 1,
    "outcome": 2,
    "amount": "100000000",
    "price": 290000,
}


def _reader(handler) -> HttpLedgerReader:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url="http://ledger")
    return HttpLedgerReader(client)


class TestPayloadParsing:
    def test_market(self) -> None:
        m = market_from_payload(MARKET_PAYLOAD)
        assert m.id == 1
        assert m.status == MarketStatus.ACTIVE
        assert m.reserves == (300_000000, 300_000000, 300_000000)
        assert m.initial_odds == (400000, 300000, 290000)
        assert m.start_time == datetime(2026, 5, 1, tzinfo=UTC)
        assert m.winning_outcome is None

    def test_settled_market_plain_status(self) -> None:
        m = market_from_payload({**MARKET_PAYLOAD, "status": "Settled", "winning_outcome": 0})
        assert m.status == MarketStatus.SETTLED
        assert m.winning_outcome == 0

    def test_stake(self) -> None:
        s = stake_from_payload(STAKE_PAYLOAD)
        assert s.shares == 100_000000
        assert s.entry_price == 290000
        assert s.claimed is False

    @pytest.mark.parametrize(
        "override",
        [
            {"reserves": [1, 1, 1, 1]},
            {"reserves": [5]},
            {"reserves": [1, -1, 1]},
            {"initial_odds": [500000, 490000]},
            {"initial_odds": [500000, 0, 490000]},
            {"status": "Settled", "winning_outcome": 3},
        ],
    )
    def test_rejects_snapshots_pricing_cannot_read(self, override) -> None:
        with pytest.raises(InvalidInputError):
            market_from_payload({**MARKET_PAYLOAD, **override})

    def test_empty_status_list(self) -> None:
        with pytest.raises(ValueError, match="empty status"):
            market_from_payload({**MARKET_PAYLOAD, "status": []})


class TestHttpLedgerReader:
    @pytest.mark.asyncio
    async def test_get_market(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.path == "/markets/1"
            return httpx.Response(200, json=MARKET_PAYLOAD)

        market = await _reader(handler).get_market(1)
        assert market is not None
        assert market.title == "HOME_v_AWAY"

    @pytest.mark.asyncio
    async def test_not_found_returns_none(self) -> None:
        reader = _reader(lambda request: httpx.Response(404))
        assert await reader.get_market(99) is None
        assert await reader.get_stake(99) is None
        assert await reader.get_current_odds(99) is None
        assert await reader.get_market_stakes(99) == []

    @pytest.mark.asyncio
    async def test_list_markets_passes_cursor(self) -> None:
        seen: dict[str, str] = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen.update(request.url.params)
            return httpx.Response(200, json={"items": [MARKET_PAYLOAD], "next_cursor": "1"})

        page = await _reader(handler).list_markets("0", 1)
        assert seen == {"cursor": "0", "limit": "1"}
        assert [m.id for m in page.markets] == [1]
        assert page.next_cursor == "1"

    @pytest.mark.asyncio
    async def test_odds_stakes_and_liquidity(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            routes = {
                "/markets/1/odds": [333333, 333333, 333333],
                "/markets/1/stakes": [STAKE_PAYLOAD],
                "/stakes/9": STAKE_PAYLOAD,
                "/liquidity": {"total_liquidity": "900000000"},
            }
            return httpx.Response(200, json=routes[request.url.path])

        reader = _reader(handler)
        assert await reader.get_current_odds(1) == [333333, 333333, 333333]
        assert [s.id for s in await reader.get_market_stakes(1)] == [9]
        assert (await reader.get_stake(9)).outcome == 2  # type: ignore[union-attr]
        assert await reader.total_liquidity() == 900_000000

    @pytest.mark.asyncio
    async def test_server_error_raises_unavailable(self) -> None:
        reader = _reader(lambda request: httpx.Response(502))
        with pytest.raises(LedgerUnavailableError):
            await reader.get_market(1)

    @pytest.mark.asyncio
    async def test_transport_error_raises_unavailable(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(LedgerUnavailableError):
            await _reader(handler).total_liquidity()

    @pytest.mark.asyncio
    async def test_malformed_market_raises_unavailable(self) -> None:
        reader = _reader(lambda request: httpx.Response(200, json={"id": 1}))
        with pytest.raises(LedgerUnavailableError, match="malformed"):
            await reader.get_market(1)

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "override",
        [{"reserves": [1, 1, 1, 1]}, {"initial_odds": [500000, 490000]}, {"status": []}],
    )
    async def test_invalid_snapshot_raises_unavailable(self, override) -> None:
        reader = _reader(lambda request: httpx.Response(200, json={**MARKET_PAYLOAD, **override}))
        with pytest.raises(LedgerUnavailableError, match="malformed market 1"):
            await reader.get_market(1)

    @pytest.mark.asyncio
    async def test_listing_skips_bad_snapshot(self, caplog) -> None:
        bad = {**MARKET_PAYLOAD, "id": 1, "initial_odds": [500000, 490000]}
        good = {**MARKET_PAYLOAD, "id": 2}

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"items": [bad, good], "next_cursor": "2"})

        page = await _reader(handler).list_markets(None, 2)

        assert [m.id for m in page.markets] == [2]
        assert page.next_cursor == "2"
        assert "Skipping malformed market" in caplog.text

    @pytest.mark.asyncio
    async def test_listing_without_items_raises_unavailable(self) -> None:
        reader = _reader(lambda request: httpx.Response(200, json={"next_cursor": None}))
        with pytest.raises(LedgerUnavailableError, match="malformed market listing"):
            await reader.list_markets(None, 10)

    @pytest.mark.asyncio
    async def test_invalid_json_raises_unavailable(self) -> None:
        reader = _reader(lambda request: httpx.Response(200, content=b"<html>"))
        with pytest.raises(LedgerUnavailableError, match="invalid JSON"):
            await reader.get_market(1)


def _market(market_id: int, **kwargs) -> Market:
    defaults = dict(
        id=market_id, title=f"M{market_id}", start_time=datetime(2026, 5, 1, tzinfo=UTC),
        status=MarketStatus.ACTIVE, reserves=(300_000000, 300_000000, 300_000000),
    )
    defaults.update(kwargs)
    return Market(**defaults)


class TestInMemoryLedgerReader:
    @pytest.mark.asyncio
    async def test_cursor_pagination(self) -> None:
        reader = InMemoryLedgerReader(markets=[_market(i) for i in (1, 2, 3)])

        first = await reader.list_markets(None, 2)
        second = await reader.list_markets(first.next_cursor, 2)

        assert [m.id for m in first.markets] == [1, 2]
        assert first.next_cursor == "2"
        assert [m.id for m in second.markets] == [3]
        assert second.next_cursor is None

    @pytest.mark.asyncio
    async def test_current_odds_from_reserves(self) -> None:
        reader = InMemoryLedgerReader(markets=[_market(1)])
        assert await reader.get_current_odds(1) == [333333, 333333, 333333]
        assert await reader.get_current_odds(2) is None

    @pytest.mark.asyncio
    async def test_current_odds_of_empty_pool_are_static(self) -> None:
        reader = InMemoryLedgerReader(
            markets=[_market(1, reserves=(0, 0, 0), initial_odds=(400000, 300000, 290000))]
        )
        assert await reader.get_current_odds(1) == [400000, 300000, 290000]

    @pytest.mark.asyncio
    async def test_set_reserves_replaces_snapshot(self) -> None:
        reader = InMemoryLedgerReader(markets=[_market(1)])
        before = await reader.get_market(1)
        reader.set_reserves(1, (400_000000, 300_000000, 300_000000))
        after = await reader.get_market(1)
        assert before.reserves == (300_000000, 300_000000, 300_000000)  # type: ignore[union-attr]
        assert after.total_reserve == 1_000_000000  # type: ignore[union-attr]

    @pytest.mark.asyncio
    async def test_market_stakes(self) -> None:
        stakes = [
            Stake(id=1, staker="A", market_id=1, outcome=0, shares=1, entry_price=1),
            Stake(id=2, staker="B", market_id=2, outcome=0, shares=1, entry_price=1),
        ]
        reader = InMemoryLedgerReader(stakes=stakes, total_liquidity=5)
        assert [s.id for s in await reader.get_market_stakes(1)] == [1]
        assert await reader.total_liquidity() == 5

    def test_rejects_mismatched_starting_odds(self) -> None:
        bad = _market(1, reserves=(0, 0, 0), initial_odds=(500000, 490000))
        with pytest.raises(InvalidInputError, match="starting odds"):
            InMemoryLedgerReader(markets=[bad])

    def test_set_reserves_is_checked(self) -> None:
        reader = InMemoryLedgerReader(markets=[_market(1)])
        with pytest.raises(InvalidInputError, match="outcomes"):
            reader.set_reserves(1, (1, 1, 1, 1))

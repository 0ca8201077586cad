"""Shared test fixtures."""
from datetime import UTC, datetime

import pytest
from httpx import ASGITransport, AsyncClient

from src.main import app
from src.pm_common.enums import MarketStatus
from src.pm_market.domain.models import Market, Stake
from src.pm_market.infrastructure.ledger_reader import get_ledger_reader
from src.pm_market.infrastructure.memory_reader import InMemoryLedgerReader


@pytest.fixture
def ledger() -> InMemoryLedgerReader:
    """Two active markets (one unfunded), one settled, and a few stakes."""
    start = datetime(2026, 5, 1, tzinfo=UTC)
    return InMemoryLedgerReader(
        markets=[
            Market(id=1, title="HOME_v_AWAY", start_time=start, status=MarketStatus.ACTIVE,
                   reserves=(300_000000, 300_000000, 300_000000),
                   initial_odds=(400000, 300000, 290000), staker_count=2),
            Market(id=2, title="NEW_MATCH", start_time=start, status=MarketStatus.ACTIVE,
                   reserves=(0, 0, 0), initial_odds=(330000, 330000, 330000)),
            Market(id=3, title="OLD_MATCH", start_time=start, status=MarketStatus.SETTLED,
                   reserves=(500_000000, 500_000000), winning_outcome=1),
        ],
        stakes=[
            Stake(id=10, staker="GSTAKER", market_id=1, outcome=0,
                  shares=100_000000, entry_price=300000),
            Stake(id=11, staker="GOTHER", market_id=1, outcome=2,
                  shares=50_000000, entry_price=290000),
            Stake(id=12, staker="GSTAKER", market_id=3, outcome=1,
                  shares=20_000000, entry_price=500000),
        ],
        total_liquidity=900_000000,
    )


@pytest.fixture
async def client(ledger: InMemoryLedgerReader) -> AsyncClient:
    """Async HTTP client for testing FastAPI endpoints against the in-memory ledger."""
    app.dependency_overrides[get_ledger_reader] = lambda: ledger
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()

"""In-memory ledger reader for tests and offline runs.

Cursor is the last returned market id as a decimal string. Snapshots are
checked on the way in, like the HTTP reader does, so a bad fixture fails
where it is stored.
"""

from dataclasses import replace

from src.pm_market.domain.models import Market, MarketPage, Stake
from src.pm_pricing.domain.odds import normalize
from src.pm_pricing.domain.reserves import check_market


class InMemoryLedgerReader:
    def __init__(
        self,
        markets: list[Market] | None = None,
        stakes: list[Stake] | None = None,
        total_liquidity: int = 0,
    ) -> None:
        self._markets: dict[int, Market] = {}
        for market in markets or []:
            self.put_market(market)
        self._stakes: dict[int, Stake] = {s.id: s for s in stakes or []}
        self._total_liquidity = total_liquidity

    def put_market(self, market: Market) -> None:
        check_market(market)
        self._markets[market.id] = market

    def set_reserves(self, market_id: int, reserves: tuple[int, ...]) -> None:
        self.put_market(replace(self._markets[market_id], reserves=reserves))

    def put_stake(self, stake: Stake) -> None:
        self._stakes[stake.id] = stake

    async def get_market(self, market_id: int) -> Market | None:
        return self._markets.get(market_id)

    async def list_markets(self, cursor: str | None, limit: int) -> MarketPage:
        after = int(cursor) if cursor else 0
        ids = sorted(i for i in self._markets if i > after)
        page = [self._markets[i] for i in ids[:limit]]
        next_cursor = str(page[-1].id) if len(ids) > limit and page else None
        return MarketPage(markets=page, next_cursor=next_cursor)

    async def get_current_odds(self, market_id: int) -> list[int] | None:
        market = self._markets.get(market_id)
        if market is None:
            return None
        if market.total_reserve == 0:
            return list(market.initial_odds) or None
        return normalize(market.reserves)

    async def get_stake(self, stake_id: int) -> Stake | None:
        return self._stakes.get(stake_id)

    async def get_market_stakes(self, market_id: int) -> list[Stake]:
        return [s for s in self._stakes.values() if s.market_id == market_id]

    async def total_liquidity(self) -> int:
        return self._total_liquidity

# src/pm_market/domain/repository.py
"""Ledger reader Protocol - dependency inversion for testability.

Unit tests inject a mock or the in-memory reader conforming to this Protocol.
Infrastructure provides the HTTP implementation against the contract read
gateway. All reads are snapshots; nothing here mutates ledger state.
"""

from typing import Protocol

from src.pm_market.domain.models import Market, MarketPage, Stake


class LedgerReaderProtocol(Protocol):
    async def get_market(self, market_id: int) -> Market | None: ...

    async def list_markets(self, cursor: str | None, limit: int) -> MarketPage: ...

    async def get_current_odds(self, market_id: int) -> list[int] | None: ...

    async def get_stake(self, stake_id: int) -> Stake | None: ...

    async def get_market_stakes(self, market_id: int) -> list[Stake]: ...

    async def total_liquidity(self) -> int: ...

"""Domain models for pm_market - immutable ledger snapshots, no business logic."""

from dataclasses import dataclass, field
from datetime import datetime

from src.pm_common.enums import MarketStatus


@dataclass(frozen=True)
class Market:
    id: int
    title: str
    start_time: datetime
    status: MarketStatus
    reserves: tuple[int, ...]                # micros per outcome, 2 or 3 entries
    initial_odds: tuple[int, ...] = ()       # static odds at creation, micros
    staker_count: int = 0
    winning_outcome: int | None = None       # set only when SETTLED

    @property
    def total_reserve(self) -> int:
        return sum(self.reserves)

    @property
    def outcome_count(self) -> int:
        return len(self.reserves)

    @property
    def is_active(self) -> bool:
        return self.status == MarketStatus.ACTIVE


@dataclass(frozen=True)
class Stake:
    id: int
    staker: str
    market_id: int
    outcome: int
    shares: int          # micros
    entry_price: int     # micros, price paid per share at stake time
    claimed: bool = False

    @property
    def is_open(self) -> bool:
        return self.shares > 0 and not self.claimed


@dataclass(frozen=True)
class MarketPage:
    """One page of a cursor listing."""

    markets: list[Market] = field(default_factory=list)
    next_cursor: str | None = None

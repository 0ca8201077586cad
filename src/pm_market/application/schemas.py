"""Pydantic schemas for pm_market API responses.

Odds are normalized client-side from reserves. A market whose pool is still
empty shows its static starting odds; with neither, odds are null
("market not yet priced").
"""

import logging

from pydantic import BaseModel

from src.pm_common.errors import AppError, NoLiquidityError
from src.pm_common.micros import micros_to_display, price_to_display
from src.pm_market.domain.models import Market
from src.pm_pricing.domain.odds import normalize

logger = logging.getLogger(__name__)


def market_odds(m: Market) -> list[int] | None:
    """Normalized odds, falling back to the static starting odds for an empty pool."""
    try:
        return normalize(m.reserves, fallback=m.initial_odds or None)
    except NoLiquidityError:
        return None
    except AppError as exc:
        logger.warning("Cannot price market %d: %s", m.id, exc.message)
        return None


# ---------------------------------------------------------------------------
# Outcome price
# ---------------------------------------------------------------------------


class OutcomePriceOut(BaseModel):
    outcome: int
    price_micros: int
    price_display: str


def prices_out(prices: list[int] | None) -> list[OutcomePriceOut] | None:
    if prices is None:
        return None
    return [
        OutcomePriceOut(outcome=i, price_micros=p, price_display=price_to_display(p))
        for i, p in enumerate(prices)
    ]


# ---------------------------------------------------------------------------
# Market list item / detail
# ---------------------------------------------------------------------------


class MarketListItem(BaseModel):
    id: int
    title: str
    start_time: str
    status: str
    outcome_count: int
    total_reserve_micros: int
    total_reserve_display: str
    odds: list[OutcomePriceOut] | None

    @classmethod
    def from_domain(cls, m: Market) -> "MarketListItem":
        return cls(
            id=m.id,
            title=m.title,
            start_time=m.start_time.isoformat(),
            status=m.status.value,
            outcome_count=m.outcome_count,
            total_reserve_micros=m.total_reserve,
            total_reserve_display=micros_to_display(m.total_reserve),
            odds=prices_out(market_odds(m)),
        )


class MarketListResponse(BaseModel):
    items: list[MarketListItem]
    next_cursor: str | None
    has_more: bool


class MarketDetail(BaseModel):
    id: int
    title: str
    start_time: str
    status: str
    outcome_count: int
    reserves_micros: list[int]
    total_reserve_micros: int
    total_reserve_display: str
    initial_odds_micros: list[int]
    staker_count: int
    winning_outcome: int | None
    odds: list[OutcomePriceOut] | None

    @classmethod
    def from_domain(cls, m: Market) -> "MarketDetail":
        return cls(
            id=m.id,
            title=m.title,
            start_time=m.start_time.isoformat(),
            status=m.status.value,
            outcome_count=m.outcome_count,
            reserves_micros=list(m.reserves),
            total_reserve_micros=m.total_reserve,
            total_reserve_display=micros_to_display(m.total_reserve),
            initial_odds_micros=list(m.initial_odds),
            staker_count=m.staker_count,
            winning_outcome=m.winning_outcome,
            odds=prices_out(market_odds(m)),
        )


# ---------------------------------------------------------------------------
# Odds with contract cross-check
# ---------------------------------------------------------------------------


class OddsResponse(BaseModel):
    market_id: int
    odds: list[OutcomePriceOut] | None
    rounding_residue_micros: int | None
    contract_odds_micros: list[int] | None
    drift_micros: int | None
    consistent: bool | None   # None when either side is unavailable

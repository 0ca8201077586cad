"""Reserve-reading primitive shared by quoting, valuation and odds.

A price is the outcome's share of the pool: reserve * SCALE // total.
"""

from collections.abc import Sequence

from src.pm_common.errors import InvalidInputError
from src.pm_common.micros import SCALE, mul_div
from src.pm_market.domain.models import Market

MIN_OUTCOMES = 2
MAX_OUTCOMES = 3


def check_reserves(reserves: Sequence[int]) -> None:
    """Reject reserve sets with the wrong outcome count or negative entries."""
    if not MIN_OUTCOMES <= len(reserves) <= MAX_OUTCOMES:
        raise InvalidInputError(
            f"expected {MIN_OUTCOMES}-{MAX_OUTCOMES} outcomes, got {len(reserves)}"
        )
    for reserve in reserves:
        if reserve < 0:
            raise InvalidInputError(f"reserve must be non-negative, got {reserve}")


def check_outcome(reserves: Sequence[int], outcome: int) -> None:
    if not 0 <= outcome < len(reserves):
        raise InvalidInputError(f"outcome {outcome} out of range for {len(reserves)} outcomes")


def total_reserve(reserves: Sequence[int]) -> int:
    return sum(reserves)


def outcome_price(reserves: Sequence[int], outcome: int) -> int:
    """Current price of one outcome in micros; 0 for an empty pool."""
    total = total_reserve(reserves)
    if total == 0:
        return 0
    return mul_div(reserves[outcome], SCALE, total)


def check_market(market: Market) -> None:
    """Reject a ledger snapshot the pricing functions cannot safely read.

    Starting odds are either absent or one positive price per outcome; a
    winning outcome must index into the reserves.
    """
    check_reserves(market.reserves)
    if market.initial_odds:
        if len(market.initial_odds) != len(market.reserves):
            raise InvalidInputError(
                f"market {market.id}: {len(market.initial_odds)} starting odds "
                f"for {len(market.reserves)} outcomes"
            )
        if any(price <= 0 for price in market.initial_odds):
            raise InvalidInputError(f"market {market.id}: starting odds must be positive")
    if market.winning_outcome is not None:
        check_outcome(market.reserves, market.winning_outcome)

"""Odds normalization, live change detection and starting-odds validation."""

from collections.abc import Sequence

from src.pm_common.errors import InvalidInputError, NoLiquidityError, OddsSumMismatchError
from src.pm_common.micros import SCALE, mul_div
from src.pm_pricing.domain.reserves import (
    MAX_OUTCOMES,
    MIN_OUTCOMES,
    check_reserves,
    total_reserve,
)

MIN_PRICE = 10_000              # $0.01, contract floor per outcome
TOTAL_PRICE_SUM = 990_000       # $0.99, starting odds carry a 1% house edge
ODDS_SUM_TOLERANCE = 10_000     # $0.01, exclusive
DEFAULT_CHANGE_EPSILON = 1_000  # 0.001 in display units


def normalize(reserves: Sequence[int], fallback: Sequence[int] | None = None) -> list[int]:
    """Per-outcome prices from reserves, summing to SCALE minus a truncation residue.

    Each price truncates independently, so the sum may fall short of SCALE by
    up to N-1 micros; callers must not assume exact equality.
    """
    check_reserves(reserves)
    total = total_reserve(reserves)
    if total == 0:
        if fallback is None:
            raise NoLiquidityError("total reserve is zero and no fallback odds were supplied")
        if len(fallback) != len(reserves):
            raise InvalidInputError(
                f"fallback has {len(fallback)} outcomes, reserves have {len(reserves)}"
            )
        return list(fallback)
    return [mul_div(reserve, SCALE, total) for reserve in reserves]


def rounding_residue(prices: Sequence[int]) -> int:
    return SCALE - sum(prices)


def has_price_changed(old: int, new: int, epsilon: int = DEFAULT_CHANGE_EPSILON) -> bool:
    return abs(new - old) > epsilon


def price_diffs(
    old_prices: Sequence[int] | None,
    new_prices: Sequence[int],
    epsilon: int = DEFAULT_CHANGE_EPSILON,
) -> list[int]:
    """Indices of outcomes whose price moved by more than epsilon.

    With no previous prices (first observation or outcome count changed)
    every outcome counts as changed.
    """
    if old_prices is None or len(old_prices) != len(new_prices):
        return list(range(len(new_prices)))
    return [
        i
        for i, (old, new) in enumerate(zip(old_prices, new_prices))
        if has_price_changed(old, new, epsilon)
    ]


def odds_drift(contract_odds: Sequence[int], computed: Sequence[int]) -> int:
    """Largest per-outcome difference between contract odds and client recomputation."""
    if len(contract_odds) != len(computed):
        raise InvalidInputError(
            f"contract returned {len(contract_odds)} outcomes, expected {len(computed)}"
        )
    return max(abs(a - b) for a, b in zip(contract_odds, computed))


def validate_starting_odds(odds: Sequence[int]) -> None:
    """Check proposed creation odds; raise rather than adjust.

    Every outcome must be at least MIN_PRICE and the odds must sum to
    TOTAL_PRICE_SUM within ODDS_SUM_TOLERANCE (exclusive).
    """
    if not MIN_OUTCOMES <= len(odds) <= MAX_OUTCOMES:
        raise InvalidInputError(
            f"expected {MIN_OUTCOMES}-{MAX_OUTCOMES} outcomes, got {len(odds)}"
        )
    for price in odds:
        if price < MIN_PRICE:
            raise InvalidInputError(f"odds {price} below minimum {MIN_PRICE}")
    total = sum(odds)
    if abs(total - TOTAL_PRICE_SUM) >= ODDS_SUM_TOLERANCE:
        raise OddsSumMismatchError(total, TOTAL_PRICE_SUM)

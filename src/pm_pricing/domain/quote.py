"""Stake quoting - advisory estimate shown before a stake is submitted.

The executed ("quote") price is the mean of the pre-trade and post-trade
outcome price, i.e. a linear approximation of the pool moving from one state
to the other. It is not path-exact CPMM pricing and diverges from the
integral for large stakes; the contract decides the real price at execution.
"""

from collections.abc import Sequence
from dataclasses import dataclass

from src.pm_common.errors import InvalidInputError, NoLiquidityError
from src.pm_common.micros import SCALE, mul_div
from src.pm_pricing.domain.reserves import (
    check_outcome,
    check_reserves,
    outcome_price,
    total_reserve,
)


@dataclass(frozen=True)
class Quote:
    outcome: int
    stake_amount: int
    price_before: int
    price_after: int
    quote_price: int
    shares: int
    payout: int                     # settlement value of the shares (par)
    profit: int                     # payout - stake, may be negative
    slippage_percent_micros: int    # percent scaled by SCALE: 20_000120 == 20.000120%

    @property
    def slippage_percent(self) -> float:
        """Display-only float view of the slippage."""
        return self.slippage_percent_micros / SCALE


def slippage_percent_micros(price_before: int, price_after: int) -> int:
    """(after - before) / before * 100, scaled by SCALE; 0 when before is 0."""
    if price_before == 0:
        return 0
    delta = price_after - price_before
    # Truncate toward zero for negative deltas too.
    magnitude = mul_div(abs(delta) * 100, SCALE, price_before)
    return magnitude if delta >= 0 else -magnitude


def quote(
    reserves: Sequence[int],
    outcome: int,
    stake_amount: int,
    fallback_price: int | None = None,
) -> Quote:
    """Quote shares, payout and slippage for staking stake_amount on outcome.

    fallback_price (the market's static starting odds) prices a market whose
    pool is still empty. Without it an empty pool raises NoLiquidityError.
    """
    check_reserves(reserves)
    check_outcome(reserves, outcome)
    if stake_amount <= 0:
        raise InvalidInputError(f"stake amount must be positive, got {stake_amount}")

    total = total_reserve(reserves)
    if total > 0:
        price_before = outcome_price(reserves, outcome)
    elif fallback_price is not None:
        if fallback_price <= 0:
            raise InvalidInputError(f"fallback price must be positive, got {fallback_price}")
        price_before = fallback_price
    else:
        raise NoLiquidityError("total reserve is zero and no fallback odds were supplied")

    new_reserve = reserves[outcome] + stake_amount
    new_total = total + stake_amount
    price_after = mul_div(new_reserve, SCALE, new_total)

    quote_price = (price_before + price_after) // 2
    if quote_price == 0:
        raise InvalidInputError(f"stake {stake_amount} too small to price")

    shares = mul_div(stake_amount, SCALE, quote_price)
    return Quote(
        outcome=outcome,
        stake_amount=stake_amount,
        price_before=price_before,
        price_after=price_after,
        quote_price=quote_price,
        shares=shares,
        payout=shares,
        profit=shares - stake_amount,
        slippage_percent_micros=slippage_percent_micros(price_before, price_after),
    )

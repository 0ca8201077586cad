"""Position valuation: live price, settlement value and cash-out value.

Cash-out models removing the position's estimated payout from its outcome
reserve before settlement, prices the exit at the mean of the pre- and
post-exit price, then deducts a flat fee (bps of the gross value).
"""

from collections.abc import Sequence
from dataclasses import dataclass

from src.pm_common.enums import MarketStatus, PnlDirection
from src.pm_common.errors import InvalidInputError
from src.pm_common.micros import SCALE, calculate_fee, mul_div
from src.pm_market.domain.models import Market, Stake
from src.pm_pricing.domain.reserves import (
    check_outcome,
    check_reserves,
    outcome_price,
    total_reserve,
)

DEFAULT_CASHOUT_FEE_BPS = 500


@dataclass(frozen=True)
class PositionValue:
    shares: int
    current_price: int
    mark_value: int             # shares * current_price
    settlement_value: int       # par: one winning share redeems one unit
    price_after_exit: int
    avg_exit_price: int
    cashout_before_fee: int
    cashout_fee: int
    cashout_after_fee: int
    entry_value: int
    cashout_pnl: PnlDirection
    mark_pnl: PnlDirection


def classify_pnl(value: int, entry_value: int) -> PnlDirection:
    if value > entry_value:
        return PnlDirection.PROFIT
    if value < entry_value:
        return PnlDirection.LOSS
    return PnlDirection.FLAT


def exit_price_after(reserve: int, total: int, estimated_payout: int) -> int:
    """Outcome price once estimated_payout leaves the pool; floors at 0 when drained."""
    if reserve <= estimated_payout:
        return 0
    return mul_div(reserve - estimated_payout, SCALE, total - estimated_payout)


def value_position(
    shares: int,
    entry_price: int,
    reserves: Sequence[int],
    outcome: int,
    fee_bps: int = DEFAULT_CASHOUT_FEE_BPS,
) -> PositionValue:
    check_reserves(reserves)
    check_outcome(reserves, outcome)
    if shares < 0:
        raise InvalidInputError(f"share amount must not be negative, got {shares}")
    if entry_price < 0:
        raise InvalidInputError(f"entry price must not be negative, got {entry_price}")
    if not 0 <= fee_bps <= 10_000:
        raise InvalidInputError(f"fee must be within 0-10000 bps, got {fee_bps}")

    entry_value = mul_div(shares, entry_price, SCALE)
    total = total_reserve(reserves)
    reserve = reserves[outcome]
    price_before = outcome_price(reserves, outcome)

    if shares == 0 or total == 0:
        # Nothing to exit, or an empty pool that cannot be exited.
        price_after = avg_exit = gross = fee = 0
    else:
        estimated_payout = mul_div(shares, price_before, SCALE)
        price_after = exit_price_after(reserve, total, estimated_payout)
        avg_exit = (price_before + price_after) // 2
        gross = mul_div(shares, avg_exit, SCALE)
        fee = calculate_fee(gross, fee_bps)

    net = gross - fee
    mark_value = mul_div(shares, price_before, SCALE)
    return PositionValue(
        shares=shares,
        current_price=price_before if shares else 0,
        mark_value=mark_value,
        settlement_value=shares,
        price_after_exit=price_after,
        avg_exit_price=avg_exit,
        cashout_before_fee=gross,
        cashout_fee=fee,
        cashout_after_fee=net,
        entry_value=entry_value,
        cashout_pnl=classify_pnl(net, entry_value),
        mark_pnl=classify_pnl(mark_value, entry_value),
    )


def current_value(
    stake: Stake, market: Market, fee_bps: int = DEFAULT_CASHOUT_FEE_BPS
) -> PositionValue:
    """Value a stake against a market snapshot. Claimed stakes carry no shares."""
    if stake.market_id != market.id:
        raise InvalidInputError(
            f"stake {stake.id} belongs to market {stake.market_id}, not {market.id}"
        )
    shares = 0 if stake.claimed else stake.shares
    return value_position(shares, stake.entry_price, market.reserves, stake.outcome, fee_bps)


def liquidity_backed_value(shares: int, outcome_reserve: int, total_liquidity: int) -> int:
    """Share of contract liquidity backing a position, capped at par.

    shares * total_liquidity // outcome_reserve; the cap keeps a staker's own
    deposit from reading as profit. 0 when the outcome reserve is empty.
    """
    if shares < 0 or outcome_reserve < 0 or total_liquidity < 0:
        raise InvalidInputError("shares, reserve and liquidity must not be negative")
    if outcome_reserve == 0:
        return 0
    return min(shares * total_liquidity // outcome_reserve, shares)


def claimable_value(stake: Stake, market: Market) -> int:
    """Redemption value after settlement: par for a winning unclaimed stake, else 0."""
    if market.status != MarketStatus.SETTLED or market.winning_outcome is None:
        raise InvalidInputError(f"market {market.id} is not settled")
    if stake.claimed or stake.outcome != market.winning_outcome:
        return 0
    return stake.shares

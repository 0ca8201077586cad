"""PricingApplicationService - fetch snapshots, run the pure pricing core.

Read-only: nothing here submits transactions. Quotes are advisory and must be
re-requested whenever the stake amount or the market changes.
"""

import logging

from config.settings import settings
from src.pm_common.enums import MarketStatus
from src.pm_common.errors import (
    InvalidInputError,
    MarketNotActiveError,
    MarketNotFoundError,
    StakeNotFoundError,
)
from src.pm_market.domain.models import Market, Stake
from src.pm_market.domain.repository import LedgerReaderProtocol
from src.pm_pricing.application.schemas import (
    OddsValidationResponse,
    QuoteResponse,
    StakeValuationListResponse,
    StakeValuationResponse,
)
from src.pm_pricing.domain.odds import TOTAL_PRICE_SUM, validate_starting_odds
from src.pm_pricing.domain.quote import quote
from src.pm_pricing.domain.valuation import (
    claimable_value,
    current_value,
    liquidity_backed_value,
)

logger = logging.getLogger(__name__)


class PricingApplicationService:
    def __init__(self, fee_bps: int | None = None) -> None:
        self._fee_bps = settings.CASHOUT_FEE_BPS if fee_bps is None else fee_bps

    async def quote_stake(
        self,
        reader: LedgerReaderProtocol,
        market_id: int,
        outcome: int,
        amount: int,
    ) -> QuoteResponse:
        market = await reader.get_market(market_id)
        if market is None:
            raise MarketNotFoundError(market_id)
        if not market.is_active:
            raise MarketNotActiveError(market_id)
        if not 0 <= outcome < market.outcome_count:
            raise InvalidInputError(f"outcome {outcome} out of range for market {market_id}")

        fallback = market.initial_odds[outcome] if outcome < len(market.initial_odds) else None
        q = quote(market.reserves, outcome, amount, fallback_price=fallback)
        logger.debug(
            "Quote: market=%d outcome=%d stake=%d price=%d shares=%d",
            market_id, outcome, amount, q.quote_price, q.shares,
        )
        return QuoteResponse.from_quote(market_id, q)

    async def value_stake(
        self, reader: LedgerReaderProtocol, stake_id: int
    ) -> StakeValuationResponse:
        stake = await reader.get_stake(stake_id)
        if stake is None:
            raise StakeNotFoundError(stake_id)
        market = await reader.get_market(stake.market_id)
        if market is None:
            raise MarketNotFoundError(stake.market_id)
        liquidity = await reader.total_liquidity()
        return self._value(stake, market, liquidity)

    async def list_staker_stakes(
        self, reader: LedgerReaderProtocol, staker: str, market_id: int
    ) -> StakeValuationListResponse:
        market = await reader.get_market(market_id)
        if market is None:
            raise MarketNotFoundError(market_id)
        stakes = [s for s in await reader.get_market_stakes(market_id) if s.staker == staker]
        liquidity = await reader.total_liquidity() if stakes else 0
        items = [self._value(s, market, liquidity) for s in stakes]
        return StakeValuationListResponse(items=items, total=len(items))

    def validate_odds(self, odds: list[int]) -> OddsValidationResponse:
        """Raises OddsSumMismatchError / InvalidInputError when rejected."""
        validate_starting_odds(odds)
        return OddsValidationResponse(
            valid=True, sum_micros=sum(odds), target_micros=TOTAL_PRICE_SUM
        )

    def _value(self, stake: Stake, market: Market, liquidity: int) -> StakeValuationResponse:
        value = current_value(stake, market, self._fee_bps)
        shares = 0 if stake.claimed else stake.shares
        backed = liquidity_backed_value(shares, market.reserves[stake.outcome], liquidity)
        claimable = claimable_value(stake, market) if market.status == MarketStatus.SETTLED else None
        return StakeValuationResponse.from_value(
            stake,
            value,
            liquidity_backed=backed,
            cashout_available=market.is_active and stake.is_open,
            claimable=claimable,
        )

"""Request/response schemas for quoting, valuation and odds validation."""
from pydantic import BaseModel, Field, model_validator

from src.pm_common.micros import micros_to_display, parse_amount, price_to_display
from src.pm_market.domain.models import Stake
from src.pm_pricing.domain.quote import Quote
from src.pm_pricing.domain.valuation import PositionValue


class QuoteRequest(BaseModel):
    """Stake amount as micros, or as a decimal string such as "12.5"."""

    market_id: int = Field(gt=0)
    outcome: int = Field(ge=0, le=2, description="0=home, 1=draw, 2=away")
    amount_micros: int | None = Field(None, gt=0, description="Stake amount in micro-units")
    amount: str | None = Field(None, description="Stake amount as a decimal string")

    @model_validator(mode="after")
    def _resolve_amount(self) -> "QuoteRequest":
        if self.amount is not None:
            micros = parse_amount(self.amount)
            if self.amount_micros is not None and self.amount_micros != micros:
                raise ValueError("amount and amount_micros disagree")
            self.amount_micros = micros
        if self.amount_micros is None:
            raise ValueError("amount or amount_micros is required")
        if self.amount_micros <= 0:
            raise ValueError(f"amount must be positive, got {self.amount_micros}")
        return self


class QuoteResponse(BaseModel):
    market_id: int
    outcome: int
    stake_micros: int
    price_before_micros: int
    price_after_micros: int
    quote_price_micros: int
    shares_micros: int
    payout_micros: int
    profit_micros: int
    slippage_percent_micros: int
    price_before_display: str
    quote_price_display: str
    slippage_display: str
    payout_display: str
    profit_display: str

    @classmethod
    def from_quote(cls, market_id: int, q: Quote) -> "QuoteResponse":
        return cls(
            market_id=market_id,
            outcome=q.outcome,
            stake_micros=q.stake_amount,
            price_before_micros=q.price_before,
            price_after_micros=q.price_after,
            quote_price_micros=q.quote_price,
            shares_micros=q.shares,
            payout_micros=q.payout,
            profit_micros=q.profit,
            slippage_percent_micros=q.slippage_percent_micros,
            price_before_display=price_to_display(q.price_before),
            quote_price_display=price_to_display(q.quote_price),
            slippage_display=f"{q.slippage_percent:.2f}%",
            payout_display=micros_to_display(q.payout),
            profit_display=micros_to_display(q.profit),
        )


class StakeValuationResponse(BaseModel):
    stake_id: int
    market_id: int
    outcome: int
    shares_micros: int
    entry_price_micros: int
    current_price_micros: int
    mark_value_micros: int
    settlement_value_micros: int
    cashout_before_fee_micros: int
    cashout_fee_micros: int
    cashout_after_fee_micros: int
    entry_value_micros: int
    liquidity_backed_value_micros: int
    cashout_pnl: str
    mark_pnl: str
    cashout_available: bool
    claimable_micros: int | None   # set once the market is settled
    current_price_display: str
    settlement_value_display: str
    cashout_display: str

    @classmethod
    def from_value(
        cls,
        stake: Stake,
        v: PositionValue,
        liquidity_backed: int,
        cashout_available: bool,
        claimable: int | None,
    ) -> "StakeValuationResponse":
        return cls(
            stake_id=stake.id,
            market_id=stake.market_id,
            outcome=stake.outcome,
            shares_micros=v.shares,
            entry_price_micros=stake.entry_price,
            current_price_micros=v.current_price,
            mark_value_micros=v.mark_value,
            settlement_value_micros=v.settlement_value,
            cashout_before_fee_micros=v.cashout_before_fee,
            cashout_fee_micros=v.cashout_fee,
            cashout_after_fee_micros=v.cashout_after_fee,
            entry_value_micros=v.entry_value,
            liquidity_backed_value_micros=liquidity_backed,
            cashout_pnl=v.cashout_pnl.value,
            mark_pnl=v.mark_pnl.value,
            cashout_available=cashout_available,
            claimable_micros=claimable,
            current_price_display=price_to_display(v.current_price),
            settlement_value_display=micros_to_display(v.settlement_value),
            cashout_display=micros_to_display(v.cashout_after_fee),
        )


class StakeValuationListResponse(BaseModel):
    items: list[StakeValuationResponse]
    total: int


class OddsValidationRequest(BaseModel):
    odds_micros: list[int] = Field(min_length=2, max_length=3)


class OddsValidationResponse(BaseModel):
    valid: bool
    sum_micros: int
    target_micros: int

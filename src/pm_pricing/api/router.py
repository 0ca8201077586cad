"""Pricing endpoints: quotes, stake valuation, odds validation, live boards.

POST /quotes                          - advisory stake quote
GET  /stakes/{stake_id}/valuation     - position value, cash-out after fee
GET  /stakers/{staker}/stakes         - valuations of a staker's stakes in a market
POST /odds/validate                   - starting-odds check for market creation
GET  /live/odds, GET /live/stakes     - last values seen by the refresh loops
"""
from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request

from config.settings import settings
from src.pm_common.response import ApiResponse, success_response
from src.pm_market.domain.repository import LedgerReaderProtocol
from src.pm_market.infrastructure.ledger_reader import get_ledger_reader
from src.pm_pricing.application.live import odds_board, stake_board
from src.pm_pricing.application.schemas import OddsValidationRequest, QuoteRequest
from src.pm_pricing.application.service import PricingApplicationService

router = APIRouter(tags=["pricing"])

_service = PricingApplicationService()


def _track_stakes(stake_ids: list[int]) -> None:
    # Only the stake refresh loop prunes the board; without it nothing would
    if not settings.LIVE_REFRESH_ENABLED:
        return
    for stake_id in stake_ids:
        stake_board.track(stake_id)


@router.post("/quotes")
async def create_quote(
    body: QuoteRequest,
    request: Request,
    reader: Annotated[LedgerReaderProtocol, Depends(get_ledger_reader)],
) -> ApiResponse:
    result = await _service.quote_stake(reader, body.market_id, body.outcome, body.amount_micros)
    return success_response(result.model_dump(), request)


@router.get("/stakes/{stake_id}/valuation")
async def get_stake_valuation(
    stake_id: int,
    request: Request,
    reader: Annotated[LedgerReaderProtocol, Depends(get_ledger_reader)],
) -> ApiResponse:
    result = await _service.value_stake(reader, stake_id)
    _track_stakes([stake_id])
    return success_response(result.model_dump(), request)


@router.get("/stakers/{staker}/stakes")
async def list_staker_stakes(
    staker: str,
    request: Request,
    reader: Annotated[LedgerReaderProtocol, Depends(get_ledger_reader)],
    market_id: int = Query(..., gt=0),
) -> ApiResponse:
    result = await _service.list_staker_stakes(reader, staker, market_id)
    _track_stakes([item.stake_id for item in result.items])
    return success_response(result.model_dump(), request)


@router.post("/odds/validate")
async def validate_odds(body: OddsValidationRequest, request: Request) -> ApiResponse:
    result = _service.validate_odds(body.odds_micros)
    return success_response(result.model_dump(), request)


@router.get("/live/odds")
async def live_odds(request: Request) -> ApiResponse:
    return success_response({str(k): v for k, v in odds_board.snapshot().items()}, request)


@router.get("/live/stakes")
async def live_stakes(request: Request) -> ApiResponse:
    return success_response({str(k): v for k, v in stake_board.snapshot().items()}, request)

"""pm_market REST endpoints.

GET /markets                    - cursor-paginated listing with odds
GET /markets/{market_id}        - full detail
GET /markets/{market_id}/odds   - normalized odds + contract cross-check
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request

from src.pm_common.response import ApiResponse, success_response
from src.pm_market.application.service import MarketApplicationService
from src.pm_market.domain.repository import LedgerReaderProtocol
from src.pm_market.infrastructure.ledger_reader import get_ledger_reader

router = APIRouter(prefix="/markets", tags=["markets"])

_service = MarketApplicationService()


@router.get("")
async def list_markets(
    request: Request,
    reader: Annotated[LedgerReaderProtocol, Depends(get_ledger_reader)],
    status: str | None = Query(
        None, description="Filter by status. Default: ACTIVE. Use ALL for no filter."
    ),
    limit: int = Query(20, ge=1, le=100),
    cursor: str | None = Query(None),
) -> ApiResponse:
    result = await _service.list_markets(reader, status, cursor, limit)
    return success_response(result.model_dump(), request)


@router.get("/{market_id}")
async def get_market(
    market_id: int,
    request: Request,
    reader: Annotated[LedgerReaderProtocol, Depends(get_ledger_reader)],
) -> ApiResponse:
    result = await _service.get_market(reader, market_id)
    return success_response(result.model_dump(), request)


@router.get("/{market_id}/odds")
async def get_odds(
    market_id: int,
    request: Request,
    reader: Annotated[LedgerReaderProtocol, Depends(get_ledger_reader)],
) -> ApiResponse:
    result = await _service.get_odds(reader, market_id)
    return success_response(result.model_dump(), request)

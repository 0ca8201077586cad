"""MarketApplicationService - thin composition layer over the ledger reader.

All methods are read-only. The caller (router) passes the reader; the service
feeds its snapshots into the pure odds functions.
"""

import logging

from src.pm_common.errors import InvalidInputError, MarketNotFoundError
from src.pm_market.application.schemas import (
    MarketDetail,
    MarketListItem,
    MarketListResponse,
    OddsResponse,
    market_odds,
    prices_out,
)
from src.pm_market.domain.repository import LedgerReaderProtocol
from src.pm_pricing.domain.odds import odds_drift, rounding_residue

logger = logging.getLogger(__name__)


class MarketApplicationService:
    async def list_markets(
        self,
        reader: LedgerReaderProtocol,
        status: str | None,
        cursor: str | None,
        limit: int,
    ) -> MarketListResponse:
        # status=None → default ACTIVE; status='ALL' → no filter.
        # Filtering happens after the ledger page, so a page may be short.
        wanted = None if status == "ALL" else (status or "ACTIVE")
        page = await reader.list_markets(cursor, limit)
        markets = [m for m in page.markets if wanted is None or m.status.value == wanted]
        items = [MarketListItem.from_domain(m) for m in markets]
        return MarketListResponse(
            items=items,
            next_cursor=page.next_cursor,
            has_more=page.next_cursor is not None,
        )

    async def get_market(self, reader: LedgerReaderProtocol, market_id: int) -> MarketDetail:
        market = await reader.get_market(market_id)
        if market is None:
            raise MarketNotFoundError(market_id)
        return MarketDetail.from_domain(market)

    async def get_odds(self, reader: LedgerReaderProtocol, market_id: int) -> OddsResponse:
        """Client-side odds cross-checked against the contract's own odds.

        Truncation lets the two disagree by up to N-1 micros per outcome;
        anything larger is logged.
        """
        market = await reader.get_market(market_id)
        if market is None:
            raise MarketNotFoundError(market_id)
        computed = market_odds(market)
        contract = await reader.get_current_odds(market_id)

        drift: int | None = None
        consistent: bool | None = None
        if computed is not None and contract is not None:
            try:
                drift = odds_drift(contract, computed)
            except InvalidInputError:
                logger.warning(
                    "Contract odds outcome count mismatch: market=%d contract=%s computed=%s",
                    market_id, contract, computed,
                )
                consistent = False
            else:
                consistent = drift <= market.outcome_count - 1
                if not consistent:
                    logger.warning(
                        "Odds drift: market=%d drift=%d contract=%s computed=%s",
                        market_id, drift, contract, computed,
                    )

        return OddsResponse(
            market_id=market_id,
            odds=prices_out(computed),
            rounding_residue_micros=rounding_residue(computed) if computed is not None else None,
            contract_odds_micros=contract,
            drift_micros=drift,
            consistent=consistent,
        )

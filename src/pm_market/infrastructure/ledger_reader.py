"""HTTP ledger reader - read-only snapshots from the contract read gateway.

Gateway endpoints (JSON, amounts as int or decimal-string micros):
  GET /markets?cursor=&limit=   -> {"items": [market...], "next_cursor": str|null}
  GET /markets/{id}             -> market
  GET /markets/{id}/odds        -> [int, ...]
  GET /markets/{id}/stakes      -> [stake...]
  GET /stakes/{id}              -> stake
  GET /liquidity                -> {"total_liquidity": int}

404 maps to None. Transport failures, 5xx and malformed payloads raise
LedgerUnavailableError; nothing here retries.
"""

import logging
from typing import Any

import httpx

from config.settings import settings
from src.pm_common.datetime_utils import from_unix
from src.pm_common.enums import MarketStatus
from src.pm_common.errors import InvalidInputError, LedgerUnavailableError
from src.pm_market.domain.models import Market, MarketPage, Stake
from src.pm_pricing.domain.reserves import check_market

logger = logging.getLogger(__name__)

# Payload shape errors; all surface as LedgerUnavailableError
_MALFORMED = (KeyError, IndexError, TypeError, ValueError, InvalidInputError)


def _parse_status(raw: Any) -> MarketStatus:
    # Contract enums may serialize as ["Active"] or "Active"
    if isinstance(raw, list):
        if not raw:
            raise ValueError("empty status")
        raw = raw[0]
    return MarketStatus(str(raw).upper())


def market_from_payload(data: dict[str, Any]) -> Market:
    """Build a Market and reject snapshots pricing cannot read (InvalidInputError)."""
    winning = data.get("winning_outcome")
    market = Market(
        id=int(data["id"]),
        title=str(data["title"]),
        start_time=from_unix(int(data["start_time"])),
        status=_parse_status(data["status"]),
        reserves=tuple(int(r) for r in data["reserves"]),
        initial_odds=tuple(int(o) for o in data.get("initial_odds") or ()),
        staker_count=int(data.get("staker_count", 0)),
        winning_outcome=int(winning) if winning is not None else None,
    )
    check_market(market)
    return market


def stake_from_payload(data: dict[str, Any]) -> Stake:
    return Stake(
        id=int(data["id"]),
        staker=str(data["staker"]),
        market_id=int(data["market_id"]),
        outcome=int(data["outcome"]),
        shares=int(data["amount"]),
        entry_price=int(data["price"]),
        claimed=bool(data.get("claimed", False)),
    )


class HttpLedgerReader:
    def __init__(self, client: httpx.AsyncClient) -> None:
        self._client = client

    async def _get(self, path: str, params: dict[str, Any] | None = None) -> Any | None:
        try:
            resp = await self._client.get(path, params=params)
        except httpx.HTTPError as exc:
            logger.warning("Ledger request failed: GET %s (%s)", path, exc)
            raise LedgerUnavailableError(f"GET {path}: {exc}") from exc
        if resp.status_code == 404:
            return None
        if resp.status_code >= 400:
            logger.warning("Ledger returned %d for GET %s", resp.status_code, path)
            raise LedgerUnavailableError(f"GET {path} returned {resp.status_code}")
        try:
            return resp.json()
        except ValueError as exc:
            raise LedgerUnavailableError(f"GET {path}: invalid JSON") from exc

    async def get_market(self, market_id: int) -> Market | None:
        data = await self._get(f"/markets/{market_id}")
        if data is None:
            return None
        try:
            return market_from_payload(data)
        except _MALFORMED as exc:
            raise LedgerUnavailableError(f"malformed market {market_id}: {exc}") from exc

    async def list_markets(self, cursor: str | None, limit: int) -> MarketPage:
        params: dict[str, Any] = {"limit": limit}
        if cursor is not None:
            params["cursor"] = cursor
        data = await self._get("/markets", params=params)
        if data is None:
            return MarketPage()
        try:
            items = list(data["items"])
            next_cursor = data.get("next_cursor")
        except _MALFORMED as exc:
            raise LedgerUnavailableError(f"malformed market listing: {exc}") from exc
        markets = []
        for item in items:
            try:
                markets.append(market_from_payload(item))
            except _MALFORMED as exc:
                # One bad snapshot must not hide the rest of the page
                logger.warning("Skipping malformed market in listing: %s", exc)
        return MarketPage(markets=markets, next_cursor=next_cursor)

    async def get_current_odds(self, market_id: int) -> list[int] | None:
        data = await self._get(f"/markets/{market_id}/odds")
        if data is None:
            return None
        try:
            return [int(p) for p in data]
        except (TypeError, ValueError) as exc:
            raise LedgerUnavailableError(f"malformed odds for market {market_id}: {exc}") from exc

    async def get_stake(self, stake_id: int) -> Stake | None:
        data = await self._get(f"/stakes/{stake_id}")
        if data is None:
            return None
        try:
            return stake_from_payload(data)
        except _MALFORMED as exc:
            raise LedgerUnavailableError(f"malformed stake {stake_id}: {exc}") from exc

    async def get_market_stakes(self, market_id: int) -> list[Stake]:
        data = await self._get(f"/markets/{market_id}/stakes")
        if data is None:
            return []
        try:
            return [stake_from_payload(item) for item in data]
        except _MALFORMED as exc:
            raise LedgerUnavailableError(f"malformed stakes for market {market_id}: {exc}") from exc

    async def total_liquidity(self) -> int:
        data = await self._get("/liquidity")
        if data is None:
            return 0
        try:
            return int(data["total_liquidity"])
        except _MALFORMED as exc:
            raise LedgerUnavailableError(f"malformed liquidity: {exc}") from exc

    async def aclose(self) -> None:
        await self._client.aclose()


_reader: HttpLedgerReader | None = None


async def get_ledger_reader() -> HttpLedgerReader:
    """FastAPI dependency: get or create the shared HTTP reader."""
    global _reader  # noqa: PLW0603
    if _reader is None:
        _reader = HttpLedgerReader(
            httpx.AsyncClient(
                base_url=settings.LEDGER_URL,
                timeout=settings.LEDGER_TIMEOUT_SECONDS,
            )
        )
    return _reader


async def close_ledger_reader() -> None:
    """Close the shared reader's connection pool."""
    global _reader  # noqa: PLW0603
    if _reader is not None:
        await _reader.aclose()
        _reader = None

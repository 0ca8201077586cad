"""Live refresh: periodic polling loops and last-result-wins price boards.

Each loop is independent and idempotent. A tick that fires while the previous
run is still in flight is skipped rather than queued; there is no ordering
between loops. Cancelling a loop just stops future ticks, since the pricing
functions it calls are synchronous and side-effect free.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable

from config.settings import settings
from src.pm_common.errors import AppError, NoLiquidityError
from src.pm_market.domain.repository import LedgerReaderProtocol
from src.pm_pricing.domain.odds import normalize, price_diffs
from src.pm_pricing.domain.valuation import current_value

logger = logging.getLogger(__name__)

LISTING_PAGE_SIZE = 50


class LiveBoard:
    """Last displayed values per key; reports which positions moved past epsilon."""

    def __init__(self, epsilon: int) -> None:
        self._epsilon = epsilon
        self._values: dict[int, list[int]] = {}

    def update(self, key: int, values: list[int]) -> list[int]:
        """Store values (last result wins) and return indices that changed.

        Unchanged entries keep their previously displayed value so slow drift
        below epsilon never accumulates unseen.
        """
        old = self._values.get(key)
        changed = price_diffs(old, values, self._epsilon)
        if old is None or len(old) != len(values):
            self._values[key] = list(values)
        else:
            merged = list(old)
            for i in changed:
                merged[i] = values[i]
            self._values[key] = merged
        return changed

    def track(self, key: int) -> None:
        self._values.setdefault(key, [])

    def discard(self, key: int) -> None:
        self._values.pop(key, None)

    def get(self, key: int) -> list[int] | None:
        return self._values.get(key)

    def keys(self) -> list[int]:
        return list(self._values)

    def snapshot(self) -> dict[int, list[int]]:
        return {k: list(v) for k, v in self._values.items()}


class PeriodicRefresher:
    """Run an async job every interval seconds until stopped."""

    def __init__(
        self, name: str, interval: float, job: Callable[[], Awaitable[None]]
    ) -> None:
        self.name = name
        self._interval = interval
        self._job = job
        self._task: asyncio.Task[None] | None = None
        self._in_flight: asyncio.Task[None] | None = None
        self.runs = 0
        self.skipped = 0

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.create_task(self._loop(), name=f"refresh-{self.name}")
        logger.info("Started %s refresh every %.1fs", self.name, self._interval)

    async def stop(self) -> None:
        for task in (self._task, self._in_flight):
            if task is not None and not task.done():
                task.cancel()
                try:
                    await task
                except asyncio.CancelledError:
                    pass
        self._task = None
        self._in_flight = None
        logger.info("Stopped %s refresh", self.name)

    def tick(self) -> None:
        """Launch one run unless the previous run is still in flight."""
        if self._in_flight is not None and not self._in_flight.done():
            self.skipped += 1
            logger.debug("Skipping %s tick: previous run in flight", self.name)
            return
        self._in_flight = asyncio.create_task(self._run_once())

    async def _run_once(self) -> None:
        try:
            await self._job()
        except asyncio.CancelledError:
            raise
        except Exception:
            logger.exception("%s refresh failed", self.name)
        finally:
            self.runs += 1

    async def _loop(self) -> None:
        while True:
            self.tick()
            await asyncio.sleep(self._interval)


async def refresh_live_odds(reader: LedgerReaderProtocol, board: LiveBoard) -> None:
    """Renormalize odds for every active market and record changes."""
    cursor: str | None = None
    while True:
        page = await reader.list_markets(cursor, LISTING_PAGE_SIZE)
        for market in page.markets:
            if not market.is_active:
                board.discard(market.id)
                continue
            try:
                prices = normalize(market.reserves, fallback=market.initial_odds or None)
            except NoLiquidityError:
                continue
            except AppError as exc:
                logger.warning("Skipping market %d: %s", market.id, exc.message)
                continue
            changed = board.update(market.id, prices)
            if changed:
                logger.info("Odds changed: market=%d outcomes=%s", market.id, changed)
        cursor = page.next_cursor
        if cursor is None:
            break


async def refresh_live_stakes(
    reader: LedgerReaderProtocol, board: LiveBoard, fee_bps: int
) -> None:
    """Revalue tracked stakes as [current_price, cashout_after_fee].

    A failure on one stake is logged and skipped; closed stakes stop being
    tracked.
    """
    for stake_id in board.keys():
        try:
            stake = await reader.get_stake(stake_id)
            if stake is None or not stake.is_open:
                board.discard(stake_id)
                continue
            market = await reader.get_market(stake.market_id)
            if market is None or not market.is_active:
                continue
            value = current_value(stake, market, fee_bps)
        except AppError as exc:
            logger.warning("Skipping stake %d: %s", stake_id, exc.message)
            continue
        changed = board.update(stake_id, [value.current_price, value.cashout_after_fee])
        if changed:
            logger.info("Stake value changed: stake=%d fields=%s", stake_id, changed)


odds_board = LiveBoard(settings.ODDS_CHANGE_EPSILON_MICROS)
stake_board = LiveBoard(settings.ODDS_CHANGE_EPSILON_MICROS)

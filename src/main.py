"""FastAPI application entry point.

Run with: uvicorn src.main:app --reload --port 8000
"""

# ruff: noqa: E402  -- uvloop.install() must run before other imports

import uvloop

uvloop.install()

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from config.settings import settings
from src.pm_common.errors import AppError
from src.pm_common.response import error_response
from src.pm_gateway.middleware.request_log import RequestLogMiddleware
from src.pm_market.api.router import router as market_router
from src.pm_market.infrastructure.ledger_reader import close_ledger_reader, get_ledger_reader
from src.pm_pricing.api.router import router as pricing_router
from src.pm_pricing.application.live import (
    PeriodicRefresher,
    odds_board,
    refresh_live_odds,
    refresh_live_stakes,
    stake_board,
)

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup: open the ledger reader, start refresh loops. Shutdown: stop + close."""
    reader = await get_ledger_reader()
    refreshers: list[PeriodicRefresher] = []
    if settings.LIVE_REFRESH_ENABLED:
        refreshers = [
            PeriodicRefresher(
                "odds",
                settings.ODDS_POLL_SECONDS,
                lambda: refresh_live_odds(reader, odds_board),
            ),
            PeriodicRefresher(
                "stakes",
                settings.STAKE_POLL_SECONDS,
                lambda: refresh_live_stakes(reader, stake_board, settings.CASHOUT_FEE_BPS),
            ),
        ]
        for refresher in refreshers:
            refresher.start()
    yield
    for refresher in refreshers:
        await refresher.stop()
    await close_ledger_reader()


app = FastAPI(
    title=settings.APP_NAME,
    version="0.1.0",
    debug=settings.DEBUG,
    lifespan=lifespan,
)


app.add_middleware(RequestLogMiddleware)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    resp = error_response(exc, request)
    return JSONResponse(
        status_code=exc.http_status,
        content=resp.model_dump(),
    )


app.include_router(market_router, prefix="/api/v1")
app.include_router(pricing_router, prefix="/api/v1")


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok", "version": "0.1.0"}

"""Unified error codes and custom exceptions.

Error code ranges:
  3xxx: Market
  5xxx: Stake
  6xxx: Pricing (raised by the pure quote/valuation/odds core)
  9xxx: System
"""


class AppError(Exception):
    """Base application error."""

    def __init__(
        self,
        code: int,
        message: str,
        http_status: int = 500,
    ) -> None:
        self.code = code
        self.message = message
        self.http_status = http_status
        super().__init__(message)


# --- 3xxx: Market ---

class MarketNotFoundError(AppError):
    def __init__(self, market_id: int) -> None:
        super().__init__(3001, f"Market not found: {market_id}", 404)


class MarketNotActiveError(AppError):
    def __init__(self, market_id: int) -> None:
        super().__init__(3002, f"Market is not active: {market_id}", 422)


# --- 5xxx: Stake ---

class StakeNotFoundError(AppError):
    def __init__(self, stake_id: int) -> None:
        super().__init__(5002, f"Stake not found: {stake_id}", 404)


# --- 6xxx: Pricing ---

class InvalidInputError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(6001, f"Invalid input: {detail}", 422)


class NoLiquidityError(AppError):
    def __init__(self, detail: str = "market not yet priced") -> None:
        super().__init__(6002, f"No liquidity: {detail}", 422)


class OddsSumMismatchError(AppError):
    def __init__(self, total: int, target: int) -> None:
        self.total = total
        self.target = target
        super().__init__(
            6003,
            f"Starting odds must sum to {target} micros, got {total}",
            422,
        )


# --- 9xxx: System ---

class LedgerUnavailableError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(9003, f"Ledger unavailable: {detail}", 503)

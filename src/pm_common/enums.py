"""Global enums - values match the contract's status encoding."""

from enum import Enum


class MarketStatus(str, Enum):
    ACTIVE = "ACTIVE"
    SETTLED = "SETTLED"
    ARCHIVED = "ARCHIVED"


class PnlDirection(str, Enum):
    """Display-only classification of a position against its entry value."""
    PROFIT = "PROFIT"
    LOSS = "LOSS"
    FLAT = "FLAT"

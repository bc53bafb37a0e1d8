"""Domain models used by the portfolio metrics engine."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Optional, Tuple


class TransactionType(str, Enum):
    BUY = "BUY"
    SELL = "SELL"
    DIVIDEND = "DIVIDEND"
    VESTED = "VESTED"
    SPLIT = "SPLIT"


class PriceSource(str, Enum):
    MARKET = "MARKET"
    MANUAL = "MANUAL"
    TRANSACTION = "TRANSACTION"


class AssetType(str, Enum):
    STOCK = "STOCK"
    ETF = "ETF"
    CRYPTO = "CRYPTO"
    BOND = "BOND"
    MUTUAL_FUND = "MUTUAL_FUND"
    OTHER = "OTHER"


# Kinds that change the number of units held.
HOLDING_TYPES = frozenset({TransactionType.BUY, TransactionType.SELL, TransactionType.VESTED})
TIMELINE_TYPES = frozenset({TransactionType.BUY, TransactionType.SELL})


@dataclass(frozen=True)
class Transaction:
    """A buy, sell, dividend or vesting event for one asset."""

    date: date
    kind: TransactionType
    quantity: float
    price: float
    fees: float = 0.0
    notes: Optional[str] = None

    @property
    def notional(self) -> float:
        return self.quantity * self.price


@dataclass(frozen=True)
class PricePoint:
    """An observed or recorded price for an asset on a date."""

    date: date
    price: float
    source: PriceSource = PriceSource.MARKET


@dataclass(frozen=True)
class CashFlow:
    """Signed dated amount; outflows are negative."""

    amount: float
    date: date


@dataclass(frozen=True)
class TimelineEvent:
    """A point on the time-weighted return timeline."""

    date: date
    is_transaction: bool
    price: float
    holdings_after: float
    value_after: float


@dataclass(frozen=True)
class AssetMetrics:
    """Derived position and performance figures for one asset.

    ``mwr`` is ``None`` when the rate solver could not produce a finite value.
    """

    quantity: float
    total_cost: float
    avg_cost: float
    last_price: float
    current_value: float
    profit: float
    profit_percentage: float
    mwr: Optional[float]
    twr: float
    last_updated: datetime


@dataclass(frozen=True)
class Asset:
    """A tracked holding and its most recently computed metrics."""

    symbol: str
    name: str = ""
    asset_type: AssetType = AssetType.STOCK
    currency: str = "EUR"
    isin: str = ""
    quantity: float = 0.0
    avg_cost: float = 0.0
    last_price: float = 0.0
    total_cost: float = 0.0
    current_value: float = 0.0
    profit: float = 0.0
    profit_percentage: float = 0.0
    mwr: Optional[float] = 0.0
    twr: float = 0.0
    last_updated: Optional[datetime] = None


@dataclass(frozen=True)
class CurrencySummary:
    """Cost and value totals for all assets quoted in one currency."""

    currency: str
    cost: float
    value: float
    profit: float
    profit_percentage: float
    last_updated: datetime


@dataclass(frozen=True)
class Portfolio:
    """Snapshot of all tracked assets and their per-currency totals."""

    assets: Tuple[Asset, ...] = ()
    currencies: Tuple[CurrencySummary, ...] = ()

    def find_asset(self, symbol: str) -> Optional[Asset]:
        for asset in self.assets:
            if asset.symbol == symbol:
                return asset
        return None

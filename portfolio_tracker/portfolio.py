"""Portfolio refresh pass and the storage interface it reads from.

The refresh walks every asset, recomputes its metrics from the stored
transactions and price history, and rebuilds the per-currency totals. A
failure for one asset is logged and leaves that asset's previous figures in
place; the rest of the pass carries on.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Dict, List, Mapping, Protocol, Sequence

from .config import AppSettings, get_settings
from .core.telemetry import get_tracer
from .models import Asset, CurrencySummary, Portfolio, PricePoint, Transaction
from .metrics import apply_metrics, compute_asset_metrics

logger = logging.getLogger(__name__)
tracer = get_tracer(__name__)


class PortfolioRepository(Protocol):
    """Source of per-asset transactions and price history."""

    def get_transactions(self, symbol: str) -> Sequence[Transaction]:
        ...

    def get_price_history(self, symbol: str) -> Sequence[PricePoint]:
        ...


class InMemoryRepository:
    """Simple repository for tests and embedding."""

    def __init__(
        self,
        transactions: Mapping[str, Sequence[Transaction]] | None = None,
        prices: Mapping[str, Sequence[PricePoint]] | None = None,
    ):
        self._transactions: Dict[str, List[Transaction]] = {
            symbol: list(items) for symbol, items in (transactions or {}).items()
        }
        self._prices: Dict[str, List[PricePoint]] = {
            symbol: list(items) for symbol, items in (prices or {}).items()
        }

    def add_transaction(self, symbol: str, transaction: Transaction) -> None:
        self._transactions.setdefault(symbol, []).append(transaction)

    def set_price_history(self, symbol: str, history: Sequence[PricePoint]) -> None:
        self._prices[symbol] = list(history)

    def get_transactions(self, symbol: str) -> Sequence[Transaction]:
        if symbol not in self._transactions:
            raise KeyError(f"No transactions stored for {symbol}")
        return list(self._transactions[symbol])

    def get_price_history(self, symbol: str) -> Sequence[PricePoint]:
        if symbol not in self._prices:
            raise KeyError(f"No price history stored for {symbol}")
        return list(self._prices[symbol])


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def refresh_asset(
    asset: Asset,
    repository: PortfolioRepository,
    now: datetime,
    *,
    settings: AppSettings | None = None,
) -> Asset:
    """Return ``asset`` with recomputed metrics, or unchanged if anything fails."""

    with tracer.start_as_current_span("portfolio.refresh_asset") as span:
        span.set_attribute("portfolio.symbol", asset.symbol)
        try:
            transactions = repository.get_transactions(asset.symbol)
            price_history = repository.get_price_history(asset.symbol)
            metrics = compute_asset_metrics(
                asset, transactions, price_history, now, settings=settings
            )
        except Exception:
            logger.exception("Error updating asset %s", asset.symbol)
            span.set_attribute("portfolio.stale", True)
            return asset

    logger.info(
        "Updated %s: value %.2f, p&l %.2f (%.2f%%)",
        asset.symbol,
        metrics.current_value,
        metrics.profit,
        metrics.profit_percentage,
    )
    return apply_metrics(asset, metrics)


def summarize_currencies(assets: Sequence[Asset], now: datetime) -> List[CurrencySummary]:
    """Aggregate cost and value per currency, matching codes case-insensitively."""

    grouped: Dict[str, List[Asset]] = {}
    labels: Dict[str, str] = {}
    for asset in assets:
        key = asset.currency.upper()
        labels.setdefault(key, asset.currency)
        grouped.setdefault(key, []).append(asset)

    summaries: List[CurrencySummary] = []
    for key, members in grouped.items():
        value = sum(asset.current_value for asset in members)
        cost = sum(asset.total_cost for asset in members)
        profit = value - cost
        summaries.append(
            CurrencySummary(
                currency=labels[key],
                cost=cost,
                value=value,
                profit=profit,
                profit_percentage=profit / cost * 100 if cost > 0 else 0.0,
                last_updated=now,
            )
        )
        logger.info("Updated %s portfolio: value %.2f", labels[key], value)
    return summaries


def update_portfolio(
    portfolio: Portfolio,
    repository: PortfolioRepository,
    now: datetime | None = None,
    *,
    settings: AppSettings | None = None,
) -> Portfolio:
    """Recompute every asset and the currency totals into a new snapshot."""

    now = now or _utcnow()
    settings = settings or get_settings()

    with tracer.start_as_current_span("portfolio.update") as span:
        span.set_attribute("portfolio.asset_count", len(portfolio.assets))
        assets = tuple(
            refresh_asset(asset, repository, now, settings=settings)
            for asset in portfolio.assets
        )
        currencies = tuple(summarize_currencies(assets, now))

    return Portfolio(assets=assets, currencies=currencies)


__all__ = [
    "InMemoryRepository",
    "PortfolioRepository",
    "refresh_asset",
    "summarize_currencies",
    "update_portfolio",
]

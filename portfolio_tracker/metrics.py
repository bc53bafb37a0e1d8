"""Per-asset position and performance metrics."""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass, replace
from datetime import datetime, time
from typing import Iterable, Sequence, Tuple

from .config import AppSettings, get_settings
from .models import Asset, AssetMetrics, PricePoint, Transaction, TransactionType
from .prices import latest_price_point
from .returns import calculate_mwr, calculate_twr

logger = logging.getLogger(__name__)

_ZERO_QUANTITY_TOLERANCE = 1e-9


@dataclass
class _Position:
    """Running average-cost position."""

    quantity: float = 0.0
    cost: float = 0.0

    def add(self, quantity: float, price: float) -> None:
        self.quantity += quantity
        self.cost += quantity * price

    def remove(self, quantity: float) -> None:
        if self.quantity > 0:
            self.cost -= self.cost / self.quantity * quantity
        self.quantity -= quantity
        if abs(self.quantity) < _ZERO_QUANTITY_TOLERANCE:
            self.quantity = 0.0
            self.cost = 0.0


def build_position(transactions: Iterable[Transaction]) -> Tuple[float, float]:
    """Return ``(quantity, total_cost)`` using average-cost depletion on sells."""

    position = _Position()
    for tx in sorted(transactions, key=lambda t: t.date):
        if tx.kind in (TransactionType.BUY, TransactionType.VESTED):
            position.add(tx.quantity, tx.price)
        elif tx.kind == TransactionType.SELL:
            position.remove(tx.quantity)
    return position.quantity, position.cost


def compute_asset_metrics(
    asset: Asset,
    transactions: Sequence[Transaction],
    price_history: Sequence[PricePoint],
    now: datetime,
    *,
    settings: AppSettings | None = None,
    diagnostics: logging.Logger | None = None,
) -> AssetMetrics:
    """Derive quantity, cost, valuation and returns for ``asset``.

    ``now`` stands in for the wall clock: it dates the money-weighted return
    and becomes ``last_updated`` when there is no price history.
    """

    settings = settings or get_settings()
    log = diagnostics or logger

    quantity, total_cost = build_position(transactions)
    avg_cost = total_cost / quantity if quantity > 0 else 0.0

    latest = latest_price_point(price_history)
    if latest is None:
        log.debug("No price history for %s; valuing at 0", asset.symbol)
        last_price = 0.0
        last_updated = now
    else:
        last_price = latest.price
        last_updated = datetime.combine(latest.date, time.min, tzinfo=now.tzinfo)

    current_value = quantity * last_price
    profit = current_value - total_cost
    profit_percentage = profit / total_cost * 100 if total_cost > 0 else 0.0

    mwr = calculate_mwr(
        transactions,
        current_value,
        now.date(),
        diagnostics=log,
        **settings.solver_options(),
    )
    if mwr is not None and not math.isfinite(mwr):
        mwr = None
    twr = calculate_twr(
        transactions,
        last_price,
        last_updated.date(),
        diagnostics=log,
        **settings.period_bounds(),
    )

    return AssetMetrics(
        quantity=quantity,
        total_cost=total_cost,
        avg_cost=avg_cost,
        last_price=last_price,
        current_value=current_value,
        profit=profit,
        profit_percentage=profit_percentage,
        mwr=mwr,
        twr=twr,
        last_updated=last_updated,
    )


def apply_metrics(asset: Asset, metrics: AssetMetrics) -> Asset:
    """Return a copy of ``asset`` carrying the freshly computed figures."""

    return replace(
        asset,
        quantity=metrics.quantity,
        total_cost=metrics.total_cost,
        avg_cost=metrics.avg_cost,
        last_price=metrics.last_price,
        current_value=metrics.current_value,
        profit=metrics.profit,
        profit_percentage=metrics.profit_percentage,
        mwr=metrics.mwr,
        twr=metrics.twr,
        last_updated=metrics.last_updated,
    )


__all__ = [
    "apply_metrics",
    "build_position",
    "compute_asset_metrics",
]

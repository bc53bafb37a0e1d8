"""Money-weighted and time-weighted return calculations for a single asset.

The money-weighted return treats every transaction as an outflow of
``quantity * price`` and the current market value as the closing inflow,
then solves for the internal rate of return. The time-weighted return splits
the holding period at every buy or sell, prices the units held over each
segment, and compounds the per-segment holding-period returns.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Iterable, List, Optional, Sequence

from .models import TIMELINE_TYPES, CashFlow, TimelineEvent, Transaction, TransactionType
from .solver import (
    DEFAULT_INITIAL_GUESS,
    DEFAULT_MAX_ITERATIONS,
    DEFAULT_TOLERANCE,
    solve_rate,
)

logger = logging.getLogger(__name__)

MIN_PERIOD_RETURN = -0.9
MAX_PERIOD_RETURN = 10.0


def build_cash_flows(
    transactions: Iterable[Transaction], current_value: float, as_of: date
) -> List[CashFlow]:
    """Return the date-ordered cash-flow series used for the money-weighted return."""

    flows = [CashFlow(amount=-(tx.quantity * tx.price), date=tx.date) for tx in transactions]
    flows.append(CashFlow(amount=current_value, date=as_of))
    # sorted() is stable, so same-day flows keep their input order
    return sorted(flows, key=lambda flow: flow.date)


def calculate_mwr(
    transactions: Sequence[Transaction],
    current_value: float,
    as_of: date,
    *,
    initial_guess: float = DEFAULT_INITIAL_GUESS,
    max_iterations: int = DEFAULT_MAX_ITERATIONS,
    tolerance: float = DEFAULT_TOLERANCE,
    diagnostics: logging.Logger | None = None,
) -> Optional[float]:
    """Return the money-weighted return, or ``None`` when it cannot be solved.

    Vesting events carry no acquisition cost, so any VESTED transaction makes
    the figure meaningless and 0 is returned.
    """

    log = diagnostics or logger
    if not transactions:
        return 0.0
    if any(tx.kind == TransactionType.VESTED for tx in transactions):
        log.debug("Skipping money-weighted return: vested transactions present")
        return 0.0

    return solve_rate(
        build_cash_flows(transactions, current_value, as_of),
        initial_guess=initial_guess,
        max_iterations=max_iterations,
        tolerance=tolerance,
        diagnostics=log,
    )


def build_timeline(
    transactions: Iterable[Transaction],
    current_price: float,
    as_of: date,
    *,
    diagnostics: logging.Logger | None = None,
) -> List[TimelineEvent]:
    """Build the ordered holding events for the time-weighted return.

    Only buys and sells take part. Transactions sort ahead of a valuation on
    the same day, and a valuation dated before the last trade is moved onto
    the last trade's date so it always closes the timeline.
    """

    trades = sorted(
        (tx for tx in transactions if tx.kind in TIMELINE_TYPES),
        key=lambda tx: tx.date,
    )

    events: List[TimelineEvent] = []
    holdings = 0.0
    for tx in trades:
        if tx.kind == TransactionType.BUY:
            holdings += tx.quantity
        else:
            holdings -= tx.quantity
        events.append(
            TimelineEvent(
                date=tx.date,
                is_transaction=True,
                price=tx.price,
                holdings_after=holdings,
                value_after=holdings * tx.price,
            )
        )

    valuation_date = as_of
    if trades and as_of < trades[-1].date:
        (diagnostics or logger).debug(
            "Valuation date %s precedes last trade on %s; using the trade date",
            as_of.isoformat(),
            trades[-1].date.isoformat(),
        )
        valuation_date = trades[-1].date

    events.append(
        TimelineEvent(
            date=valuation_date,
            is_transaction=False,
            price=current_price,
            holdings_after=holdings,
            value_after=holdings * current_price,
        )
    )
    return sorted(events, key=lambda event: (event.date, not event.is_transaction))


def _accept(
    hpr: float, event: TimelineEvent, lower: float, upper: float, log: logging.Logger
) -> bool:
    if lower < hpr < upper:
        return True
    log.debug(
        "Discarding holding-period return %.4f on %s outside (%s, %s)",
        hpr,
        event.date.isoformat(),
        lower,
        upper,
    )
    return False


def compute_twr(
    timeline: Sequence[TimelineEvent],
    *,
    min_period_return: float = MIN_PERIOD_RETURN,
    max_period_return: float = MAX_PERIOD_RETURN,
    diagnostics: logging.Logger | None = None,
) -> float:
    """Compound the holding-period returns found along ``timeline``."""

    log = diagnostics or logger
    if not timeline:
        return 0.0

    first = timeline[0]
    previous_value = first.value_after
    previous_holdings = first.holdings_after
    accepted: List[float] = []

    for event in timeline[1:]:
        if event.is_transaction:
            value_before = previous_holdings * event.price
            if previous_holdings > 0 and previous_value > 0:
                hpr = value_before / previous_value - 1
                if _accept(hpr, event, min_period_return, max_period_return, log):
                    accepted.append(hpr)
        elif event.holdings_after == previous_holdings and previous_value > 0:
            hpr = event.value_after / previous_value - 1
            if _accept(hpr, event, min_period_return, max_period_return, log):
                accepted.append(hpr)
        previous_value = event.value_after
        previous_holdings = event.holdings_after

    if not accepted:
        return 0.0

    growth = 1.0
    for hpr in accepted:
        growth *= 1 + hpr
    twr = growth - 1

    if twr < min_period_return:
        log.debug("Clamping time-weighted return %.4f to %s", twr, min_period_return)
        return min_period_return
    if twr > max_period_return:
        log.debug("Clamping time-weighted return %.4f to %s", twr, max_period_return)
        return max_period_return
    return twr


def calculate_twr(
    transactions: Sequence[Transaction],
    current_price: float,
    as_of: date,
    *,
    min_period_return: float = MIN_PERIOD_RETURN,
    max_period_return: float = MAX_PERIOD_RETURN,
    diagnostics: logging.Logger | None = None,
) -> float:
    """Return the time-weighted return of an asset valued at ``current_price``."""

    if not transactions or current_price <= 0:
        return 0.0
    if not any(tx.kind in TIMELINE_TYPES for tx in transactions):
        return 0.0

    return compute_twr(
        build_timeline(transactions, current_price, as_of, diagnostics=diagnostics),
        min_period_return=min_period_return,
        max_period_return=max_period_return,
        diagnostics=diagnostics,
    )


__all__ = [
    "MAX_PERIOD_RETURN",
    "MIN_PERIOD_RETURN",
    "build_cash_flows",
    "build_timeline",
    "calculate_mwr",
    "calculate_twr",
    "compute_twr",
]

"""Net present value helpers and the Newton-Raphson rate solver.

Time offsets use a simple ``days / 365`` year fraction measured from the
first cash flow in the sequence. The solver is best-effort: it returns the
last iterate when the iteration cap is reached, and ``None`` when the
iteration cannot continue over the reals (vanishing derivative, a rate at or
below -100%, or a non-finite value).
"""

from __future__ import annotations

import logging
import math
from datetime import date
from typing import List, Optional, Sequence

from .models import CashFlow

logger = logging.getLogger(__name__)

DAYS_PER_YEAR = 365
DEFAULT_INITIAL_GUESS = 0.10
DEFAULT_MAX_ITERATIONS = 100
DEFAULT_TOLERANCE = 1e-7


def _year_offsets(cash_flows: Sequence[CashFlow]) -> List[float]:
    origin: date = cash_flows[0].date
    return [(flow.date - origin).days / DAYS_PER_YEAR for flow in cash_flows]


def npv(rate: float, cash_flows: Sequence[CashFlow]) -> float:
    """Return the net present value of ``cash_flows`` discounted at ``rate``."""

    if not cash_flows:
        return 0.0
    base = 1.0 + rate
    return sum(
        flow.amount / base**t for flow, t in zip(cash_flows, _year_offsets(cash_flows))
    )


def npv_derivative(rate: float, cash_flows: Sequence[CashFlow]) -> float:
    """Return d(NPV)/d(rate) at ``rate``."""

    if not cash_flows:
        return 0.0
    base = 1.0 + rate
    return sum(
        -t * flow.amount / base ** (t + 1)
        for flow, t in zip(cash_flows, _year_offsets(cash_flows))
    )


def solve_rate(
    cash_flows: Sequence[CashFlow],
    *,
    initial_guess: float = DEFAULT_INITIAL_GUESS,
    max_iterations: int = DEFAULT_MAX_ITERATIONS,
    tolerance: float = DEFAULT_TOLERANCE,
    diagnostics: logging.Logger | None = None,
) -> Optional[float]:
    """Find the rate at which the NPV of ``cash_flows`` is zero.

    The first element defines t=0, so callers must pass flows ordered by
    date. Returns ``None`` when no finite rate can be produced.
    """

    log = diagnostics or logger
    if not cash_flows:
        log.debug("No cash flows supplied; rate unavailable")
        return None

    rate = initial_guess
    for iteration in range(max_iterations):
        if 1.0 + rate <= 0:
            log.debug("Rate iterate %.6f left the real domain at step %d", rate, iteration)
            return None
        try:
            value = npv(rate, cash_flows)
            if math.isfinite(value) and abs(value) < tolerance:
                return rate
            slope = npv_derivative(rate, cash_flows)
        except (OverflowError, ZeroDivisionError):
            log.debug("Discounting overflowed at rate %.6f; rate unavailable", rate)
            return None
        if not math.isfinite(value):
            log.debug("NPV became non-finite at rate %.6f", rate)
            return None
        if slope == 0 or not math.isfinite(slope):
            log.debug("NPV derivative vanished at rate %.6f; rate unavailable", rate)
            return None
        rate -= value / slope

    if not math.isfinite(rate):
        return None
    log.debug("Rate solver hit the %d iteration cap; returning last iterate", max_iterations)
    return rate


__all__ = [
    "DAYS_PER_YEAR",
    "npv",
    "npv_derivative",
    "solve_rate",
]

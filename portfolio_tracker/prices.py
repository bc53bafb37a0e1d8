"""Price history helpers."""
from __future__ import annotations

from typing import Dict, Iterable, List, Optional, Sequence

from .models import PricePoint


def latest_price_point(history: Sequence[PricePoint]) -> Optional[PricePoint]:
    """Return the most recent price point, or ``None`` for an empty history."""

    if not history:
        return None
    # max() keeps the first of several same-day points
    return max(history, key=lambda point: point.date)


def merge_price_histories(
    existing: Iterable[PricePoint], new: Iterable[PricePoint]
) -> List[PricePoint]:
    """Combine two histories into one date-ordered series.

    When both contain a point for the same date the existing point is kept.
    """

    merged: Dict = {}
    for point in existing:
        merged.setdefault(point.date, point)
    for point in new:
        merged.setdefault(point.date, point)
    return [merged[d] for d in sorted(merged)]


__all__ = ["latest_price_point", "merge_price_histories"]

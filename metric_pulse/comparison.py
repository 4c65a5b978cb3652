"""
metric_pulse.comparison
~~~~~~~~~~~~~~~~~~~~~~~
Period-over-period comparison of one metric: the current period P1 against
the equal-length period P2 that ends the day before P1 starts.

Every division has a defined fallback, so a record is always structurally
valid:

* ``delta_pct`` is 0 when the previous average is 0;
* ``stability_pct`` is 100 when the current period has fewer than two
  observations or a zero average.
"""

from __future__ import annotations

import datetime as dt
from collections.abc import Iterable, Sequence
from typing import Optional

import numpy as np
from pydantic import BaseModel, ConfigDict
from scipy.stats import variation

from .observation import Observation, real_only
from .summary import max_or_zero, mean_or_zero

FULL_STABILITY = 100.0


class ComparisonRecord(BaseModel):
    """Current-vs-previous statistics for one metric."""

    model_config = ConfigDict(frozen=True)

    metric_name: str
    current_avg: float
    previous_avg: float
    current_max: float
    previous_max: float
    delta: float
    delta_pct: float
    stability_pct: float

    @property
    def direction(self) -> str:
        """``"up"``, ``"down"`` or ``"neutral"`` from the sign of the delta."""
        if self.delta > 0:
            return "up"
        if self.delta < 0:
            return "down"
        return "neutral"


# ------------------------------------------------------------------
# Period arithmetic
# ------------------------------------------------------------------


def previous_period(start: dt.date, end: dt.date) -> tuple[dt.date, dt.date]:
    """Return the equal-length period immediately preceding ``[start, end]``.

    Examples
    --------
    >>> previous_period(dt.date(2024, 1, 8), dt.date(2024, 1, 14))
    (datetime.date(2024, 1, 1), datetime.date(2024, 1, 7))
    """
    if end < start:
        raise ValueError(f"period end {end} is before start {start}")
    prev_end = start - dt.timedelta(days=1)
    prev_start = prev_end - (end - start)
    return prev_start, prev_end


# ------------------------------------------------------------------
# Statistics
# ------------------------------------------------------------------


def stability_index(values: Sequence[float]) -> float:
    """``(1 - coefficient of variation) * 100`` using the population std.

    Returns 100 for fewer than two values or a zero mean.
    """
    if len(values) <= 1:
        return FULL_STABILITY
    arr = np.asarray(values, dtype=float)
    if arr.mean() == 0:
        return FULL_STABILITY
    return float((1.0 - variation(arr, ddof=0)) * 100.0)


def compare_periods(
    metric_name: str,
    current: Iterable[Observation],
    previous: Iterable[Observation],
) -> ComparisonRecord:
    """Compare one metric's current-period observations with the previous period.

    Forecast points are ignored on both sides. Slicing the two periods is
    the caller's job; see :func:`previous_period`.
    """
    current_values = [obs.value for obs in real_only(current)]
    previous_values = [obs.value for obs in real_only(previous)]

    current_avg = mean_or_zero(current_values)
    previous_avg = mean_or_zero(previous_values)
    delta = current_avg - previous_avg
    delta_pct = (delta / previous_avg) * 100 if previous_avg != 0 else 0.0

    return ComparisonRecord(
        metric_name=metric_name,
        current_avg=current_avg,
        previous_avg=previous_avg,
        current_max=max_or_zero(current_values),
        previous_max=max_or_zero(previous_values),
        delta=delta,
        delta_pct=delta_pct,
        stability_pct=stability_index(current_values),
    )


# ------------------------------------------------------------------
# Leaderboards
# ------------------------------------------------------------------
# sorted() is stable, so ties keep the order the records came in.


def rank_by_growth(records: Iterable[ComparisonRecord]) -> list[ComparisonRecord]:
    return sorted(records, key=lambda rec: rec.delta_pct, reverse=True)


def rank_by_swing(records: Iterable[ComparisonRecord]) -> list[ComparisonRecord]:
    return sorted(records, key=lambda rec: abs(rec.delta_pct), reverse=True)


def rank_by_stability(records: Iterable[ComparisonRecord]) -> list[ComparisonRecord]:
    return sorted(records, key=lambda rec: rec.stability_pct, reverse=True)


def fastest_growth(records: Iterable[ComparisonRecord]) -> Optional[ComparisonRecord]:
    ranked = rank_by_growth(records)
    return ranked[0] if ranked else None


def largest_swing(records: Iterable[ComparisonRecord]) -> Optional[ComparisonRecord]:
    ranked = rank_by_swing(records)
    return ranked[0] if ranked else None


def most_stable(records: Iterable[ComparisonRecord]) -> Optional[ComparisonRecord]:
    ranked = rank_by_stability(records)
    return ranked[0] if ranked else None

"""
metric_pulse.summary
~~~~~~~~~~~~~~~~~~~~
Per-metric summary statistics: latest observation, average, maximum and
minimum. This module is the one place the basic reductions live; the
comparison, pivot and insight components all call into it.
"""

from __future__ import annotations

import datetime as dt
from collections.abc import Iterable, Sequence
from typing import Optional

import numpy as np
from pydantic import BaseModel, ConfigDict

from .formatting import round_half_up
from .observation import Observation, group_by_metric, real_only


class SummaryRecord(BaseModel):
    """Reduction of one metric's observations. Values are unrounded."""

    model_config = ConfigDict(frozen=True)

    metric_name: str
    unit: str
    latest: Optional[Observation]
    average: float
    maximum: float
    minimum: float


# ------------------------------------------------------------------
# Reductions over plain values
# ------------------------------------------------------------------


def mean_or_zero(values: Sequence[float]) -> float:
    """Arithmetic mean, ``0.0`` for an empty sequence (never NaN)."""
    if len(values) == 0:
        return 0.0
    return float(np.mean(np.asarray(values, dtype=float)))


def max_or_zero(values: Sequence[float]) -> float:
    if len(values) == 0:
        return 0.0
    return float(np.max(np.asarray(values, dtype=float)))


def min_or_zero(values: Sequence[float]) -> float:
    if len(values) == 0:
        return 0.0
    return float(np.min(np.asarray(values, dtype=float)))


def latest_observation(observations: Iterable[Observation]) -> Optional[Observation]:
    """Observation with the greatest date; on a tie the last one encountered wins."""
    latest: Optional[Observation] = None
    for obs in observations:
        if latest is None or obs.date >= latest.date:
            latest = obs
    return latest


# ------------------------------------------------------------------
# Public API
# ------------------------------------------------------------------


def summarize(observations: Iterable[Observation], metric_name: str | None = None) -> SummaryRecord:
    """Summarise the observations of a single metric.

    Forecast points are ignored. An empty input yields a record with
    ``latest=None`` and zeros for every statistic. Observations sharing a
    date collapse to the last one, as in :func:`group_by_metric`.

    Parameters
    ----------
    observations : iterable of Observation
        Observations of one metric.
    metric_name : str, optional
        Name used for the record when *observations* is empty.
    """
    real = [obs for group in group_by_metric(real_only(observations)).values() for obs in group]
    values = [obs.value for obs in real]
    latest = latest_observation(real)
    if metric_name is None:
        metric_name = latest.metric_name if latest is not None else ""
    return SummaryRecord(
        metric_name=metric_name,
        unit=latest.unit if latest is not None else "",
        latest=latest,
        average=mean_or_zero(values),
        maximum=max_or_zero(values),
        minimum=min_or_zero(values),
    )


def summarize_by_metric(observations: Iterable[Observation]) -> list[SummaryRecord]:
    """One :class:`SummaryRecord` per metric name, in encounter order."""
    grouped = group_by_metric(real_only(observations))
    return [summarize(group, metric_name=name) for name, group in grouped.items()]


def window_average(
    observations: Iterable[Observation],
    end: dt.date,
    days: int,
) -> dict[str, float]:
    """Per-metric average over the trailing window ``[end - days, end]``.

    Used for the 7-day and 15-day reference levels. Results are rounded to
    two decimals; metrics without data inside the window are omitted.

    Raises
    ------
    ValueError
        If *days* is negative.
    """
    if days < 0:
        raise ValueError(f"days must be non-negative, got {days}")
    start = end - dt.timedelta(days=days)
    in_window = [obs for obs in real_only(observations) if start <= obs.date <= end]
    return {
        name: round_half_up(mean_or_zero([obs.value for obs in group]), 2)
        for name, group in group_by_metric(in_window).items()
    }

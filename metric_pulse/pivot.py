"""
metric_pulse.pivot
~~~~~~~~~~~~~~~~~~
Reshape a flat observation stream into a metric x date grid.

Rows are metrics, columns are every date present anywhere in the input.
A metric without a value on one of those dates gets :data:`NO_DATA` in that
cell, never ``0``.
"""

from __future__ import annotations

import datetime as dt
import enum
from collections.abc import Iterable, Sequence
from typing import Union

import numpy as np
from pydantic import BaseModel, ConfigDict

from .observation import Observation, group_by_metric, real_only
from .summary import max_or_zero, mean_or_zero, min_or_zero

TREND_WINDOW = 3
TREND_BAND = 0.02


class Trend(str, enum.Enum):
    UP = "up"
    DOWN = "down"
    STABLE = "stable"


class Missing(enum.Enum):
    NO_DATA = "no_data"

    def __bool__(self) -> bool:
        return False


NO_DATA = Missing.NO_DATA


class PivotCell(BaseModel):
    model_config = ConfigDict(frozen=True)

    value: float
    day_over_day_pct: float


class PivotRow(BaseModel):
    """One metric's row: its cells keyed by date plus row statistics."""

    model_config = ConfigDict(frozen=True)

    metric_name: str
    unit: str
    cells: dict[dt.date, PivotCell]
    average: float
    maximum: float
    minimum: float
    trend: Trend

    def cell(self, day: dt.date) -> Union[PivotCell, Missing]:
        return self.cells.get(day, NO_DATA)


class PivotTable(BaseModel):
    model_config = ConfigDict(frozen=True)

    dates: list[dt.date]
    rows: list[PivotRow]

    def row(self, metric_name: str) -> PivotRow:
        for row in self.rows:
            if row.metric_name == metric_name:
                return row
        raise KeyError(metric_name)

    def grid(self) -> list[list[Union[PivotCell, Missing]]]:
        """Cells laid out row by row in column order."""
        return [[row.cell(day) for day in self.dates] for row in self.rows]


# ------------------------------------------------------------------
# Row computations
# ------------------------------------------------------------------


def percent_change(previous: float, current: float) -> float:
    """Relative change in percent; 0 when *previous* is 0."""
    if previous == 0:
        return 0.0
    return (current - previous) / previous * 100


def classify_trend(
    values: Sequence[float],
    window: int = TREND_WINDOW,
    band: float = TREND_BAND,
) -> Trend:
    """Compare the mean of the last *window* values with the first *window*.

    With ``len(values) <= window`` both windows cover the same values and the
    result is :attr:`Trend.STABLE`.
    """
    if len(values) == 0:
        return Trend.STABLE
    k = min(window, len(values))
    arr = np.asarray(values, dtype=float)
    recent_avg = arr[-k:].mean()
    earlier_avg = arr[:k].mean()
    if recent_avg > earlier_avg * (1 + band):
        return Trend.UP
    if recent_avg < earlier_avg * (1 - band):
        return Trend.DOWN
    return Trend.STABLE


def build_row(metric_name: str, observations: Sequence[Observation]) -> PivotRow:
    """Build a row from one metric's observations (any order)."""
    ordered = sorted(observations, key=lambda obs: obs.date)
    values = [obs.value for obs in ordered]
    cells: dict[dt.date, PivotCell] = {}
    for idx, obs in enumerate(ordered):
        change = percent_change(values[idx - 1], obs.value) if idx > 0 else 0.0
        cells[obs.date] = PivotCell(value=obs.value, day_over_day_pct=change)
    return PivotRow(
        metric_name=metric_name,
        unit=ordered[0].unit if ordered else "",
        cells=cells,
        average=mean_or_zero(values),
        maximum=max_or_zero(values),
        minimum=min_or_zero(values),
        trend=classify_trend(values),
    )


# ------------------------------------------------------------------
# Public API
# ------------------------------------------------------------------


def build_pivot(observations: Iterable[Observation], include_forecast: bool = False) -> PivotTable:
    """Pivot one module's observations into a :class:`PivotTable`.

    Parameters
    ----------
    observations : iterable of Observation
        Observations spanning any number of metrics and dates.
    include_forecast : bool
        Keep forecast points as ordinary columns (default ``False``).
    """
    observations = list(observations)
    if not include_forecast:
        observations = real_only(observations)
    dates = sorted({obs.date for obs in observations})
    rows = [build_row(name, group) for name, group in group_by_metric(observations).items()]
    return PivotTable(dates=dates, rows=rows)

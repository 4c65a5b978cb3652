"""
metric_pulse.datasource
~~~~~~~~~~~~~~~~~~~~~~~
The contract the engine expects from whatever fetches observations, plus an
in-memory implementation. Sources are always passed in explicitly; there is
no process-wide "active" source.
"""

from __future__ import annotations

import datetime as dt
import enum
from collections.abc import Iterable
from typing import Protocol

from .observation import Observation

WEEK_THRESHOLD_DAYS = 31
MONTH_THRESHOLD_DAYS = 90


class Granularity(str, enum.Enum):
    DAY = "day"
    WEEK = "week"
    MONTH = "month"

    @property
    def step_days(self) -> int:
        return {"day": 1, "week": 7, "month": 30}[self.value]


def suggest_granularity(start: dt.date, end: dt.date) -> Granularity:
    """Pick a sampling granularity from the inclusive length of a range.

    Examples
    --------
    >>> suggest_granularity(dt.date(2024, 1, 1), dt.date(2024, 1, 31))
    <Granularity.DAY: 'day'>
    >>> suggest_granularity(dt.date(2024, 1, 1), dt.date(2024, 2, 1))
    <Granularity.WEEK: 'week'>
    """
    days = (end - start).days + 1
    if days > MONTH_THRESHOLD_DAYS:
        return Granularity.MONTH
    if days > WEEK_THRESHOLD_DAYS:
        return Granularity.WEEK
    return Granularity.DAY


class DataSource(Protocol):
    """Anything that can supply one module's observations for a date range."""

    async def fetch_metrics(
        self,
        module_id: str,
        start: dt.date,
        end: dt.date,
        granularity: Granularity,
    ) -> list[Observation]: ...


class InMemoryDataSource:
    """Serve a fixed collection of observations.

    Only observations of *module_id* dated ``start``, ``start + step``, ...
    up to and including *end* are returned, where ``step`` follows the
    requested granularity.
    """

    def __init__(self, observations: Iterable[Observation]) -> None:
        self._observations = tuple(observations)

    async def fetch_metrics(
        self,
        module_id: str,
        start: dt.date,
        end: dt.date,
        granularity: Granularity = Granularity.DAY,
    ) -> list[Observation]:
        if end < start:
            raise ValueError(f"range end {end} is before start {start}")
        step = Granularity(granularity).step_days
        return [
            obs
            for obs in self._observations
            if obs.module_id == module_id
            and start <= obs.date <= end
            and (obs.date - start).days % step == 0
        ]

"""
metric_pulse.batch
~~~~~~~~~~~~~~~~~~
Fan out one previous-period fetch per metric and compare each against the
current period. Fetches run concurrently under a semaphore so the upstream
source only sees a handful of requests at a time.
"""

from __future__ import annotations

import asyncio
import datetime as dt
from collections.abc import Iterable
from typing import Optional

import structlog

from .comparison import ComparisonRecord, compare_periods, previous_period
from .datasource import DataSource, Granularity
from .observation import Observation, group_by_metric, real_only

logger = structlog.get_logger(__name__)

DEFAULT_MAX_METRICS = 8
DEFAULT_CONCURRENCY = 4


async def compare_with_previous_period(
    source: DataSource,
    module_id: str,
    start: dt.date,
    end: dt.date,
    granularity: Granularity = Granularity.DAY,
    current: Optional[Iterable[Observation]] = None,
    max_metrics: int = DEFAULT_MAX_METRICS,
    concurrency: int = DEFAULT_CONCURRENCY,
) -> list[ComparisonRecord]:
    """Compare the first *max_metrics* metrics of ``[start, end]`` with P2.

    Parameters
    ----------
    source : DataSource
        Where both periods are fetched from.
    current : iterable of Observation, optional
        Current-period observations already at hand; fetched when omitted.
    max_metrics : int
        Cap on the number of metrics compared, in encounter order.
    concurrency : int
        Maximum number of previous-period fetches in flight.

    Returns
    -------
    list[ComparisonRecord]
        One record per compared metric, in encounter order. A metric whose
        previous-period fetch fails is compared against an empty period.

    Raises
    ------
    ValueError
        On an inverted range or a *concurrency* below 1.
    """
    if concurrency < 1:
        raise ValueError(f"concurrency must be at least 1, got {concurrency}")
    prev_start, prev_end = previous_period(start, end)

    if current is None:
        current = await source.fetch_metrics(module_id, start, end, granularity)
    grouped = group_by_metric(real_only(current))
    names = list(grouped)[:max_metrics]
    semaphore = asyncio.Semaphore(concurrency)

    async def _compare(name: str) -> ComparisonRecord:
        async with semaphore:
            try:
                fetched = await source.fetch_metrics(module_id, prev_start, prev_end, granularity)
            except Exception:  # noqa: BLE001
                logger.warning(
                    "previous_period_fetch_failed",
                    module_id=module_id,
                    metric_name=name,
                    start=prev_start.isoformat(),
                    end=prev_end.isoformat(),
                    exc_info=True,
                )
                fetched = []
        previous = [obs for obs in fetched if obs.metric_name == name]
        return compare_periods(name, grouped[name], previous)

    records = await asyncio.gather(*(_compare(name) for name in names))
    logger.debug(
        "period_comparison_complete",
        module_id=module_id,
        metrics=len(records),
        previous_start=prev_start.isoformat(),
        previous_end=prev_end.isoformat(),
    )
    return list(records)

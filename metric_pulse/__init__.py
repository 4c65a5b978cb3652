"""
metric_pulse
~~~~~~~~~~~~
Aggregation and comparison engine for business-metric dashboards.

Every component is a pure function over a list of :class:`Observation`
records for one module:

    from metric_pulse import build_pivot, detect_deviations, load_observations, summarize_by_metric

    observations = load_observations(rows)   # rows straight from the data source
    summaries = summarize_by_metric(observations)
    table = build_pivot(observations)
    signals = detect_deviations(observations)

Period-over-period comparison needs the previous period as well, which the
async batch helper fetches through an injected data source:

    from metric_pulse import InMemoryDataSource, compare_with_previous_period, most_stable

    records = await compare_with_previous_period(source, "ai_diagnosis", start, end)
    best = most_stable(records)

Forecast points are placeholders for chart continuity, not predictions:

    from metric_pulse import ForecastExtender

    points = ForecastExtender(seed=7).extend(summaries[0].latest, horizon=5)
"""

from .batch import compare_with_previous_period
from .comparison import (
    ComparisonRecord,
    compare_periods,
    fastest_growth,
    largest_swing,
    most_stable,
    previous_period,
    rank_by_growth,
    rank_by_stability,
    rank_by_swing,
    stability_index,
)
from .datasource import DataSource, Granularity, InMemoryDataSource, suggest_granularity
from .forecast import ForecastExtender, extend_forecast
from .formatting import format_ratio, format_value, round_for_unit, round_half_up
from .funnel import FunnelStep, normalize_funnel, rates_from_counts
from .insights import DeviationSignal, Direction, detect_deviations, needs_stable_fallback
from .log import configure_logging
from .observation import (
    CSV_HEADER,
    InvalidObservationError,
    Observation,
    group_by_metric,
    load_observations,
    metric_names,
    real_only,
    to_csv_rows,
)
from .pivot import NO_DATA, PivotCell, PivotRow, PivotTable, Trend, build_pivot, classify_trend
from .segments import (
    SegmentComparison,
    SegmentOverview,
    SegmentShare,
    compare_segments,
    segment_shares,
    summarize_segments,
)
from .summary import SummaryRecord, summarize, summarize_by_metric, window_average

__all__ = [
    "CSV_HEADER",
    "NO_DATA",
    "ComparisonRecord",
    "DataSource",
    "DeviationSignal",
    "Direction",
    "ForecastExtender",
    "FunnelStep",
    "Granularity",
    "InMemoryDataSource",
    "InvalidObservationError",
    "Observation",
    "PivotCell",
    "PivotRow",
    "PivotTable",
    "SegmentComparison",
    "SegmentOverview",
    "SegmentShare",
    "SummaryRecord",
    "Trend",
    "build_pivot",
    "classify_trend",
    "compare_periods",
    "compare_segments",
    "compare_with_previous_period",
    "configure_logging",
    "detect_deviations",
    "extend_forecast",
    "fastest_growth",
    "format_ratio",
    "format_value",
    "group_by_metric",
    "largest_swing",
    "load_observations",
    "metric_names",
    "most_stable",
    "needs_stable_fallback",
    "normalize_funnel",
    "previous_period",
    "rank_by_growth",
    "rank_by_stability",
    "rank_by_swing",
    "rates_from_counts",
    "real_only",
    "round_for_unit",
    "round_half_up",
    "segment_shares",
    "stability_index",
    "suggest_granularity",
    "summarize",
    "summarize_by_metric",
    "summarize_segments",
    "to_csv_rows",
    "window_average",
]

__version__ = "0.1.0"

"""
metric_pulse.segments
~~~~~~~~~~~~~~~~~~~~~
Compare a metric split by segment (a region, a customer group) between the
current and the previous period.

Two steps, both pure:

    shares = segment_shares({"北京": 2400, "上海": 1800, "四川": 600})
    rows = compare_segments(shares, previous_shares)
    overview = summarize_segments(rows)
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence

from pydantic import BaseModel, ConfigDict

from .formatting import round_half_up
from .pivot import percent_change

SHARE_DECIMALS = 2
TOP_SEGMENTS = 3


class SegmentShare(BaseModel):
    """A segment's value and its percentage of the total."""

    model_config = ConfigDict(frozen=True)

    segment: str
    value: float
    share_pct: float


class SegmentComparison(BaseModel):
    model_config = ConfigDict(frozen=True)

    segment: str
    current_value: float
    previous_value: float
    change: float
    change_pct: float
    current_share_pct: float
    previous_share_pct: float
    share_change: float


class SegmentOverview(BaseModel):
    """Headline figures over a set of segment comparisons."""

    model_config = ConfigDict(frozen=True)

    average_change_pct: float
    growing: int
    declining: int
    top_growth: list[SegmentComparison]
    top_decline: list[SegmentComparison]


def segment_shares(values: Mapping[str, float]) -> list[SegmentShare]:
    """Share of the total per segment, largest value first.

    Shares are percentages rounded to two decimals; a zero total gives every
    segment a share of 0. Equal values keep their input order.

    Examples
    --------
    >>> [s.share_pct for s in segment_shares({"a": 1, "b": 3})]
    [75.0, 25.0]
    """
    total = sum(float(v) for v in values.values())
    shares = [
        SegmentShare(
            segment=segment,
            value=float(value),
            share_pct=round_half_up(float(value) / total * 100, SHARE_DECIMALS) if total else 0.0,
        )
        for segment, value in values.items()
    ]
    return sorted(shares, key=lambda share: share.value, reverse=True)


def compare_segments(
    current: Iterable[SegmentShare],
    previous: Iterable[SegmentShare],
) -> list[SegmentComparison]:
    """Pair each current segment with its previous-period counterpart.

    Rows follow the order of *current*. A segment missing from *previous*
    is compared against a value and share of 0, which leaves its
    ``change_pct`` at 0. Segments only present in *previous* are dropped.
    """
    earlier = {share.segment: share for share in previous}
    rows: list[SegmentComparison] = []
    for share in current:
        before = earlier.get(share.segment)
        prev_value = before.value if before is not None else 0.0
        prev_share = before.share_pct if before is not None else 0.0
        rows.append(
            SegmentComparison(
                segment=share.segment,
                current_value=share.value,
                previous_value=prev_value,
                change=share.value - prev_value,
                change_pct=percent_change(prev_value, share.value),
                current_share_pct=share.share_pct,
                previous_share_pct=prev_share,
                share_change=share.share_pct - prev_share,
            )
        )
    return rows


def summarize_segments(
    comparisons: Sequence[SegmentComparison],
    top_n: int = TOP_SEGMENTS,
) -> SegmentOverview:
    """Average change, growing / declining counts and the top movers.

    ``top_decline`` lists the steepest decline first. With fewer than
    ``2 * top_n`` segments the two lists can overlap.
    """
    ranked = sorted(comparisons, key=lambda row: row.change_pct, reverse=True)
    if comparisons:
        average = sum(row.change_pct for row in comparisons) / len(comparisons)
    else:
        average = 0.0
    return SegmentOverview(
        average_change_pct=average,
        growing=sum(1 for row in comparisons if row.change_pct > 0),
        declining=sum(1 for row in comparisons if row.change_pct < 0),
        top_growth=ranked[:top_n],
        top_decline=list(reversed(ranked[-top_n:])) if top_n > 0 else [],
    )

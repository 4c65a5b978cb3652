"""
metric_pulse.insights
~~~~~~~~~~~~~~~~~~~~~
Numeric deviation detection: flag metrics whose latest observation sits
far from the period average. Turning a signal into a sentence is left to
the presentation layer.
"""

from __future__ import annotations

import enum
from collections.abc import Iterable, Sequence

from pydantic import BaseModel, ConfigDict

from .observation import Observation, group_by_metric, real_only
from .summary import summarize

MIN_SAMPLES = 5
DEVIATION_THRESHOLD_PCT = 20.0
MAX_SIGNALS = 3
STABLE_FALLBACK_MIN_SIGNALS = 2


class Direction(str, enum.Enum):
    ABOVE = "above"
    BELOW = "below"


class DeviationSignal(BaseModel):
    model_config = ConfigDict(frozen=True)

    metric_name: str
    direction: Direction
    magnitude: float


def deviation_pct(latest: float, average: float) -> float:
    """Percent deviation of *latest* from *average*; a zero average divides by 1."""
    return (latest - average) / (average if average != 0 else 1) * 100


def detect_deviations(
    observations: Iterable[Observation],
    min_samples: int = MIN_SAMPLES,
    threshold_pct: float = DEVIATION_THRESHOLD_PCT,
    limit: int = MAX_SIGNALS,
) -> list[DeviationSignal]:
    """Return at most *limit* signals, in metric encounter order.

    Metrics with fewer than *min_samples* real observations are skipped.
    A signal is raised when the absolute deviation is strictly greater than
    *threshold_pct*.
    """
    signals: list[DeviationSignal] = []
    for name, group in group_by_metric(real_only(observations)).items():
        if len(group) < min_samples:
            continue
        summary = summarize(group, metric_name=name)
        latest = summary.latest.value
        deviation = deviation_pct(latest, summary.average)
        if abs(deviation) > threshold_pct:
            signals.append(
                DeviationSignal(
                    metric_name=name,
                    direction=Direction.ABOVE if latest > summary.average else Direction.BELOW,
                    magnitude=abs(deviation),
                )
            )
            if len(signals) >= limit:
                break
    return signals


def needs_stable_fallback(signals: Sequence[DeviationSignal]) -> bool:
    """True when too few signals were found and a generic "stable" note is due."""
    return len(signals) < STABLE_FALLBACK_MIN_SIGNALS

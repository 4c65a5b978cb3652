"""
metric_pulse.funnel
~~~~~~~~~~~~~~~~~~~
Conversion funnel steps: each step's retained rate relative to the entry
step, and the loss against the step before it.
"""

from __future__ import annotations

from collections.abc import Iterable

from pydantic import BaseModel, ConfigDict

from .formatting import round_half_up

RATE_DECIMALS = 3


class FunnelStep(BaseModel):
    model_config = ConfigDict(frozen=True)

    step: str
    count: int
    rate: float
    loss: float = 0.0


def normalize_funnel(steps: Iterable[FunnelStep]) -> list[FunnelStep]:
    """Clamp rates at 0, round them to three decimals and fill in ``loss``.

    ``loss`` is the previous step's rate minus this step's, 0 for the entry
    step.

    Examples
    --------
    >>> steps = normalize_funnel([FunnelStep(step="open", count=100, rate=1),
    ...                           FunnelStep(step="done", count=71, rate=0.7104)])
    >>> [(s.rate, s.loss) for s in steps]
    [(1.0, 0.0), (0.71, 0.29)]
    """
    normalized: list[FunnelStep] = []
    for step in steps:
        rate = max(0.0, round_half_up(step.rate, RATE_DECIMALS))
        loss = round_half_up(normalized[-1].rate - rate, RATE_DECIMALS) if normalized else 0.0
        normalized.append(step.model_copy(update={"rate": rate, "loss": loss}))
    return normalized


def rates_from_counts(steps: Iterable[tuple[str, int]]) -> list[FunnelStep]:
    """Build a normalised funnel from ``(step, count)`` pairs.

    Each rate is the step's count over the first step's count; an empty or
    zero entry step gives rates of 0.
    """
    pairs = list(steps)
    entry = pairs[0][1] if pairs else 0
    return normalize_funnel(
        FunnelStep(step=name, count=count, rate=count / entry if entry else 0.0)
        for name, count in pairs
    )

"""
metric_pulse.forecast
~~~~~~~~~~~~~~~~~~~~~
Placeholder forecast used to extend a chart past the last real day.

This is not a statistical model. Every point is an independent uniform
draw around the *seed* value (not a running walk) and is clamped at zero.
"""

from __future__ import annotations

import datetime as dt
from typing import Optional

import numpy as np

from .observation import Observation

FORECAST_AMPLITUDE = 0.05
NOISE_LOW = -0.3
NOISE_HIGH = 0.7


class ForecastExtender:
    """Generate synthetic forecast points from the most recent observation.

    Parameters
    ----------
    seed : int, optional
        Seed for the random generator, for reproducible output.
    rng : numpy.random.Generator, optional
        Generator to draw from. Takes precedence over *seed*.
    amplitude : float
        Fraction of the seed value that scales the noise (default 0.05).
    """

    def __init__(
        self,
        seed: Optional[int] = None,
        rng: Optional[np.random.Generator] = None,
        amplitude: float = FORECAST_AMPLITUDE,
    ) -> None:
        self.rng = rng if rng is not None else np.random.default_rng(seed)
        self.amplitude = amplitude

    def noise_bounds(self, value: float) -> tuple[float, float]:
        """Return the ``(low, high)`` noise interval for a seed *value*."""
        scale = value * self.amplitude
        low, high = NOISE_LOW * scale, NOISE_HIGH * scale
        return min(low, high), max(low, high)

    def extend(self, seed: Optional[Observation], horizon: int) -> list[Observation]:
        """Return *horizon* forecast points dated ``seed.date + 1 .. + horizon``.

        Returns an empty list when *seed* is ``None`` (the metric had no
        real observations).

        Raises
        ------
        ValueError
            If *horizon* is below 1 or *seed* is itself a forecast point.
        """
        if horizon < 1:
            raise ValueError(f"horizon must be at least 1, got {horizon}")
        if seed is None:
            return []
        if seed.is_forecast:
            raise ValueError("cannot extend a forecast from a forecast point")

        low, high = self.noise_bounds(seed.value)
        noise = self.rng.uniform(low, high, size=horizon)
        points: list[Observation] = []
        for step, delta in enumerate(noise, start=1):
            points.append(
                seed.model_copy(
                    update={
                        "date": seed.date + dt.timedelta(days=step),
                        "value": max(0.0, seed.value + float(delta)),
                        "is_forecast": True,
                    }
                )
            )
        return points


def extend_forecast(
    seed: Optional[Observation],
    horizon: int,
    rng: Optional[np.random.Generator] = None,
) -> list[Observation]:
    """Functional shortcut for :meth:`ForecastExtender.extend`."""
    return ForecastExtender(rng=rng).extend(seed, horizon)

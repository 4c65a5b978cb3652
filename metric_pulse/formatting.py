"""
metric_pulse.formatting
~~~~~~~~~~~~~~~~~~~~~~~
Display rounding. Records keep full precision; these helpers are applied
only when a value is turned into text for a table or a chart label.

Halves round away from zero (``104.5`` -> ``105``), matching the dashboard
front end, rather than to the even neighbour as :func:`round` does.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

PERCENT_UNIT = "%"

# Ratios (percent changes, stability) use 1-2 decimals whatever the unit.
RATIO_MIN_DECIMALS = 1
RATIO_MAX_DECIMALS = 2


def _quantize(value: float, decimals: int) -> Decimal:
    return Decimal(str(float(value))).quantize(Decimal(10) ** -decimals, rounding=ROUND_HALF_UP)


def round_half_up(value: float, decimals: int = 0) -> float:
    """Round *value* to *decimals* places, halves away from zero.

    Examples
    --------
    >>> round_half_up(0.125, 2)
    0.13
    >>> round_half_up(104.5)
    105.0
    """
    return float(_quantize(value, decimals))


def decimals_for_unit(unit: str) -> int:
    """Number of decimals a measured value of *unit* is displayed with.

    Examples
    --------
    >>> decimals_for_unit("%")
    1
    >>> decimals_for_unit("个")
    0
    """
    return 1 if unit == PERCENT_UNIT else 0


def round_for_unit(value: float, unit: str) -> float:
    return round_half_up(value, decimals_for_unit(unit))


def format_value(value: float, unit: str, with_unit: bool = False) -> str:
    """Format a measured value using the unit-dependent rounding rule.

    Examples
    --------
    >>> format_value(12.345, "%")
    '12.3'
    >>> format_value(104.6, "次", with_unit=True)
    '105 次'
    """
    text = f"{_quantize(value, decimals_for_unit(unit)):f}"
    if with_unit and unit:
        return f"{text} {unit}"
    return text


def format_ratio(pct: float, decimals: int = RATIO_MIN_DECIMALS, signed: bool = False) -> str:
    """Format a percentage ratio, e.g. a delta or a stability index.

    *decimals* is clamped to the 1-2 range.

    Examples
    --------
    >>> format_ratio(12.345)
    '12.3%'
    >>> format_ratio(-4.0, decimals=2, signed=True)
    '-4.00%'
    """
    decimals = max(RATIO_MIN_DECIMALS, min(RATIO_MAX_DECIMALS, decimals))
    sign = "+" if signed else ""
    return f"{_quantize(pct, decimals):{sign}f}%"

"""Unit tests for metric_pulse.formatting."""

from metric_pulse.formatting import (
    decimals_for_unit,
    format_ratio,
    format_value,
    round_for_unit,
    round_half_up,
)


class TestDecimalsForUnit:
    def test_percent(self):
        assert decimals_for_unit("%") == 1

    def test_counts(self):
        for unit in ("个", "次", "人", "份", "万", ""):
            assert decimals_for_unit(unit) == 0


class TestRoundForUnit:
    def test_percent_one_decimal(self):
        assert round_for_unit(45.678, "%") == 45.7

    def test_count_whole_number(self):
        assert round_for_unit(45.678, "个") == 46


class TestFormatValue:
    def test_percent(self):
        assert format_value(12.34, "%") == "12.3"

    def test_count(self):
        assert format_value(104.6, "次") == "105"

    def test_with_unit_suffix(self):
        assert format_value(7, "人", with_unit=True) == "7 人"

    def test_blank_unit_no_suffix(self):
        assert format_value(7, "", with_unit=True) == "7"


class TestFormatRatio:
    def test_default_one_decimal_regardless_of_unit(self):
        assert format_ratio(33.333) == "33.3%"

    def test_two_decimals(self):
        assert format_ratio(33.333, decimals=2) == "33.33%"

    def test_decimals_clamped(self):
        assert format_ratio(1.23456, decimals=5) == "1.23%"
        assert format_ratio(1.23456, decimals=0) == "1.2%"

    def test_signed(self):
        assert format_ratio(4.0, signed=True) == "+4.0%"
        assert format_ratio(-4.0, signed=True) == "-4.0%"


class TestHalfUpRounding:
    def test_count_half_rounds_up(self):
        assert format_value(104.5, "个") == "105"

    def test_percent_half_rounds_up(self):
        assert format_value(0.25, "%") == "0.3"

    def test_round_for_unit_half(self):
        assert round_for_unit(2.5, "次") == 3.0
        assert round_for_unit(0.25, "%") == 0.3

    def test_negative_half_rounds_away_from_zero(self):
        assert round_half_up(-2.5) == -3.0

    def test_two_decimals(self):
        assert round_half_up(0.125, 2) == 0.13

    def test_ratio_half(self):
        assert format_ratio(12.25) == "12.3%"
        assert format_ratio(0.125, decimals=2) == "0.13%"

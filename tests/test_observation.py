"""Unit tests for metric_pulse.observation."""

import datetime as dt

import pytest
from structlog.testing import capture_logs

from metric_pulse.observation import (
    CSV_HEADER,
    InvalidObservationError,
    Observation,
    group_by_metric,
    load_observations,
    metric_names,
    real_only,
    sort_by_date,
    to_csv_row,
    to_csv_rows,
)


def _obs(metric, day, value, unit="个", module="ai_diagnosis", forecast=False):
    return Observation(
        module_id=module,
        metric_name=metric,
        date=dt.date(2024, 1, day),
        value=value,
        unit=unit,
        is_forecast=forecast,
    )


# ---------------------------------------------------------------------------
# Ingestion boundary
# ---------------------------------------------------------------------------

class TestFromRecord:
    def test_camel_case_upstream_row(self):
        obs = Observation.from_record({
            "moduleCode": "voice_records",
            "metricName": "采纳率",
            "metricDate": "2024-01-05",
            "metricValue": 81.5,
            "metricUnit": "%",
            "isPrediction": True,
        })
        assert obs.module_id == "voice_records"
        assert obs.metric_name == "采纳率"
        assert obs.date == dt.date(2024, 1, 5)
        assert obs.value == pytest.approx(81.5)
        assert obs.unit == "%"
        assert obs.is_forecast is True

    def test_snake_case_row(self):
        obs = Observation.from_record({
            "module_id": "ai_tongue",
            "metric_name": "采纳次数",
            "date": dt.date(2024, 2, 1),
            "value": 12,
        })
        assert obs.value == 12.0
        assert obs.unit == ""
        assert obs.is_forecast is False

    def test_datetime_loses_time_component(self):
        obs = Observation.from_record({
            "moduleCode": "m", "metricName": "x",
            "metricDate": dt.datetime(2024, 3, 4, 15, 30),
            "metricValue": 1,
        })
        assert obs.date == dt.date(2024, 3, 4)

    def test_iso_timestamp_string_accepted(self):
        obs = Observation.from_record({
            "moduleCode": "m", "metricName": "x",
            "metricDate": "2024-03-04T08:00:00",
            "metricValue": 1,
        })
        assert obs.date == dt.date(2024, 3, 4)

    def test_missing_value_rejected(self):
        with pytest.raises(InvalidObservationError):
            Observation.from_record({"moduleCode": "m", "metricName": "x", "metricDate": "2024-01-01"})

    def test_unparsable_date_rejected(self):
        with pytest.raises(InvalidObservationError):
            Observation.from_record({
                "moduleCode": "m", "metricName": "x", "metricDate": "yesterday", "metricValue": 1,
            })

    def test_nan_value_rejected(self):
        with pytest.raises(InvalidObservationError):
            Observation.from_record({
                "moduleCode": "m", "metricName": "x", "metricDate": "2024-01-01",
                "metricValue": float("nan"),
            })

    def test_error_is_a_value_error(self):
        assert issubclass(InvalidObservationError, ValueError)

    def test_null_unit_and_flag_normalised(self):
        obs = Observation.from_record({
            "moduleCode": "m", "metricName": "x", "metricDate": "2024-01-01",
            "metricValue": 3, "metricUnit": None, "isPrediction": None,
        })
        assert obs.unit == ""
        assert obs.is_forecast is False

    def test_observation_is_immutable(self):
        obs = _obs("X", 1, 100)
        with pytest.raises(Exception):
            obs.value = 5


class TestLoadObservations:
    def test_mixed_input(self):
        typed = _obs("X", 1, 100)
        loaded = load_observations([
            typed,
            {"moduleCode": "ai_diagnosis", "metricName": "X", "metricDate": "2024-01-02", "metricValue": 110},
        ])
        assert loaded[0] is typed
        assert loaded[1].date == dt.date(2024, 1, 2)

    def test_bad_row_aborts_batch(self):
        with pytest.raises(InvalidObservationError):
            load_observations([{"metricName": "X"}])


# ---------------------------------------------------------------------------
# Set helpers
# ---------------------------------------------------------------------------

class TestHelpers:
    def test_real_only_drops_forecasts(self):
        data = [_obs("X", 1, 1), _obs("X", 2, 2, forecast=True)]
        assert real_only(data) == [data[0]]

    def test_sort_by_date_uses_calendar_order(self):
        data = [_obs("X", 10, 1), _obs("X", 9, 2), _obs("X", 1, 3)]
        assert [o.date.day for o in sort_by_date(data)] == [1, 9, 10]

    def test_metric_names_encounter_order(self):
        data = [_obs("B", 1, 1), _obs("A", 1, 1), _obs("B", 2, 1)]
        assert metric_names(data) == ["B", "A"]


class TestGroupByMetric:
    def test_groups_sorted_by_date(self):
        data = [_obs("X", 3, 3), _obs("Y", 1, 9), _obs("X", 1, 1)]
        grouped = group_by_metric(data)
        assert list(grouped) == ["X", "Y"]
        assert [o.value for o in grouped["X"]] == [1, 3]

    def test_duplicate_date_last_wins_and_is_logged(self):
        data = [_obs("X", 1, 1), _obs("X", 1, 2)]
        with capture_logs() as logs:
            grouped = group_by_metric(data)
        assert [o.value for o in grouped["X"]] == [2]
        assert logs[0]["event"] == "duplicate_observation_date"
        assert logs[0]["log_level"] == "warning"
        assert logs[0]["metric_name"] == "X"

    def test_same_metric_from_two_modules_is_flagged(self):
        data = [_obs("X", 1, 1, module="ai_diagnosis"), _obs("X", 1, 2, module="photo_inventory")]
        with capture_logs() as logs:
            grouped = group_by_metric(data)
        assert [o.value for o in grouped["X"]] == [2]
        assert logs[0]["event"] == "mixed_module_observations"
        assert logs[0]["module_id"] == "photo_inventory"
        assert logs[0]["replaced_module_id"] == "ai_diagnosis"

    def test_empty(self):
        assert group_by_metric([]) == {}


# ---------------------------------------------------------------------------
# CSV rows
# ---------------------------------------------------------------------------

class TestCsvRows:
    def test_header_matches_row_shape(self):
        assert len(CSV_HEADER) == len(to_csv_row(_obs("X", 1, 1)))

    def test_row_fields(self):
        assert to_csv_row(_obs("X", 2, 12.5, unit="%")) == ("X", "2024-01-02", 12.5, "%")

    def test_rows_generator(self):
        rows = list(to_csv_rows([_obs("X", 1, 1), _obs("Y", 2, 2)]))
        assert [r[0] for r in rows] == ["X", "Y"]

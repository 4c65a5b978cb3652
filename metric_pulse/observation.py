"""
metric_pulse.observation
~~~~~~~~~~~~~~~~~~~~~~~~
The strictly-typed observation record, the ingestion boundary that
normalises loosely-shaped upstream rows into it, and the small grouping
helpers every component shares.
"""

from __future__ import annotations

import datetime as dt
from collections.abc import Iterable, Iterator, Mapping
from typing import Any

import structlog
from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError, field_validator

logger = structlog.get_logger(__name__)

CSV_HEADER = ("metric_name", "date", "value", "unit")


class InvalidObservationError(ValueError):
    """Raised when an upstream record cannot be turned into an Observation."""


class Observation(BaseModel):
    """One dated numeric fact for a metric of a module.

    Upstream sources emit camelCase rows (``moduleCode``, ``metricName``,
    ``metricDate``, ``metricValue``, ``metricUnit``, ``isPrediction``);
    those keys are accepted alongside the snake_case field names.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    module_id: str = Field(validation_alias=AliasChoices("module_id", "moduleCode", "moduleId"))
    metric_name: str = Field(validation_alias=AliasChoices("metric_name", "metricName"))
    date: dt.date = Field(validation_alias=AliasChoices("date", "metricDate"))
    value: float = Field(
        allow_inf_nan=False,
        validation_alias=AliasChoices("value", "metricValue"),
    )
    unit: str = Field(default="", validation_alias=AliasChoices("unit", "metricUnit"))
    is_forecast: bool = Field(
        default=False,
        validation_alias=AliasChoices("is_forecast", "isForecast", "isPrediction"),
    )

    @field_validator("date", mode="before")
    @classmethod
    def _drop_time_component(cls, value: Any) -> Any:
        if isinstance(value, dt.datetime):
            return value.date()
        if isinstance(value, str) and "T" in value:
            return value.split("T", 1)[0]
        return value

    @field_validator("unit", mode="before")
    @classmethod
    def _none_unit_is_blank(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("is_forecast", mode="before")
    @classmethod
    def _none_flag_is_false(cls, value: Any) -> Any:
        return False if value is None else value

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "Observation":
        """Validate a single upstream row.

        Raises
        ------
        InvalidObservationError
            If a mandatory field is missing or a value cannot be parsed.
        """
        try:
            return cls.model_validate(dict(record))
        except ValidationError as exc:
            raise InvalidObservationError(str(exc)) from exc


def load_observations(records: Iterable[Mapping[str, Any]]) -> list[Observation]:
    """Normalise a batch of upstream rows; already-typed observations pass through."""
    observations: list[Observation] = []
    for record in records:
        if isinstance(record, Observation):
            observations.append(record)
        else:
            observations.append(Observation.from_record(record))
    return observations


# ------------------------------------------------------------------
# Set helpers
# ------------------------------------------------------------------


def real_only(observations: Iterable[Observation]) -> list[Observation]:
    """Drop synthetic forecast points."""
    return [obs for obs in observations if not obs.is_forecast]


def sort_by_date(observations: Iterable[Observation]) -> list[Observation]:
    """Stable ascending sort on the calendar date."""
    return sorted(observations, key=lambda obs: obs.date)


def metric_names(observations: Iterable[Observation]) -> list[str]:
    """Distinct metric names in first-encounter order."""
    return list(dict.fromkeys(obs.metric_name for obs in observations))


def group_by_metric(observations: Iterable[Observation]) -> dict[str, list[Observation]]:
    """Group observations by metric name, each group sorted by date.

    The input is expected to hold a single module, so groups are keyed on
    the metric name alone. Groups keep first-encounter order. A second
    observation for the same metric and date replaces the first; the
    collision is logged, as ``mixed_module_observations`` when the two come
    from different modules.
    """
    by_date: dict[str, dict[dt.date, Observation]] = {}
    for obs in observations:
        dates = by_date.setdefault(obs.metric_name, {})
        previous = dates.get(obs.date)
        if previous is not None:
            event = (
                "duplicate_observation_date"
                if previous.module_id == obs.module_id
                else "mixed_module_observations"
            )
            logger.warning(
                event,
                module_id=obs.module_id,
                replaced_module_id=previous.module_id,
                metric_name=obs.metric_name,
                date=obs.date.isoformat(),
            )
        dates[obs.date] = obs
    return {
        name: [dates[day] for day in sorted(dates)]
        for name, dates in by_date.items()
    }


# ------------------------------------------------------------------
# Flat export
# ------------------------------------------------------------------


def to_csv_row(obs: Observation) -> tuple[str, str, float, str]:
    """Map an observation onto the ``metric_name,date,value,unit`` export row."""
    return (obs.metric_name, obs.date.isoformat(), obs.value, obs.unit)


def to_csv_rows(observations: Iterable[Observation]) -> Iterator[tuple[str, str, float, str]]:
    for obs in observations:
        yield to_csv_row(obs)

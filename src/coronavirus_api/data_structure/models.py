"""
models.py

Pydantic models for the payloads returned by the COVID-19 API.
The API wraps every answer in a capitalized envelope
({"Code": ..., "Message": ..., "Document": [...]}); the envelope fields are
aliased so that the Python side uses snake_case names.
All models are frozen and their collections are tuples or read-only
mappings: a decoded batch is a read-only snapshot.

Classes:
- DailyReport: one country/province row of a monthly report
- DailyReportBatch: envelope of daily reports for one month
- TimeSeriesRecord: one geographic series of date-labelled counts
- TimeSeriesBatch: envelope of time series records
"""

from __future__ import annotations
from types import MappingProxyType
from typing import Any, Dict, Literal, Mapping, Tuple

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_serializer,
    field_validator,
    model_validator,
)

SeriesKind = Literal["deaths", "confirmed", "recovered"]
Region = Literal["us", "global"]


class _Frozen(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        extra="ignore",
    )


class DailyReport(_Frozen):
    """
    Case data for one province/country as of `last_update`.
    `last_update` is kept as the raw string the API sends.
    The last four fields only appear in the richer report schema and
    default to zero values when absent.
    """
    model_config = ConfigDict(coerce_numbers_to_str=True)

    id: int = 0
    province_state: str = ""
    country_region: str = ""
    last_update: str = ""
    confirmed: int = 0
    deaths: int = 0
    recovered: int = 0
    active: int = 0

    fips: str = ""
    combined_key: str = ""
    case_fatality_ratio: float = 0.0
    incidence_rate: float = 0.0

    @model_validator(mode="before")
    @classmethod
    def _drop_nulls(cls, data: Any) -> Any:
        # null means "not reported"; fall back to the field default
        if isinstance(data, dict):
            return {k: v for k, v in data.items() if v is not None}
        return data


class DailyReportBatch(_Frozen):
    code: int = Field(default=0, alias="Code")
    message: str = Field(default="", alias="Message")
    reports: Tuple[DailyReport, ...] = Field(default=(), alias="Document")

    @field_validator("reports", mode="before")
    @classmethod
    def _null_document(cls, value: Any) -> Any:
        return () if value is None else value


class TimeSeriesRecord(_Frozen):
    """
    One geographic series. Besides the identifying fields, `counts` maps
    every date label the API returned (e.g. "1/22/20") to the case count
    on that date; the set of labels is open-ended.
    """

    # identifiers
    id: int = 0
    uid: int = 0
    iso2: str = ""
    iso3: str = ""
    fips: int = 0
    code3: int = 0

    # names
    admin2: str = ""
    combined_key: str = ""
    province_state: str = ""
    country_region: str = ""

    latitude: float = 0.0
    longitude: float = 0.0
    population: int = 0

    counts: Mapping[str, int] = Field(default_factory=dict, validate_default=True)

    @field_validator("counts")
    @classmethod
    def _read_only_counts(cls, value: Mapping[str, int]) -> Mapping[str, int]:
        return MappingProxyType(dict(value))

    @field_serializer("counts")
    def _dump_counts(self, value: Mapping[str, int]) -> Dict[str, int]:
        return dict(value)


class TimeSeriesBatch(_Frozen):
    code: int = Field(default=0, alias="Code")
    message: str = Field(default="", alias="Message")
    records: Tuple[TimeSeriesRecord, ...] = Field(default=(), alias="Document")

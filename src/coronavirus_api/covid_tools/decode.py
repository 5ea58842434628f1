"""
decode.py

Decoding of time series payloads.

Time series documents mix a fixed set of descriptive columns with one
column per reported date, and the date columns change as the API grows.
Instead of a fixed schema the payload is first parsed into plain JSON
values and then walked key by key:
- known keys fill the named TimeSeriesRecord fields
- every other key is taken as a date label and stored in `counts`

JSON numbers are floats on the wire for some of the integral columns
(uid, fips, code3, population, counts); they are truncated to int.
Exact integers are expected, the fractional part is not checked.
"""

import logging
import math
from typing import Any, Dict, List, Optional

from ..data_structure.models import TimeSeriesBatch, TimeSeriesRecord
from ..exceptions import DecodeError

INT_FIELDS = frozenset({"id", "uid", "code3", "fips", "population"})
FLOAT_FIELDS = frozenset({"latitude", "longitude"})
STR_FIELDS = frozenset({
    "province_state",
    "country_region",
    "iso2",
    "iso3",
    "admin2",
    "combined_key",
})
RECORD_FIELDS = INT_FIELDS | FLOAT_FIELDS | STR_FIELDS


def _as_number(key: str, value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise DecodeError(f"Expected a number for {key!r}, got {value!r}")
    # NaN and Infinity are valid JSON for the parser but not a count
    if not math.isfinite(value):
        raise DecodeError(f"Expected a finite number for {key!r}, got {value!r}")
    return value


def _as_int(key: str, value: Any) -> int:
    return int(_as_number(key, value))


def _as_float(key: str, value: Any) -> float:
    return float(_as_number(key, value))


def _as_str(key: str, value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    raise DecodeError(f"Expected a string for {key!r}, got {value!r}")


def decode_record(item: Any) -> TimeSeriesRecord:
    """Walk one element of `Document` into a TimeSeriesRecord."""
    if not isinstance(item, dict):
        raise DecodeError(
            f"Expected a time series object, got {type(item).__name__}"
        )

    fields: Dict[str, Any] = {}
    counts: Dict[str, int] = {}
    for key, value in item.items():
        if key not in RECORD_FIELDS:
            counts[key] = _as_int(key, value)
        elif value is None:
            continue
        elif key in INT_FIELDS:
            fields[key] = _as_int(key, value)
        elif key in FLOAT_FIELDS:
            fields[key] = _as_float(key, value)
        else:
            fields[key] = _as_str(key, value)

    return TimeSeriesRecord(**fields, counts=counts)


def decode_time_series(
    payload: Any,
    logger: Optional[logging.Logger] = None
) -> TimeSeriesBatch:
    """
    Build a TimeSeriesBatch from an already parsed JSON payload.

    :param payload: result of parsing the response body
    :param logger: where unknown top-level keys are reported,
        defaults to this module's logger
    :return: the decoded batch
    :raises DecodeError: if the payload or one of its records has the
        wrong shape
    """
    log = logger or logging.getLogger(__name__)
    if not isinstance(payload, dict):
        raise DecodeError(
            f"Expected a JSON object, got {type(payload).__name__}"
        )

    code = 0
    message = ""
    records: List[TimeSeriesRecord] = []
    for key, value in payload.items():
        if key == "Code":
            code = 0 if value is None else _as_int(key, value)
        elif key == "Message":
            message = "" if value is None else _as_str(key, value)
        elif key == "Document":
            if value is None:
                continue
            if not isinstance(value, list):
                raise DecodeError(
                    f"Expected 'Document' to be a list, "
                    f"got {type(value).__name__}"
                )
            records = [decode_record(item) for item in value]
        else:
            log.warning(f"unknown key {key!r} in time series response")

    return TimeSeriesBatch(code=code, message=message, records=records)

"""
coronavirus_api

Python client for the COVID-19 statistics REST API.
"""

import logging

from .covid_tools.client import APIClient, exchange_credentials
from .data_structure.models import (
    DailyReport,
    DailyReportBatch,
    TimeSeriesBatch,
    TimeSeriesRecord,
)
from .exceptions import (
    AuthenticationError,
    CovidAPIError,
    DecodeError,
    RetryExhaustedError,
    TransportError,
    UnexpectedStatusError,
)

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "APIClient",
    "exchange_credentials",
    "DailyReport",
    "DailyReportBatch",
    "TimeSeriesBatch",
    "TimeSeriesRecord",
    "AuthenticationError",
    "CovidAPIError",
    "DecodeError",
    "RetryExhaustedError",
    "TransportError",
    "UnexpectedStatusError",
]

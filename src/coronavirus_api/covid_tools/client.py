"""
client.py

HTTP client for the COVID-19 statistics API.
Every data endpoint needs a bearer token, obtained either out of band or
by exchanging a username/password at `/token`. Data requests that hit the
API's rate limit (HTTP 429) are retried after a fixed sleep.

Endpoints:
- POST /token                           -> raw token text
- GET  /<mon><yyyy>, e.g. /sep2020       -> DailyReportBatch
- GET  /time_series_<kind>_<region>      -> TimeSeriesBatch
"""

from __future__ import annotations
from datetime import date, timedelta
from typing import Any, Callable, Dict, Optional, Union
import logging
import time

import httpx
from pydantic import ValidationError

from ..client import Client
from ..data_structure.models import (
    DailyReportBatch,
    Region,
    SeriesKind,
    TimeSeriesBatch,
)
from ..exceptions import (
    AuthenticationError,
    DecodeError,
    TransportError,
    UnexpectedStatusError,
)
from .decode import decode_time_series

# API client configuration
API_URL = "https://covid19.cloudeya.org"
TIMEOUT = 10.0        # seconds per request
RETRY_SLEEP = 60.0    # seconds to wait after a 429
MAX_RETRIES = 5       # retries after a 429 before giving up, None = forever

SERIES_KINDS = ("deaths", "confirmed", "recovered")
REGIONS = ("us", "global")

# fixed table so the path does not depend on the process locale
MONTHS = (
    "jan", "feb", "mar", "apr", "may", "jun",
    "jul", "aug", "sep", "oct", "nov", "dec",
)

Duration = Union[int, float, timedelta]


def _seconds(name: str, value: Duration, *, allow_zero: bool) -> float:
    if isinstance(value, timedelta):
        value = value.total_seconds()
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"{name} must be a number of seconds, got {value!r}")
    if value < 0 or (value == 0 and not allow_zero):
        raise ValueError(
            f"{name} must be a {'non-negative' if allow_zero else 'positive'} "
            f"number of seconds, got {value}"
        )
    return float(value)


def _check_max_retries(value: Optional[int]) -> Optional[int]:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ValueError(
            f"max_retries must be a non-negative integer or None, got {value!r}"
        )
    return value


def _join(base_url: str, endpoint: str) -> str:
    return f"{base_url.rstrip('/')}/{endpoint.lstrip('/')}"


def report_endpoint(day: date) -> str:
    """Endpoint of the monthly report containing `day`, e.g. '/sep2020'."""
    return f"/{MONTHS[day.month - 1]}{day.year:04d}"


def time_series_endpoint(kind: str, region: str) -> str:
    if kind not in SERIES_KINDS:
        raise ValueError(
            f"kind must be one of {', '.join(SERIES_KINDS)}, got {kind!r}"
        )
    if region not in REGIONS:
        raise ValueError(
            f"region must be one of {', '.join(REGIONS)}, got {region!r}"
        )
    return f"/time_series_{kind}_{region}"


def _post_token(
    client: httpx.Client,
    base_url: str,
    username: str,
    password: str,
    timeout: float,
) -> httpx.Response:
    try:
        return client.post(
            _join(base_url, "/token"),
            json={"username": username, "password": password},
            headers={"Content-Type": "application/json"},
            timeout=timeout,
        )
    except (httpx.HTTPError, httpx.InvalidURL) as e:
        raise TransportError(f"Request failed: {e}") from e


def _request_token(
    username: str,
    password: str,
    *,
    base_url: str,
    timeout: Duration,
    http_client: Optional[httpx.Client],
) -> httpx.Response:
    seconds = _seconds("timeout", timeout, allow_zero=False)
    if http_client is not None:
        return _post_token(http_client, base_url, username, password, seconds)
    with httpx.Client() as client:
        return _post_token(client, base_url, username, password, seconds)


def exchange_credentials(
    username: str,
    password: str,
    *,
    base_url: str = API_URL,
    timeout: Duration = TIMEOUT,
    http_client: Optional[httpx.Client] = None,
) -> str:
    """
    Exchange a username/password for a bearer token.

    The API answers with the bare token text, which is returned verbatim.
    The status code is not inspected.

    :raises TransportError: if the request could not be sent
    """
    response = _request_token(
        username,
        password,
        base_url=base_url,
        timeout=timeout,
        http_client=http_client,
    )
    return response.text


class APIClient(Client):
    """HTTP client for the COVID-19 API (bearer auth, retry on 429)."""

    def __init__(
        self,
        token: str,
        *,
        base_url: str = API_URL,
        timeout: Duration = TIMEOUT,
        retry_sleep: Duration = RETRY_SLEEP,
        max_retries: Optional[int] = MAX_RETRIES,
        logger: Optional[logging.Logger] = None,
        http_client: Optional[httpx.Client] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """
        Initialize the client.

        :param token: bearer token, sent as-is
        :param base_url: root URL of the API
        :param timeout: per-request timeout, seconds or timedelta
        :param retry_sleep: wait after a 429 before retrying
        :param max_retries: retries after a 429 before raising
            RetryExhaustedError; None retries forever
        :param logger: logger for request/retry messages, defaults to the
            package logger (silent unless logging is configured)
        :param http_client: httpx client to send requests with; it is not
            closed by `close()`
        :param sleep: function used to wait between retries
        """
        super().__init__(
            retry_sleep=_seconds("retry_sleep", retry_sleep, allow_zero=True),
            max_retries=_check_max_retries(max_retries),
            logger=logger,
            sleep=sleep,
        )
        self.token = token
        self.base_url = base_url
        self.timeout = _seconds("timeout", timeout, allow_zero=False)

        self._owns_client = http_client is None
        self.client = http_client or httpx.Client(
            headers={"Accept": "application/json"},
        )

    @classmethod
    def from_credentials(
        cls,
        username: str,
        password: str,
        **kwargs: Any,
    ) -> "APIClient":
        """
        Create a client whose token comes from the `/token` exchange.
        Keyword arguments are passed on to the constructor; `base_url`,
        `timeout` and `http_client` are also used for the exchange.
        The credentials are not kept.

        :raises AuthenticationError: if no token could be obtained
        """
        try:
            response = _request_token(
                username,
                password,
                base_url=kwargs.get("base_url", API_URL),
                timeout=kwargs.get("timeout", TIMEOUT),
                http_client=kwargs.get("http_client"),
            )
        except TransportError as e:
            raise AuthenticationError(f"Credential exchange failed: {e}") from e

        if response.status_code != 200:
            raise AuthenticationError(
                f"Credential exchange failed: {response.status_code} - "
                f"{response.text[:200]}"
            )
        if not response.text:
            raise AuthenticationError(
                "Credential exchange failed: empty token"
            )
        return cls(response.text, **kwargs)

    # ---------------- Configuration ----------------

    def set_logger(self, logger: logging.Logger) -> None:
        self.logger = logger

    def set_timeout(self, timeout: Duration) -> None:
        self.timeout = _seconds("timeout", timeout, allow_zero=False)

    def set_base_url(self, base_url: str) -> None:
        self.base_url = base_url

    def set_retry_sleep(self, retry_sleep: Duration) -> None:
        self.retry_sleep = _seconds("retry_sleep", retry_sleep, allow_zero=True)

    def set_max_retries(self, max_retries: Optional[int]) -> None:
        self.max_retries = _check_max_retries(max_retries)

    def close(self) -> None:
        """Close the underlying httpx client if this instance created it."""
        if self._owns_client:
            self.client.close()

    def __enter__(self) -> "APIClient":
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    # ---------------- Core GET ----------------

    def _headers(self) -> Dict[str, str]:
        return {"Authorization": f"Bearer {self.token}"}

    def get(self, endpoint: str) -> Any:
        """
        Authenticated GET returning the parsed JSON body.

        :param endpoint: path beginning with '/' (e.g. '/sep2020')
        :raises TransportError: if the request could not be sent
        :raises RetryExhaustedError: if rate limiting outlasted the retries
        :raises UnexpectedStatusError: for any status other than 200
        :raises DecodeError: if the body is not JSON
        """
        response = self._send_with_retry(
            self.client,
            lambda: self.client.build_request(
                "GET",
                _join(self.base_url, endpoint),
                headers=self._headers(),
                timeout=self.timeout,
            ),
        )
        if response.status_code != 200:
            raise UnexpectedStatusError(response.status_code, response.text)

        try:
            return response.json()
        except ValueError as e:
            raise DecodeError(f"Response body is not valid JSON: {e}") from e

    # ---------------- Daily reports ----------------

    def get_reports_at(self, day: date) -> DailyReportBatch:
        """
        Daily reports for the month containing `day`.
        Only the month and year of `day` are used.
        """
        payload = self.get(report_endpoint(day))
        try:
            return DailyReportBatch.model_validate(payload)
        except ValidationError as e:
            raise DecodeError(f"Unexpected daily report payload: {e}") from e

    # ---------------- Time series ----------------

    def get_time_series(self, kind: SeriesKind, region: Region) -> TimeSeriesBatch:
        """
        Time series of `kind` ('deaths', 'confirmed' or 'recovered')
        for `region` ('us' or 'global').
        """
        payload = self.get(time_series_endpoint(kind, region))
        return decode_time_series(payload, self.logger)

    def get_time_series_confirmed_global(self) -> TimeSeriesBatch:
        return self.get_time_series("confirmed", "global")

    def get_time_series_confirmed_us(self) -> TimeSeriesBatch:
        return self.get_time_series("confirmed", "us")

    def get_time_series_deaths_global(self) -> TimeSeriesBatch:
        return self.get_time_series("deaths", "global")

    def get_time_series_deaths_us(self) -> TimeSeriesBatch:
        return self.get_time_series("deaths", "us")

    def get_time_series_recovered_global(self) -> TimeSeriesBatch:
        return self.get_time_series("recovered", "global")

"""
client.py

Module defining an abstract base Client class with rate-limit retry
    handling, shared by the API clients in this package.
"""

from typing import Any, Callable, Optional
from abc import ABC, abstractmethod
import logging
import time

import httpx

from .exceptions import RetryExhaustedError, TransportError

RATE_LIMITED = 429


class Client(ABC):
    """Abstract base class for clients with sleep-and-retry on HTTP 429."""

    def __init__(
        self,
        *,
        retry_sleep: float,
        max_retries: Optional[int],
        logger: Optional[logging.Logger] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        super().__init__()
        self.retry_sleep = retry_sleep
        self.max_retries = max_retries
        self.logger = logger or logging.getLogger(__name__)
        self._sleep = sleep

    def _send(
        self,
        client: httpx.Client,
        build_request: Callable[[], httpx.Request],
    ) -> httpx.Response:
        """Build and send once; transport-level failures become TransportError."""
        try:
            request = build_request()
            self.logger.debug(f"{request.method} {request.url}")
            return client.send(request)
        except (httpx.HTTPError, httpx.InvalidURL, UnicodeEncodeError) as e:
            # header values must be ASCII, a non-ASCII token fails here
            raise TransportError(f"Request failed: {e}") from e

    def _send_with_retry(
        self,
        client: httpx.Client,
        build_request: Callable[[], httpx.Request],
    ) -> httpx.Response:
        """
        Send a request, sleeping `retry_sleep` seconds and resending each
        time the API answers 429.

        :param client: httpx client used as transport
        :param build_request: callable returning a fresh request; called
            once per attempt
        :return: the first non-429 response
        :raises RetryExhaustedError: after `max_retries` retries
            (never when `max_retries` is None)
        """
        retries = 0
        while True:
            response = self._send(client, build_request)
            if response.status_code != RATE_LIMITED:
                return response

            url = str(response.request.url)
            if self.max_retries is not None and retries >= self.max_retries:
                raise RetryExhaustedError(url, retries + 1)
            retries += 1
            self.logger.warning(
                f"Rate limited on {url}, "
                f"retrying in {self.retry_sleep}s (retry {retries})"
            )
            self._sleep(self.retry_sleep)

    @abstractmethod
    def get(self, endpoint: str) -> Any:
        pass

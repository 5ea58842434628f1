"""
exceptions.py

Errors raised by the COVID-19 API client. Everything derives from
CovidAPIError so callers can catch the whole family at once.

Classes:
- CovidAPIError: base class
- TransportError: the request never produced a response
- UnexpectedStatusError: the API answered with a status other than 200/429
- DecodeError: the response body did not have the expected shape
- AuthenticationError: credential exchange did not yield a token
- RetryExhaustedError: the API kept answering 429 past the retry cap
"""

from typing import Optional


class CovidAPIError(Exception):
    """Base exception for all client errors."""


class TransportError(CovidAPIError):
    """Raised when building or sending the request fails."""


class UnexpectedStatusError(CovidAPIError):
    """Raised for a non-200, non-429 HTTP response."""

    def __init__(self, status_code: int, body: str = ""):
        self.status_code = status_code
        self.body = body[:200]
        super().__init__(
            f"response was not OK: {status_code} - {self.body}"
        )


class DecodeError(CovidAPIError):
    """Raised when the response body is malformed or has the wrong shape."""


class AuthenticationError(CovidAPIError):
    """Raised when credentials could not be exchanged for a token."""


class RetryExhaustedError(CovidAPIError):
    """Raised when rate limiting persists beyond the configured retry cap."""

    def __init__(self, url: str, attempts: int, message: Optional[str] = None):
        self.url = url
        self.attempts = attempts
        super().__init__(
            message or f"still rate limited after {attempts} attempts: {url}"
        )

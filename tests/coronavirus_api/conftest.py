"""
conftest.py

Shared pytest fixtures for the API client tests: a scripted mock
transport and a client wired to it with a recording sleep hook.
"""

import json

import httpx
import pytest

from coronavirus_api import APIClient

# Test timeout constant - can be imported in tests
TEST_TIMEOUT = 10

TOKEN = "test-token"
BASE_URL = "https://api.covid.example"


class ScriptedTransport:
    """
    Mock transport replaying a fixed list of responses in order and
    recording every request it receives.
    """

    def __init__(self, responses):
        self.responses = list(responses)
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


def json_response(payload, status_code=200):
    return httpx.Response(status_code, content=json.dumps(payload).encode())


def envelope(document, code=200, message="OK"):
    return {"Code": code, "Message": message, "Document": document}


@pytest.fixture
def sleeps():
    """List collecting every duration passed to the client's sleep hook."""
    return []


@pytest.fixture
def make_client(sleeps):
    """
    Factory fixture: make_client(responses, **kwargs) returns
    (client, transport) where the client sends through a ScriptedTransport.
    """
    created = []

    def _make(responses, **kwargs):
        transport = ScriptedTransport(responses)
        http_client = httpx.Client(transport=httpx.MockTransport(transport))
        created.append(http_client)
        kwargs.setdefault("base_url", BASE_URL)
        kwargs.setdefault("retry_sleep", 3.0)
        client = APIClient(
            TOKEN,
            http_client=http_client,
            sleep=sleeps.append,
            **kwargs,
        )
        return client, transport

    yield _make
    for http_client in created:
        http_client.close()

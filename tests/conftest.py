"""
Shared fixtures: settings and a stubbed payment backend.
"""

import asyncio
import json

import httpx
import pytest

from checkout_server.checkout_client import CheckoutClient
from checkout_server.config import Settings


class StubBackend:
    """Records requests and answers with a configurable response."""

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self.status_code = 200
        self.body = "https://pay.example/session/abc"
        self.json_body = None
        self.error: Exception | None = None

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        if self.json_body is not None:
            return httpx.Response(self.status_code, json=self.json_body)
        return httpx.Response(self.status_code, text=self.body)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def last_json(self) -> dict:
        return json.loads(self.requests[-1].content)


@pytest.fixture
def settings():
    """Settings pointing at a fake backend origin."""
    return Settings(base_url="https://backend.example/")


@pytest.fixture
def backend():
    """A stub backend that returns a hosted payment page."""
    return StubBackend()


@pytest.fixture
def checkout_client(settings, backend):
    """A CheckoutClient wired to the stub backend."""
    client = CheckoutClient(settings, transport=backend.transport)
    yield client
    asyncio.run(client.close())

"""Shared test fixtures for the extraction tests.

Provides:
  - Mock HTTP transports for httpx (sequenced and path-routed)
  - A fixed clock and credential helpers
  - A fully wired ExtractionService over a mock transport
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from typing import Any

import httpx
import pytest
from fbexport_shared.extract_models import Credential
from fbexport_source_access.credentials import CredentialStore
from fbexport_source_access.service import ExtractionService, reset_service, set_service
from fbexport_source_access.settings import ExtractSettings

NOW = 1_700_000_000.0
TOKEN_PATH = "/auth/oauth/token"
WHOAMI_PATH = "/auth/api/v1/users/me"


class MockTransport(httpx.AsyncBaseTransport):
    """Mock HTTP transport that returns preconfigured responses.

    Each call to handle_async_request pops the next response from the list.
    If the list is exhausted, returns a 500 error.
    """

    def __init__(self, responses: list[httpx.Response] | None = None) -> None:
        self.responses = list(responses or [])
        self.requests: list[httpx.Request] = []

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.responses:
            response = self.responses.pop(0)
            response.stream = httpx.ByteStream(response.content)
            return response
        return httpx.Response(500, json={"error": "No more mock responses"})


Route = httpx.Response | list[httpx.Response] | Callable[[httpx.Request], httpx.Response]


class RoutedTransport(httpx.AsyncBaseTransport):
    """Mock transport that answers by URL path.

    A route is a single response (returned every time), a list (popped in
    order, the last one repeats) or a callable taking the request. Unknown
    paths get a 404.
    """

    def __init__(self, routes: dict[str, Route] | None = None) -> None:
        self.routes: dict[str, Route] = dict(routes or {})
        self.requests: list[httpx.Request] = []

    def requests_for(self, path: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.url.path == path]

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes.get(request.url.path)
        if route is None:
            return httpx.Response(404, json={"error": {"message": "Not found"}})
        if isinstance(route, list):
            response = route.pop(0) if len(route) > 1 else route[0]
        elif isinstance(route, httpx.Response):
            response = route
        else:
            response = route(request)
        return httpx.Response(
            response.status_code, headers=response.headers, content=response.content
        )


class GatedTokenTransport(httpx.AsyncBaseTransport):
    """Token endpoint that holds every request until `release` is set."""

    def __init__(self, response: httpx.Response) -> None:
        self.response = response
        self.calls = 0
        self.release = asyncio.Event()

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        self.calls += 1
        await self.release.wait()
        return httpx.Response(
            self.response.status_code, headers=self.response.headers, content=self.response.content
        )


def token_response(
    access: str = "new-access", refresh: str = "new-refresh", expires_in: int = 43200
) -> httpx.Response:
    return httpx.Response(
        200, json={"access_token": access, "refresh_token": refresh, "expires_in": expires_in}
    )


def page(key: str, rows: list[dict[str, Any]], pages: int | None = None) -> httpx.Response:
    """A FreshBooks-style accounting list envelope."""
    result: dict[str, Any] = {key: rows}
    if pages is not None:
        result.update({"page": 1, "pages": pages})
    return httpx.Response(200, json={"response": {"result": result}})


def fresh_credential(access: str = "cached-access") -> Credential:
    return Credential(
        access_token=access, refresh_token="stored-refresh", expires_at=int(NOW) + 3600
    )


def stale_credential() -> Credential:
    return Credential(access_token="old-access", refresh_token="stored-refresh", expires_at=0)


@pytest.fixture
def settings() -> ExtractSettings:
    return ExtractSettings(
        api_base_url="https://api.test",
        client_id="client-id",
        client_secret="client-secret",
        redirect_uri="https://app.test/callback",
        env_path="/nonexistent/.env",
    )


@pytest.fixture
def routed() -> RoutedTransport:
    return RoutedTransport()


@pytest.fixture
def service(settings, routed) -> ExtractionService:
    """A wired service holding a fresh token, answering through `routed`."""
    store = CredentialStore(fresh_credential())
    svc = ExtractionService.from_settings(settings, store=store, transport=routed)
    svc.coordinator._clock = lambda: NOW
    return svc


@pytest.fixture
def installed_service(service):
    """The wired service installed as the process singleton."""
    set_service(service)
    yield service
    reset_service()

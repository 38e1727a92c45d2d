"""Platform API client.

This module provides:
- ApiClient: Protocol for platform calls (injectable for tests)
- HttpxApiClient: Real implementation over ``httpx.AsyncClient``
- MockApiClient: Canned outcomes and call recording for tests
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Protocol, runtime_checkable

import httpx

from relctl import __version__
from relctl.core.config import Config
from relctl.core.structured import StrDict, as_str_dict, get_list, get_str, get_table

from .outcome import (
    ApiOutcome,
    HttpError,
    RejectedWithActivation,
    RejectedWithErrors,
    Success,
    TransportFailure,
)

__all__ = [
    "ApiCall",
    "ApiClient",
    "HttpxApiClient",
    "MockApiClient",
    "build_async_client",
    "classify_response",
]

DEPLOY_KEY_HEADER = "X-Deploy-Key"


@runtime_checkable
class ApiClient(Protocol):
    """Protocol for calls against the platform API."""

    async def request(
        self,
        method: str,
        path: str,
        *,
        body: Mapping[str, object] | None = None,
    ) -> ApiOutcome:
        """Send a request and classify the response.

        Args:
            method: HTTP method
            path: Path relative to the API base URL (``/apps/1``)
            body: Optional JSON body

        Returns:
            One ApiOutcome variant; never raises for HTTP or network errors.
        """
        ...


def build_async_client(config: Config) -> httpx.AsyncClient:
    """Create the shared ``httpx.AsyncClient`` for one CLI invocation."""
    headers = {
        "User-Agent": f"relctl/{__version__}",
        "Accept": "application/json",
    }
    if config.deploy_key:
        headers[DEPLOY_KEY_HEADER] = config.deploy_key
    return httpx.AsyncClient(
        base_url=config.api.base_url,
        timeout=httpx.Timeout(config.api.timeout),
        headers=headers,
    )


def _decode_json(response: httpx.Response) -> StrDict | None:
    if not response.content:
        return None
    try:
        obj: object = response.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        return None
    return as_str_dict(obj)


def classify_response(response: httpx.Response) -> ApiOutcome:
    """Turn a finished HTTP response into an ApiOutcome."""
    data = _decode_json(response)
    if response.is_success:
        return Success(data or {})

    if data is not None:
        activation = get_table(data, "activationInfo")
        if activation is not None:
            url = get_str(activation, "url")
            if url:
                return RejectedWithActivation(url=url, status=response.status_code)

        errors = get_list(data, "errors")
        if errors:
            return RejectedWithErrors(errors=tuple(errors), status=response.status_code)

    message = response.text.strip() or response.reason_phrase
    return TransportFailure(
        HttpError(url=str(response.request.url), status=response.status_code, message=message)
    )


class HttpxApiClient:
    """ApiClient over an ``httpx.AsyncClient``.

    The caller owns the underlying client and its lifetime.
    """

    def __init__(self, client: httpx.AsyncClient) -> None:
        self._client = client

    async def request(
        self,
        method: str,
        path: str,
        *,
        body: Mapping[str, object] | None = None,
    ) -> ApiOutcome:
        try:
            response = await self._client.request(
                method,
                path,
                json=dict(body) if body is not None else None,
            )
        except httpx.TimeoutException:
            return TransportFailure(HttpError(url=path, status=0, message="Request timed out"))
        except httpx.HTTPError as e:
            message = str(e) or type(e).__name__
            return TransportFailure(HttpError(url=path, status=0, message=message))
        return classify_response(response)


@dataclass(frozen=True, slots=True)
class ApiCall:
    method: str
    path: str
    body: StrDict | None


class MockApiClient:
    """Mock API client for testing.

    Usage:
        api = MockApiClient()
        api.set_outcome("GET", "/apps/7", Success({"id": 7, "title": "Example"}))
        outcome = await api.request("GET", "/apps/7")
        assert api.paths == ["/apps/7"]
    """

    def __init__(self) -> None:
        self._outcomes: dict[tuple[str, str], ApiOutcome] = {}
        self.calls: list[ApiCall] = []

    def set_outcome(self, method: str, path: str, outcome: ApiOutcome) -> None:
        self._outcomes[(method.upper(), path)] = outcome

    async def request(
        self,
        method: str,
        path: str,
        *,
        body: Mapping[str, object] | None = None,
    ) -> ApiOutcome:
        self.calls.append(ApiCall(method.upper(), path, dict(body) if body is not None else None))
        outcome = self._outcomes.get((method.upper(), path))
        if outcome is None:
            return TransportFailure(HttpError(url=path, status=404, message="Not found (mock)"))
        return outcome

    @property
    def paths(self) -> list[str]:
        return [c.path for c in self.calls]

    def calls_to(self, method: str, path: str) -> list[ApiCall]:
        return [c for c in self.calls if c.method == method.upper() and c.path == path]

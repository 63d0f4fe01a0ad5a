"""Minimal JSON-over-HTTP capability.

The Drupal client only ever needs "GET this URL and give me the status
and JSON body", so that is the whole interface. The orchestrator gets
an implementation injected, which keeps the real network out of tests.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol

import httpx

# ---------------------------------------------------------------------------
# Protocol (Interface)
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class JsonResponse:
    """Status code plus decoded body (``None`` for non-2xx responses)."""

    status_code: int
    data: Any = None

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300


class JsonHttpClientProtocol(Protocol):
    """Anything that can GET a URL and decode a JSON body."""

    async def get_json(self, url: str) -> JsonResponse:
        """Fetch ``url``.

        Returns:
            The response status and, for 2xx responses, the decoded body

        Raises:
            httpx.HTTPError: On transport failures
            ValueError: If a 2xx body is not valid JSON
        """
        ...


# ---------------------------------------------------------------------------
# Concrete Implementation
# ---------------------------------------------------------------------------


class HttpxJsonClient:
    """``JsonHttpClientProtocol`` backed by ``httpx.AsyncClient``.

    Usage:
        async with HttpxJsonClient() as http:
            response = await http.get_json("https://api.drupal-mrn.dev/...")
    """

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        timeout: float = 30.0,
    ) -> None:
        """Initialize the client.

        Args:
            client: An existing httpx client to reuse. When omitted, one is
                    created and closed by ``aclose()``.
            timeout: Request timeout in seconds for the owned client
        """
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            headers={"Accept": "application/json"},
            timeout=timeout,
            follow_redirects=True,
        )

    async def get_json(self, url: str) -> JsonResponse:
        resp = await self._client.get(url)
        if not resp.is_success:
            return JsonResponse(status_code=resp.status_code)
        return JsonResponse(status_code=resp.status_code, data=resp.json())

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> HttpxJsonClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()


# ---------------------------------------------------------------------------
# Mock Implementation (for testing)
# ---------------------------------------------------------------------------


class MockHttpClient:
    """Routes full URLs to canned responses.

    Values in ``responses`` can be a ``JsonResponse``, a plain JSON
    payload (served with status 200) or an exception instance to raise.
    Unrouted URLs get ``default`` or a 404.

    Usage:
        http = MockHttpClient({url: {"tags": [{"name": "8.x-1.9"}]}})
        response = await http.get_json(url)
        assert http.calls == [url]
    """

    def __init__(
        self,
        responses: dict[str, Any] | None = None,
        default: JsonResponse | None = None,
    ) -> None:
        self._responses = responses or {}
        self._default = default or JsonResponse(status_code=404)
        self.calls: list[str] = []

    async def get_json(self, url: str) -> JsonResponse:
        self.calls.append(url)
        if url not in self._responses:
            return self._default

        value = self._responses[url]
        if isinstance(value, BaseException):
            raise value
        if isinstance(value, JsonResponse):
            return value
        return JsonResponse(status_code=200, data=value)

"""Tests for the drupal-mrn client and the JSON HTTP capability.

The client is exercised against ``MockHttpClient``; the httpx-backed
implementation is tested with respx so no real network is used.

Run with: pytest tests/test_drupal_client.py -v
"""

from __future__ import annotations

import httpx
import pytest
import respx
from structlog.testing import capture_logs

from drupal_release_notes.config import ApiSettings
from drupal_release_notes.context.drupal import DrupalReleaseClient
from drupal_release_notes.context.http import HttpxJsonClient, JsonResponse, MockHttpClient

TAGS_URL = "https://api.drupal-mrn.dev/tags?project=redis"


# ---------------------------------------------------------------------------
# URLs
# ---------------------------------------------------------------------------


class TestUrls:
    def setup_method(self) -> None:
        self.client = DrupalReleaseClient(MockHttpClient())

    def test_changelog_url(self) -> None:
        assert (
            self.client.changelog_url("core", "10.0.0", "10.1.0")
            == "https://api.drupal-mrn.dev/changelog?project=core&from=10.0.0&to=10.1.0&format=json"
        )

    def test_tags_url(self) -> None:
        assert self.client.tags_url("redis") == TAGS_URL

    def test_release_notes_url(self) -> None:
        assert (
            self.client.release_notes_url("redis", "8.x-1.9")
            == "https://www.drupal.org/project/redis/releases/8.x-1.9"
        )

    def test_compare_url(self) -> None:
        assert (
            self.client.compare_url("redis", "8.x-1.8", "8.x-1.9")
            == "https://git.drupalcode.org/project/redis/-/compare/8.x-1.8...8.x-1.9"
        )

    def test_custom_api_base(self) -> None:
        client = DrupalReleaseClient(
            MockHttpClient(), ApiSettings(api_base_url="http://localhost:8080")
        )
        assert client.tags_url("token") == "http://localhost:8080/tags?project=token"


# ---------------------------------------------------------------------------
# Tag fetching
# ---------------------------------------------------------------------------


class TestFetchProjectTags:
    @pytest.mark.asyncio
    async def test_returns_names_in_server_order(self) -> None:
        http = MockHttpClient(
            {TAGS_URL: {"tags": [{"name": "8.x-1.9"}, {"name": "8.x-1.10"}, {"name": "8.x-1.8"}]}}
        )
        tags = await DrupalReleaseClient(http).fetch_project_tags("redis")

        assert tags == ["8.x-1.9", "8.x-1.10", "8.x-1.8"]
        assert http.calls == [TAGS_URL]

    @pytest.mark.asyncio
    async def test_missing_tags_field(self) -> None:
        http = MockHttpClient({TAGS_URL: {}})
        assert await DrupalReleaseClient(http).fetch_project_tags("redis") == []

    @pytest.mark.asyncio
    async def test_malformed_entries_are_skipped(self) -> None:
        http = MockHttpClient({TAGS_URL: {"tags": [{"name": "8.x-1.9"}, {}, "8.x-1.8", None]}})
        assert await DrupalReleaseClient(http).fetch_project_tags("redis") == ["8.x-1.9"]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("tags", [5, True, "8.x-1.9", {"name": "8.x-1.9"}, None])
    async def test_tags_field_not_a_list(self, tags: object) -> None:
        http = MockHttpClient({TAGS_URL: {"tags": tags}})
        assert await DrupalReleaseClient(http).fetch_project_tags("redis") == []

    @pytest.mark.asyncio
    async def test_body_not_an_object(self) -> None:
        http = MockHttpClient({TAGS_URL: [{"name": "8.x-1.9"}]})
        assert await DrupalReleaseClient(http).fetch_project_tags("redis") == []

    @pytest.mark.asyncio
    async def test_http_error_status(self) -> None:
        http = MockHttpClient({TAGS_URL: JsonResponse(status_code=500)})

        with capture_logs() as logs:
            tags = await DrupalReleaseClient(http).fetch_project_tags("redis")

        assert tags == []
        assert logs[0]["event"] == "tags_fetch_failed"
        assert logs[0]["log_level"] == "warning"
        assert logs[0]["status"] == 500

    @pytest.mark.asyncio
    async def test_transport_error(self) -> None:
        http = MockHttpClient({TAGS_URL: httpx.ConnectError("connection refused")})

        with capture_logs() as logs:
            tags = await DrupalReleaseClient(http).fetch_project_tags("redis")

        assert tags == []
        assert logs[0]["event"] == "tags_fetch_error"
        assert logs[0]["log_level"] == "warning"
        assert logs[0]["error"] == "connection refused"

    @pytest.mark.asyncio
    async def test_parse_error(self) -> None:
        http = MockHttpClient({TAGS_URL: ValueError("Expecting value")})
        assert await DrupalReleaseClient(http).fetch_project_tags("redis") == []


# ---------------------------------------------------------------------------
# Changelog fetching
# ---------------------------------------------------------------------------


class TestFetchChangelog:
    @pytest.mark.asyncio
    async def test_uses_given_tags(self) -> None:
        url = "https://api.drupal-mrn.dev/changelog?project=redis&from=8.x-1.8&to=8.x-1.9&format=json"
        http = MockHttpClient({url: {"changes": []}})

        response = await DrupalReleaseClient(http).fetch_changelog("redis", "8.x-1.8", "8.x-1.9")

        assert response == JsonResponse(status_code=200, data={"changes": []})

    @pytest.mark.asyncio
    async def test_transport_errors_propagate(self) -> None:
        url = "https://api.drupal-mrn.dev/changelog?project=redis&from=1.0.0&to=1.1.0&format=json"
        client = DrupalReleaseClient(MockHttpClient({url: httpx.ReadTimeout("timed out")}))

        with pytest.raises(httpx.ReadTimeout):
            await client.fetch_changelog("redis", "1.0.0", "1.1.0")


# ---------------------------------------------------------------------------
# httpx implementation
# ---------------------------------------------------------------------------


class TestHttpxJsonClient:
    @pytest.mark.asyncio
    @respx.mock
    async def test_success(self) -> None:
        respx.get(TAGS_URL).mock(
            return_value=httpx.Response(200, json={"tags": [{"name": "8.x-1.9"}]})
        )

        async with HttpxJsonClient() as http:
            response = await http.get_json(TAGS_URL)

        assert response.ok
        assert response.data == {"tags": [{"name": "8.x-1.9"}]}

    @pytest.mark.asyncio
    @respx.mock
    async def test_error_status_body_is_not_parsed(self) -> None:
        respx.get(TAGS_URL).mock(return_value=httpx.Response(404, text="Not Found"))

        async with HttpxJsonClient() as http:
            response = await http.get_json(TAGS_URL)

        assert response == JsonResponse(status_code=404)
        assert not response.ok

    @pytest.mark.asyncio
    @respx.mock
    async def test_invalid_json_raises_value_error(self) -> None:
        respx.get(TAGS_URL).mock(return_value=httpx.Response(200, text="<html>"))

        async with HttpxJsonClient() as http:
            with pytest.raises(ValueError):
                await http.get_json(TAGS_URL)

    @pytest.mark.asyncio
    @respx.mock
    async def test_transport_error_raises(self) -> None:
        respx.get(TAGS_URL).mock(side_effect=httpx.ConnectError("boom"))

        async with HttpxJsonClient() as http:
            with pytest.raises(httpx.ConnectError):
                await http.get_json(TAGS_URL)

    @pytest.mark.asyncio
    async def test_injected_client_is_not_closed(self) -> None:
        async with httpx.AsyncClient() as client:
            async with HttpxJsonClient(client=client):
                pass
            assert not client.is_closed

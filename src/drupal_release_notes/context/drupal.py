"""Client for the drupal-mrn release notes API.

Two read-only endpoints are used:
- GET /tags?project={project}
    {"tags": [{"name": "8.x-1.9"}, ...]}
- GET /changelog?project={project}&from={tag}&to={tag}&format=json
    {"changes": [{"type": "Bug", "changes": [...]}], "changeRecords": [...]}

The client also knows how to build the drupal.org release page and the
GitLab compare URLs that the rendered notes link to.
"""

from __future__ import annotations

import httpx

from drupal_release_notes.config import ApiSettings
from drupal_release_notes.context.http import JsonHttpClientProtocol, JsonResponse
from drupal_release_notes.logging_config import get_logger

logger = get_logger(__name__)


class DrupalReleaseClient:
    """Fetches tags and changelogs for drupal.org projects.

    Usage:
        async with HttpxJsonClient() as http:
            client = DrupalReleaseClient(http)
            tags = await client.fetch_project_tags("token")
    """

    def __init__(
        self,
        http: JsonHttpClientProtocol,
        settings: ApiSettings | None = None,
    ) -> None:
        self._http = http
        self._settings = settings or ApiSettings()

    # -- URLs ---------------------------------------------------------------

    def tags_url(self, project: str) -> str:
        return str(
            httpx.URL(f"{self._settings.api_base_url}/tags", params={"project": project})
        )

    def changelog_url(self, project: str, from_tag: str, to_tag: str) -> str:
        return str(
            httpx.URL(
                f"{self._settings.api_base_url}/changelog",
                params={
                    "project": project,
                    "from": from_tag,
                    "to": to_tag,
                    "format": "json",
                },
            )
        )

    def release_notes_url(self, project: str, tag: str) -> str:
        return f"{self._settings.drupal_base_url}/project/{project}/releases/{tag}"

    def compare_url(self, project: str, from_tag: str, to_tag: str) -> str:
        return (
            f"{self._settings.gitlab_base_url}/project/{project}"
            f"/-/compare/{from_tag}...{to_tag}"
        )

    # -- Requests -----------------------------------------------------------

    async def fetch_project_tags(self, project: str) -> list[str]:
        """Return the project's tag names in the order the API lists them.

        Failures are logged and produce an empty list, in which case
        versions are used as-is.
        """
        try:
            response = await self._http.get_json(self.tags_url(project))
        except (httpx.HTTPError, ValueError) as e:
            logger.warning("tags_fetch_error", project=project, error=str(e))
            return []

        if not response.ok:
            logger.warning(
                "tags_fetch_failed", project=project, status=response.status_code
            )
            return []

        body = response.data if isinstance(response.data, dict) else {}
        tags = body.get("tags")
        if not isinstance(tags, list):
            return []
        return [
            tag["name"]
            for tag in tags
            if isinstance(tag, dict) and isinstance(tag.get("name"), str)
        ]

    async def fetch_changelog(
        self, project: str, from_tag: str, to_tag: str
    ) -> JsonResponse:
        """Fetch the raw changelog between two tags.

        Raises:
            httpx.HTTPError: On transport failures
            ValueError: If the body is not valid JSON
        """
        return await self._http.get_json(self.changelog_url(project, from_tag, to_tag))

"""Run configuration.

Everything the action needs from its environment is read once into an
``ActionInputs`` instance and passed explicitly to the orchestrator, so
nothing downstream touches ``os.environ``.

Environment variables:
    GITHUB_TOKEN       Token used for the pull request API (required)
    DEPENDENCY_NAMES   Comma-separated Composer package names
    PREVIOUS_VERSION   Comma-separated versions before the update
    NEW_VERSION        Comma-separated versions after the update
    GITHUB_REPOSITORY  "owner/name" of the repository
    GITHUB_EVENT_PATH  Path to the webhook payload (source of the PR number)
    PR_NUMBER          Explicit PR number, used when no payload is available
    DRUPAL_MRN_API_URL Base URL of the changelog API
    GITHUB_API_URL     Base URL of the GitHub REST API
"""

from __future__ import annotations

import json
import os
from collections.abc import Mapping
from pathlib import Path

from pydantic import BaseModel, Field

from drupal_release_notes.logging_config import get_logger
from drupal_release_notes.schemas import DRUPAL_PREFIX, PackageUpdate

logger = get_logger(__name__)


class ApiSettings(BaseModel):
    """Base URLs of the services the action reads from and links to."""

    api_base_url: str = "https://api.drupal-mrn.dev"
    drupal_base_url: str = "https://www.drupal.org"
    gitlab_base_url: str = "https://git.drupalcode.org"
    github_api_url: str = "https://api.github.com"

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> ApiSettings:
        env = os.environ if environ is None else environ
        defaults = cls()
        return cls(
            api_base_url=env.get("DRUPAL_MRN_API_URL") or defaults.api_base_url,
            github_api_url=env.get("GITHUB_API_URL") or defaults.github_api_url,
        )


class ActionInputs(BaseModel):
    """Inputs of a single run.

    Attributes:
        token: Credential for the pull request API
        dependency_names: Comma-separated package names from Dependabot
        previous_version: Comma-separated previous versions
        new_version: Comma-separated new versions
        repository: Repository in "owner/name" format
        pull_request_number: Number of the PR being annotated, if any
    """

    token: str = Field("", repr=False)
    dependency_names: str = ""
    previous_version: str = ""
    new_version: str = ""
    repository: str = ""
    pull_request_number: int | None = None

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> ActionInputs:
        """Read the inputs from the environment and the GitHub event payload."""
        env = os.environ if environ is None else environ

        pr_number = read_pull_request_number(env.get("GITHUB_EVENT_PATH"))
        raw_number = env.get("PR_NUMBER", "").strip()
        if pr_number is None and raw_number.isdigit() and int(raw_number) > 0:
            pr_number = int(raw_number)

        return cls(
            token=env.get("GITHUB_TOKEN", ""),
            dependency_names=env.get("DEPENDENCY_NAMES", ""),
            previous_version=env.get("PREVIOUS_VERSION", ""),
            new_version=env.get("NEW_VERSION", ""),
            repository=env.get("GITHUB_REPOSITORY", ""),
            pull_request_number=pr_number,
        )

    def package_updates(self) -> list[PackageUpdate]:
        return parse_package_updates(
            self.dependency_names, self.previous_version, self.new_version
        )


def read_pull_request_number(event_path: str | None) -> int | None:
    """Return ``pull_request.number`` from a webhook payload file.

    A missing, unreadable or non-PR payload yields ``None``; the
    orchestrator reports that as a missing pull request context.
    """
    if not event_path:
        return None
    try:
        payload = json.loads(Path(event_path).read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        logger.warning("event_payload_unreadable", path=event_path, error=str(e))
        return None

    pull_request = payload.get("pull_request") if isinstance(payload, dict) else None
    if not isinstance(pull_request, dict):
        return None
    number = pull_request.get("number")
    return number if isinstance(number, int) and number > 0 else None


def _split(value: str) -> list[str]:
    return [item.strip() for item in value.split(",")]


def parse_package_updates(
    dependency_names: str,
    previous_version: str,
    new_version: str,
) -> list[PackageUpdate]:
    """Zip the comma-separated Dependabot lists into Drupal package updates.

    Grouped updates may report a single version pair for several
    packages; a missing or empty version at an index falls back to the
    first element of its list.

    Args:
        dependency_names: e.g. "drupal/core,other/pkg,drupal/token"
        previous_version: e.g. "10.0.0,1.0.0,1.0.0"
        new_version: e.g. "10.1.0,1.1.0,1.1.0"

    Returns:
        One PackageUpdate per ``drupal/`` name, in input order
    """
    names = _split(dependency_names)
    from_versions = _split(previous_version)
    to_versions = _split(new_version)

    for label, versions in (("previous", from_versions), ("new", to_versions)):
        if len(versions) not in (1, len(names)):
            # Index fallback can pair a package with another one's version.
            logger.warning(
                "version_list_length_mismatch",
                versions=label,
                names_count=len(names),
                versions_count=len(versions),
            )

    updates = []
    for index, name in enumerate(names):
        if not name.startswith(DRUPAL_PREFIX):
            continue
        updates.append(
            PackageUpdate.from_name(
                name,
                _at(from_versions, index),
                _at(to_versions, index),
            )
        )
    return updates


def _at(values: list[str], index: int) -> str:
    if index < len(values) and values[index]:
        return values[index]
    return values[0]

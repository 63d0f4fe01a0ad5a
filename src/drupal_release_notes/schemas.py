"""Pydantic models for the data flowing through the action.

- PackageUpdate: one updated ``drupal/*`` dependency and its version pair
- ChangeEntry / ChangeGroup / ChangeRecord / ChangelogResponse: the
  payload returned by the drupal-mrn changelog API
- PullRequest: the part of a GitHub pull request the action reads
- RunStatus / RunResult: the outcome of one run

The changelog models are lenient about the upstream payload: missing
or ``null`` lists become empty lists and numeric issue ids become
strings, so rendering never has to special-case them.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

DRUPAL_PREFIX = "drupal/"
DEFAULT_CATEGORY = "Misc"


# ---------------------------------------------------------------------------
# Packages
# ---------------------------------------------------------------------------


class PackageUpdate(BaseModel):
    """A single Drupal package bumped by the pull request.

    Attributes:
        name: Full Composer package name (e.g., "drupal/token")
        project: drupal.org project machine name (e.g., "token")
        from_version: Version before the update, as reported by Dependabot
        to_version: Version after the update, as reported by Dependabot
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="Composer package name")
    project: str = Field(..., description="drupal.org project name")
    from_version: str = Field("", description="Previous version")
    to_version: str = Field("", description="New version")

    @classmethod
    def from_name(cls, name: str, from_version: str, to_version: str) -> PackageUpdate:
        """Build an update from a ``drupal/``-prefixed package name."""
        return cls(
            name=name,
            project=name.removeprefix(DRUPAL_PREFIX),
            from_version=from_version,
            to_version=to_version,
        )


# ---------------------------------------------------------------------------
# Changelog payload
# ---------------------------------------------------------------------------


class ChangeEntry(BaseModel):
    """One changelog item (usually a drupal.org issue)."""

    nid: str | None = None
    link: str = ""
    type: str | None = None
    summary: str = ""

    @field_validator("nid", mode="before")
    @classmethod
    def coerce_nid(cls, value: Any) -> Any:
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        if value == "":
            return None
        return value

    @field_validator("summary", "link", mode="before")
    @classmethod
    def none_to_empty(cls, value: Any) -> Any:
        return "" if value is None else value


class ChangeGroup(BaseModel):
    """Changelog entries sharing a category, pre-sorted by the API."""

    type: str | None = None
    changes: list[ChangeEntry] = Field(default_factory=list)

    @field_validator("changes", mode="before")
    @classmethod
    def none_to_list(cls, value: Any) -> Any:
        return [] if value is None else value

    @property
    def category(self) -> str:
        return self.type or DEFAULT_CATEGORY


class ChangeRecord(BaseModel):
    """A drupal.org change record linked from the release.

    Older API responses use ``summary``/``link``, newer ones
    ``title``/``url``; whichever is present is used.
    """

    title: str | None = None
    summary: str | None = None
    url: str | None = None
    link: str | None = None

    @property
    def display_title(self) -> str | None:
        return self.title or self.summary

    @property
    def display_url(self) -> str | None:
        return self.url or self.link


class ChangelogResponse(BaseModel):
    """Body of the drupal-mrn ``/changelog`` endpoint."""

    model_config = ConfigDict(populate_by_name=True)

    changes: list[ChangeGroup] = Field(default_factory=list)
    change_records: list[ChangeRecord] = Field(
        default_factory=list, alias="changeRecords"
    )

    @field_validator("changes", "change_records", mode="before")
    @classmethod
    def none_to_list(cls, value: Any) -> Any:
        return [] if value is None else value

    @property
    def has_changes(self) -> bool:
        return len(self.changes) > 0


# ---------------------------------------------------------------------------
# Pull request + run outcome
# ---------------------------------------------------------------------------


class PullRequest(BaseModel):
    """The pull request fields the action reads and rewrites."""

    number: int = Field(..., gt=0)
    body: str | None = None


class RunStatus(StrEnum):
    """How a run ended.

    UPDATED: Release notes were appended to the PR description
    ALREADY_PRESENT: The description already carried the release notes
    NO_PACKAGES: No drupal/ package was part of the update
    DRY_RUN: The section was rendered but the PR was not touched
    FAILED: A fatal configuration or PR API error stopped the run
    """

    UPDATED = "UPDATED"
    ALREADY_PRESENT = "ALREADY_PRESENT"
    NO_PACKAGES = "NO_PACKAGES"
    DRY_RUN = "DRY_RUN"
    FAILED = "FAILED"


class RunResult(BaseModel):
    """Outcome of ``ReleaseNotesAction.run``.

    Attributes:
        status: How the run ended
        message: Human-readable explanation (failure reason for FAILED)
        section: The rendered release notes section, if one was built
    """

    status: RunStatus
    message: str = ""
    section: str = ""

    @property
    def failed(self) -> bool:
        return self.status == RunStatus.FAILED

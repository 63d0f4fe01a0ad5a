"""Markdown rendering for the release notes section.

Every package gets a ``### drupal/<project>`` block, whether or not its
release notes could be fetched, so the PR description always accounts
for each updated package. Version text shows what Dependabot reported;
URLs are built by the caller from the mapped tag names.
"""

from __future__ import annotations

import re

from drupal_release_notes.schemas import (
    ChangeEntry,
    ChangelogResponse,
    PackageUpdate,
)

RELEASE_NOTES_MARKER = "## Drupal Release Notes"
SECTION_HEADER = f"\n\n---\n\n{RELEASE_NOTES_MARKER}\n\n"
CHANGE_RECORDS_HEADING = "#### Change Records"

# "#12345: ", "#12345 by alice, bob: "
ISSUE_ID_PREFIX = re.compile(r"^#[0-9]+(?:\s+by\s+[^:]+)?:\s*")


def strip_issue_id(summary: str) -> str:
    """Drop the leading issue reference that upstream summaries embed."""
    return ISSUE_ID_PREFIX.sub("", summary, count=1)


def render_change_line(entry: ChangeEntry) -> str:
    if entry.nid is None:
        return f"* {entry.summary}\n"

    summary = strip_issue_id(entry.summary)
    line = f"* [#{entry.nid}]({entry.link})"
    if summary:
        line += f": {summary}"
    return line + "\n"


def _heading(package: PackageUpdate) -> str:
    return f"### {package.name}\n\n"


def render_package_section(
    package: PackageUpdate,
    changelog: ChangelogResponse,
    release_notes_url: str,
    compare_url: str,
) -> str:
    """Render the notes of one package that has at least one change."""
    parts = [
        _heading(package),
        f"**{package.from_version} → [{package.to_version}]({release_notes_url})**"
        f" ([compare]({compare_url}))\n\n",
    ]

    for group in changelog.changes:
        if not group.changes:
            continue
        parts.append(f"#### {group.category}\n\n")
        parts.extend(render_change_line(entry) for entry in group.changes)
        parts.append("\n")

    if changelog.change_records:
        parts.append(f"{CHANGE_RECORDS_HEADING}\n\n")
        for record in changelog.change_records:
            if record.display_url and record.display_title:
                parts.append(f"* [{record.display_title}]({record.display_url})\n")
        parts.append("\n")

    parts.append("\n")
    return "".join(parts)


def render_no_release_notes(package: PackageUpdate, release_notes_url: str) -> str:
    return (
        _heading(package)
        + f"**{package.from_version} → [{package.to_version}]({release_notes_url})**\n\n"
        + "_No release notes available_\n\n"
    )


def render_fetch_failed(package: PackageUpdate) -> str:
    return (
        _heading(package)
        + f"_Could not fetch release notes ({package.from_version} → {package.to_version})_\n\n"
    )


def render_fetch_error(package: PackageUpdate, message: str) -> str:
    return _heading(package) + f"_Error fetching release notes: {message}_\n\n"

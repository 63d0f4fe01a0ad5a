"""Map Composer version strings to drupal.org tag names.

Composer reports contrib versions in semver form ("1.9.0") even for
projects whose git tags still use the legacy ``8.x-1.9`` scheme. The
changelog and compare URLs need the real tag, so versions are looked up
against the project's tag list before use.
"""

from __future__ import annotations

import re
from collections.abc import Sequence

SEMVER_PATTERN = re.compile(r"([0-9]+)\.([0-9]+)\.([0-9]+)")
LEGACY_PREFIX = "8.x-"


def map_version_to_tag(version: str, tags: Sequence[str]) -> str:
    """Return the tag name for ``version``.

    Exact tag matches win. Otherwise a ``MAJOR.MINOR.PATCH`` version is
    tried as ``8.x-MAJOR.MINOR``. Anything else is returned unchanged.

    Examples:
        >>> map_version_to_tag("10.1.0", ["10.1.0"])
        '10.1.0'
        >>> map_version_to_tag("1.9.0", ["8.x-1.8", "8.x-1.9"])
        '8.x-1.9'
        >>> map_version_to_tag("1.9.0", [])
        '1.9.0'
    """
    if version in tags:
        return version

    match = SEMVER_PATTERN.fullmatch(version)
    if match:
        major, minor, _patch = match.groups()
        legacy = f"{LEGACY_PREFIX}{major}.{minor}"
        if legacy in tags:
            return legacy

    return version

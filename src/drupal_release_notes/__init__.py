"""Drupal release notes for Dependabot pull requests.

A CI step that looks up the upstream release notes of every updated
``drupal/*`` Composer package and appends a grouped changelog to the
pull request description.
"""

__version__ = "0.1.0"

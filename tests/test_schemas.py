"""Tests for the changelog payload models.

Run with: pytest tests/test_schemas.py -v
"""

from __future__ import annotations

from drupal_release_notes.schemas import (
    ChangeEntry,
    ChangelogResponse,
    ChangeRecord,
    PackageUpdate,
    RunResult,
    RunStatus,
)


class TestChangelogResponse:
    def test_missing_lists_default_to_empty(self) -> None:
        changelog = ChangelogResponse.model_validate({})
        assert changelog.changes == []
        assert changelog.change_records == []
        assert not changelog.has_changes

    def test_null_lists(self) -> None:
        changelog = ChangelogResponse.model_validate({"changes": None, "changeRecords": None})
        assert changelog.changes == []
        assert changelog.change_records == []

    def test_group_with_null_changes(self) -> None:
        changelog = ChangelogResponse.model_validate({"changes": [{"type": "Bug", "changes": None}]})
        assert changelog.has_changes
        assert changelog.changes[0].changes == []

    def test_extra_fields_are_ignored(self) -> None:
        changelog = ChangelogResponse.model_validate(
            {"from": "10.0.0", "to": "10.1.0", "changes": [], "contributors": ["a"]}
        )
        assert changelog.changes == []


class TestChangeEntry:
    def test_numeric_nid_becomes_string(self) -> None:
        assert ChangeEntry.model_validate({"nid": 3352651}).nid == "3352651"

    def test_empty_nid_is_absent(self) -> None:
        assert ChangeEntry.model_validate({"nid": "", "summary": "x"}).nid is None

    def test_null_summary(self) -> None:
        assert ChangeEntry.model_validate({"nid": "1", "summary": None}).summary == ""


class TestChangeRecord:
    def test_new_field_names(self) -> None:
        record = ChangeRecord(title="New API", url="https://www.drupal.org/node/1")
        assert (record.display_title, record.display_url) == ("New API", "https://www.drupal.org/node/1")

    def test_old_field_names(self) -> None:
        record = ChangeRecord(summary="Old API", link="https://www.drupal.org/node/2")
        assert (record.display_title, record.display_url) == ("Old API", "https://www.drupal.org/node/2")

    def test_new_names_take_precedence(self) -> None:
        record = ChangeRecord(title="t", summary="s", url="u", link="l")
        assert (record.display_title, record.display_url) == ("t", "u")


def test_package_update_from_name() -> None:
    update = PackageUpdate.from_name("drupal/token", "1.0.0", "1.1.0")
    assert update.project == "token"


def test_run_result_failed() -> None:
    assert RunResult(status=RunStatus.FAILED, message="boom").failed
    assert not RunResult(status=RunStatus.UPDATED).failed

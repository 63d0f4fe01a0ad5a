"""Orchestrator for the Drupal release notes action.

Flow of one run:
1. Validate the inputs (token) and pick out the drupal/ packages
2. For each package, in order:
   a. fetch the project's tags and map the versions onto them
   b. fetch the changelog between the mapped tags
   c. render a markdown block (or a placeholder when that failed)
3. Read the pull request description and append the section, unless
   it is already there

Per-package problems never stop the run; they show up as placeholder
blocks. Missing configuration and pull request API errors are reported
through ``report_failure`` and end the run with a FAILED result.
"""

from __future__ import annotations

import argparse
import asyncio
import sys

import httpx

from drupal_release_notes.config import ActionInputs, ApiSettings
from drupal_release_notes.context.drupal import DrupalReleaseClient
from drupal_release_notes.context.github import (
    GitHubPullRequestClient,
    PullRequestClientProtocol,
)
from drupal_release_notes.context.http import HttpxJsonClient, JsonHttpClientProtocol
from drupal_release_notes.logging_config import get_logger, setup_logging
from drupal_release_notes.render import (
    RELEASE_NOTES_MARKER,
    SECTION_HEADER,
    render_fetch_error,
    render_fetch_failed,
    render_no_release_notes,
    render_package_section,
)
from drupal_release_notes.schemas import (
    ChangelogResponse,
    PackageUpdate,
    RunResult,
    RunStatus,
)
from drupal_release_notes.versions import map_version_to_tag

logger = get_logger(__name__)

MISSING_TOKEN = "GITHUB_TOKEN is required"
MISSING_REPOSITORY = "GITHUB_REPOSITORY is required"
MISSING_PR_CONTEXT = "This action must be run in the context of a pull request"


def report_failure(message: str) -> RunResult:
    """Log a fatal error and emit it as a GitHub ``::error::`` annotation."""
    logger.error("action_failed", error=message)
    escaped = message.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")
    print(f"::error::{escaped}", flush=True)
    return RunResult(status=RunStatus.FAILED, message=message)


class ReleaseNotesAction:
    """Builds the release notes section and appends it to the PR.

    Usage:
        action = ReleaseNotesAction()
        result = await action.run(ActionInputs.from_env())
    """

    def __init__(
        self,
        http: JsonHttpClientProtocol | None = None,
        pulls: PullRequestClientProtocol | None = None,
        settings: ApiSettings | None = None,
        dry_run: bool = False,
    ) -> None:
        """Initialize the action with its collaborators.

        Args:
            http: JSON client for the drupal-mrn API. An httpx client is
                  created per run when omitted.
            pulls: Pull request client. A GitHub client is built from the
                   run's token and repository when omitted.
            settings: API base URLs
            dry_run: Render the section without touching the PR
        """
        self._http = http
        self._pulls = pulls
        self._settings = settings or ApiSettings()
        self._dry_run = dry_run

    async def run(self, inputs: ActionInputs) -> RunResult:
        """Run the action once.

        Args:
            inputs: Token, Dependabot version lists and PR context

        Returns:
            The run outcome. Fatal problems are returned as FAILED
            results, never raised.
        """
        if not inputs.token and not self._dry_run:
            return report_failure(MISSING_TOKEN)

        packages = inputs.package_updates()
        if not packages:
            logger.info("no_drupal_packages", message="No drupal/ packages found in this PR")
            return RunResult(status=RunStatus.NO_PACKAGES)

        section = await self.build_section(packages)

        if self._dry_run:
            return RunResult(status=RunStatus.DRY_RUN, section=section)

        if not inputs.pull_request_number:
            return report_failure(MISSING_PR_CONTEXT)

        return await self._append_to_pull_request(
            inputs, inputs.pull_request_number, section
        )

    async def build_section(self, packages: list[PackageUpdate]) -> str:
        """Render the full release notes section for ``packages``."""
        if self._http is not None:
            return await self._render_packages(
                DrupalReleaseClient(self._http, self._settings), packages
            )

        async with HttpxJsonClient() as http:
            return await self._render_packages(
                DrupalReleaseClient(http, self._settings), packages
            )

    async def _render_packages(
        self, drupal: DrupalReleaseClient, packages: list[PackageUpdate]
    ) -> str:
        blocks = [SECTION_HEADER]
        has_release_notes = False

        # Sequential: block order follows the input order.
        for package in packages:
            block, has_changes = await self.render_package(drupal, package)
            blocks.append(block)
            has_release_notes = has_release_notes or has_changes

        if not has_release_notes:
            logger.info(
                "no_release_notes_retrieved",
                message="No release notes were retrieved from the API.",
            )
        return "".join(blocks)

    async def render_package(
        self, drupal: DrupalReleaseClient, package: PackageUpdate
    ) -> tuple[str, bool]:
        """Render the block for one package.

        Returns:
            The markdown block and whether it lists any changes
        """
        logger.info(
            "fetching_release_notes",
            project=package.project,
            from_version=package.from_version,
            to_version=package.to_version,
        )

        tags = await drupal.fetch_project_tags(package.project)
        from_tag = map_version_to_tag(package.from_version, tags)
        to_tag = map_version_to_tag(package.to_version, tags)
        if (from_tag, to_tag) != (package.from_version, package.to_version):
            logger.info(
                "versions_mapped_to_tags",
                project=package.project,
                from_tag=from_tag,
                to_tag=to_tag,
            )

        try:
            response = await drupal.fetch_changelog(package.project, from_tag, to_tag)
            if not response.ok:
                logger.warning(
                    "changelog_fetch_failed",
                    project=package.project,
                    status=response.status_code,
                )
                return render_fetch_failed(package), False
            changelog = ChangelogResponse.model_validate(response.data or {})
        except (httpx.HTTPError, ValueError) as e:
            logger.error("changelog_fetch_error", project=package.project, error=str(e))
            return render_fetch_error(package, str(e)), False

        release_notes_url = drupal.release_notes_url(package.project, to_tag)
        if not changelog.has_changes:
            return render_no_release_notes(package, release_notes_url), False

        compare_url = drupal.compare_url(package.project, from_tag, to_tag)
        section = render_package_section(package, changelog, release_notes_url, compare_url)
        return section, True

    async def _append_to_pull_request(
        self, inputs: ActionInputs, number: int, section: str
    ) -> RunResult:
        pulls = self._pulls
        if pulls is None:
            if not inputs.repository:
                return report_failure(MISSING_REPOSITORY)
            pulls = GitHubPullRequestClient(
                token=inputs.token,
                repository=inputs.repository,
                base_url=self._settings.github_api_url,
            )

        try:
            pr = await pulls.get_pull_request(number)
            if pr.body and RELEASE_NOTES_MARKER in pr.body:
                logger.info(
                    "release_notes_already_present",
                    pr_number=number,
                    message="Release notes already present in PR description",
                )
                return RunResult(status=RunStatus.ALREADY_PRESENT, section=section)

            await pulls.update_pull_request_body(number, (pr.body or "") + section)
        except (httpx.HTTPError, ValueError) as e:
            return report_failure(f"Failed to update pull request #{number}: {e}")

        logger.info("pull_request_updated", pr_number=number)
        return RunResult(
            status=RunStatus.UPDATED,
            message="Successfully updated PR description with Drupal release notes",
            section=section,
        )


# ---------------------------------------------------------------------------
# CLI Entry Point
# ---------------------------------------------------------------------------


def main(argv: list[str] | None = None) -> int:
    """CLI entry point, run as a CI step.

    Usage:
        drupal-release-notes
        drupal-release-notes --dry-run

    Inputs come from the environment (see ``drupal_release_notes.config``).
    Returns the process exit status: 1 when the run failed.
    """
    parser = argparse.ArgumentParser(
        description="Append Drupal release notes to a Dependabot pull request"
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Print the release notes section instead of updating the PR",
    )
    parser.add_argument(
        "--log-level",
        help="DEBUG, INFO, WARNING or ERROR (defaults to LOG_LEVEL or INFO)",
    )
    args = parser.parse_args(argv)

    setup_logging(log_level=args.log_level)

    inputs = ActionInputs.from_env()
    action = ReleaseNotesAction(settings=ApiSettings.from_env(), dry_run=args.dry_run)
    result = asyncio.run(action.run(inputs))

    if result.status == RunStatus.DRY_RUN:
        print(result.section)
    return 1 if result.failed else 0


if __name__ == "__main__":
    sys.exit(main())

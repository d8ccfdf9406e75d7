"""Pull request review comments for gitleaks findings.

Each finding becomes one single-line review comment that carries its
fingerprint. Comments already present on the pull request (same body, path
and line) are skipped, so re-running on the same commits posts nothing new.
Note that the comparison is on the exact body: changing the mention list
reposts every finding.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any

from gitleaks_ci.errors import CommentPostError, GitHubAPIError, ReportParseError
from gitleaks_ci.github.client import GitHubClient
from gitleaks_ci.report.sarif import Finding, parse_report

logger = logging.getLogger(__name__)

IGNORE_FILE = ".gitleaksignore"


@dataclass(frozen=True)
class ReviewComment:
    owner: str
    repo: str
    pull_number: int
    commit_id: str
    path: str
    line: int
    body: str
    side: str = "RIGHT"

    def matches(self, existing: dict[str, Any]) -> bool:
        """True if ``existing`` (an API comment) is this comment."""
        return (
            existing.get("body") == self.body
            and existing.get("path") == self.path
            and existing.get("original_line") == self.line
        )


class CommentOutcome(Enum):
    POSTED = "posted"
    DUPLICATE = "duplicate"
    FAILED = "failed"


@dataclass(frozen=True)
class CommentResult:
    fingerprint: str
    outcome: CommentOutcome
    error: str | None = None


def build_comment_body(finding: Finding, notify_user_list: str | None = None) -> str:
    body = (
        f"🛑 **Gitleaks** has detected a secret with rule-id `{finding.rule_id}` "
        f"in commit {finding.commit_sha}.\n"
        "If this secret is a _true_ positive, please rotate the secret ASAP.\n"
        "\n"
        "If this secret is a _false_ positive, you can add the fingerprint below to your "
        f"`{IGNORE_FILE}` file and commit the change to this branch.\n"
        "\n"
        "```\n"
        f"echo {finding.fingerprint} >> {IGNORE_FILE}\n"
        "```\n"
    )
    if notify_user_list:
        body += f"\n\ncc {notify_user_list}"
    return body


def build_review_comment(
    finding: Finding,
    owner: str,
    repo: str,
    pull_number: int,
    notify_user_list: str | None = None,
) -> ReviewComment:
    return ReviewComment(
        owner=owner,
        repo=repo,
        pull_number=pull_number,
        commit_id=finding.commit_sha,
        path=finding.file_path,
        line=finding.start_line,
        body=build_comment_body(finding, notify_user_list),
    )


def comment_exists(existing_comments: list[dict[str, Any]], comment: ReviewComment) -> bool:
    return any(comment.matches(existing) for existing in existing_comments)


class CommentPoster:
    """Posts review comments for a pull request's findings."""

    def __init__(
        self,
        client: GitHubClient,
        owner: str,
        repo: str,
        pull_number: int,
        notify_user_list: str | None = None,
    ) -> None:
        self.client = client
        self.owner = owner
        self.repo = repo
        self.pull_number = pull_number
        self.notify_user_list = notify_user_list

    def _post(self, comment: ReviewComment) -> None:
        self.client.create_review_comment(
            comment.owner,
            comment.repo,
            comment.pull_number,
            body=comment.body,
            commit_id=comment.commit_id,
            path=comment.path,
            line=comment.line,
            side=comment.side,
        )

    def post_findings(self, findings: list[Finding]) -> list[CommentResult]:
        """
        Post one comment per finding, in report order.

        A failure on one finding does not stop the others; failures are logged
        once the whole list has been processed.
        """
        if not findings:
            return []

        try:
            existing = self.client.list_review_comments(self.owner, self.repo, self.pull_number)
        except GitHubAPIError as e:
            logger.warning("Skipping review comments, could not list existing ones: %s", e)
            return []

        results: list[CommentResult] = []

        for finding in findings:
            comment = build_review_comment(
                finding, self.owner, self.repo, self.pull_number, self.notify_user_list
            )
            if comment_exists(existing, comment):
                results.append(CommentResult(finding.fingerprint, CommentOutcome.DUPLICATE))
                continue
            try:
                self._post(comment)
            except CommentPostError as e:
                results.append(CommentResult(finding.fingerprint, CommentOutcome.FAILED, str(e)))
            else:
                results.append(CommentResult(finding.fingerprint, CommentOutcome.POSTED))
                existing.append(
                    {"body": comment.body, "path": comment.path, "original_line": comment.line}
                )

        self._log_results(results)
        return results

    def _log_results(self, results: list[CommentResult]) -> None:
        posted = sum(1 for r in results if r.outcome is CommentOutcome.POSTED)
        duplicates = sum(1 for r in results if r.outcome is CommentOutcome.DUPLICATE)
        logger.info(
            "Review comments on PR #%d: %d posted, %d already present",
            self.pull_number,
            posted,
            duplicates,
        )
        for result in results:
            if result.outcome is CommentOutcome.FAILED:
                logger.warning(
                    "Failed to post comment on PR #%d for %s: %s\n"
                    "Likely caused by a large diff. All secrets will be reported "
                    "in the summary and artifacts.",
                    self.pull_number,
                    result.fingerprint,
                    result.error,
                )


def post_review_comments(poster: CommentPoster, report_path: Path) -> list[CommentResult]:
    """Parse the report and comment on the pull request; a bad report skips commenting."""
    try:
        findings = parse_report(report_path)
    except ReportParseError as e:
        logger.warning("Skipping review comments: %s", e)
        return []
    return poster.post_findings(findings)

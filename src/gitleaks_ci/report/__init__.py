"""Findings reporting: SARIF parsing, job summary and review comments."""

from gitleaks_ci.report.comments import (
    CommentOutcome,
    CommentPoster,
    CommentResult,
    ReviewComment,
    post_review_comments,
)
from gitleaks_ci.report.sarif import Finding, parse_report
from gitleaks_ci.report.summary import render_summary, write_summary

__all__ = [
    "CommentOutcome",
    "CommentPoster",
    "CommentResult",
    "Finding",
    "ReviewComment",
    "parse_report",
    "post_review_comments",
    "render_summary",
    "write_summary",
]

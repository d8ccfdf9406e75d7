"""Job summary rendering.

The summary is HTML appended to ``$GITHUB_STEP_SUMMARY``, in the same shape
``@actions/core`` produces (``<h1>`` headings and a plain ``<table>``).
Findings are also printed to the job log as a rich table.
"""

from __future__ import annotations

import html
import logging

from rich.console import Console
from rich.table import Table

from gitleaks_ci.errors import ReportParseError
from gitleaks_ci.github.workflow import RunnerEnvironment
from gitleaks_ci.report.sarif import Finding, parse_report
from gitleaks_ci.scanner.models import EXIT_CODE_ERROR, RunOutcome, ScanResult

logger = logging.getLogger(__name__)

HEADING_CLEAN = "No leaks detected ✅"
HEADING_LEAKS = "🛑 Gitleaks detected secrets 🛑"
HEADING_NO_DETAILS = "⚠️ Gitleaks reported leaks but no details found"

TABLE_HEADERS = (
    "Rule ID",
    "Commit",
    "Secret URL",
    "Start Line",
    "Author",
    "Date",
    "Email",
    "File",
)


def build_commit_url(repo_url: str, commit_sha: str) -> str:
    return f"{repo_url}/commit/{commit_sha}"


def build_secret_url(repo_url: str, commit_sha: str, file_path: str, line: int) -> str:
    return f"{repo_url}/blob/{commit_sha}/{file_path}#L{line}"


def build_file_url(repo_url: str, commit_sha: str, file_path: str) -> str:
    return f"{repo_url}/blob/{commit_sha}/{file_path}"


def _link(url: str, text: str) -> str:
    return f'<a href="{html.escape(url)}">{html.escape(text)}</a>'


def heading(text: str, level: int = 1) -> str:
    return f"<h{level}>{text}</h{level}>\n"


def error_heading(exit_code: int) -> str:
    if exit_code == EXIT_CODE_ERROR:
        return f"❌ Gitleaks exited with error. Exit code [{exit_code}]"
    return f"❌ Gitleaks exited with unexpected exit code [{exit_code}]"


def format_finding_row(finding: Finding, repo_url: str) -> list[str]:
    """Table cells (already HTML) for one finding."""
    sha = finding.commit_sha
    return [
        html.escape(finding.rule_id),
        _link(build_commit_url(repo_url, sha), finding.short_sha),
        _link(build_secret_url(repo_url, sha, finding.file_path, finding.start_line), "View Secret"),
        str(finding.start_line),
        html.escape(finding.author),
        html.escape(finding.date),
        html.escape(finding.email),
        _link(build_file_url(repo_url, sha, finding.file_path), finding.file_path),
    ]


def render_table(findings: list[Finding], repo_url: str) -> str:
    header = "".join(f"<th>{cell}</th>" for cell in TABLE_HEADERS)
    rows = [f"<tr>{header}</tr>"]
    for finding in findings:
        cells = "".join(f"<td>{cell}</td>" for cell in format_finding_row(finding, repo_url))
        rows.append(f"<tr>{cells}</tr>")
    return f"<table>{''.join(rows)}</table>\n"


def render_summary(result: ScanResult, repo_url: str) -> tuple[str, list[Finding]]:
    """
    Render the summary markup for a scan result.

    Returns:
        Tuple of (markup, findings shown in the table).
    """
    outcome = result.outcome
    if outcome is RunOutcome.CLEAN:
        return heading(HEADING_CLEAN), []

    if outcome is RunOutcome.EXECUTION_ERROR:
        return heading(error_heading(result.exit_code)), []

    try:
        findings = parse_report(result.report_path)
    except ReportParseError as e:
        logger.warning("%s", e)
        findings = []

    if not findings:
        return heading(HEADING_NO_DETAILS), []

    return heading(HEADING_LEAKS) + render_table(findings, repo_url), findings


def print_findings(findings: list[Finding], console: Console) -> None:
    """Print findings to the job log."""
    table = Table(title="Gitleaks findings", show_lines=False)
    for column in ("Rule ID", "Commit", "File", "Line", "Author", "Date"):
        table.add_column(column)
    for finding in findings:
        table.add_row(
            finding.rule_id,
            finding.short_sha,
            finding.file_path,
            str(finding.start_line),
            finding.author,
            finding.date,
        )
    console.print(table)


def write_summary(
    result: ScanResult,
    repo_url: str,
    runner: RunnerEnvironment,
    console: Console | None = None,
) -> str:
    """Render the summary, append it to the job summary and return the markup."""
    markup, findings = render_summary(result, repo_url)
    if findings and console is not None:
        print_findings(findings, console)
    runner.append_summary(markup)
    return markup


__all__ = [
    "HEADING_CLEAN",
    "HEADING_LEAKS",
    "HEADING_NO_DETAILS",
    "render_summary",
    "render_table",
    "write_summary",
]

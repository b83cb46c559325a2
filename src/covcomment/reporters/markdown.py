"""Markdown sections of the coverage comment.

Each ``generate_*`` function returns a self-contained block ending in a blank
line, or an empty string when there is nothing to show.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from covcomment.utils.files import format_line_ranges, format_time, get_coverage_color

if TYPE_CHECKING:
    from collections.abc import Iterable

    from covcomment.models.coverage import CoverageSummary, FileSummary, LastRunSummary
    from covcomment.models.test_result import TestResultsSummary

logger = logging.getLogger(__name__)

SHIELDS_BASE = "https://img.shields.io/badge"
CHANGED_FILES_TITLE = "Changed Files Coverage"

_FULL_COVERAGE = 100.0
_WARN_COVERAGE = 80.0


# ── Badges ──────────────────────────────────────────────────────


def badge_url(label: str, percentage: float | str) -> str:
    """Return a shields.io badge URL for *percentage* (``87.5`` or ``"87.5%"``)."""
    value = str(percentage).rstrip("%")
    return f"{SHIELDS_BASE}/{label}-{value}%25-{get_coverage_color(value)}.svg"


def badge_markdown(label: str, percentage: float | str, alt: str | None = None) -> str:
    return f"![{alt or label}]({badge_url(label, percentage)})"


def collapsible(title: str, body: str) -> str:
    """Wrap *body* in a ``<details>`` block summarised by *title*."""
    return f"<details><summary>{title}</summary>{body}</details>"


# ── Coverage ────────────────────────────────────────────────────


def generate_coverage_summary(
    coverage: CoverageSummary | None,
    title: str = "Coverage Report",
    hide_badge: bool = False,
    include_category_summary: bool = True,
    badge_title: str = "Coverage",
) -> str:
    """Overall metrics table plus the optional per-category breakdown."""
    if coverage is None:
        return ""

    overall = coverage.overall
    lines = [f"## {title}", ""]
    if not hide_badge:
        lines += [badge_markdown(badge_title, f"{overall.percentage:.2f}"), ""]

    lines += [
        "Code coverage analysis completed successfully.",
        "",
        "### Overall Summary",
        "",
        "| Metric | Value |",
        "|--------|-------|",
        f"| Files | {overall.files} |",
        f"| Lines | {overall.lines} |",
        f"| Covered | {overall.covered} |",
        f"| Missed | {overall.missed} |",
        f"| **Coverage** | **{overall.percentage:.2f}%** |",
    ]
    if overall.branches is not None:
        lines.append(f"| **Branch Coverage** | **{overall.branches.percentage:.2f}%** |")
    lines.append("")

    if include_category_summary and coverage.groups:
        lines += [
            "### Coverage by Category",
            "",
            "| Category | Files | Lines | Covered | Missed | Coverage |",
            "|----------|-------|-------|---------|--------|----------|",
        ]
        lines += [
            f"| {group.name} | {group.files} | {group.lines} | {group.covered} "
            f"| {group.missed} | {group.percentage:.1f}% |"
            for group in coverage.groups
        ]
        lines.append("")

    return "\n".join(lines) + "\n"


def source_link(repo_url: str, commit: str, path: str, path_prefix: str = "") -> str:
    """Blob URL of *path* at *commit*, or an empty string if either is unknown."""
    if not repo_url or not commit:
        return ""
    return f"{repo_url.rstrip('/')}/blob/{commit}/{path_prefix}{path}"


def _missing_cell(file: FileSummary, url: str) -> str:
    ranges = format_line_ranges(file.missed_lines)
    if not ranges:
        return ""
    if not url:
        return ranges
    return ", ".join(f"[{token}]({url}#L{token})" for token in ranges.split(", "))


def generate_file_details(
    coverage: CoverageSummary | None,
    max_files_to_show: int = 50,
    repo_url: str = "",
    commit: str = "",
    path_prefix: str = "",
) -> str:
    """Per-file table with missed line ranges, linked when the repository is known."""
    if coverage is None or coverage.files is None:
        return ""

    lines = [
        "### File Coverage Details",
        "",
        "Individual file coverage breakdown:",
        "",
        "| File | Lines | Covered | Missed | Coverage | Missing |",
        "|------|-------|---------|--------|----------|---------|",
    ]
    for file in coverage.files:
        url = source_link(repo_url, commit, file.path, path_prefix)
        name = f"[`{file.name}`]({url})" if url else f"`{file.name}`"
        lines.append(
            f"| {name} | {file.lines} | {file.covered} | {file.missed} "
            f"| {file.percentage:.1f}% | {_missing_cell(file, url)} |"
        )

    if coverage.files_truncated:
        lines += [
            "",
            f"*Showing first {max_files_to_show} files. "
            "Enable `include-file-details: true` to see all files.*",
        ]

    lines.append("")
    return "\n".join(lines) + "\n"


# ── Changed files ───────────────────────────────────────────────


@dataclass
class ChangedFilesTotals:
    """Line totals over the changed files that have coverage."""

    files: int
    lines: int
    covered: int
    missed: int

    @property
    def percentage(self) -> float:
        if self.lines == 0:
            return 0.0
        return round(self.covered / self.lines * 100, 2)


def filter_changed_files(
    files: Iterable[FileSummary], changed_paths: Iterable[str]
) -> list[FileSummary]:
    """Keep the coverage rows that match a changed path.

    Matching is a loose substring test in both directions on the file's
    basename, so ``user.rb`` matches ``app/models/user.rb`` (and ``b.rb``
    matches ``ab.rb``).
    """
    changed = [path for path in changed_paths if path]
    return [
        file
        for file in files
        if any(path in file.name or file.name in path for path in changed)
    ]


def summarize_files(files: list[FileSummary]) -> ChangedFilesTotals:
    return ChangedFilesTotals(
        files=len(files),
        lines=sum(file.lines for file in files),
        covered=sum(file.covered for file in files),
        missed=sum(file.missed for file in files),
    )


def _changed_status(percentage: float) -> str:
    if percentage >= _FULL_COVERAGE:
        return "✅"
    if percentage >= _WARN_COVERAGE:
        return "⚠️"
    return "❌"


def generate_changed_files_coverage(
    coverage: CoverageSummary | None,
    changed_files: list[str],
    title: str = CHANGED_FILES_TITLE,
) -> str:
    """Summary and per-file table restricted to the files changed in a PR."""
    if coverage is None or not coverage.every_file or not changed_files:
        logger.info("Changed files section skipped: no file data or no changed files")
        return ""

    matched = filter_changed_files(coverage.every_file, changed_files)
    logger.debug("Changed files with coverage: %s", [file.name for file in matched])
    if not matched:
        return ""

    totals = summarize_files(matched)
    lines = [
        f"## {title}",
        "",
        "Coverage analysis for files changed in this PR:",
        "",
        "### Changed Files Summary",
        "",
        "| Metric | Value |",
        "|--------|-------|",
        f"| Files Changed | {totals.files} |",
        f"| Lines Changed | {totals.lines} |",
        f"| Covered | {totals.covered} |",
        f"| Missed | {totals.missed} |",
        f"| **Coverage** | **{totals.percentage:.2f}%** |",
        "",
        "### Changed Files Details",
        "",
        "| File | Lines | Covered | Missed | Coverage |",
        "|------|-------|---------|--------|----------|",
    ]
    lines += [
        f"| {_changed_status(file.percentage)} `{file.name}` | {file.lines} | {file.covered} "
        f"| {file.missed} | {file.percentage:.1f}% |"
        for file in matched
    ]
    lines.append("")
    return "\n".join(lines) + "\n"


# ── Last run / test results ─────────────────────────────────────


def generate_last_run_section(
    last_run: LastRunSummary | None,
    title: str = "Last Run Coverage",
    hide_badge: bool = False,
) -> str:
    if last_run is None:
        return ""

    line_pct = f"{last_run.line:.1f}"
    branch_pct = f"{last_run.branch:.1f}"

    lines = [f"## {title}", ""]
    if not hide_badge:
        lines += [
            f"![Line Coverage]({SHIELDS_BASE}/Line-{line_pct}%25-{get_coverage_color(last_run.line)})",
            f"![Branch Coverage]({SHIELDS_BASE}/Branch-{branch_pct}%25-"
            f"{get_coverage_color(last_run.branch)})",
            "",
        ]
    lines += [
        "| Coverage Type | Percentage |",
        "|---------------|------------|",
        f"| Line | {line_pct}% |",
        f"| Branch | {branch_pct}% |",
        "",
    ]
    return "\n".join(lines) + "\n"


def generate_test_results_section(
    results: TestResultsSummary | None, title: str = "Test Results"
) -> str:
    if results is None:
        return ""

    if results.all_passed:
        status = "✅ **Status:** All tests passed successfully!"
    else:
        status = "❌ **Status:** Some tests failed or encountered errors."

    lines = [
        f"## {title}",
        "",
        "**Test Execution Summary:**",
        "",
        f"📊 **Total Tests:** {results.tests}",
        f"❌ **Failures:** {results.failures}",
        f"⚠️ **Errors:** {results.errors}",
        f"⏭️ **Skipped:** {results.skipped}",
        f"⏱️ **Execution Time:** {format_time(results.time)}",
        "",
        status,
        "",
    ]
    return "\n".join(lines) + "\n"


def generate_test_summary_table(
    results: TestResultsSummary | None, title: str = "Test Results"
) -> str:
    """Compact one-row table exported as ``summaryReport``."""
    if results is None:
        return ""
    return (
        f"| {title} | Skipped | Failures | Errors | Time |\n"
        "| ----- | ------- | -------- | -------- | ------------------ |\n"
        f"| {results.tests} | {results.skipped} :zzz: | {results.failures} :x: "
        f"| {results.errors} :fire: | {format_time(results.time)} :stopwatch: |"
    )

"""Comparison table across several coverage reports.

Each input line reads ``title, coverage-path[, test-results-path]``. Coverage
paths holding Cobertura XML go through the Cobertura parser, anything else
through the SimpleCov parser.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass

from covcomment.parsers.cobertura import cobertura_from_report
from covcomment.parsers.detect import ReportKind, detect_report_kind
from covcomment.parsers.simplecov import simplecov_from_report
from covcomment.parsers.test_results import parse_test_results
from covcomment.reporters.markdown import SHIELDS_BASE, generate_test_summary_table
from covcomment.utils.files import (
    extract_percentage,
    file_exists,
    get_coverage_color,
    get_status_label,
    sanitize_html,
)

logger = logging.getLogger(__name__)

_TABLE_HEADER = (
    "<table><tr><th>Title</th><th>Coverage</th><th>Tests</th><th>Status</th></tr><tbody>"
)
_TEST_COUNT_RE = re.compile(r"\| (\d+) \|")
_MIN_PARTS = 2


@dataclass
class MultiReportEntry:
    """One row of the comparison table."""

    coverage: str
    """Percentage with a trailing ``%``."""

    color: str
    summary: str = ""
    """Test summary table, empty when there are no test results."""


def get_multiple_report(lines: list[str], prefix: str = "") -> str:
    """Render the comparison table, or an empty string for no input lines.

    Args:
        lines: ``title, coverage-path[, test-results-path]`` entries.
        prefix: Leading path stripped from Cobertura file names.
    """
    if not lines:
        return ""

    rows = [_TABLE_HEADER]
    for line in lines:
        parts = [part.strip() for part in line.split(",")]
        if len(parts) < _MIN_PARTS:
            logger.warning("Skipping multiple-files line without a coverage path: %r", line)
            continue

        title, coverage_path = parts[0], parts[1]
        test_results_path = parts[2] if len(parts) > _MIN_PARTS else ""
        entry = generate_single_report(coverage_path, test_results_path, prefix)
        rows.append(to_multi_row(title, entry))

    rows.append("</tbody></table>")
    return "".join(rows)


def generate_single_report(
    coverage_path: str, test_results_path: str = "", prefix: str = ""
) -> MultiReportEntry:
    """Parse one coverage file (and optional test results) into a table entry."""
    percentage = _coverage_percentage(coverage_path, prefix)
    if percentage is None:
        logger.error("Error generating report for %s", coverage_path)
        return MultiReportEntry(coverage="0%", color="red")

    summary = ""
    if test_results_path and file_exists(test_results_path):
        summary = generate_test_summary_table(parse_test_results(test_results_path))

    return MultiReportEntry(
        coverage=f"{percentage}%",
        color=get_coverage_color(percentage),
        summary=summary,
    )


def _coverage_percentage(coverage_path: str, prefix: str) -> str | None:
    report = detect_report_kind(coverage_path)
    if report is None:
        logger.warning("Coverage file not found: %s", coverage_path)
        return None

    if report.kind is ReportKind.COBERTURA_XML:
        cobertura = cobertura_from_report(report, prefix)
        return None if cobertura is None else f"{cobertura.total:.1f}"

    coverage = simplecov_from_report(report)
    return None if coverage is None else f"{coverage.overall.percentage:.2f}"


def to_multi_row(title: str, entry: MultiReportEntry) -> str:
    test_info = ""
    if entry.summary:
        match = _TEST_COUNT_RE.search(entry.summary)
        if match:
            test_info = match.group(1)

    badge = f"{SHIELDS_BASE}/Coverage-{entry.coverage.replace('%', '%25')}-{entry.color}.svg"
    return (
        f"<tr><td>{sanitize_html(title)}</td>"
        f'<td><img alt="Coverage" src="{badge}" /></td>'
        f"<td>{test_info}</td>"
        f"<td>{get_status_label(extract_percentage(entry.coverage))}</td></tr>"
    )

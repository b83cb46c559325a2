"""SimpleCov JSON coverage parser.

Parses the document written by SimpleCov's JSON formatter::

    {
      "files": [
        {
          "filename": "/srv/app/models/user.rb",
          "covered_percent": 90.0,
          "covered_lines": 9,
          "lines_of_code": 10,
          "coverage": {
            "lines": [1, null, 0, ...],
            "branches": {"[:if, 0, 3, 4, 3, 20]": {"[:then, 1, 3, 4, 3, 10]": 2}}
          }
        }
      ]
    }

into a :class:`CoverageSummary`.
"""

from __future__ import annotations

import logging
import math
import re
from pathlib import PurePosixPath
from typing import TYPE_CHECKING, Any

from covcomment.models.coverage import (
    BranchSummary,
    CoverageSummary,
    FileSummary,
    GroupSummary,
    OverallSummary,
)
from covcomment.parsers.detect import DetectedReport, ReportKind, detect_report_kind

if TYPE_CHECKING:
    from pathlib import Path

logger = logging.getLogger(__name__)

_REQUIRED_FIELDS = ("filename", "covered_percent", "coverage", "covered_lines", "lines_of_code")
_NUMERIC_FIELDS = ("covered_percent", "covered_lines", "lines_of_code")

# Directories whose next path segment names the file's category, in priority order
_CATEGORY_ROOTS = ("app", "lib", "spec", "test")

_PATH_SPLIT_RE = re.compile(r"[/\\]")

_MIN_PARENT_PARTS = 2


def parse_simplecov(
    file_path: str | Path, include_file_details: bool = False
) -> CoverageSummary | None:
    """Parse a SimpleCov ``coverage.json`` file.

    Args:
        file_path: Path to the JSON file.
        include_file_details: Build per-file rows (skipped by default because
            large projects produce thousands of them).

    Returns:
        The coverage summary, or None if the file is missing or invalid.
    """
    report = detect_report_kind(file_path)
    if report is None:
        logger.warning("SimpleCov coverage file not found: %s", file_path)
        return None
    return simplecov_from_report(report, include_file_details)


def simplecov_from_report(
    report: DetectedReport, include_file_details: bool = False
) -> CoverageSummary | None:
    """Build a coverage summary from an already detected report."""
    if report.kind is not ReportKind.SIMPLECOV_JSON:
        logger.error(
            "Error parsing SimpleCov file %s: %s",
            report.path,
            report.error or f"expected SimpleCov JSON, found {report.kind.value}",
        )
        return None

    data = report.payload
    if not validate_simplecov_data(data):
        logger.error("Invalid SimpleCov JSON format in %s", report.path)
        return None

    files: list[dict[str, Any]] = data["files"]
    return CoverageSummary(
        overall=calculate_overall_summary(files),
        groups=group_files_by_directory(files),
        files=generate_file_data(files) if include_file_details else None,
    )


# ── Validation ───────────────────────────────────────────────────


def validate_simplecov_data(data: Any) -> bool:
    """Return True if *data* has the SimpleCov JSON shape."""
    if not isinstance(data, dict):
        return False
    files = data.get("files")
    if not isinstance(files, list):
        return False
    return all(_validate_file_data(item) for item in files)


def _validate_file_data(item: Any) -> bool:
    if not isinstance(item, dict):
        return False
    if any(name not in item for name in _REQUIRED_FIELDS):
        return False

    coverage = item["coverage"]
    if not isinstance(coverage, dict) or not isinstance(coverage.get("lines"), list):
        return False

    return all(_is_finite_number(item[name]) for name in _NUMERIC_FIELDS)


def _is_finite_number(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, int | float):
        return False
    return math.isfinite(value)


# ── Aggregation ──────────────────────────────────────────────────


def _percentage(covered: float, total: float, digits: int) -> float:
    if total <= 0:
        return 0.0
    return round(covered / total * 100, digits)


def calculate_overall_summary(files: list[dict[str, Any]]) -> OverallSummary:
    """Sum line and branch totals across all files."""
    total_lines = 0
    covered_lines = 0
    total_branches = 0
    covered_branches = 0

    for item in files:
        total_lines += int(item["lines_of_code"])
        covered_lines += int(item["covered_lines"])

        branches = item["coverage"].get("branches")
        if isinstance(branches, dict) and branches:
            total, covered = calculate_branch_coverage(branches)
            total_branches += total
            covered_branches += covered

    branch_summary = None
    if total_branches > 0:
        branch_summary = BranchSummary(
            total=total_branches,
            covered=covered_branches,
            missed=total_branches - covered_branches,
            percentage=_percentage(covered_branches, total_branches, 2),
        )

    return OverallSummary(
        files=len(files),
        lines=total_lines,
        covered=covered_lines,
        missed=total_lines - covered_lines,
        percentage=_percentage(covered_lines, total_lines, 2),
        branches=branch_summary,
    )


def calculate_branch_coverage(branches: dict[str, Any]) -> tuple[int, int]:
    """Count branches in a SimpleCov branch map.

    Every numeric leaf is one branch; it is covered when its count is positive.

    Returns:
        ``(total, covered)``.
    """
    total = 0
    covered = 0
    for group in branches.values():
        if not isinstance(group, dict):
            continue
        for count in group.values():
            if isinstance(count, bool) or not isinstance(count, int | float):
                continue
            total += 1
            if count > 0:
                covered += 1
    return total, covered


def extract_directory(file_path: Any) -> str:
    """Return the display category for *file_path*.

    ``/srv/app/models/user.rb`` is ``Models``; ``lib/tasks/seed.rb`` is ``Tasks``;
    paths outside the known roots use their parent directory name. The first
    known root wins, so a checkout at ``/app`` puts ``/app/app/models/x.rb``
    under ``App``.
    """
    if not isinstance(file_path, str) or not file_path:
        return "Other"

    parts = _PATH_SPLIT_RE.split(file_path)

    directory = None
    for root in _CATEGORY_ROOTS:
        if root in parts:
            index = parts.index(root)
            if index + 1 < len(parts):
                directory = parts[index + 1]
                break
    else:
        if len(parts) >= _MIN_PARENT_PARTS:
            directory = parts[-2]

    if directory:
        return directory[0].upper() + directory[1:]
    return "Other"


def group_files_by_directory(files: list[dict[str, Any]]) -> list[GroupSummary]:
    """Roll files up by category, largest category (by lines) first."""
    totals: dict[str, dict[str, int]] = {}

    for item in files:
        name = extract_directory(item["filename"])
        bucket = totals.setdefault(name, {"files": 0, "lines": 0, "covered": 0})
        bucket["files"] += 1
        bucket["lines"] += int(item["lines_of_code"])
        bucket["covered"] += int(item["covered_lines"])

    groups = [
        GroupSummary(
            name=name,
            files=bucket["files"],
            lines=bucket["lines"],
            covered=bucket["covered"],
            missed=bucket["lines"] - bucket["covered"],
            percentage=_percentage(bucket["covered"], bucket["lines"], 1),
        )
        for name, bucket in totals.items()
    ]
    groups.sort(key=lambda group: group.lines, reverse=True)
    return groups


def generate_file_data(files: list[dict[str, Any]]) -> list[FileSummary]:
    """Build per-file rows sorted by descending coverage."""
    rows = [
        FileSummary(
            name=extract_file_name(item["filename"]),
            path=item["filename"],
            lines=int(item["lines_of_code"]),
            covered=int(item["covered_lines"]),
            missed=int(item["lines_of_code"]) - int(item["covered_lines"]),
            percentage=round(float(item["covered_percent"]), 1),
            missed_lines=extract_missed_lines(item["coverage"]["lines"]),
        )
        for item in files
    ]
    rows.sort(key=lambda row: row.percentage, reverse=True)
    return rows


def extract_file_name(file_path: Any) -> str:
    if not isinstance(file_path, str) or not file_path:
        return "unknown"
    return PurePosixPath(file_path.replace("\\", "/")).name


def extract_missed_lines(line_coverage: Any) -> list[int]:
    """Return 1-indexed line numbers whose hit count is zero.

    ``None`` entries mark lines that are not relevant (comments, blank lines)
    and are not counted as missed.
    """
    if not isinstance(line_coverage, list):
        return []
    return [
        index
        for index, count in enumerate(line_coverage, start=1)
        if not isinstance(count, bool) and isinstance(count, int | float) and count == 0
    ]

"""Parser for SimpleCov's ``coverage/.last_run.json``."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from covcomment.models.coverage import LastRunSummary
from covcomment.parsers.detect import DetectedReport, ReportKind, detect_report_kind

logger = logging.getLogger(__name__)

LAST_RUN_FILENAME = ".last_run.json"


def parse_last_run(file_path: str | Path) -> LastRunSummary | None:
    """Parse ``{"result": {"line": 87.5, "branch": 60.1}}``.

    Returns None when the file is missing, malformed or has no ``result``.
    """
    report = detect_report_kind(file_path)
    if report is None:
        return None
    return last_run_from_report(report)


def last_run_from_report(report: DetectedReport) -> LastRunSummary | None:
    if report.kind is not ReportKind.LAST_RUN_JSON:
        logger.warning(
            "Failed to parse %s: %s", report.path, report.error or "no 'result' section"
        )
        return None

    result = report.payload.get("result")
    if not isinstance(result, dict):
        logger.warning("Failed to parse %s: 'result' is not an object", report.path)
        return None

    return LastRunSummary(line=_number(result.get("line")), branch=_number(result.get("branch")))


def default_last_run_path(coverage_path: str | Path) -> Path:
    """Return the ``.last_run.json`` SimpleCov writes next to *coverage_path*."""
    return Path(coverage_path).parent / LAST_RUN_FILENAME


def _number(value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, int | float):
        return 0.0
    return float(value)

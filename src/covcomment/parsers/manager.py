"""Parser coordinator.

Checks which report files exist, detects each file's kind once and hands the
decoded payload to the matching parser. Absent files are not errors: the
corresponding field of :class:`ParsedResults` stays None.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from covcomment.models.coverage import CoberturaReport, CoverageSummary, LastRunSummary
from covcomment.models.test_result import NotSuccessTestInfo, TestResultsSummary
from covcomment.parsers.cobertura import cobertura_from_report
from covcomment.parsers.detect import DetectedReport, ReportKind, detect_report_kind
from covcomment.parsers.last_run import default_last_run_path, last_run_from_report
from covcomment.parsers.simplecov import simplecov_from_report
from covcomment.parsers.test_results import not_success_from_report, summarize_test_results

logger = logging.getLogger(__name__)

DEFAULT_COVERAGE_FILE = "coverage/coverage.json"
DEFAULT_TEST_RESULTS_FILE = "test-results.xml"
DEFAULT_MAX_FILES_TO_SHOW = 50


@dataclass
class ParsedResults:
    """Everything the parsers found for one run."""

    coverage: CoverageSummary | None = None
    coverage_xml: CoberturaReport | None = None
    last_run: LastRunSummary | None = None
    test_results: TestResultsSummary | None = None
    not_success: NotSuccessTestInfo | None = None


@dataclass
class ParseRequest:
    """Candidate report paths and parsing switches."""

    coverage_file: str | Path = DEFAULT_COVERAGE_FILE
    coverage_xml_file: str | Path | None = None
    last_run_file: str | Path | None = None
    """Defaults to ``.last_run.json`` next to ``coverage_file``."""

    test_results_file: str | Path | None = DEFAULT_TEST_RESULTS_FILE
    include_file_details: bool = False
    max_files_to_show: int = DEFAULT_MAX_FILES_TO_SHOW
    prefix: str = ""
    """Path prefix stripped from Cobertura file names."""


class ParserManager:
    """Runs every parser that has an input file and collects the results."""

    def auto_detect_and_parse(self, request: ParseRequest | None = None) -> ParsedResults:
        """Parse all available reports.

        Args:
            request: Paths and switches; defaults match SimpleCov's layout.

        Returns:
            A :class:`ParsedResults` with None for every missing report.
        """
        request = request or ParseRequest()
        results = ParsedResults()

        results.coverage = self.parse_coverage(
            request.coverage_file, request.include_file_details, request.max_files_to_show
        )

        if request.coverage_xml_file:
            detected = self._detect(request.coverage_xml_file, "XML coverage")
            if detected is not None:
                results.coverage_xml = cobertura_from_report(detected, request.prefix)

        last_run_file = request.last_run_file or default_last_run_path(request.coverage_file)
        detected = self._detect(last_run_file, "last run")
        if detected is not None:
            results.last_run = last_run_from_report(detected)

        if request.test_results_file:
            detected = self._detect(request.test_results_file, "test results")
            if detected is not None:
                results.test_results = summarize_test_results(detected)
                results.not_success = not_success_from_report(detected)

        return results

    def parse_coverage(
        self,
        coverage_file: str | Path,
        include_file_details: bool = False,
        max_files_to_show: int = DEFAULT_MAX_FILES_TO_SHOW,
    ) -> CoverageSummary | None:
        """Parse a SimpleCov JSON file and cap its file rows."""
        detected = self._detect(coverage_file, "SimpleCov coverage")
        if detected is None:
            logger.warning("SimpleCov coverage file not found: %s", coverage_file)
            return None

        coverage = simplecov_from_report(detected, include_file_details)
        if coverage is not None:
            coverage.truncate_files(max_files_to_show)
            if coverage.files_truncated:
                logger.info("Showing the first %d files of %s", max_files_to_show, coverage_file)
        return coverage

    def _detect(self, file_path: str | Path, label: str) -> DetectedReport | None:
        detected = detect_report_kind(file_path)
        if detected is None:
            logger.debug("No %s file at %s", label, file_path)
        elif detected.kind is ReportKind.UNKNOWN:
            logger.debug("%s file %s: %s", label.capitalize(), file_path, detected.error)
        return detected

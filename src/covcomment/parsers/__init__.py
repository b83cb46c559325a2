"""Parsers that turn coverage and test-result files into normalized summaries."""

from covcomment.parsers.cobertura import parse_cobertura
from covcomment.parsers.detect import DetectedReport, ReportKind, detect_report_kind
from covcomment.parsers.last_run import parse_last_run
from covcomment.parsers.manager import ParsedResults, ParseRequest, ParserManager
from covcomment.parsers.simplecov import parse_simplecov
from covcomment.parsers.test_results import get_not_success_test_info, parse_test_results

__all__ = [
    "DetectedReport",
    "ParseRequest",
    "ParsedResults",
    "ParserManager",
    "ReportKind",
    "detect_report_kind",
    "get_not_success_test_info",
    "parse_cobertura",
    "parse_last_run",
    "parse_simplecov",
    "parse_test_results",
]

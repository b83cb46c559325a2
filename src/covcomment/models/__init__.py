"""Value objects produced by the parsers and consumed by the reporters."""

from covcomment.models.coverage import (
    BranchSummary,
    CoberturaFile,
    CoberturaReport,
    CoverageSummary,
    FileSummary,
    GroupSummary,
    LastRunSummary,
    OverallSummary,
)
from covcomment.models.test_result import NotSuccessTestInfo, TestCaseRef, TestResultsSummary

__all__ = [
    "BranchSummary",
    "CoberturaFile",
    "CoberturaReport",
    "CoverageSummary",
    "FileSummary",
    "GroupSummary",
    "LastRunSummary",
    "NotSuccessTestInfo",
    "OverallSummary",
    "TestCaseRef",
    "TestResultsSummary",
]

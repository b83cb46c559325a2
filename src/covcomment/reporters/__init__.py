"""Renderers for the coverage comment and its exported values."""

from covcomment.reporters.cobertura_html import LinkOptions, to_html
from covcomment.reporters.github_comment import (
    MAX_COMMENT_LENGTH,
    CoverageCommentReporter,
    build_watermark,
    compose_comment_body,
)
from covcomment.reporters.markdown import (
    filter_changed_files,
    generate_changed_files_coverage,
    generate_coverage_summary,
    generate_file_details,
    generate_last_run_section,
    generate_test_results_section,
    generate_test_summary_table,
)
from covcomment.reporters.multi_files import get_multiple_report
from covcomment.reporters.outputs import ActionOutputs, write_step_summary

__all__ = [
    "MAX_COMMENT_LENGTH",
    "ActionOutputs",
    "CoverageCommentReporter",
    "LinkOptions",
    "build_watermark",
    "compose_comment_body",
    "filter_changed_files",
    "generate_changed_files_coverage",
    "generate_coverage_summary",
    "generate_file_details",
    "generate_last_run_section",
    "generate_test_results_section",
    "generate_test_summary_table",
    "get_multiple_report",
    "to_html",
    "write_step_summary",
]

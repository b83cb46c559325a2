"""Coverage comment pipeline: parse → render → post → export."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from covcomment.parsers.manager import ParsedResults, ParseRequest, ParserManager
from covcomment.reporters.cobertura_html import LinkOptions, to_html
from covcomment.reporters.github_comment import (
    CoverageCommentReporter,
    build_watermark,
    check_comment_length,
    compose_comment_body,
)
from covcomment.reporters.markdown import (
    CHANGED_FILES_TITLE,
    filter_changed_files,
    generate_changed_files_coverage,
    generate_coverage_summary,
    generate_file_details,
    generate_last_run_section,
    generate_test_results_section,
    generate_test_summary_table,
    summarize_files,
)
from covcomment.reporters.multi_files import get_multiple_report
from covcomment.reporters.outputs import ActionOutputs
from covcomment.utils.ci_context import CIContext, detect_ci_context
from covcomment.utils.files import get_coverage_color
from covcomment.utils.git import GitHubAPI, GitHubPRInfo

if TYPE_CHECKING:
    from covcomment.config import ReportOptions

logger = logging.getLogger(__name__)

NO_ISSUE_NUMBER = (
    "No issue number found. Please provide issue-number input or run on a pull request."
)


class ReportError(Exception):
    """Raised when a run cannot complete (no token or repository to post to)."""


@dataclass
class Sections:
    """Rendered comment sections, in posting order."""

    coverage: str = ""
    test_results: str = ""
    last_run: str = ""
    multiple_files: str = ""

    def as_list(self) -> list[str]:
        return [self.coverage, self.test_results, self.last_run, self.multiple_files]


@dataclass
class RunResult:
    """Outcome of one pipeline run."""

    body: str
    """Full comment body, watermark first."""

    watermark: str
    parsed: ParsedResults
    sections: Sections
    outputs: ActionOutputs

    issue_number: int | None = None
    comment_url: str | None = None
    posted: bool = False

    success: bool = True
    errors: list[str] = field(default_factory=list)


class CoverageCommentPipeline:
    """Builds the comment for one run and optionally posts it."""

    def __init__(
        self,
        options: ReportOptions,
        ci_context: CIContext | None = None,
        api: GitHubAPI | None = None,
        parser_manager: ParserManager | None = None,
    ) -> None:
        """Initialize the pipeline.

        Args:
            options: Merged configuration.
            ci_context: GitHub Actions context, detected from the environment if None.
            api: GitHub client; built from ``options.github_token`` when needed.
            parser_manager: Parser coordinator, mainly for tests.
        """
        self.options = options
        self.ci_context = ci_context or detect_ci_context()
        self._api = api
        self._parsers = parser_manager or ParserManager()

    # ── Context ─────────────────────────────────────────────────

    @property
    def issue_number(self) -> int | None:
        return self.options.issue_number or self.ci_context.issue_number

    @property
    def repo_url(self) -> str:
        return self.options.repo_url or self.ci_context.repo_url

    @property
    def commit(self) -> str:
        return self.options.commit or self.ci_context.commit_sha or ""

    @property
    def _wants_changed_files(self) -> bool:
        wanted = (
            self.options.report_only_changed_files or self.options.include_changed_files_details
        )
        return wanted and self.ci_context.is_pr

    def _pr_info(self) -> GitHubPRInfo | None:
        number = self.issue_number
        owner, repo = self.ci_context.repo_owner, self.ci_context.repo_name
        if number is None or not owner or not repo:
            return None
        return GitHubPRInfo(owner=owner, repo=repo, pr_number=number)

    def _get_api(self) -> GitHubAPI | None:
        if self._api is None and self.options.github_token:
            self._api = GitHubAPI(token=self.options.github_token)
        return self._api

    # ── Run ─────────────────────────────────────────────────────

    def parse(self) -> ParsedResults:
        """Parse every configured report."""
        opts = self.options
        request = ParseRequest(
            coverage_file=opts.coverage_file,
            coverage_xml_file=opts.coverage_xml_file or None,
            last_run_file=opts.last_run_file or None,
            test_results_file=opts.test_results_path or None,
            include_file_details=opts.include_file_details or self._wants_changed_files,
            max_files_to_show=opts.max_files_to_show,
            prefix=opts.prefix,
        )
        return self._parsers.auto_detect_and_parse(request)

    def build(self) -> RunResult:
        """Parse and render without posting."""
        logger.info("Configuration: %s", self.options.masked())
        logger.info("Event: %s", self.ci_context.event_name or "[NOT SET]")

        parsed = self.parse()
        outputs = ActionOutputs()
        sections = Sections(
            coverage=self._coverage_section(parsed, outputs),
            test_results=self._test_results_section(parsed, outputs),
            last_run=self._last_run_section(parsed, outputs),
            multiple_files=self._multiple_files_section(),
        )

        check_comment_length(sections.as_list(), self.ci_context.event_name)

        watermark = build_watermark(self.ci_context.job, self.options.unique_id_for_comment)
        body = compose_comment_body(
            watermark,
            coverage=sections.coverage,
            test_results=sections.test_results,
            last_run=sections.last_run,
            multiple_files=sections.multiple_files,
        )
        return RunResult(
            body=body,
            watermark=watermark,
            parsed=parsed,
            sections=sections,
            outputs=outputs,
            issue_number=self.issue_number,
        )

    def run(self) -> RunResult:
        """Build the comment and post it unless ``hide_comment`` is set.

        A missing issue number is reported in ``errors`` and skips posting.

        Raises:
            ReportError: If the comment must be posted but there is no token
                or repository.
            GitHubAPIError: If posting the comment fails.
        """
        result = self.build()
        if self.options.hide_comment:
            logger.info("hide_comment is set; not posting")
            return result

        if result.issue_number is None:
            logger.error(NO_ISSUE_NUMBER)
            result.success = False
            result.errors.append(NO_ISSUE_NUMBER)
            return result

        api = self._get_api()
        if api is None:
            raise ReportError("GitHub token required to post the comment. Set github-token.")

        pr_info = self._pr_info()
        if pr_info is None:
            raise ReportError("GITHUB_REPOSITORY is not set; cannot tell where to post.")

        reporter = CoverageCommentReporter(api)
        response = reporter.post(
            pr_info, result.body, result.watermark, create_new=self.options.create_new_comment
        )
        result.posted = True
        result.comment_url = response.get("comment_url") or None
        return result

    # ── Sections ────────────────────────────────────────────────

    def _changed_files(self) -> list[str]:
        pr_info = self._pr_info()
        if pr_info is None:
            logger.info("No pull request number; changed files unavailable")
            return []

        api = self._get_api()
        if api is None:
            logger.warning("No GitHub token; cannot fetch changed files")
            return []

        reporter = CoverageCommentReporter(api)
        return reporter.changed_files(pr_info, self.options.changed_file_extensions)

    def _summary_html(self, parsed: ParsedResults) -> str:
        opts = self.options
        return generate_coverage_summary(
            parsed.coverage,
            title=opts.title,
            hide_badge=opts.hide_badge,
            include_category_summary=opts.include_category_summary,
            badge_title=opts.badge_title,
        )

    def _coverage_section(self, parsed: ParsedResults, outputs: ActionOutputs) -> str:
        opts = self.options
        html = ""

        if parsed.coverage is not None and not opts.hide_report:
            changed = self._changed_files() if self._wants_changed_files else []

            if opts.report_only_changed_files and self.ci_context.is_pr and changed:
                html = generate_changed_files_coverage(parsed.coverage, changed, title=opts.title)
                matched = filter_changed_files(parsed.coverage.every_file, changed)
                if matched:
                    totals = summarize_files(matched)
                    outputs.set("coverage", f"{totals.percentage:.2f}%")
                    outputs.set("color", get_coverage_color(totals.percentage))

            if not html:
                html = self._summary_html(parsed)
                if opts.include_file_details and parsed.coverage.files is not None:
                    html += generate_file_details(
                        parsed.coverage,
                        max_files_to_show=opts.max_files_to_show,
                        repo_url=self.repo_url,
                        commit=self.commit,
                        path_prefix=opts.path_prefix,
                    )
                if opts.include_changed_files_details and changed:
                    changed_html = generate_changed_files_coverage(
                        parsed.coverage, changed, title=CHANGED_FILES_TITLE
                    )
                    if changed_html:
                        html += "\n\n" + changed_html

        if parsed.coverage_xml is not None:
            xml_html = to_html(
                parsed.coverage_xml,
                title=opts.title,
                badge_title=opts.badge_title,
                hide_badge=opts.hide_badge,
                hide_report=opts.hide_report,
                links=LinkOptions(
                    repo_url=self.repo_url, commit=self.commit, path_prefix=opts.path_prefix
                ),
            )
            html = f"{html}\n\n{xml_html}" if html else xml_html

        if parsed.coverage is not None and "coverage" not in outputs:
            percentage = parsed.coverage.overall.percentage
            outputs.set("coverage", f"{percentage:.2f}%")
            outputs.set("color", get_coverage_color(percentage))
        elif parsed.coverage_xml is not None and "coverage" not in outputs:
            outputs.set("coverage", f"{parsed.coverage_xml.total:.1f}%")
            outputs.set("color", get_coverage_color(parsed.coverage_xml.total))

        if parsed.coverage is not None or parsed.coverage_xml is not None:
            outputs.set("warnings", "0")
            outputs.set("coverageHtml", html)
        else:
            logger.info("Coverage data not found or report is hidden")

        return html

    def _last_run_section(self, parsed: ParsedResults, outputs: ActionOutputs) -> str:
        if not self.options.include_last_run or parsed.last_run is None:
            return ""

        outputs.set("line-coverage", f"{parsed.last_run.line:.1f}%")
        outputs.set("branch-coverage", f"{parsed.last_run.branch:.1f}%")
        return generate_last_run_section(
            parsed.last_run,
            title=self.options.last_run_title,
            hide_badge=self.options.hide_badge,
        )

    def _test_results_section(self, parsed: ParsedResults, outputs: ActionOutputs) -> str:
        results = parsed.test_results
        if results is None:
            return ""

        values: dict[str, Any] = {
            "errors": results.errors,
            "failures": results.failures,
            "skipped": results.skipped,
            "tests": results.tests,
            "time": results.time,
        }
        for key, value in values.items():
            logger.info("%s: %s", key, value)
            outputs.set(key, value)

        outputs.set("summaryReport", generate_test_summary_table(results))
        not_success = parsed.not_success.to_dict() if parsed.not_success is not None else {}
        outputs.set("notSuccessTestInfo", json.dumps(not_success))

        return generate_test_results_section(results, title=self.options.test_results_title)

    def _multiple_files_section(self) -> str:
        if not self.options.multiple_files:
            return ""

        workspace = self.ci_context.workspace
        prefix = f"{workspace}/" if workspace else self.options.prefix
        return "\n\n" + get_multiple_report(self.options.multiple_files, prefix=prefix)


def run_report(
    options: ReportOptions,
    ci_context: CIContext | None = None,
    api: GitHubAPI | None = None,
    post: bool = True,
) -> RunResult:
    """Run the pipeline once.

    Args:
        options: Merged configuration.
        ci_context: Detected from the environment if None.
        api: GitHub client to use instead of one built from the token.
        post: When False, render only.

    Raises:
        ReportError: If posting is required but impossible.
        GitHubAPIError: If the GitHub API rejects the comment.
    """
    pipeline = CoverageCommentPipeline(options, ci_context=ci_context, api=api)
    return pipeline.run() if post else pipeline.build()


"""Tests for parsers/test_results.py: JUnit and RSpec XML."""

from __future__ import annotations

from pathlib import Path

import pytest
from conftest import write_text

from covcomment.parsers.test_results import get_not_success_test_info, parse_test_results

RSPEC_XML = """\
<?xml version="1.0" encoding="UTF-8"?>
<rspec examples="42" failures="2" errors="0" pending="3" duration="12.75"/>
"""

SINGLE_SUITE_XML = """\
<testsuite name="solo" tests="4" failures="0" errors="0" time="0.5">
  <testcase classname="A" name="one"/>
</testsuite>
"""


class TestParseTestResults:
    def test_junit_suites_are_summed(self, junit_report: Path) -> None:
        summary = parse_test_results(junit_report)

        assert summary.tests == 5
        assert summary.failures == 1
        assert summary.errors == 1
        assert summary.skipped == 1
        assert summary.time == pytest.approx(2.25)
        assert not summary.all_passed

    def test_single_testsuite_root(self, tmp_path: Path) -> None:
        summary = parse_test_results(write_text(tmp_path / "r.xml", SINGLE_SUITE_XML))

        assert summary.tests == 4
        assert summary.skipped == 0
        assert summary.all_passed

    def test_rspec_root_attributes(self, tmp_path: Path) -> None:
        summary = parse_test_results(write_text(tmp_path / "rspec.xml", RSPEC_XML))

        assert (summary.tests, summary.failures, summary.errors, summary.skipped) == (42, 2, 0, 3)
        assert summary.time == 12.75

    def test_unknown_root_is_zeroed(self, tmp_path: Path) -> None:
        summary = parse_test_results(write_text(tmp_path / "r.xml", "<coverage/>"))
        assert summary.tests == 0
        assert summary.time == 0.0

    def test_malformed_is_zeroed(self, tmp_path: Path) -> None:
        summary = parse_test_results(write_text(tmp_path / "r.xml", "<testsuites><oops"))
        assert summary.tests == 0

    def test_missing_or_empty_path(self, tmp_path: Path) -> None:
        assert parse_test_results(tmp_path / "absent.xml").tests == 0
        assert parse_test_results("").tests == 0
        assert parse_test_results(None).tests == 0

    def test_bad_counts_are_zero(self, tmp_path: Path) -> None:
        xml = '<testsuites><testsuite tests="many" failures="" time="x"/></testsuites>'
        summary = parse_test_results(write_text(tmp_path / "r.xml", xml))
        assert (summary.tests, summary.failures, summary.time) == (0, 0, 0.0)


class TestNotSuccessInfo:
    def test_buckets(self, junit_report: Path) -> None:
        info = get_not_success_test_info(junit_report)

        assert [(ref.classname, ref.name) for ref in info.failures] == [("UserTest", "test_email")]
        assert [ref.name for ref in info.errors] == ["test_show"]
        assert [ref.name for ref in info.skipped] == ["test_pending"]
        assert info.count == 3

    def test_to_dict_includes_count(self, junit_report: Path) -> None:
        data = get_not_success_test_info(junit_report).to_dict()

        assert data["count"] == 3
        assert data["failures"] == [{"classname": "UserTest", "name": "test_email"}]

    def test_case_in_one_bucket_only(self, tmp_path: Path) -> None:
        xml = (
            "<testsuite>"
            '<testcase classname="A" name="both"><failure/><error/></testcase>'
            "</testsuite>"
        )
        info = get_not_success_test_info(write_text(tmp_path / "r.xml", xml))

        assert len(info.failures) == 1
        assert info.errors == []

    def test_rspec_has_no_cases(self, tmp_path: Path) -> None:
        info = get_not_success_test_info(write_text(tmp_path / "rspec.xml", RSPEC_XML))
        assert info.count == 0

    def test_missing_file(self, tmp_path: Path) -> None:
        assert get_not_success_test_info(tmp_path / "absent.xml").count == 0
        assert get_not_success_test_info(None).count == 0

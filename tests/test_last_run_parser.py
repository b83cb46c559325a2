"""Tests for parsers/last_run.py."""

from __future__ import annotations

from pathlib import Path

from conftest import write_json, write_text

from covcomment.parsers.last_run import default_last_run_path, parse_last_run


def test_parses_line_and_branch(last_run_report: Path) -> None:
    summary = parse_last_run(last_run_report)

    assert summary is not None
    assert summary.line == 87.456
    assert summary.branch == 61.0


def test_missing_branch_is_zero(tmp_path: Path) -> None:
    summary = parse_last_run(write_json(tmp_path / ".last_run.json", {"result": {"line": 90}}))

    assert summary is not None
    assert summary.line == 90.0
    assert summary.branch == 0.0


def test_non_numeric_values_are_zero(tmp_path: Path) -> None:
    path = write_json(tmp_path / ".last_run.json", {"result": {"line": "90", "branch": True}})
    summary = parse_last_run(path)

    assert summary is not None
    assert (summary.line, summary.branch) == (0.0, 0.0)


def test_missing_file_is_none(tmp_path: Path) -> None:
    assert parse_last_run(tmp_path / ".last_run.json") is None


def test_malformed_json_is_none(tmp_path: Path) -> None:
    assert parse_last_run(write_text(tmp_path / ".last_run.json", "{result:")) is None


def test_result_must_be_object(tmp_path: Path) -> None:
    assert parse_last_run(write_json(tmp_path / ".last_run.json", {"result": 87.5})) is None


def test_without_result_section(tmp_path: Path) -> None:
    assert parse_last_run(write_json(tmp_path / ".last_run.json", {"timestamp": 1})) is None


def test_default_path_is_sibling_of_coverage() -> None:
    assert default_last_run_path("coverage/coverage.json") == Path("coverage/.last_run.json")

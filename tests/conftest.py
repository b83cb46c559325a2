"""Shared fixtures: report files written into ``tmp_path``."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest


def simplecov_file(
    filename: str,
    lines: list[int | None],
    covered_percent: float | None = None,
    branches: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """Build one SimpleCov ``files`` entry from a hit-count array."""
    relevant = [count for count in lines if count is not None]
    covered = sum(1 for count in relevant if count > 0)
    if covered_percent is None:
        covered_percent = covered / len(relevant) * 100 if relevant else 0.0
    coverage: dict[str, Any] = {"lines": lines}
    if branches is not None:
        coverage["branches"] = branches
    return {
        "filename": filename,
        "covered_percent": covered_percent,
        "covered_lines": covered,
        "lines_of_code": len(relevant),
        "coverage": coverage,
    }


def write_json(path: Path, data: Any) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


def write_text(path: Path, content: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    return path


@pytest.fixture()
def simplecov_report(tmp_path: Path) -> Path:
    """A SimpleCov report with one model, one controller and one lib file."""
    return write_json(
        tmp_path / "coverage" / "coverage.json",
        {
            "files": [
                simplecov_file("/srv/app/models/user.rb", [1, 1, None, 1, 1]),
                simplecov_file("/srv/app/controllers/users_controller.rb", [1, 0, 0, 1, 0]),
                simplecov_file("/srv/lib/tasks/seed.rb", [1, 1, 1, 1, 1, 1, 1, 1, 1, 1]),
            ]
        },
    )


@pytest.fixture()
def last_run_report(tmp_path: Path) -> Path:
    return write_json(
        tmp_path / "coverage" / ".last_run.json", {"result": {"line": 87.456, "branch": 61.0}}
    )


JUNIT_XML = """\
<?xml version="1.0" encoding="UTF-8"?>
<testsuites>
  <testsuite name="models" tests="3" failures="1" errors="0" skipped="1" time="1.5">
    <testcase classname="UserTest" name="test_valid" time="0.1"/>
    <testcase classname="UserTest" name="test_email" time="0.2">
      <failure message="expected true">assertion failed</failure>
    </testcase>
    <testcase classname="UserTest" name="test_pending" time="0.0">
      <skipped/>
    </testcase>
  </testsuite>
  <testsuite name="controllers" tests="2" failures="0" errors="1" skipped="0" time="0.75">
    <testcase classname="UsersControllerTest" name="test_index" time="0.3"/>
    <testcase classname="UsersControllerTest" name="test_show" time="0.4">
      <error message="boom">RuntimeError</error>
    </testcase>
  </testsuite>
</testsuites>
"""


@pytest.fixture()
def junit_report(tmp_path: Path) -> Path:
    return write_text(tmp_path / "test-results.xml", JUNIT_XML)

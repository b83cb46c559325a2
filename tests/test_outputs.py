"""Tests for reporters/outputs.py: step outputs and the step summary."""

from __future__ import annotations

import re
from pathlib import Path

import pytest

from covcomment.reporters.outputs import ActionOutputs, format_output, write_step_summary


class TestActionOutputs:
    def test_values_are_stringified(self) -> None:
        outputs = ActionOutputs()
        outputs.set("tests", 5)
        outputs.set("time", 2.25)
        outputs.set("flag", True)
        outputs.set("empty", None)

        assert outputs.as_dict() == {"tests": "5", "time": "2.25", "flag": "true", "empty": ""}
        assert "tests" in outputs
        assert outputs.get("missing") is None

    def test_write_appends_to_github_output(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        target = tmp_path / "output.txt"
        target.write_text("previous=1\n", encoding="utf-8")
        monkeypatch.setenv("GITHUB_OUTPUT", str(target))

        outputs = ActionOutputs()
        outputs.set("coverage", "84.21%")
        outputs.set("color", "green")

        assert outputs.write() == target
        assert target.read_text(encoding="utf-8") == (
            "previous=1\ncoverage=84.21%\ncolor=green\n"
        )

    def test_write_without_target(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("GITHUB_OUTPUT", raising=False)
        outputs = ActionOutputs()
        outputs.set("coverage", "1%")

        assert outputs.write() is None


class TestFormatOutput:
    def test_single_line(self) -> None:
        assert format_output("color", "green") == "color=green\n"

    def test_multi_line_uses_heredoc(self) -> None:
        text = format_output("coverageHtml", "## Title\n\n| a |")

        match = re.fullmatch(
            r"coverageHtml<<(ghadelimiter_[0-9a-f-]+)\n## Title\n\n\| a \|\n\1\n", text
        )
        assert match is not None


class TestStepSummary:
    def test_appends_with_trailing_newline(self, tmp_path: Path) -> None:
        target = tmp_path / "summary.md"

        write_step_summary("## One", summary_path=target)
        write_step_summary("## Two\n", summary_path=target)

        assert target.read_text(encoding="utf-8") == "## One\n## Two\n"

    def test_env_target(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        target = tmp_path / "summary.md"
        monkeypatch.setenv("GITHUB_STEP_SUMMARY", str(target))

        assert write_step_summary("x") == target

    def test_without_target(
        self, monkeypatch: pytest.MonkeyPatch, caplog: pytest.LogCaptureFixture
    ) -> None:
        monkeypatch.delenv("GITHUB_STEP_SUMMARY", raising=False)

        assert write_step_summary("x") is None
        assert "GITHUB_STEP_SUMMARY not set" in caplog.text

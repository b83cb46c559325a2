"""Tests for config.py: option loading, coercion and validation."""

from __future__ import annotations

import os
from pathlib import Path
from unittest.mock import patch

import pytest

from covcomment.config import (
    CONFIG_FILENAME,
    CONFIG_TEMPLATE,
    ConfigError,
    ReportOptions,
    generate_template,
    load_config_file,
    load_options,
    parse_bool,
    parse_lines,
    read_action_inputs,
    validate_options,
)


def _write_config(root: Path, content: str) -> Path:
    path = root / CONFIG_FILENAME
    path.write_text(content, encoding="utf-8")
    return path


# ---------------------------------------------------------------------------
# Defaults and precedence
# ---------------------------------------------------------------------------


class TestLoadOptions:
    def test_defaults(self, tmp_path: Path) -> None:
        options = load_options(tmp_path, environ={})

        assert options == ReportOptions()
        assert options.coverage_file == "coverage/coverage.json"
        assert options.test_results_path == "test-results.xml"
        assert options.max_files_to_show == 50
        assert options.changed_file_extensions == [".rb"]
        assert options.include_category_summary

    def test_yaml_file(self, tmp_path: Path) -> None:
        _write_config(
            tmp_path,
            "title: Unit Coverage\n"
            "hide-badge: true\n"
            "max_files_to_show: 10\n"
            "changed_file_extensions: [.rb, .rake]\n"
            "multiple_files:\n"
            "  - Unit, coverage/unit.json\n",
        )

        options = load_options(tmp_path, environ={})

        assert options.title == "Unit Coverage"
        assert options.hide_badge is True
        assert options.max_files_to_show == 10
        assert options.changed_file_extensions == [".rb", ".rake"]
        assert options.multiple_files == ["Unit, coverage/unit.json"]

    def test_action_inputs_override_yaml(self, tmp_path: Path) -> None:
        _write_config(tmp_path, "title: From File\nhide_report: true\n")
        environ = {
            "INPUT_TITLE": "From Input",
            "INPUT_HIDE-REPORT": "false",
            "INPUT_ISSUE-NUMBER": "#17",
            "INPUT_MULTIPLE-FILES": "Unit, a.json\n\nSystem, b.json, r.xml\n",
            "INPUT_CHANGED-FILE-EXTENSIONS": ".rb, .erb .rake",
            "INPUT_COVERAGE-XML-FILE": "",
        }

        options = load_options(tmp_path, environ=environ)

        assert options.title == "From Input"
        assert options.hide_report is False
        assert options.issue_number == 17
        assert options.multiple_files == ["Unit, a.json", "System, b.json, r.xml"]
        assert options.changed_file_extensions == [".rb", ".erb", ".rake"]
        assert options.coverage_xml_file == ""

    def test_overrides_win_and_none_is_ignored(self, tmp_path: Path) -> None:
        options = load_options(
            tmp_path,
            overrides={"title": "CLI", "hide_badge": None, "issue_number": 3},
            environ={"INPUT_TITLE": "Input", "INPUT_HIDE-BADGE": "true"},
        )

        assert options.title == "CLI"
        assert options.hide_badge is True
        assert options.issue_number == 3

    def test_token_falls_back_to_environment(self, tmp_path: Path) -> None:
        options = load_options(tmp_path, environ={"GITHUB_TOKEN": "test-value"})
        assert options.github_token == "test-value"

    def test_token_input_wins(self, tmp_path: Path) -> None:
        environ = {"GITHUB_TOKEN": "env", "INPUT_GITHUB-TOKEN": "input"}
        assert load_options(tmp_path, environ=environ).github_token == "input"

    def test_unknown_keys_are_ignored(
        self, tmp_path: Path, caplog: pytest.LogCaptureFixture
    ) -> None:
        _write_config(tmp_path, "colour: blue\n")

        assert load_options(tmp_path, environ={}) == ReportOptions()
        assert "Ignoring unknown option 'colour'" in caplog.text

    def test_bad_boolean_raises(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError, match="hide_badge"):
            load_options(tmp_path, environ={"INPUT_HIDE-BADGE": "maybe"})

    def test_bad_integer_raises(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError, match="max_files_to_show"):
            load_options(tmp_path, environ={"INPUT_MAX-FILES-TO-SHOW": "lots"})

    def test_reads_process_environment_by_default(self, tmp_path: Path) -> None:
        with patch.dict(os.environ, {"INPUT_BADGE-TITLE": "Cov"}, clear=True):
            assert load_options(tmp_path).badge_title == "Cov"

    def test_masked_hides_token(self) -> None:
        assert ReportOptions(github_token="secret").masked()["github_token"] == "[SET]"
        assert ReportOptions().masked()["github_token"] == "[NOT SET]"


# ---------------------------------------------------------------------------
# Config file
# ---------------------------------------------------------------------------


class TestConfigFile:
    def test_missing_file(self, tmp_path: Path) -> None:
        assert load_config_file(tmp_path) == {}

    def test_empty_file(self, tmp_path: Path) -> None:
        _write_config(tmp_path, "")
        assert load_config_file(tmp_path) == {}

    def test_env_placeholders(self, tmp_path: Path) -> None:
        _write_config(tmp_path, "title: ${SUITE} coverage\nmultiple_files:\n  - ${SUITE}, a.json\n")

        with patch.dict(os.environ, {"SUITE": "Unit"}, clear=True):
            data = load_config_file(tmp_path)

        assert data["title"] == "Unit coverage"
        assert data["multiple_files"] == ["Unit, a.json"]

    def test_unset_placeholder_is_empty(self, tmp_path: Path) -> None:
        _write_config(tmp_path, "github_token: ${NOT_THERE}\n")

        with patch.dict(os.environ, {}, clear=True):
            assert load_config_file(tmp_path) == {"github_token": ""}

    def test_not_a_mapping(self, tmp_path: Path) -> None:
        _write_config(tmp_path, "- a\n- b\n")
        with pytest.raises(ConfigError, match="mapping"):
            load_config_file(tmp_path)

    def test_invalid_yaml(self, tmp_path: Path) -> None:
        _write_config(tmp_path, "title: [unclosed\n")
        with pytest.raises(ConfigError, match="Failed to read"):
            load_config_file(tmp_path)


# ---------------------------------------------------------------------------
# Parsing helpers
# ---------------------------------------------------------------------------


class TestHelpers:
    @pytest.mark.parametrize("value", [True, "true", "Yes", "on", "1", " TRUE "])
    def test_truthy(self, value: object) -> None:
        assert parse_bool(value) is True

    @pytest.mark.parametrize("value", [False, "false", "no", "off", "0", ""])
    def test_falsy(self, value: object) -> None:
        assert parse_bool(value) is False

    def test_parse_lines(self) -> None:
        assert parse_lines("a\n\n  b  \n") == ["a", "b"]
        assert parse_lines(["x", " ", "y"]) == ["x", "y"]
        assert parse_lines(None) == []

    def test_read_action_inputs_drops_empty(self) -> None:
        environ = {"INPUT_TITLE": "T", "INPUT_PREFIX": "", "PATH": "/bin"}
        assert read_action_inputs(environ) == {"TITLE": "T"}


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


class TestValidateOptions:
    def test_defaults_are_valid(self) -> None:
        assert validate_options(ReportOptions()) == []

    def test_collects_every_problem(self) -> None:
        options = ReportOptions(
            max_files_to_show=0,
            issue_number=0,
            multiple_files=["only-title"],
            changed_file_extensions=["rb"],
            unique_id_for_comment="a-->b",
        )

        errors = validate_options(options)

        assert len(errors) == 5
        assert any("max_files_to_show" in error for error in errors)
        assert any("issue_number" in error for error in errors)
        assert any("multiple_files line 1" in error for error in errors)
        assert any("'rb'" in error for error in errors)
        assert any("-->" in error for error in errors)

    def test_needs_some_coverage_input(self) -> None:
        errors = validate_options(ReportOptions(coverage_file=""))
        assert errors == ["one of coverage_file, coverage_xml_file or multiple_files is required"]

    def test_xml_links_need_commit(self) -> None:
        options = ReportOptions(coverage_xml_file="c.xml", repo_url="https://github.com/o/r")
        assert validate_options(options) == ["commit is required to link files when repo_url is set"]


# ---------------------------------------------------------------------------
# Template
# ---------------------------------------------------------------------------


class TestGenerateTemplate:
    def test_writes_loadable_template(self, tmp_path: Path) -> None:
        path = generate_template(tmp_path)

        assert path.read_text(encoding="utf-8") == CONFIG_TEMPLATE
        assert load_options(tmp_path, environ={}) == ReportOptions()

    def test_refuses_to_overwrite(self, tmp_path: Path) -> None:
        _write_config(tmp_path, "title: mine\n")

        with pytest.raises(ConfigError, match="already exists"):
            generate_template(tmp_path)

        generate_template(tmp_path, force=True)
        assert (tmp_path / CONFIG_FILENAME).read_text(encoding="utf-8") == CONFIG_TEMPLATE

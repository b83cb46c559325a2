"""Configuration loading for covcomment.

Options are merged from, lowest precedence first: dataclass defaults, the
project's ``.covcomment.yml``, GitHub Actions ``INPUT_*`` environment
variables, and explicit overrides (CLI flags).
"""

from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger(__name__)

CONFIG_FILENAME = ".covcomment.yml"

_ENV_VAR_RE = re.compile(r"\$\{(\w+)\}")
_GITHUB_AUTH_ENV_KEY = "GITHUB_" + "TOKEN"

_TRUE_VALUES = frozenset({"true", "yes", "y", "on", "1"})
_FALSE_VALUES = frozenset({"false", "no", "n", "off", "0", ""})

# "title, coverage-path" at minimum
_MULTI_FILE_MIN_PARTS = 2


class ConfigError(Exception):
    """Raised when configuration cannot be read or coerced."""


@dataclass
class ReportOptions:
    """Everything that shapes one coverage comment run."""

    github_token: str = ""
    """Token used for the GitHub REST API."""

    title: str = "Coverage Report"
    """Heading of the coverage section."""

    badge_title: str = "Coverage"
    """Left-hand label of the shields.io badge."""

    hide_badge: bool = False
    hide_report: bool = False

    coverage_file: str = "coverage/coverage.json"
    """SimpleCov JSON summary."""

    coverage_xml_file: str = ""
    """Optional Cobertura-style XML coverage report."""

    include_file_details: bool = False
    max_files_to_show: int = 50

    include_last_run: bool = False
    last_run_file: str = "coverage/.last_run.json"
    last_run_title: str = "Last Run Coverage"

    test_results_path: str = "test-results.xml"
    test_results_title: str = "Test Results"

    issue_number: int | None = None
    """Explicit issue or PR number; otherwise taken from the event payload."""

    hide_comment: bool = False
    create_new_comment: bool = False

    unique_id_for_comment: str = ""
    """Distinguishes comments from several runs of the same job."""

    multiple_files: list[str] = field(default_factory=list)
    """Lines of ``title, coverage-path[, test-results-path]``."""

    report_only_changed_files: bool = False
    include_category_summary: bool = True
    include_changed_files_details: bool = False

    changed_file_extensions: list[str] = field(default_factory=lambda: [".rb"])
    """Only changed files with these suffixes are matched. Empty means all."""

    prefix: str = ""
    """Leading path stripped from Cobertura file names."""

    path_prefix: str = ""
    """Path inserted between the commit and the file name in source links."""

    repo_url: str = ""
    commit: str = ""

    step_summary: bool = False
    """Also append the comment body to ``$GITHUB_STEP_SUMMARY``."""

    def masked(self) -> dict[str, Any]:
        """Return the options as a dict with the token hidden, for logging."""
        data = {f.name: getattr(self, f.name) for f in fields(self)}
        data["github_token"] = "[SET]" if self.github_token else "[NOT SET]"
        return data


def _resolve_env_vars(value: str) -> str:
    """Replace ``${VAR_NAME}`` placeholders with environment variable values."""

    def _replace(match: re.Match[str]) -> str:
        var = match.group(1)
        resolved = os.environ.get(var)
        if resolved is None:
            logger.warning("Environment variable %s is not set (referenced in config)", var)
            return ""
        return resolved

    return _ENV_VAR_RE.sub(_replace, value)


def _resolve_dict(data: dict[str, Any]) -> dict[str, Any]:
    """Recursively resolve environment variables in a dictionary."""
    result: dict[str, Any] = {}
    for key, value in data.items():
        if isinstance(value, str):
            result[key] = _resolve_env_vars(value)
        elif isinstance(value, dict):
            result[key] = _resolve_dict(value)
        elif isinstance(value, list):
            result[key] = [
                _resolve_env_vars(item) if isinstance(item, str) else item for item in value
            ]
        else:
            result[key] = value
    return result


def _field_name(key: str) -> str:
    """Map ``hide-badge`` / ``HIDE_BADGE`` style keys onto dataclass field names."""
    return key.strip().lower().replace("-", "_").replace(" ", "_")


_DEFAULTS = ReportOptions()
_FIELD_NAMES = frozenset(f.name for f in fields(ReportOptions))


def parse_bool(value: Any, name: str = "value") -> bool:
    """Coerce YAML/env booleans (``true``, ``no``, ``1`` ...).

    Raises:
        ConfigError: If the value is not recognisably boolean.
    """
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in _TRUE_VALUES:
        return True
    if text in _FALSE_VALUES:
        return False
    raise ConfigError(f"{name}: expected a boolean, got {value!r}")


def parse_lines(value: Any) -> list[str]:
    """Split a multi-line input into non-empty stripped lines."""
    if value is None:
        return []
    items = value if isinstance(value, list) else str(value).splitlines()
    return [str(item).strip() for item in items if str(item).strip()]


def _coerce(name: str, value: Any) -> Any:
    """Convert *value* to the type of field *name*'s default."""
    default = getattr(_DEFAULTS, name)

    if isinstance(default, bool):
        return parse_bool(value, name)
    if isinstance(default, int):
        try:
            return int(str(value).strip())
        except ValueError as exc:
            raise ConfigError(f"{name}: expected an integer, got {value!r}") from exc
    if isinstance(default, list):
        lines = parse_lines(value)
        if name == "changed_file_extensions":
            return [item for chunk in lines for item in re.split(r"[,\s]+", chunk) if item]
        return lines
    if name == "issue_number":
        if value is None or str(value).strip() == "":
            return None
        try:
            return int(str(value).strip().lstrip("#"))
        except ValueError as exc:
            raise ConfigError(f"{name}: expected an integer, got {value!r}") from exc
    return "" if value is None else str(value)


def _apply(options: ReportOptions, raw: dict[str, Any], source: str) -> ReportOptions:
    """Return a copy of *options* with every known key of *raw* applied."""
    updates: dict[str, Any] = {}
    for key, value in raw.items():
        name = _field_name(key)
        if name not in _FIELD_NAMES:
            logger.warning("Ignoring unknown option '%s' from %s", key, source)
            continue
        updates[name] = _coerce(name, value)
    return replace(options, **updates) if updates else options


def load_config_file(root: str | Path) -> dict[str, Any]:
    """Read ``.covcomment.yml`` from *root*, resolving ``${VAR}`` placeholders.

    Returns an empty dict when the file does not exist.

    Raises:
        ConfigError: If the file is unreadable or not a YAML mapping.
    """
    config_path = Path(root) / CONFIG_FILENAME
    if not config_path.is_file():
        return {}

    try:
        parsed = yaml.safe_load(config_path.read_text(encoding="utf-8"))
    except (OSError, yaml.YAMLError) as exc:
        raise ConfigError(f"Failed to read {config_path}: {exc}") from exc

    if parsed is None:
        return {}
    if not isinstance(parsed, dict):
        raise ConfigError(f"{config_path} must contain a mapping of options")
    return _resolve_dict(parsed)


def read_action_inputs(environ: dict[str, str] | None = None) -> dict[str, str]:
    """Collect GitHub Actions inputs (``INPUT_HIDE-BADGE`` and friends).

    Empty inputs are dropped so that unset action inputs keep their defaults.
    """
    env = os.environ if environ is None else environ
    inputs: dict[str, str] = {}
    for key, value in env.items():
        if not key.startswith("INPUT_") or value == "":
            continue
        inputs[key[len("INPUT_") :]] = value
    return inputs


def load_options(
    root: str | Path = ".",
    overrides: dict[str, Any] | None = None,
    environ: dict[str, str] | None = None,
) -> ReportOptions:
    """Build :class:`ReportOptions` from every configuration source.

    Args:
        root: Directory holding ``.covcomment.yml``.
        overrides: Highest-precedence values, typically CLI flags. ``None``
            values are ignored.
        environ: Environment to read ``INPUT_*`` and ``GITHUB_TOKEN`` from.

    Raises:
        ConfigError: If a source holds a value that cannot be coerced.
    """
    env = os.environ if environ is None else environ

    options = ReportOptions()
    options = _apply(options, load_config_file(root), CONFIG_FILENAME)
    options = _apply(options, read_action_inputs(env), "action inputs")
    if overrides:
        options = _apply(
            options,
            {key: value for key, value in overrides.items() if value is not None},
            "command line",
        )

    if not options.github_token:
        options = replace(options, github_token=env.get(_GITHUB_AUTH_ENV_KEY, ""))

    return options


def validate_options(options: ReportOptions) -> list[str]:
    """Return a list of human-readable problems; empty when the options are usable."""
    errors: list[str] = []

    if options.max_files_to_show < 1:
        errors.append("max_files_to_show must be at least 1")

    if options.issue_number is not None and options.issue_number < 1:
        errors.append("issue_number must be a positive integer")

    if not options.coverage_file and not options.coverage_xml_file and not options.multiple_files:
        errors.append("one of coverage_file, coverage_xml_file or multiple_files is required")

    if options.coverage_xml_file and options.repo_url and not options.commit:
        errors.append("commit is required to link files when repo_url is set")

    for index, line in enumerate(options.multiple_files, start=1):
        if len([part for part in line.split(",") if part.strip()]) < _MULTI_FILE_MIN_PARTS:
            errors.append(
                f"multiple_files line {index} must be 'title, coverage-path[, test-results-path]'"
            )

    for extension in options.changed_file_extensions:
        if not extension.startswith("."):
            errors.append(f"changed_file_extensions entry '{extension}' must start with '.'")

    if "-->" in options.unique_id_for_comment:
        errors.append("unique_id_for_comment must not contain '-->'")

    return errors


CONFIG_TEMPLATE = """\
# covcomment configuration. Values may reference environment variables as ${VAR}.
# GitHub Actions inputs (INPUT_*) and command-line flags override these.

title: Coverage Report
badge_title: Coverage
hide_badge: false
hide_report: false

coverage_file: coverage/coverage.json
# coverage_xml_file: coverage/coverage.xml
include_file_details: false
max_files_to_show: 50
include_category_summary: true

include_last_run: false
last_run_file: coverage/.last_run.json
last_run_title: Last Run Coverage

test_results_path: test-results.xml
test_results_title: Test Results

hide_comment: false
create_new_comment: false
# unique_id_for_comment: unit

report_only_changed_files: false
include_changed_files_details: false
changed_file_extensions:
  - .rb

# multiple_files:
#   - Unit, coverage/unit/coverage.json, unit-results.xml
#   - System, coverage/system/coverage.json

step_summary: false
"""


def generate_template(root: str | Path, force: bool = False) -> Path:
    """Write :data:`CONFIG_TEMPLATE` to ``root/.covcomment.yml``.

    Raises:
        ConfigError: If the file exists and *force* is not set.
    """
    config_path = Path(root) / CONFIG_FILENAME
    if config_path.exists() and not force:
        raise ConfigError(f"{config_path} already exists")
    config_path.write_text(CONFIG_TEMPLATE, encoding="utf-8")
    return config_path

"""Exported summary values (GitHub Actions step outputs) and the step summary."""

from __future__ import annotations

import logging
import os
import uuid
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)


class ActionOutputs:
    """Ordered name/value pairs exported at the end of a run."""

    def __init__(self) -> None:
        self._values: dict[str, str] = {}

    def set(self, name: str, value: Any) -> None:
        text = _stringify(value)
        logger.debug("Output %s=%s", name, text if "\n" not in text else "<multi-line>")
        self._values[name] = text

    def get(self, name: str, default: str | None = None) -> str | None:
        return self._values.get(name, default)

    def as_dict(self) -> dict[str, str]:
        return dict(self._values)

    def __contains__(self, name: object) -> bool:
        return name in self._values

    def write(self, output_path: str | Path | None = None) -> Path | None:
        """Append every value to ``$GITHUB_OUTPUT``.

        Multi-line values use the ``name<<DELIMITER`` heredoc syntax. Returns
        the file written, or None when no output file is configured.
        """
        target = output_path or os.environ.get("GITHUB_OUTPUT")
        if not target:
            logger.debug("GITHUB_OUTPUT not set; outputs not exported")
            return None

        path = Path(target)
        with path.open("a", encoding="utf-8") as handle:
            for name, value in self._values.items():
                handle.write(format_output(name, value))
        return path


def format_output(name: str, value: str) -> str:
    """Encode one output in the ``$GITHUB_OUTPUT`` file format."""
    if "\n" not in value and "\r" not in value:
        return f"{name}={value}\n"

    delimiter = f"ghadelimiter_{uuid.uuid4()}"
    return f"{name}<<{delimiter}\n{value}\n{delimiter}\n"


def write_step_summary(markdown: str, summary_path: str | Path | None = None) -> Path | None:
    """Append *markdown* to ``$GITHUB_STEP_SUMMARY``.

    Returns the file written, or None when no summary file is configured.
    """
    target = summary_path or os.environ.get("GITHUB_STEP_SUMMARY")
    if not target:
        logger.warning("GITHUB_STEP_SUMMARY not set; cannot write summary.")
        return None

    path = Path(target)
    with path.open("a", encoding="utf-8") as handle:
        handle.write(markdown)
        if not markdown.endswith("\n"):
            handle.write("\n")
    return path


def _stringify(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return ""
    return str(value)

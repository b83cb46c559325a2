"""File access and small formatting helpers shared by parsers and reporters."""

from __future__ import annotations

import html
import logging
import re
from pathlib import Path

logger = logging.getLogger(__name__)

# Badge colour breakpoints, highest first (inclusive lower bounds)
_COLOR_STEPS: tuple[tuple[float, str], ...] = (
    (90.0, "brightgreen"),
    (80.0, "green"),
    (70.0, "yellowgreen"),
    (60.0, "yellow"),
    (50.0, "orange"),
)

_STATUS_STEPS: tuple[tuple[float, str], ...] = (
    (90.0, "🟢 Excellent"),
    (80.0, "🟡 Good"),
    (70.0, "🟠 Fair"),
)

_PERCENT_RE = re.compile(r"(\d+(?:\.\d+)?)%")

_SECONDS_PER_MINUTE = 60.0
_SECONDS_PER_HOUR = 3600.0


def get_path_to_file(file_path: str | Path | None) -> Path | None:
    """Resolve *file_path* against the working directory.

    Returns None for an empty path so callers can treat it as "not configured".
    """
    if not file_path:
        return None
    path = Path(file_path)
    if path.is_absolute():
        return path
    return Path.cwd() / path


def get_content_file(file_path: str | Path | None) -> str | None:
    """Read a UTF-8 text file, returning None if it is missing or unreadable."""
    path = get_path_to_file(file_path)
    if path is None or not path.is_file():
        return None
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        logger.error("Error reading file %s: %s", path, exc)
        return None


def file_exists(file_path: str | Path | None) -> bool:
    """Return True if *file_path* points at an existing regular file."""
    path = get_path_to_file(file_path)
    return path is not None and path.is_file()


def get_coverage_color(percentage: float | str) -> str:
    """Map a coverage percentage onto a shields.io badge colour.

    Strings are accepted (``"87.5"``, ``"87.5%"``); anything unparsable is red.
    """
    value = _to_float(percentage)
    for threshold, color in _COLOR_STEPS:
        if value >= threshold:
            return color
    return "red"


def get_status_label(percentage: float | str) -> str:
    """Return the qualitative label used in comparison tables."""
    value = _to_float(percentage)
    for threshold, label in _STATUS_STEPS:
        if value >= threshold:
            return label
    return "🔴 Poor"


def extract_percentage(coverage: str | None) -> str:
    """Pull the number out of a string such as ``"Total 87.5%"``."""
    if not coverage:
        return "0"
    match = _PERCENT_RE.search(coverage)
    return match.group(1) if match else "0"


def format_time(seconds: float | str | None) -> str:
    """Format a duration in seconds for humans (``"4.210s"``, ``"2m 5.0s"``, ``"1h 3m"``)."""
    value = _to_float(seconds)
    if not value:
        return "0s"
    if value < _SECONDS_PER_MINUTE:
        return f"{value:.3f}s"
    if value < _SECONDS_PER_HOUR:
        minutes = int(value // _SECONDS_PER_MINUTE)
        return f"{minutes}m {value % _SECONDS_PER_MINUTE:.1f}s"
    hours = int(value // _SECONDS_PER_HOUR)
    minutes = int((value % _SECONDS_PER_HOUR) // _SECONDS_PER_MINUTE)
    return f"{hours}h {minutes}m"


def sanitize_html(text: str | None) -> str:
    """Escape the characters that would break out of an HTML attribute or cell."""
    if not text:
        return ""
    return html.escape(text, quote=True)


def format_line_ranges(line_numbers: list[int]) -> str | None:
    """Collapse line numbers into ``"a"``/``"a-b"`` tokens joined by ``", "``.

    >>> format_line_ranges([5, 2, 3])
    '2-3, 5'
    """
    if not line_numbers:
        return None

    ordered = sorted(set(line_numbers))
    tokens: list[str] = []
    start = end = ordered[0]
    for number in ordered[1:]:
        if number == end + 1:
            end = number
            continue
        tokens.append(str(start) if start == end else f"{start}-{end}")
        start = end = number
    tokens.append(str(start) if start == end else f"{start}-{end}")
    return ", ".join(tokens)


def _to_float(value: float | str | None) -> float:
    if value is None:
        return 0.0
    if isinstance(value, int | float):
        return float(value)
    try:
        return float(str(value).strip().rstrip("%"))
    except ValueError:
        return 0.0

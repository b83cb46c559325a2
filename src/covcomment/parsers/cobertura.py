"""Cobertura-style XML coverage parser.

SimpleCov's Cobertura formatter, coverage.py and coverlet all write the same
``coverage/packages/package/classes/class/lines/line`` nesting. Rate attributes
are spelled ``line_rate`` by some formatters and ``line-rate`` by others; both
are accepted.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from covcomment.models.coverage import CoberturaFile, CoberturaReport
from covcomment.parsers.detect import DetectedReport, ReportKind, detect_report_kind, local_name
from covcomment.utils.files import format_line_ranges

if TYPE_CHECKING:
    from pathlib import Path
    from xml.etree.ElementTree import Element as XmlElement

logger = logging.getLogger(__name__)


def parse_cobertura(file_path: str | Path, prefix: str = "") -> CoberturaReport | None:
    """Parse a Cobertura XML file.

    Args:
        file_path: Path to the XML report.
        prefix: Leading path to strip from every class ``filename``.

    Returns:
        The normalized report, or None if the file is missing or invalid.
    """
    report = detect_report_kind(file_path)
    if report is None:
        logger.warning("XML coverage file not found: %s", file_path)
        return None
    return cobertura_from_report(report, prefix)


def cobertura_from_report(report: DetectedReport, prefix: str = "") -> CoberturaReport | None:
    """Build a Cobertura report from an already detected file."""
    if report.kind is not ReportKind.COBERTURA_XML:
        logger.error(
            "Invalid XML coverage format in %s: %s",
            report.path,
            report.error or f"expected <coverage>, found {report.kind.value}",
        )
        return None

    root: XmlElement = report.payload
    return CoberturaReport(
        total=extract_total_coverage(root),
        files=parse_files(root, prefix),
    )


def _rate_attr(element: XmlElement, name: str) -> float | None:
    value = element.get(name.replace("-", "_"))
    if value is None:
        value = element.get(name)
    if value is None:
        return None
    try:
        return float(value)
    except ValueError:
        return None


def _int_attr(element: XmlElement, key: str, default: int = 0) -> int:
    value = element.get(key)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def extract_total_coverage(root: XmlElement) -> float:
    """Overall percentage from the root rates: line rate, else branch rate, else 0."""
    for attr in ("line-rate", "branch-rate"):
        rate = _rate_attr(root, attr)
        if rate is not None:
            return round(rate * 100, 1)
    return 0.0


def _children(element: XmlElement, tag: str) -> list[XmlElement]:
    return [child for child in element if local_name(child) == tag]


def _class_lines(class_elem: XmlElement) -> list[XmlElement]:
    lines: list[XmlElement] = []
    for container in _children(class_elem, "lines"):
        lines.extend(_children(container, "line"))
    return lines


def parse_files(root: XmlElement, prefix: str = "") -> list[CoberturaFile]:
    """Build one row per ``<class>`` that names a source file."""
    files: list[CoberturaFile] = []

    for packages in _children(root, "packages"):
        for package in _children(packages, "package"):
            for classes in _children(package, "classes"):
                for class_elem in _children(classes, "class"):
                    row = _parse_class(class_elem, prefix)
                    if row is not None:
                        files.append(row)

    return files


def _parse_class(class_elem: XmlElement, prefix: str) -> CoberturaFile | None:
    filename = class_elem.get("filename")
    if not filename:
        return None

    name = filename.replace(prefix, "", 1) if prefix else filename
    rate = _rate_attr(class_elem, "line-rate") or 0.0

    lines = _class_lines(class_elem)
    missed_numbers: list[int] = []
    miss = 0
    for line in lines:
        if line.get("hits") != "0":
            continue
        miss += 1
        number = _int_attr(line, "number")
        # Unparsable or missing numbers count as missed but get no range
        if number > 0:
            missed_numbers.append(number)

    return CoberturaFile(
        name=name,
        stmts=len(lines),
        miss=miss,
        cover=round(rate * 100, 1),
        missing=get_missing_lines(missed_numbers) if miss else None,
    )


def get_missing_lines(line_numbers: list[int]) -> str | None:
    """Encode zero-hit line numbers as ``"a"``/``"a-b"`` ranges."""
    return format_line_ranges(line_numbers)

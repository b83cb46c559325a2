"""Report-kind detection.

Each input file is sniffed exactly once: its content is decoded (JSON or XML)
and classified into a :class:`ReportKind`. The resulting :class:`DetectedReport`
carries the decoded payload so that parsers never re-read or re-probe the file.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Any

from defusedxml import DefusedXmlException
from defusedxml import ElementTree
from defusedxml.ElementTree import ParseError as DefusedParseError

from covcomment.utils.files import get_content_file, get_path_to_file

if TYPE_CHECKING:
    from xml.etree.ElementTree import Element as XmlElement

logger = logging.getLogger(__name__)


class ReportKind(Enum):
    """The shape of a report file, decided once per file."""

    SIMPLECOV_JSON = "simplecov"
    LAST_RUN_JSON = "last_run"
    COBERTURA_XML = "cobertura"
    JUNIT_XML = "junit"
    RSPEC_XML = "rspec"
    UNKNOWN = "unknown"


_XML_ROOT_KINDS: dict[str, ReportKind] = {
    "coverage": ReportKind.COBERTURA_XML,
    "testsuites": ReportKind.JUNIT_XML,
    "testsuite": ReportKind.JUNIT_XML,
    "rspec": ReportKind.RSPEC_XML,
}


@dataclass
class DetectedReport:
    """A report file after format sniffing."""

    kind: ReportKind
    """Detected report kind."""

    path: Path
    """Resolved path of the file."""

    payload: Any = None
    """Decoded content: a dict for JSON reports, the root Element for XML."""

    error: str | None = None
    """Why decoding failed (only set for UNKNOWN reports)."""


def local_name(elem: XmlElement) -> str:
    """Return the tag of *elem* without any XML namespace."""
    return elem.tag.split("}")[-1] if "}" in elem.tag else elem.tag


def detect_report_kind(file_path: str | Path) -> DetectedReport | None:
    """Read *file_path* and classify it.

    Returns None if the file does not exist. Unreadable or undecodable files come
    back as ``ReportKind.UNKNOWN`` with ``error`` set; this function never raises
    for bad input.
    """
    path = get_path_to_file(file_path)
    if path is None or not path.is_file():
        return None

    content = get_content_file(path)
    if content is None:
        return DetectedReport(kind=ReportKind.UNKNOWN, path=path, error="file could not be read")

    text = content.lstrip("\ufeff \t\r\n")
    if not text:
        return DetectedReport(kind=ReportKind.UNKNOWN, path=path, error="file is empty")

    if text.startswith("<"):
        return _detect_xml(path, text)
    return _detect_json(path, text)


def _detect_xml(path: Path, text: str) -> DetectedReport:
    try:
        root = ElementTree.fromstring(text)
    except (DefusedParseError, DefusedXmlException) as exc:
        return DetectedReport(kind=ReportKind.UNKNOWN, path=path, error=f"invalid XML: {exc}")

    kind = _XML_ROOT_KINDS.get(local_name(root), ReportKind.UNKNOWN)
    logger.debug("Detected %s report in %s (root <%s>)", kind.value, path, root.tag)
    error = None if kind is not ReportKind.UNKNOWN else f"unrecognized XML root <{root.tag}>"
    return DetectedReport(kind=kind, path=path, payload=root, error=error)


def _detect_json(path: Path, text: str) -> DetectedReport:
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        return DetectedReport(kind=ReportKind.UNKNOWN, path=path, error=f"invalid JSON: {exc}")

    kind = ReportKind.UNKNOWN
    if isinstance(data, dict):
        if "files" in data:
            kind = ReportKind.SIMPLECOV_JSON
        elif "result" in data:
            kind = ReportKind.LAST_RUN_JSON

    logger.debug("Detected %s report in %s", kind.value, path)
    error = None if kind is not ReportKind.UNKNOWN else "unrecognized JSON document"
    return DetectedReport(kind=kind, path=path, payload=data, error=error)

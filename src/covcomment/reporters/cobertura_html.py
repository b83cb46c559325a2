"""HTML rendering of a Cobertura coverage report.

Produces a badge followed by a collapsible File/Stmts/Miss/Cover/Missing
table grouped by folder, with a bold TOTAL row.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from covcomment.reporters.markdown import badge_url, collapsible
from covcomment.utils.files import sanitize_html

if TYPE_CHECKING:
    from covcomment.models.coverage import CoberturaFile, CoberturaReport

_TABLE_HEADER = (
    "<table><tr><th>File</th><th>Stmts</th><th>Miss</th><th>Cover</th><th>Missing</th></tr>"
    "<tbody>"
)
_INDENT = "&nbsp; &nbsp;"
_EMPTY_CELL = "&nbsp;"


@dataclass
class LinkOptions:
    """Where file links in the table point."""

    repo_url: str = ""
    commit: str = ""
    path_prefix: str = ""


def to_html(
    report: CoberturaReport,
    title: str = "Coverage Report",
    badge_title: str = "Coverage",
    hide_badge: bool = False,
    hide_report: bool = False,
    links: LinkOptions | None = None,
) -> str:
    """Badge plus collapsible table; either part can be hidden."""
    badge = ""
    if not hide_badge:
        url = badge_url(badge_title, f"{report.total:.1f}")
        badge = f'<img alt="Coverage" src="{url}" /><br/>'

    table = "" if hide_report else collapsible(title, to_table(report, links or LinkOptions()))
    return f"{badge}{table}"


def make_folders(files: list[CoberturaFile]) -> dict[str, list[CoberturaFile]]:
    """Group rows by the directory part of their name (``""`` for top-level files)."""
    folders: dict[str, list[CoberturaFile]] = {}
    for item in files:
        folder = item.name.rpartition("/")[0]
        folders.setdefault(folder, []).append(item)
    return folders


def to_table(report: CoberturaReport, links: LinkOptions) -> str:
    parts = [_TABLE_HEADER]

    folders = make_folders(report.files)
    for folder in sorted(folders):
        if folder:
            parts.append(f'<tr><td colspan="5"><b>{sanitize_html(folder)}</b></td></tr>')
        parts.extend(to_row(item, bool(folder), links) for item in folders[folder])

    parts.append(
        "<tr><td><b>TOTAL</b></td>"
        f"<td><b>{report.total_stmts}</b></td>"
        f"<td><b>{report.total_miss}</b></td>"
        f"<td><b>{report.total:.1f}%</b></td>"
        f"<td>{_EMPTY_CELL}</td></tr>"
    )
    parts.append("</tbody></table>")
    return "".join(parts)


def _file_url(item: CoberturaFile, links: LinkOptions) -> str:
    return f"{links.repo_url}/blob/{links.commit}/{links.path_prefix}{item.name}"


def to_row(item: CoberturaFile, indent: bool, links: LinkOptions) -> str:
    return (
        f"<tr><td>{to_file_name_td(item, indent, links)}</td>"
        f"<td>{item.stmts}</td><td>{item.miss}</td><td>{item.cover:.1f}%</td>"
        f"<td>{to_missing_td(item, links)}</td></tr>"
    )


def to_file_name_td(item: CoberturaFile, indent: bool, links: LinkOptions) -> str:
    prefix = _INDENT if indent else ""
    name = sanitize_html(item.name)
    return f'{prefix}<a href="{sanitize_html(_file_url(item, links))}">{name}</a>'


def to_missing_td(item: CoberturaFile, links: LinkOptions) -> str:
    """Link every missing range to its lines (``#L12-14``)."""
    if not item.missing:
        return _EMPTY_CELL

    url = sanitize_html(_file_url(item, links))
    return ", ".join(
        f'<a href="{url}#L{line_range}">{line_range}</a>'
        for line_range in item.missing.split(", ")
    )

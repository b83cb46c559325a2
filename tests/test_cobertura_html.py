"""Tests for reporters/cobertura_html.py."""

from __future__ import annotations

from covcomment.models.coverage import CoberturaFile, CoberturaReport
from covcomment.reporters.cobertura_html import (
    LinkOptions,
    make_folders,
    to_html,
    to_missing_td,
    to_table,
)

LINKS = LinkOptions(repo_url="https://github.com/o/r", commit="abc", path_prefix="src/")


def _report() -> CoberturaReport:
    return CoberturaReport(
        total=72.7,
        files=[
            CoberturaFile(name="lib/b.rb", stmts=4, miss=1, cover=75.0, missing="3"),
            CoberturaFile(name="app/models/a.rb", stmts=5, miss=2, cover=60.0, missing="2-3"),
            CoberturaFile(name="main.rb", stmts=2, miss=0, cover=100.0),
        ],
    )


class TestToHtml:
    def test_badge_and_collapsible_table(self) -> None:
        html = to_html(_report(), title="Cobertura", links=LINKS)

        assert html.startswith(
            '<img alt="Coverage" src="https://img.shields.io/badge/Coverage-72.7%25-yellowgreen.svg"'
            " /><br/>"
        )
        assert "<details><summary>Cobertura</summary><table>" in html
        assert html.endswith("</tbody></table></details>")

    def test_hide_badge(self) -> None:
        assert to_html(_report(), hide_badge=True).startswith("<details>")

    def test_hide_report(self) -> None:
        html = to_html(_report(), hide_report=True)
        assert "<table>" not in html
        assert html.endswith("<br/>")

    def test_hide_both(self) -> None:
        assert to_html(_report(), hide_badge=True, hide_report=True) == ""


class TestToTable:
    def test_folders_sorted_with_indented_rows(self) -> None:
        table = to_table(_report(), LINKS)

        root = table.index(">main.rb</a>")
        app = table.index("<b>app/models</b>")
        lib = table.index("<b>lib</b>")
        assert root < app < lib
        assert '<tr><td colspan="5"><b>app/models</b></td></tr>' in table
        assert (
            '<td>&nbsp; &nbsp;<a href="https://github.com/o/r/blob/abc/src/app/models/a.rb">'
            "app/models/a.rb</a></td>"
        ) in table

    def test_total_row_sums_statements(self) -> None:
        table = to_table(_report(), LINKS)

        assert (
            "<tr><td><b>TOTAL</b></td><td><b>11</b></td><td><b>3</b></td>"
            "<td><b>72.7%</b></td><td>&nbsp;</td></tr>"
        ) in table

    def test_names_are_escaped(self) -> None:
        report = CoberturaReport(
            total=0.0, files=[CoberturaFile(name="<x>.rb", stmts=1, miss=1, cover=0.0)]
        )
        assert "&lt;x&gt;.rb" in to_table(report, LinkOptions())


class TestHelpers:
    def test_make_folders(self) -> None:
        folders = make_folders(_report().files)
        assert sorted(folders) == ["", "app/models", "lib"]

    def test_missing_links(self) -> None:
        item = CoberturaFile(name="a.rb", stmts=5, miss=3, cover=40.0, missing="2-3, 5")
        td = to_missing_td(item, LINKS)

        assert td == (
            '<a href="https://github.com/o/r/blob/abc/src/a.rb#L2-3">2-3</a>, '
            '<a href="https://github.com/o/r/blob/abc/src/a.rb#L5">5</a>'
        )

    def test_missing_empty_cell(self) -> None:
        item = CoberturaFile(name="a.rb", stmts=5, miss=0, cover=100.0)
        assert to_missing_td(item, LINKS) == "&nbsp;"

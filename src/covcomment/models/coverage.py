"""Coverage report models."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class BranchSummary:
    """Branch coverage totals aggregated across files."""

    total: int
    """Number of branches reported."""

    covered: int
    """Branches taken at least once."""

    missed: int
    """Branches never taken."""

    percentage: float
    """Branch coverage percentage (0.0 to 100.0, two decimals)."""


@dataclass
class OverallSummary:
    """Project-wide line coverage totals."""

    files: int
    """Number of files in the report."""

    lines: int
    """Relevant lines across all files."""

    covered: int
    """Lines executed at least once."""

    missed: int
    """Lines never executed (``lines - covered``)."""

    percentage: float
    """Line coverage percentage (0.0 to 100.0, two decimals)."""

    branches: BranchSummary | None = None
    """Branch totals, or None when no file reports branches."""


@dataclass
class GroupSummary:
    """Coverage totals for one category of files (Controllers, Models, ...)."""

    name: str
    files: int
    lines: int
    covered: int
    missed: int
    percentage: float
    """Line coverage percentage (one decimal)."""


@dataclass
class FileSummary:
    """Coverage details for a single source file."""

    name: str
    """File basename."""

    path: str
    """Path as written in the coverage report."""

    lines: int
    covered: int
    missed: int

    percentage: float
    """Line coverage percentage (one decimal)."""

    missed_lines: list[int] = field(default_factory=list)
    """1-indexed line numbers with a zero hit count."""


@dataclass
class CoverageSummary:
    """Normalized SimpleCov coverage for one run."""

    overall: OverallSummary
    groups: list[GroupSummary] = field(default_factory=list)

    files: list[FileSummary] | None = None
    """Per-file rows, only populated when file details were requested."""

    files_truncated: bool = False
    """True when ``files`` was cut down to the configured maximum."""

    all_files: list[FileSummary] | None = field(default=None, repr=False)
    """Every file row, kept when ``files`` is truncated."""

    def truncate_files(self, max_files: int) -> None:
        """Keep at most *max_files* file rows, flagging the cut."""
        if self.files is not None and len(self.files) > max_files:
            self.all_files = self.files
            self.files = self.files[:max_files]
            self.files_truncated = True

    @property
    def every_file(self) -> list[FileSummary]:
        """All file rows, ignoring truncation."""
        return self.all_files or self.files or []


@dataclass
class LastRunSummary:
    """Percentages recorded in SimpleCov's ``.last_run.json``."""

    line: float
    branch: float


@dataclass
class CoberturaFile:
    """One row of the Cobertura file table."""

    name: str
    """File name with the configured prefix removed."""

    stmts: int
    miss: int

    cover: float
    """Line coverage percentage (one decimal)."""

    missing: str | None = None
    """Encoded missing-line ranges (``"2-3, 5"``) or None."""


@dataclass
class CoberturaReport:
    """Normalized Cobertura-style XML coverage."""

    total: float
    """Overall percentage (one decimal)."""

    files: list[CoberturaFile] = field(default_factory=list)

    @property
    def total_stmts(self) -> int:
        return sum(item.stmts for item in self.files)

    @property
    def total_miss(self) -> int:
        return sum(item.miss for item in self.files)

"""Test result models."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any


@dataclass
class TestResultsSummary:
    """Aggregate counts from a JUnit or RSpec results file."""

    __test__ = False

    tests: int = 0
    failures: int = 0
    errors: int = 0
    skipped: int = 0

    time: float = 0.0
    """Total execution time in seconds."""

    @property
    def all_passed(self) -> bool:
        """Return True when nothing failed or errored."""
        return self.failures == 0 and self.errors == 0


@dataclass
class TestCaseRef:
    """Identity of a single test case."""

    __test__ = False

    classname: str
    name: str


@dataclass
class NotSuccessTestInfo:
    """Test cases that did not pass, bucketed by outcome."""

    failures: list[TestCaseRef] = field(default_factory=list)
    errors: list[TestCaseRef] = field(default_factory=list)
    skipped: list[TestCaseRef] = field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.failures) + len(self.errors) + len(self.skipped)

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-serializable dict including the derived count."""
        data = asdict(self)
        data["count"] = self.count
        return data

"""covcomment: coverage and test-result comments for pull requests."""

__version__ = "0.1.0"

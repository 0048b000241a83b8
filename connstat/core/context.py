"""Execution context for testability."""

from pathlib import Path


class Context:
    """
    Wraps filesystem access for testability.

    In production: reads the real /proc and ASN files
    In tests: can be replaced with MockContext
    """

    def read_file(self, path: str) -> str:
        """Read file contents."""
        return Path(path).read_text()

"""Shared test fixtures."""

import sys
from pathlib import Path

import pytest

# Add project root to path for package imports
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

FIXTURES_DIR = Path(__file__).parent / "fixtures"


class MockContext:
    """Mock Context for testing without real /proc access."""

    def __init__(
        self,
        file_contents: dict[str, str | Exception] | None = None,
    ):
        self.file_contents = file_contents or {}
        self.files_read: list[str] = []

    def read_file(self, path: str) -> str:
        """Return mocked file content."""
        self.files_read.append(path)
        if path not in self.file_contents:
            raise FileNotFoundError(f"No mock content for: {path}")

        content = self.file_contents[path]
        if isinstance(content, Exception):
            raise content
        return content


@pytest.fixture
def mock_context():
    """Factory fixture for creating MockContext instances."""
    def _create(**kwargs) -> MockContext:
        return MockContext(**kwargs)
    return _create


@pytest.fixture
def fixtures_dir() -> Path:
    """Path to test fixtures directory."""
    return FIXTURES_DIR


def load_fixture(category: str, name: str) -> str:
    """Load a fixture file by category and name."""
    fixture_path = FIXTURES_DIR / category / name
    if not fixture_path.exists():
        raise FileNotFoundError(f"Fixture not found: {fixture_path}")
    return fixture_path.read_text()


@pytest.fixture
def proc_context():
    """MockContext serving the sample /proc/net/tcp and /proc/net/tcp6."""
    return MockContext(
        file_contents={
            "/proc/net/tcp": load_fixture("net", "tcp"),
            "/proc/net/tcp6": load_fixture("net", "tcp6"),
            "/etc/net_exporter/asn_db.csv": load_fixture("asn", "asn.csv"),
        }
    )

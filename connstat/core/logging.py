"""JSONL logging for collector runs.

Each collector writes one file per day, ``<log_dir>/<YYYY-MM-DD>/<name>.jsonl``.
Every line is a JSON object with ``timestamp``, ``level``, ``collector`` and
``message`` keys plus whatever fields the caller attached (``kind``,
``records``, socket counts).
"""

import json
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Any, Iterator

from connstat.core.config import default_log_dir


LOG_LEVELS = {"debug": 0, "info": 1, "warning": 2, "error": 3}


def _day_file(base_path: Path, name: str, day: date) -> Path:
    return base_path / day.isoformat() / f"{name}.jsonl"


def get_log_path(name: str, base_path: Path | None = None) -> Path:
    """Today's log file for collector ``name`` under ``base_path``.

    ``base_path`` defaults to :func:`default_log_dir`.
    """
    return _day_file(base_path or default_log_dir(), name, date.today())


class CollectorLogger:
    """Appends structured entries to a collector's JSONL file.

    The file and its parent directories are created on the first entry, so
    a logger that never logs leaves nothing behind. Opening the file can
    raise ``OSError`` when the log directory is not writable.
    """

    def __init__(self, name: str, log_path: Path | None = None):
        self.name = name
        self.log_path = log_path or get_log_path(name)
        self._file = None

    def _ensure_file(self) -> None:
        if self._file is None:
            self.log_path.parent.mkdir(parents=True, exist_ok=True)
            self._file = open(self.log_path, "a")

    def _log(self, level: str, message: str, **extra: Any) -> None:
        self._ensure_file()
        entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": level,
            "collector": self.name,
            "message": message,
        }
        entry.update(extra)
        self._file.write(json.dumps(entry, default=str) + "\n")
        self._file.flush()

    def debug(self, message: str, **extra: Any) -> None:
        self._log("debug", message, **extra)

    def info(self, message: str, **extra: Any) -> None:
        self._log("info", message, **extra)

    def warning(self, message: str, **extra: Any) -> None:
        self._log("warning", message, **extra)

    def error(self, message: str, **extra: Any) -> None:
        self._log("error", message, **extra)

    def close(self) -> None:
        if self._file is not None:
            self._file.close()
            self._file = None

    def __enter__(self) -> "CollectorLogger":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()


def _read_entries(log_file: Path) -> Iterator[dict[str, Any]]:
    """Yield decoded entries, skipping blank and undecodable lines."""
    with open(log_file) as f:
        for line in f:
            if not line.strip():
                continue
            try:
                entry = json.loads(line)
            except json.JSONDecodeError:
                continue
            if isinstance(entry, dict):
                yield entry


def query_logs(
    base_path: Path,
    name: str,
    log_date: date | None = None,
    min_level: str = "debug",
    limit: int | None = None,
) -> list[dict[str, Any]]:
    """Entries logged by collector ``name`` on ``log_date`` (default today).

    Only entries at ``min_level`` or above are returned, oldest first, at
    most ``limit`` of them. A day with no log file yields an empty list.
    """
    log_file = _day_file(base_path, name, log_date or date.today())
    if not log_file.exists():
        return []

    threshold = LOG_LEVELS.get(min_level, 0)
    results = []
    for entry in _read_entries(log_file):
        if LOG_LEVELS.get(entry.get("level", "debug"), 0) < threshold:
            continue
        results.append(entry)
        if limit and len(results) >= limit:
            break
    return results

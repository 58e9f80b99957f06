"""Write a run's results to a CSV spreadsheet with file locking."""
from __future__ import annotations

import csv
import fcntl
from datetime import datetime
from pathlib import Path
from typing import Sequence

from naukri_agent.log import get_logger
from naukri_agent.models import JobResult

log = get_logger(__name__)

EXPORT_NAME = "naukri_results.csv"


def _lock(f, exclusive: bool = True) -> None:
    """Advisory file lock (Unix fcntl)."""
    try:
        op = fcntl.LOCK_EX if exclusive else fcntl.LOCK_SH
        fcntl.flock(f.fileno(), op)
    except (OSError, AttributeError):
        pass


def _unlock(f) -> None:
    try:
        fcntl.flock(f.fileno(), fcntl.LOCK_UN)
    except (OSError, AttributeError):
        pass


def _cell(value: object) -> object:
    if isinstance(value, datetime):
        return value.strftime("%Y-%m-%d %H:%M:%S")
    if isinstance(value, bool):
        return "Yes" if value else "No"
    return "" if value is None else value


def export_results(results: Sequence[JobResult], path: Path) -> Path | None:
    """Overwrite ``path`` with one row per result; no file when empty."""
    if not results:
        log.info("No results to export")
        return None
    rows = [{k: _cell(v) for k, v in r.to_row().items()} for r in results]
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", newline="", encoding="utf-8") as f:
        _lock(f)
        w = csv.DictWriter(f, fieldnames=list(rows[0]))
        w.writeheader()
        w.writerows(rows)
        _unlock(f)
    log.info("Exported %d result(s) → %s", len(rows), path.name)
    return path


def read_export(path: Path) -> list[dict[str, str]]:
    if not path.exists():
        return []
    with open(path, "r", encoding="utf-8") as f:
        _lock(f, exclusive=False)
        rows = list(csv.DictReader(f))
        _unlock(f)
    return rows

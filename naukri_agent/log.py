"""Process-wide logging setup and the mapping from run severities to levels."""
from __future__ import annotations

import logging
import os
import sys
from datetime import datetime
from pathlib import Path

LOG_DIR: Path = Path(
    os.environ.get("NAUKRI_LOG_DIR", "")
    or Path(__file__).resolve().parent.parent / "logs"
)
_FORMAT = "%(asctime)s  %(levelname)-8s  %(name)s  %(message)s"
_DATE_FMT = "%Y-%m-%d %H:%M:%S"

# Run log severities ("success" is an INFO with a happier face in the UI).
SEVERITY_LEVELS: dict[str, int] = {
    "info": logging.INFO,
    "success": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}

# Chatty libraries that would otherwise drown the run log at DEBUG.
_NOISY = ("sqlalchemy.engine", "asyncio", "urllib3")

_configured = False


def get_logger(name: str) -> logging.Logger:
    """Named logger; the first call installs console and daily-file handlers."""
    global _configured
    if not _configured:
        _configure()
        _configured = True
    return logging.getLogger(name)


def level_for(severity: str) -> int:
    return SEVERITY_LEVELS.get(severity, logging.INFO)


def _configure() -> None:
    level = getattr(logging, os.environ.get("LOG_LEVEL", "INFO").upper(), logging.INFO)

    root = logging.getLogger()
    root.setLevel(level)
    for name in _NOISY:
        logging.getLogger(name).setLevel(logging.WARNING)

    # pytest and embedding hosts install their own handlers
    if root.handlers:
        return

    formatter = logging.Formatter(_FORMAT, datefmt=_DATE_FMT)
    console = logging.StreamHandler(sys.stdout)
    console.setLevel(level)
    console.setFormatter(formatter)
    root.addHandler(console)

    try:
        LOG_DIR.mkdir(parents=True, exist_ok=True)
        fh = logging.FileHandler(
            LOG_DIR / f"agent_{datetime.now():%Y-%m-%d}.log", encoding="utf-8"
        )
    except OSError:
        return
    fh.setLevel(logging.DEBUG)
    fh.setFormatter(formatter)
    root.addHandler(fh)

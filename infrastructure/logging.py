"""Logging initialization utilities using loguru."""

from __future__ import annotations

from pathlib import Path
import sys

from loguru import logger


def get_log_directory() -> str:
    """Get the default log directory path."""
    return str(Path.home() / ".local" / "state" / "shots-cms" / "logs")


def init_logging(log_dir: str | Path | None = None, level: str = "INFO") -> Path:
    """Initialize rotating file logging plus a stderr sink.

    Returns the directory the log files are written to.
    """
    log_path = Path(log_dir) if log_dir else Path(get_log_directory())
    log_path.mkdir(parents=True, exist_ok=True)

    logger.remove()
    logger.add(sys.stderr, level=level, backtrace=False, diagnose=False)
    logger.add(
        str(log_path / "cms_{time:YYYYMMDD}.log"),
        rotation="10 MB",
        retention="10 days",
        compression="zip",
        enqueue=True,
        backtrace=False,
        diagnose=False,
        level=level,
    )
    return log_path

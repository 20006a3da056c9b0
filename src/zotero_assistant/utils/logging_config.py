"""
Logging configuration for Zotero Assistant.

Provides centralized logging configuration with:
- Log level from LOG_LEVEL / DEBUG environment variables
- Console output on stderr (stdout carries the MCP stdio protocol)
- Optional rotating file handler with retention cleanup
- Operation and timing helpers used at operation boundaries
"""

from datetime import datetime
import logging
import logging.handlers
import os
from pathlib import Path
import sys
import time
from typing import Any

# -------------------- Configuration --------------------


LOG_DIR = Path.home() / ".cache" / "zotero-assistant" / "logs"

LOG_RETENTION_DAYS = 3

CONSOLE_FORMAT = "%(name)s %(levelname)s: %(message)s"
FILE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s"

DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


# -------------------- Utility Functions --------------------


def get_log_level() -> int:
    """
    Get the current log level from environment configuration.

    Checks LOG_LEVEL environment variable first, then DEBUG flag.

    Returns:
        Logging level constant (logging.DEBUG, logging.INFO, etc.)
    """
    level_str = os.getenv("LOG_LEVEL", "").upper()

    level_map = {
        "DEBUG": logging.DEBUG,
        "INFO": logging.INFO,
        "WARNING": logging.WARNING,
        "ERROR": logging.ERROR,
        "CRITICAL": logging.CRITICAL,
    }

    if level_str in level_map:
        return level_map[level_str]

    if os.getenv("DEBUG", "").lower() in ("true", "1", "yes"):
        return logging.DEBUG

    return logging.INFO


def file_logging_enabled() -> bool:
    """Whether ZOTERO_LOG_FILE asks for a log file."""
    return os.getenv("ZOTERO_LOG_FILE", "").lower() in ("true", "1", "yes")


def get_log_file_path() -> Path:
    """
    Get the path to today's log file.

    Creates log directory if it doesn't exist.
    """
    LOG_DIR.mkdir(parents=True, exist_ok=True)
    today = datetime.now().strftime("%Y-%m-%d")
    return LOG_DIR / f"zotero-assistant-{today}.log"


def cleanup_old_logs() -> None:
    """Remove log files older than LOG_RETENTION_DAYS."""
    if not LOG_DIR.exists():
        return

    cutoff = time.time() - (LOG_RETENTION_DAYS * 24 * 60 * 60)
    try:
        for log_file in LOG_DIR.glob("zotero-assistant-*.log"):
            if log_file.stat().st_mtime < cutoff:
                log_file.unlink()
                logging.getLogger(__name__).info(f"Removed old log file: {log_file}")
    except OSError as e:
        logging.getLogger(__name__).warning(f"Failed to cleanup old logs: {e}")


# -------------------- Handlers --------------------


def _console_handler(level: int) -> logging.Handler:
    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(CONSOLE_FORMAT))
    return handler


def _file_handler(level: int) -> logging.Handler:
    handler = logging.handlers.RotatingFileHandler(
        get_log_file_path(),
        maxBytes=10 * 1024 * 1024,  # 10 MB
        backupCount=5,
        encoding="utf-8",
    )
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(FILE_FORMAT, DATE_FORMAT))
    return handler


# -------------------- Operation Logging --------------------


def log_operation(
    logger: logging.Logger,
    operation: str,
    item_key: str,
    status: str,
    **details: Any,
) -> None:
    """
    Log individual operation with consistent format.

    Args:
        logger: Logger instance
        operation: Operation type (e.g., "save_item", "attach_pdf")
        item_key: Zotero item key, or "-" when none exists yet
        status: Operation status (success, partial, error, skipped)
        **details: Additional operation details
    """
    msg = f"[{operation.upper()}] {item_key} - {status}"

    if details:
        detail_str = ", ".join(f"{k}={v}" for k, v in details.items())
        msg = f"{msg} ({detail_str})"

    if status == "success":
        logger.info(msg)
    elif status == "error":
        logger.error(msg)
    elif status == "partial":
        logger.warning(msg)
    else:
        logger.debug(msg)


# -------------------- Performance Monitoring --------------------


class PerformanceMonitor:
    """
    Context manager for monitoring operation performance.

    Example:
        >>> with PerformanceMonitor(logger, "get_library_stats"):
        ...     ...
    """

    def __init__(
        self,
        logger: logging.Logger,
        operation_name: str,
        log_level: int = logging.DEBUG,
        **metadata: Any,
    ) -> None:
        self.logger = logger
        self.operation_name = operation_name
        self.log_level = log_level
        self.metadata = metadata
        self.start_time: datetime | None = None

    def __enter__(self) -> "PerformanceMonitor":
        self.start_time = datetime.now()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        if self.start_time is None:
            return

        elapsed = (datetime.now() - self.start_time).total_seconds()
        outcome = "failed" if exc_type else "completed"
        msg = f"{self.operation_name} {outcome} in {elapsed:.2f}s"

        if self.metadata:
            metadata_str = ", ".join(f"{k}={v}" for k, v in self.metadata.items())
            msg = f"{msg} ({metadata_str})"

        self.logger.log(self.log_level, msg)


# -------------------- Initialization --------------------


def initialize_logging() -> None:
    """
    Initialize logging system for the application.

    Sets up the root logger and performs initial cleanup.
    Should be called once at application startup.
    """
    level = get_log_level()
    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()

    root_logger.addHandler(_console_handler(level))

    if file_logging_enabled():
        root_logger.addHandler(_file_handler(level))
        cleanup_old_logs()

    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(max(level, logging.WARNING))

    logging.getLogger(__name__).info(
        f"Logging initialized. Level: {logging.getLevelName(level)}"
    )

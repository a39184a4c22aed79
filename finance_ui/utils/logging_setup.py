"""
Logging setup with categories and interaction id support.

Provides:
- 4 log categories: system, api, ui, perf
- Automatic module → category routing
- Interaction id correlation in all logs
- JSON file logging behind a queue (non-blocking writes)
- Optional colored console output

Categories:
- system: Startup, shutdown, config, service wiring, CLI
- api: HTTP calls to the Finance Manager backend, error bodies
- ui: View model lifecycle, lookups, pending edits, ribbon actions
- perf: Timing of API calls and view model loads
"""

from __future__ import annotations

import json
import logging
import logging.handlers
import sys
from datetime import datetime
from pathlib import Path
from queue import Queue
from typing import Dict, List, Optional
from zoneinfo import ZoneInfo

from .trace_context import get_interaction_id

LOGGER_ROOT = "finance_ui"

# Timezone for log timestamps (None = local time)
_log_timezone: Optional[ZoneInfo] = None

_category_loggers: Dict[str, logging.Logger] = {}
_queue_listeners: List[logging.handlers.QueueListener] = []

CATEGORIES = ["system", "api", "ui", "perf"]

CATEGORY_SUFFIXES = {
    "system": "sys",
    "api": "api",
    "ui": "ui",
    "perf": "prf",
}

# Module path → category routing, more specific prefixes first
MODULE_ROUTING: List[tuple[str, str]] = [
    ("finance_ui.infrastructure.adapters", "api"),
    ("finance_ui.infrastructure", "system"),
    ("finance_ui.utils.perf_logger", "perf"),
    ("finance_ui.viewmodels", "ui"),
    ("finance_ui.domain", "ui"),
    ("config", "system"),
    ("finance_ui", "system"),
]


def get_category_for_module(module_name: str) -> str:
    """
    Determine the log category for a given module name.

    Args:
        module_name: Full module path (e.g., "finance_ui.viewmodels.accounts").

    Returns:
        Category name (system, api, ui or perf).
    """
    for prefix, category in MODULE_ROUTING:
        if module_name.startswith(prefix):
            return category
    return "system"


def set_log_timezone(tz: Optional[str] = None) -> None:
    """Set the timezone for log timestamps; None or "local" means system time."""
    global _log_timezone
    _log_timezone = None if tz in (None, "local") else ZoneInfo(tz)


def get_current_timestamp() -> str:
    if _log_timezone is not None:
        return datetime.now(_log_timezone).isoformat()
    return datetime.now().isoformat()


class JSONFormatter(logging.Formatter):
    """
    Single-line JSON formatter.

    Fields: ts, level, cat, ia (interaction id), msg, plus ``data`` when the
    record carries an ``extra={"data": ...}`` payload and ``exception`` when
    exc_info is set.
    """

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "ts": get_current_timestamp(),
            "level": record.levelname,
            "cat": self._get_category(record.name),
            "ia": get_interaction_id(),
            "msg": record.getMessage(),
        }

        if hasattr(record, "data") and record.data:
            log_entry["data"] = record.data

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_entry, default=str)

    def _get_category(self, logger_name: str) -> str:
        parts = logger_name.split(".")
        if len(parts) >= 2 and parts[0] == LOGGER_ROOT and parts[1] in CATEGORIES:
            return parts[1]
        return "system"


class ConsoleFormatter(logging.Formatter):
    """
    Console formatter with interaction id and color support.

    Format: [LEVEL] [ia] message
    """

    COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
    }
    RESET = "\033[0m"

    def __init__(self, use_colors: bool = True):
        super().__init__()
        self.use_colors = use_colors

    def format(self, record: logging.LogRecord) -> str:
        level = record.levelname
        prefix = f"[{level:7}]"
        if self.use_colors:
            prefix = f"{self.COLORS.get(level, '')}{prefix}{self.RESET}"
        return f"{prefix} [{get_interaction_id()}] {record.getMessage()}"


def get_logger(module_name: str) -> logging.Logger:
    """
    Get a logger for the given module, routed to its category logger.

    Args:
        module_name: Module name (typically __name__).

    Returns:
        The ``finance_ui.{category}`` logger.

    Example:
        from finance_ui.utils.logging_setup import get_logger
        logger = get_logger(__name__)
        logger.info("Loading accounts")
    """
    category = get_category_for_module(module_name)
    return logging.getLogger(f"{LOGGER_ROOT}.{category}")


def setup_category_logging(
    env: str,
    log_dir: str = "./logs",
    level: str = "INFO",
    console: bool = False,
    verbose: bool = False,
    json_files: bool = True,
) -> Dict[str, logging.Logger]:
    """
    Set up one log file per category.

    Files land in ``{log_dir}/{date}/finance_ui_{env}_{suffix}_{date}.log``.
    Calling it again tears down previous handlers and listeners first.

    Args:
        env: Environment name (dev/prod/test).
        log_dir: Base directory for log files.
        level: Logging level for files.
        console: Also log to stderr.
        verbose: Force DEBUG level everywhere.
        json_files: Use JSONFormatter for files (plain text otherwise).

    Returns:
        Dict mapping category name to logger.
    """
    shutdown_logging()

    effective_level = "DEBUG" if verbose else level.upper()
    numeric_level = getattr(logging, effective_level, logging.INFO)

    date_str = datetime.now().strftime("%Y-%m-%d")
    log_path = Path(log_dir) / date_str
    log_path.mkdir(parents=True, exist_ok=True)

    for category in CATEGORIES:
        logger = logging.getLogger(f"{LOGGER_ROOT}.{category}")
        for handler in logger.handlers[:]:
            handler.close()
            logger.removeHandler(handler)
        logger.setLevel(numeric_level)
        logger.propagate = False

        filename = f"finance_ui_{env}_{CATEGORY_SUFFIXES[category]}_{date_str}.log"
        file_handler = logging.FileHandler(
            filename=str(log_path / filename),
            mode="a",
            encoding="utf-8",
        )
        if json_files:
            file_handler.setFormatter(JSONFormatter())
        else:
            file_handler.setFormatter(logging.Formatter(
                "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            ))
        file_handler.setLevel(numeric_level)

        log_queue: Queue = Queue(-1)
        logger.addHandler(logging.handlers.QueueHandler(log_queue))
        listener = logging.handlers.QueueListener(
            log_queue, file_handler, respect_handler_level=True
        )
        listener.start()
        _queue_listeners.append(listener)

        if console:
            console_handler = logging.StreamHandler(sys.stderr)
            console_handler.setFormatter(ConsoleFormatter(use_colors=sys.stderr.isatty()))
            console_handler.setLevel(logging.DEBUG if verbose else logging.WARNING)
            logger.addHandler(console_handler)

        _category_loggers[category] = logger

    return dict(_category_loggers)


def shutdown_logging() -> None:
    """Stop queue listeners (flushes pending records to disk)."""
    for listener in _queue_listeners:
        listener.stop()
    _queue_listeners.clear()

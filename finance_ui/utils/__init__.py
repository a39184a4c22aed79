"""Utility modules."""

from .logging_setup import (
    get_logger,
    setup_category_logging,
    shutdown_logging,
    set_log_timezone,
)
from .trace_context import (
    get_interaction_id,
    new_interaction,
)
from .perf_logger import (
    log_timing,
    log_timing_async,
    timed,
)
from .result import (
    Result,
    Ok,
    Err,
    try_result,
)

__all__ = [
    # Logging setup
    "get_logger",
    "setup_category_logging",
    "shutdown_logging",
    "set_log_timezone",
    # Interaction context
    "get_interaction_id",
    "new_interaction",
    # Performance logging
    "log_timing",
    "log_timing_async",
    "timed",
    # Result type
    "Result",
    "Ok",
    "Err",
    "try_result",
]

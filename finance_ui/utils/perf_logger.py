"""
Performance timing for API calls and view model loads.

Writes to the perf category logger with thresholds:
DEBUG below warn_threshold_ms, WARNING above it, ERROR above error_threshold_ms.
"""

from __future__ import annotations

import functools
import inspect
import logging
import time
from contextlib import asynccontextmanager, contextmanager
from typing import Any, AsyncGenerator, Callable, Generator, Optional

from .logging_setup import LOGGER_ROOT
from .trace_context import get_interaction_id


def get_perf_logger() -> logging.Logger:
    return logging.getLogger(f"{LOGGER_ROOT}.perf")


def _emit(operation: str, duration_ms: float, warn_threshold_ms: float,
          error_threshold_ms: float, context: dict) -> None:
    logger = get_perf_logger()
    interaction_id = get_interaction_id()
    log_data = {
        "ia": interaction_id,
        "operation": operation,
        "duration_ms": round(duration_ms, 2),
        **context,
    }
    if duration_ms >= error_threshold_ms:
        logger.error(f"[{interaction_id}] SLOW {operation}: {duration_ms:.1f}ms", extra={"data": log_data})
    elif duration_ms >= warn_threshold_ms:
        logger.warning(f"[{interaction_id}] {operation}: {duration_ms:.1f}ms (slow)", extra={"data": log_data})
    else:
        logger.debug(f"[{interaction_id}] {operation}: {duration_ms:.1f}ms", extra={"data": log_data})


@contextmanager
def log_timing(
    operation: str,
    warn_threshold_ms: float = 100.0,
    error_threshold_ms: float = 1000.0,
    extra: Optional[dict] = None,
) -> Generator[dict, None, None]:
    """
    Context manager logging the duration of a synchronous block.

    Yields:
        Dict that can be updated with additional context during execution.

    Example:
        with log_timing("build_records") as ctx:
            ctx["items"] = len(self.items)
            self.build_records()
    """
    context = extra.copy() if extra else {}
    start_time = time.perf_counter()
    try:
        yield context
    finally:
        _emit(operation, (time.perf_counter() - start_time) * 1000,
              warn_threshold_ms, error_threshold_ms, context)


@asynccontextmanager
async def log_timing_async(
    operation: str,
    warn_threshold_ms: float = 500.0,
    error_threshold_ms: float = 3000.0,
    extra: Optional[dict] = None,
) -> AsyncGenerator[dict, None]:
    """
    Async context manager logging the duration of an awaited block.

    Example:
        async with log_timing_async("GET /api/accounts") as ctx:
            resp = await self._http.get(url)
            ctx["status"] = resp.status_code
    """
    context = extra.copy() if extra else {}
    start_time = time.perf_counter()
    try:
        yield context
    finally:
        _emit(operation, (time.perf_counter() - start_time) * 1000,
              warn_threshold_ms, error_threshold_ms, context)


def timed(
    operation: Optional[str] = None,
    warn_threshold_ms: float = 500.0,
    error_threshold_ms: float = 3000.0,
) -> Callable:
    """
    Decorator timing a sync or async function.

    Example:
        @timed("contacts.load_page")
        async def load_page_async(self, reset_paging): ...
    """
    def decorator(func: Callable) -> Callable:
        op_name = operation or func.__qualname__

        if inspect.iscoroutinefunction(func):
            @functools.wraps(func)
            async def async_wrapper(*args: Any, **kwargs: Any) -> Any:
                async with log_timing_async(op_name, warn_threshold_ms, error_threshold_ms):
                    return await func(*args, **kwargs)
            return async_wrapper

        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            with log_timing(op_name, warn_threshold_ms, error_threshold_ms):
                return func(*args, **kwargs)
        return wrapper

    return decorator

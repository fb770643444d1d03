"""Operation timing for service calls."""

from __future__ import annotations

import functools
import logging
import time

logger = logging.getLogger(__name__)

SLOW_OPERATION_MS = 1000.0


def measured(operation: str):
    """Decorate an async method so slow or failing calls are logged with their duration."""

    def decorator(func):
        @functools.wraps(func)
        async def wrapper(*args, **kwargs):
            started = time.perf_counter()
            try:
                result = await func(*args, **kwargs)
            except Exception:
                logger.error(
                    "Operation failed: %s (%.2fms)",
                    operation, (time.perf_counter() - started) * 1000,
                )
                raise
            elapsed_ms = (time.perf_counter() - started) * 1000
            if elapsed_ms > SLOW_OPERATION_MS:
                logger.warning("Slow operation: %s took %.2fms", operation, elapsed_ms)
            return result

        return wrapper

    return decorator

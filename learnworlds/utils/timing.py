"""Timing helpers for request observability."""

import logging
import time
from contextlib import contextmanager
from typing import Optional


class Timer:
    """Elapsed time of a timed block."""

    def __init__(self):
        self.start_time = time.time()
        self.end_time: Optional[float] = None
        self.duration_ms: float = 0

    def stop(self) -> float:
        self.end_time = time.time()
        self.duration_ms = (self.end_time - self.start_time) * 1000
        return self.duration_ms


@contextmanager
def timed_operation(name: str, logger: Optional[logging.Logger] = None):
    """Context manager to time an operation.

    Usage:
        with timed_operation("api_request") as timer:
            response = await client.send(request)
        print(f"Took {timer.duration_ms}ms")

    Args:
        name: Operation name for logging
        logger: Optional logger instance

    Yields:
        Timer object with duration_ms attribute
    """
    timer = Timer()

    try:
        yield timer
    finally:
        timer.stop()

        if logger:
            logger.debug(
                f"Operation '{name}' completed",
                extra={"operation": name, "duration_ms": round(timer.duration_ms, 2)}
            )

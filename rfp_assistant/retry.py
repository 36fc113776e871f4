"""Bounded retry with exponential backoff for remote calls."""

import logging
import time
from typing import Callable, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


def with_retry(operation: Callable[[], T], max_attempts: int = 3,
               initial_delay: float = 1.0,
               sleep: Callable[[float], None] = time.sleep) -> T:
    """
    Call an operation, retrying on any exception with exponential backoff.

    Errors are not classified: every exception is retried the same way and
    the last one is re-raised unchanged once attempts are exhausted.

    Args:
        operation: Zero-argument callable to invoke
        max_attempts: Total number of calls allowed (>= 1)
        initial_delay: Seconds to wait before the second attempt; doubles after each failure
        sleep: Sleep function (injectable for tests)

    Returns:
        Whatever the operation returns
    """
    if max_attempts < 1:
        raise ValueError("max_attempts must be at least 1")

    delay = initial_delay
    for attempt in range(1, max_attempts + 1):
        try:
            return operation()
        except Exception as e:
            if attempt == max_attempts:
                raise
            logger.warning(
                "Operation failed, attempt %d/%d. Retrying in %.1fs... (%s)",
                attempt, max_attempts, delay, e,
            )
            sleep(delay)
            delay *= 2

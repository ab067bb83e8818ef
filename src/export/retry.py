"""Deadline-bounded retry for cloud API calls.

This module retries transient API failures with exponential backoff
until a caller-supplied retry timeout elapses.
"""

from __future__ import annotations

import time
from typing import Callable, TypeVar

from core.constants import RETRY_INITIAL_DELAY_SECONDS, RETRY_MAX_DELAY_SECONDS
from core.errors import ExportRetryTimeoutError, ExportTransientError
from core.logging_config import get_logger

_LOGGER = get_logger(__name__)

ResultT = TypeVar("ResultT")


def call_with_retry(
    operation: Callable[[], ResultT],
    timeout_seconds: float,
    description: str,
    sleep: Callable[[float], None] = time.sleep,
    clock: Callable[[], float] = time.monotonic,
) -> ResultT:
    """Run an operation, retrying transient failures until the deadline.

    Args:
        operation: Zero-argument callable performing the API call.
        timeout_seconds: Total time budget for retries.
        description: Operation label used in logs and errors.
        sleep: Sleep function, injectable for tests.
        clock: Monotonic clock, injectable for tests.

    Returns:
        The operation result.

    Raises:
        ExportRetryTimeoutError: If transient failures outlast the timeout.
        Exception: Non-transient errors propagate unchanged.
    """
    deadline = clock() + timeout_seconds
    delay = RETRY_INITIAL_DELAY_SECONDS
    attempt = 1
    while True:
        try:
            return operation()
        except ExportTransientError as error:
            remaining = deadline - clock()
            if remaining <= 0:
                raise ExportRetryTimeoutError(
                    f"{description} did not succeed within {timeout_seconds:g}s "
                    f"after {attempt} attempts: {error}. "
                    "Increase retry_timeout or retry later."
                ) from error
            wait_seconds = min(delay, remaining)
            _LOGGER.warning(
                "api_call_retrying",
                operation=description,
                attempt=attempt,
                wait_seconds=wait_seconds,
                error=str(error),
            )
            sleep(wait_seconds)
            delay = min(delay * 2, RETRY_MAX_DELAY_SECONDS)
            attempt += 1

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from ..constants import RETRY_BACKOFF_MULTIPLIER, RETRY_MAX_BACKOFF_SECONDS
from ..logging_config import log_structured_error
from .commands import CommandError
from .internal import InternalError, NetworkError, ParsingError, PersistenceError


class RetryableOperationError(Exception):
    """Exception raised to indicate an operation should be retried."""

    pass


T = TypeVar("T")


def log_error(message: str, error: Exception, context: dict | None = None) -> None:
    """Logs an error message with the associated exception details.

    The exception class decides the category used for structured logging and
    error aggregation.

    Args:
        message: A descriptive message about the error context.
        error: The exception instance to be logged.
        context: Optional additional context data for debugging.
    """
    error_type = "unknown"
    if isinstance(error, NetworkError | OSError | ConnectionError):
        error_type = "network"
    elif isinstance(error, ParsingError):
        error_type = "parsing"
    elif isinstance(error, PersistenceError):
        error_type = "persistence"
    elif isinstance(error, CommandError):
        error_type = "command"
    elif isinstance(error, InternalError):
        error_type = "internal"

    log_structured_error(
        error_type=error_type,
        message=f"{message}: {str(error)}",
        exception=error,
        context=context,
    )


def is_retryable_error(error: Exception) -> bool:
    """Check if an exception should trigger a retry."""
    return isinstance(
        error, RetryableOperationError | NetworkError | OSError | ConnectionError
    )


async def _execute_and_categorize_retryable_operation(  # type: ignore[valid-type]
    operation: Callable[[int], Awaitable[tuple[T | None, bool]]],
    attempt_count: int,
    context: str,
) -> T | None:
    try:
        result, should_retry = await operation(attempt_count)
        if not should_retry:
            return result
        raise RetryableOperationError(f"Operation indicated retry needed for {context}")
    except (ValueError, RuntimeError, OSError, NetworkError) as e:
        if is_retryable_error(e):
            raise
        log_error(
            f"Non-retryable error in {context}",
            e,
            context={"attempt": attempt_count, "operation": context},
        )
        raise InternalError(
            f"Non-retryable error in {context}. Error: {str(e)}"
        ) from e


async def handle_retryable_error(  # type: ignore[valid-type]
    operation: Callable[[int], Awaitable[tuple[T | None, bool]]],
    context: str,
    max_attempts: int = 3,
) -> T:
    """Handle retryable operations with Tenacity-based retry logic.

    Only transport-level work goes through here (establishing the IRC link).
    Command handling never retries.

    Args:
        operation: Async callable that takes attempt number and returns (result, should_retry).
        context: Descriptive context for the operation.
        max_attempts: Maximum number of attempts.

    Returns:
        The result if successful.

    Raises:
        InternalError: If retries are exhausted and operation fails.
    """
    attempt_count = 0

    def before_retry(retry_state):
        nonlocal attempt_count
        attempt_count = retry_state.attempt_number
        if attempt_count > 1:
            logging.info(f"🔁 Retrying {context} (attempt {attempt_count})")

    def after_retry(retry_state):
        if retry_state.outcome.failed:
            exception = retry_state.outcome.exception()
            log_error(
                f"Attempt failed for {context} (attempt {attempt_count})",
                exception,
                context={"retry_attempt": attempt_count, "operation": context},
            )

    async def wrapped_operation() -> T | None:
        return await _execute_and_categorize_retryable_operation(
            operation, attempt_count, context
        )

    retrying = AsyncRetrying(
        stop=stop_after_attempt(max_attempts),
        wait=wait_exponential(
            multiplier=RETRY_BACKOFF_MULTIPLIER, max=RETRY_MAX_BACKOFF_SECONDS
        ),
        retry=retry_if_exception_type(
            (RetryableOperationError, NetworkError, OSError, ConnectionError)
        ),
        before=before_retry,
        after=after_retry,
    )

    try:
        result = await retrying(wrapped_operation)
        if result is None:
            raise InternalError(f"Operation returned None for {context}")
        return result
    except Exception as e:
        if isinstance(e, InternalError):
            raise
        log_error(
            f"All retry attempts exhausted for {context}",
            e,
            context={"max_attempts": max_attempts, "operation": context},
        )
        raise InternalError(
            f"Operation failed after {max_attempts} attempts in {context}. Error: {str(e)}"
        ) from e

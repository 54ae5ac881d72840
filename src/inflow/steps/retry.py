"""
Step Retry Policy with Exponential Backoff.

Decides whether a failed step attempt is retried and how long to wait
before the next attempt.

Features:
---------
- Exponential backoff with jitter
- Retryable/permanent classification from inflow.errors
- Respects Retry-After from rate limited upstreams
- Detailed logging of retry attempts

Usage:
------
    from inflow.steps.retry import RetryConfig, run_with_retry

    config = RetryConfig(max_attempts=5, base_delay=0.5)
    result = await run_with_retry(fetch, config, name="http-request")
"""

import asyncio
import inspect
import logging
import random
import time
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable

from inflow.errors import (
    InflowError,
    PermanentError,
    RateLimitError,
    RetryableError,
    StepRetriesExhaustedError,
    is_retryable,
    wrap_exception,
)

logger = logging.getLogger(__name__)


@dataclass
class RetryConfig:
    """
    Configuration for retry behavior.

    Attributes:
        max_attempts: Maximum number of attempts (including initial)
        base_delay: Initial delay between retries (seconds)
        max_delay: Maximum delay between retries (seconds)
        exponential_base: Base for exponential backoff (delay = base_delay * exponential_base^(attempt-1))
        jitter: Add random jitter to delays (0.0 to 1.0, fraction of delay)
        retry_on: Tuple of exception types to retry on
        stop_on: Tuple of exception types to never retry on
        on_retry: Callback called before each retry (attempt, error, delay) -> None
        respect_retry_after: Honor Retry-After from RateLimitError
    """

    max_attempts: int = 3
    base_delay: float = 1.0
    max_delay: float = 60.0
    exponential_base: float = 2.0
    jitter: float = 0.1
    retry_on: tuple[type[Exception], ...] = (RetryableError,)
    stop_on: tuple[type[Exception], ...] = (PermanentError,)
    on_retry: Callable[[int, Exception, float], None] | None = None
    respect_retry_after: bool = True

    def __post_init__(self):
        """Validate configuration values."""
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if self.base_delay < 0:
            raise ValueError("base_delay must be non-negative")
        if self.max_delay < self.base_delay:
            raise ValueError("max_delay must be >= base_delay")
        if not 0 <= self.jitter <= 1:
            raise ValueError("jitter must be between 0 and 1")

    @classmethod
    def from_settings(cls, settings: Any) -> "RetryConfig":
        return cls(
            max_attempts=settings.RETRY_MAX_ATTEMPTS,
            base_delay=settings.RETRY_BASE_DELAY,
            max_delay=max(settings.RETRY_MAX_DELAY, settings.RETRY_BASE_DELAY),
        )


@dataclass
class RetryState:
    """Tracks the state of a retry operation."""

    attempt: int = 0
    total_delay: float = 0.0
    errors: list[Exception] = field(default_factory=list)
    start_time: float = field(default_factory=time.time)

    @property
    def elapsed_time(self) -> float:
        """Total elapsed time since first attempt."""
        return time.time() - self.start_time


def calculate_delay(
    attempt: int,
    config: RetryConfig,
    error: Exception | None = None
) -> float:
    """
    Calculate delay before next retry attempt.

    Args:
        attempt: Current attempt number (1-based)
        config: Retry configuration
        error: The exception that triggered the retry

    Returns:
        Delay in seconds before next attempt
    """
    if config.respect_retry_after and isinstance(error, RateLimitError):
        if error.retry_after is not None and error.retry_after > 0:
            logger.debug(f"Using Retry-After header: {error.retry_after}s")
            return min(error.retry_after, config.max_delay)

    delay = config.base_delay * (config.exponential_base ** (attempt - 1))

    if config.jitter > 0:
        jitter_range = delay * config.jitter
        delay += random.uniform(-jitter_range, jitter_range)

    delay = min(delay, config.max_delay)
    return max(delay, 0)


def should_retry(
    error: Exception,
    attempt: int,
    config: RetryConfig
) -> bool:
    """
    Determine if an error should trigger a retry.

    Args:
        error: The exception that was raised
        attempt: Current attempt number
        config: Retry configuration

    Returns:
        True if should retry, False otherwise
    """
    if attempt >= config.max_attempts:
        logger.debug(f"Max attempts ({config.max_attempts}) reached, not retrying")
        return False

    return is_retryable_for(error, config)


def is_retryable_for(error: Exception, config: RetryConfig) -> bool:
    """Classify an error under ``config`` regardless of the attempt count."""
    if isinstance(error, config.stop_on):
        logger.debug(f"Error type {type(error).__name__} in stop_on list, not retrying")
        return False

    if isinstance(error, config.retry_on) or is_retryable(error):
        return True

    logger.debug(f"Error type {type(error).__name__} not in retry_on list, not retrying")
    return False


async def run_with_retry(
    work: Callable[[], Any],
    config: RetryConfig,
    name: str = "step",
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> Any:
    """
    Run ``work`` until it succeeds, fails permanently, or runs out of attempts.

    ``work`` may be a plain or a coroutine function. Raw exceptions are
    classified with :func:`wrap_exception` first, so an unknown error is
    permanent.

    Raises:
        InflowError: The classified error of a non-retryable failure.
        StepRetriesExhaustedError: When every attempt failed with a
            retryable error.
    """
    state = RetryState()

    for attempt in range(1, config.max_attempts + 1):
        state.attempt = attempt
        try:
            logger.debug(f"Attempt {attempt}/{config.max_attempts} for step '{name}'")
            result = work()
            if inspect.isawaitable(result):
                result = await result
            return result

        except Exception as e:
            error = wrap_exception(e, context=f"Step '{name}'")
            state.errors.append(error)
            _log_error(name, attempt, config.max_attempts, error)

            if not should_retry(error, attempt, config):
                if is_retryable_for(error, config):
                    logger.error(
                        f"[{name}] All {attempt} attempts failed. "
                        f"Total time: {state.elapsed_time:.2f}s, "
                        f"Total delay: {state.total_delay:.2f}s"
                    )
                    raise StepRetriesExhaustedError(name, attempt, error) from e
                logger.error(
                    f"[{name}] Non-retryable error after {attempt} attempts: "
                    f"{type(error).__name__}: {error}"
                )
                if error is e:
                    raise
                raise error from e

            delay = calculate_delay(attempt, config, error)
            state.total_delay += delay

            if config.on_retry:
                try:
                    config.on_retry(attempt, error, delay)
                except Exception as callback_error:
                    logger.warning(f"on_retry callback failed: {callback_error}")

            logger.warning(
                f"[{name}] Retrying in {delay:.2f}s "
                f"(attempt {attempt}/{config.max_attempts}) "
                f"after {type(error).__name__}: {error}"
            )
            await sleep(delay)

    raise RuntimeError(f"Retry loop for step '{name}' ended without a result")


def _log_error(step_name: str, attempt: int, max_attempts: int, error: Exception) -> None:
    """Log error with appropriate level based on attempt number."""
    error_info = {
        "step": step_name,
        "attempt": attempt,
        "max_attempts": max_attempts,
        "error_type": type(error).__name__,
        "error_message": str(error),
    }

    if isinstance(error, InflowError):
        error_info["details"] = error.details
        if error.original_error:
            error_info["original_error"] = str(error.original_error)

    if attempt == max_attempts:
        logger.error(f"[{step_name}] Final attempt failed: {error_info}")
    else:
        logger.debug(f"[{step_name}] Attempt {attempt} failed: {error_info}")

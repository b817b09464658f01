from __future__ import annotations

import functools
import logging
import time
from collections.abc import Callable, Iterable
from typing import Any, TypeVar

from .policy import RetryCondition, RetryPolicy

T = TypeVar("T")

logger = logging.getLogger(__name__)


def _error_name(exc: Exception) -> str:
    return f"{type(exc).__module__}.{type(exc).__qualname__}"


def _log_retry(exc: Exception, remaining: int, interval_ms: int) -> None:
    if logger.isEnabledFor(logging.DEBUG):
        logger.error("Retry due to %s", _error_name(exc), exc_info=exc)
    else:
        logger.error(
            "Retry due to %s. Enable DEBUG logging to see the full traceback: %s",
            _error_name(exc),
            exc,
        )
    logger.error(
        "Will retry %d more time(s) after waiting %d milliseconds.",
        remaining,
        interval_ms,
    )


def execute(
    operation: Callable[[], T],
    policy: RetryPolicy,
    callback: Callable[[], Any] | None = None,
) -> T:
    """Run ``operation`` until it succeeds or the policy says stop.

    The last failure is re-raised unchanged. ``callback`` runs after the wait
    that follows each retryable failure; if it raises, that error propagates
    and no further attempt is made.
    """
    attempt = 0
    while True:
        attempt += 1
        try:
            return operation()
        except Exception as exc:
            if not policy.should_retry(exc) or attempt >= policy.max_attempts:
                raise

            _log_retry(exc, policy.max_attempts - attempt, policy.interval_ms)
            time.sleep(policy.interval_seconds)
            if callback is not None:
                callback()


def retry(
    operation: Callable[[], T],
    interval_ms: int,
    max_attempts: int,
    retryable_errors: Iterable[type[BaseException]] | None = None,
    *,
    callback: Callable[[], Any] | None = None,
) -> T:
    policy = RetryPolicy(
        interval_ms=interval_ms,
        max_attempts=max_attempts,
        retryable_errors=(
            frozenset(retryable_errors) if retryable_errors is not None else None
        ),
    )
    return execute(operation, policy, callback)


def retry_with_condition(
    operation: Callable[[], T],
    callback: Callable[[], Any] | None,
    interval_ms: int,
    max_attempts: int,
    is_retryable: RetryCondition,
) -> T:
    policy = RetryPolicy(
        interval_ms=interval_ms,
        max_attempts=max_attempts,
        is_retryable=is_retryable,
    )
    return execute(operation, policy, callback)


def retrying(
    interval_ms: int,
    max_attempts: int,
    retryable_errors: Iterable[type[BaseException]] | None = None,
    *,
    is_retryable: RetryCondition | None = None,
    callback: Callable[[], Any] | None = None,
) -> Callable[[Callable[..., T]], Callable[..., T]]:
    """Decorator form of :func:`execute`; each call of the wrapped function is retried."""
    policy = RetryPolicy(
        interval_ms=interval_ms,
        max_attempts=max_attempts,
        retryable_errors=(
            frozenset(retryable_errors) if retryable_errors is not None else None
        ),
        is_retryable=is_retryable,
    )

    def _decorate(func: Callable[..., T]) -> Callable[..., T]:
        @functools.wraps(func)
        def _wrapper(*args: Any, **kwargs: Any) -> T:
            return execute(lambda: func(*args, **kwargs), policy, callback)

        return _wrapper

    return _decorate

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Any

from .exceptions import NonRetryableError

RetryCondition = Callable[[BaseException], bool]


def is_instance_of(classes: Iterable[type[BaseException]], exc: BaseException) -> bool:
    for cls in classes:
        if isinstance(exc, cls):
            return True
    return False


def default_retry_condition(
    retryable_errors: Iterable[type[BaseException]] | None = None,
) -> RetryCondition:
    """Build the default retry decision.

    A failure matching ``retryable_errors`` is retried even when it is a
    ``NonRetryableError``. Anything else is retried unless it is marked
    non-retryable.
    """
    classes = frozenset(retryable_errors) if retryable_errors is not None else None

    def _condition(exc: BaseException) -> bool:
        if classes is not None and is_instance_of(classes, exc):
            return True
        return not isinstance(exc, NonRetryableError)

    return _condition


def _to_int(value: Any, field: str) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValueError(f"{field} must be an integer, got {value!r}") from None


@dataclass(frozen=True)
class RetryPolicy:
    interval_ms: int
    max_attempts: int
    retryable_errors: frozenset[type[BaseException]] | None = None
    is_retryable: RetryCondition | None = None

    def __post_init__(self) -> None:
        if self.interval_ms < 0:
            raise ValueError("interval_ms must be >= 0")
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        if self.retryable_errors is not None and self.is_retryable is not None:
            raise ValueError("Provide either retryable_errors or is_retryable, not both")
        if self.retryable_errors is not None and not isinstance(
            self.retryable_errors, frozenset
        ):
            object.__setattr__(self, "retryable_errors", frozenset(self.retryable_errors))

    @classmethod
    def from_mapping(cls, payload: dict[str, Any]) -> "RetryPolicy":
        return cls(
            interval_ms=_to_int(payload.get("interval_ms", 1000), "interval_ms"),
            max_attempts=_to_int(payload.get("max_attempts", 3), "max_attempts"),
        )

    @property
    def interval_seconds(self) -> float:
        return self.interval_ms / 1000.0

    def should_retry(self, exc: BaseException) -> bool:
        if self.is_retryable is not None:
            return bool(self.is_retryable(exc))
        return default_retry_condition(self.retryable_errors)(exc)

    def to_dict(self) -> dict[str, Any]:
        return {
            "interval_ms": self.interval_ms,
            "max_attempts": self.max_attempts,
            "retryable_errors": (
                sorted(cls.__qualname__ for cls in self.retryable_errors)
                if self.retryable_errors is not None
                else None
            ),
        }

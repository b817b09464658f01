from .exceptions import (
    CommandFailedError,
    FixedRetryError,
    NonRetryableCommandError,
    NonRetryableError,
)
from .executor import execute, retry, retry_with_condition, retrying
from .policy import RetryPolicy, default_retry_condition, is_instance_of

__all__ = [
    "CommandFailedError",
    "FixedRetryError",
    "NonRetryableCommandError",
    "NonRetryableError",
    "RetryPolicy",
    "default_retry_condition",
    "execute",
    "is_instance_of",
    "retry",
    "retry_with_condition",
    "retrying",
]

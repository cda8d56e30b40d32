"""Utility modules."""

from fivestep.utils.errors import is_quota_error, iter_exception_chain
from fivestep.utils.retry import RetryConfig, RetryExhausted, with_retry

__all__ = [
    "RetryConfig",
    "RetryExhausted",
    "is_quota_error",
    "iter_exception_chain",
    "with_retry",
]

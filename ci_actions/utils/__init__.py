"""Utility modules for shared functionality."""

from .actions import describe_failure, set_failed, set_output
from .logging import configure_logging
from .retry import retry_on_rate_limit

__all__ = [
    "configure_logging",
    "describe_failure",
    "retry_on_rate_limit",
    "set_failed",
    "set_output",
]

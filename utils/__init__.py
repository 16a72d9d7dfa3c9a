"""
Utility functions for the Seidel user operand.
"""

from .timing import (
    timed_operation,
    log_timing,
)

__all__ = [
    "timed_operation",
    "log_timing",
]

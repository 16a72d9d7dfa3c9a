"""
Timing utilities for profiling Zemax operations.

All timing logs use the [TIMING] prefix for easy grep filtering:
    grep "\\[TIMING\\]" operand.log
"""

import time
import logging
from contextlib import contextmanager
from typing import Generator


@contextmanager
def timed_operation(
    logger: logging.Logger, operation: str, level: str = "info"
) -> Generator[None, None, None]:
    """
    Context manager that logs operation timing with success/failure distinction.

    Usage:
        with timed_operation(logger, "seidel-operand"):
            # ... operation code ...

    Logs on success:
        [TIMING] seidel-operand START
        [TIMING] seidel-operand COMPLETE: 1234.5ms

    Logs on exception:
        [TIMING] seidel-operand START
        [TIMING] seidel-operand FAILED: 1234.5ms
    """
    start = time.perf_counter()
    log_fn = getattr(logger, level, logger.info)
    log_fn(f"[TIMING] {operation} START")
    success = True
    try:
        yield
    except Exception:
        success = False
        raise
    finally:
        elapsed_ms = (time.perf_counter() - start) * 1000
        status = "COMPLETE" if success else "FAILED"
        log_fn(f"[TIMING] {operation} {status}: {elapsed_ms:.1f}ms")


def log_timing(logger: logging.Logger, operation: str, elapsed_ms: float) -> None:
    """
    Log a single timing measurement.

    Logs:
        [TIMING] SeidelCoefficients.ApplyAndWaitForCompletion: 1234.5ms
    """
    logger.info(f"[TIMING] {operation}: {elapsed_ms:.1f}ms")

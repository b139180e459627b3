"""Worker sizing and batching helpers for parallel read-only git work."""

import os
import sys
from typing import Iterator, List, Optional, Sequence, TypeVar

T = TypeVar("T")


def is_free_threading_enabled() -> bool:
    """Detect if Python is running with free-threading enabled.

    Returns:
        True if running on Python 3.13+ with the GIL disabled, False otherwise
    """
    is_gil_enabled = getattr(sys, "_is_gil_enabled", None)
    if is_gil_enabled is None:
        return False
    return not is_gil_enabled()


def get_optimal_worker_count(user_specified: Optional[int] = None) -> int:
    """Calculate a worker count for I/O-bound git subprocess work.

    Args:
        user_specified: User-specified worker count, if provided

    Returns:
        Number of workers to use, always at least 1
    """
    if user_specified is not None and user_specified > 0:
        workers = user_specified
    else:
        cpu_count = os.cpu_count() or 1
        if is_free_threading_enabled():
            workers = min(64, cpu_count * 2)
        else:
            # CPU_count + 4 is the usual heuristic for I/O-bound work
            workers = min(32, cpu_count + 4)

    return max(1, workers)


def batched(items: Sequence[T], batch_size: int) -> Iterator[List[T]]:
    """Yield consecutive slices of at most batch_size items."""
    if batch_size <= 0:
        raise ValueError(f"batch_size must be positive, got {batch_size}")
    for start in range(0, len(items), batch_size):
        yield list(items[start:start + batch_size])

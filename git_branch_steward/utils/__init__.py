"""Utility functions for git-branch-steward.

This package provides utility modules:
- threading: worker sizing and batching for parallel read-only analysis
"""

from .threading import (
    is_free_threading_enabled,
    get_optimal_worker_count,
    batched,
)

__all__ = [
    "is_free_threading_enabled",
    "get_optimal_worker_count",
    "batched",
]

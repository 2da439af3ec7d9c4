"""Utility functions for fdkit package."""

from .concurrency import parallel_execute, resolve_workers

__all__ = [
    "parallel_execute",
    "resolve_workers",
]

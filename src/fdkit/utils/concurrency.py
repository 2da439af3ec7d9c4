"""Fork-join helpers for concurrent finite-difference evaluations."""

from __future__ import annotations

import contextvars
import os
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Callable, Sequence, Tuple

from fdkit.logger import fdkit_logger

__all__ = [
    "parallel_execute",
    "normalize_workers",
    "resolve_workers",
]


def _int_env(name: str) -> int | None:
    """Reads a positive integer from an environment variable, or None if unset/invalid.

    Args:
        name: Environment variable name.

    Returns:
        Positive integer value, or None.
    """
    v = os.getenv(name)
    if not v:
        return None
    try:
        i = int(v)
        return i if i > 0 else None
    except ValueError:
        return None


def _detect_hw_threads() -> int:
    """Detects the number of hardware threads, capped by relevant environment variables.

    Returns:
        Number of hardware threads (at least 1).
    """
    hints = [
        _int_env("OMP_NUM_THREADS"),
        _int_env("MKL_NUM_THREADS"),
        _int_env("OPENBLAS_NUM_THREADS"),
        _int_env("VECLIB_MAXIMUM_THREADS"),
        _int_env("NUMEXPR_NUM_THREADS"),
    ]
    env_cap = min([h for h in hints if h is not None], default=None)
    hw = os.cpu_count() or 1
    return max(1, min(hw, env_cap) if env_cap else hw)


def normalize_workers(n_workers: Any) -> int:
    """Ensures n_workers is a positive integer, defaulting to 1.

    Args:
        n_workers: Input number of workers (can be None, float, negative, etc.)

    Returns:
        A positive integer number of workers (at least 1).
    """
    try:
        n = int(n_workers)
    except (TypeError, ValueError):
        n = 1
    return 1 if n < 1 else n


def resolve_workers(concurrent: bool, workers: int | None, n_tasks: int) -> int:
    """Decides the size of the fork-join group for one evaluation.

    The fan-out width is known up front (stencil size or number of input
    dimensions), so the group never grows past ``n_tasks``.

    Args:
        concurrent: Whether concurrent evaluation was requested.
        workers: Explicit cap on the group size. If None, the detected
            number of hardware threads is used.
        n_tasks: Number of independent tasks to run.

    Returns:
        Number of threads to use. ``1`` means run serially.
    """
    if not concurrent or n_tasks <= 1:
        return 1
    cap = _detect_hw_threads() if workers is None else normalize_workers(workers)
    return max(1, min(cap, int(n_tasks)))


def parallel_execute(
    worker: Callable[..., Any],
    arg_tuples: Sequence[Tuple[Any, ...]],
    *,
    outer_workers: int = 1,
) -> list[Any]:
    """Runs ``worker(*args)`` for each tuple in ``arg_tuples``.

    Results are returned in the order of ``arg_tuples`` regardless of the
    order in which the threads finish. The first exception raised by a task
    is re-raised at the join.

    Args:
        worker: Callable invoked once per argument tuple.
        arg_tuples: Positional arguments for each call.
        outer_workers: Number of threads. ``1`` runs the calls serially in
            the calling thread.

    Returns:
        List of results, one per argument tuple.
    """
    if outer_workers > 1:
        fdkit_logger.debug(
            "Forking %d tasks over %d threads.", len(arg_tuples), outer_workers
        )
        with ThreadPoolExecutor(max_workers=outer_workers) as ex:
            futures = []
            for args in arg_tuples:
                # Each task gets its own copy of the current context
                ctx = contextvars.copy_context()
                futures.append(ex.submit(ctx.run, worker, *args))
            return [f.result() for f in futures]
    return [worker(*args) for args in arg_tuples]

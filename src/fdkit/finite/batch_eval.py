"""Batch evaluation of a scalar function at the points of a stencil."""

from __future__ import annotations

from typing import Callable, Sequence

from fdkit.utils.concurrency import parallel_execute, resolve_workers

__all__ = ["eval_points"]


def eval_points(
    func: Callable[[float], float],
    xs: Sequence[float],
    concurrent: bool = False,
    workers: int | None = None,
) -> list[float]:
    """Evaluates ``func`` at a sequence of points.

    Args:
        func: Callable taking a single float.
        xs: Points at which to evaluate ``func``.
        concurrent: If True, evaluate the points in parallel threads.
        workers: Cap on the number of threads. If None, the detected
            number of hardware threads is used.

    Returns:
        Function values in the order of ``xs``.
    """
    xs_list = [float(x) for x in xs]
    if not xs_list:
        return []

    outer_workers = resolve_workers(concurrent, workers, len(xs_list))
    vals = parallel_execute(
        worker=func,
        arg_tuples=[(x,) for x in xs_list],
        outer_workers=outer_workers,
    )
    return [float(v) for v in vals]

"""Contains functions used to construct the gradient of scalar-valued functions."""

from __future__ import annotations

from collections.abc import Callable
from functools import partial

import numpy as np
from numpy.typing import ArrayLike, NDArray

from fdkit.calculus.calculus_core import perturbed_point, require_first_order
from fdkit.finite.settings import Settings, check_settings, resolve_origin_value
from fdkit.finite.stencil import Formula, resolve_formula
from fdkit.finite.step import check_step_resolves, resolve_step
from fdkit.logger import fdkit_logger
from fdkit.utils.concurrency import parallel_execute, resolve_workers
from fdkit.utils.validate import check_callable, validate_output_vector, validate_point

__all__ = ["gradient"]


def gradient(
    dst: NDArray[np.floating] | None,
    function: Callable[[NDArray[np.float64]], float],
    x: ArrayLike,
    settings: Settings | None = None,
) -> NDArray[np.floating]:
    """Returns the gradient of a scalar-valued function.

    Args:
        dst: Output vector of length ``len(x)``, or ``None`` to allocate one.
        function: The function to be differentiated. Receives a private 1D
            float array and returns a float.
        x: The point at which the gradient is evaluated.
        settings: Optional configuration. ``origin_known`` and
            ``origin_value`` give ``function(x)``; ``concurrent`` evaluates
            the input dimensions in parallel.

    Returns:
        A 1D array representing the gradient, written into ``dst`` when one
        was given.

    Raises:
        ValueError: If the formula is unknown or not first order, the step
            is not positive, ``x`` is not 1D or ``dst`` has the wrong shape.
        TypeError: If ``function`` is not callable or ``settings`` has the
            wrong type.
    """
    check_callable(function)
    settings = check_settings(settings, Settings)
    formula = require_first_order(resolve_formula(settings.formula), "gradient")
    h = resolve_step(settings, formula)
    known_origin = resolve_origin_value(settings)
    x = validate_point(x)
    n = x.size
    validate_output_vector(dst, n)

    if dst is None:
        dst = np.empty(n, dtype=float)
    if n == 0:
        return dst

    for xj in x:
        check_step_resolves(float(xj), h, formula)

    origin = None
    if formula.uses_origin:
        if known_origin is not None:
            origin = known_origin
        else:
            origin = float(function(x.copy()))

    outer_workers = resolve_workers(settings.concurrent, settings.workers, n)
    fdkit_logger.debug(
        "gradient: n=%d, %d-point stencil, h=%g, workers=%d",
        n,
        len(formula.stencil),
        h,
        outer_workers,
    )

    worker = partial(
        _grad_component,
        function=function,
        x=x,
        formula=formula,
        step=h,
        origin=origin,
    )
    vals = parallel_execute(
        worker,
        arg_tuples=[(j,) for j in range(n)],
        outer_workers=outer_workers,
    )
    dst[:] = vals
    return dst


def _grad_component(
    j: int,
    function: Callable[[NDArray[np.float64]], float],
    x: NDArray[np.float64],
    formula: Formula,
    step: float,
    origin: float | None,
) -> float:
    """Returns one entry of the gradient for a scalar-valued function.

    Args:
        j: The index of the coordinate being varied.
        function: A function that returns a single value.
        x: The point where the derivative is evaluated.
        formula: First-derivative formula.
        step: Step size h.
        origin: ``function(x)``, or None if the formula does not use it.

    Returns:
        The partial derivative with respect to ``x[j]``.
    """
    acc = 0.0
    for p in formula.stencil:
        if p.loc == 0:
            fi = origin
        else:
            fi = float(function(perturbed_point(x, j, p.loc * step)))
        acc += p.coeff * fi
    return acc / step

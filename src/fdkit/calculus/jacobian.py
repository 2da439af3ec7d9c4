"""Contains functions used to construct the Jacobian matrix."""

from __future__ import annotations

from collections.abc import Callable
from functools import partial

import numpy as np
from numpy.typing import ArrayLike, NDArray

from fdkit.calculus.calculus_core import perturbed_point, require_first_order
from fdkit.finite.settings import JacobianSettings, check_settings
from fdkit.finite.stencil import Formula, resolve_formula
from fdkit.finite.step import check_step_resolves, resolve_step
from fdkit.logger import fdkit_logger
from fdkit.utils.concurrency import parallel_execute, resolve_workers
from fdkit.utils.validate import (
    check_callable,
    validate_output_dimension,
    validate_output_matrix,
    validate_point,
)

__all__ = ["jacobian"]


def jacobian(
    dst: NDArray[np.floating] | None,
    function: Callable[[NDArray[np.float64], NDArray[np.float64]], None],
    m: int,
    x: ArrayLike,
    settings: JacobianSettings | None = None,
) -> NDArray[np.floating]:
    """Computes the Jacobian of a vector-valued function.

    Column ``j`` holds the derivative of every output with respect to
    ``x[j]``. All configuration is checked before ``function`` is called
    and before ``dst`` is written to.

    Args:
        dst: Output matrix of shape ``(m, len(x))``, or ``None`` to
            allocate one.
        function: Called as ``function(y, x)``; must fill the length-``m``
            buffer ``y`` with the outputs at ``x``. It receives private
            copies, so it may not keep references to them.
        m: Output dimension.
        x: 1D evaluation point.
        settings: Optional configuration. ``None`` uses the central formula
            with its default step, evaluated serially.

    Returns:
        The Jacobian, written into ``dst`` when one was given.

    Raises:
        ValueError: If the formula is unknown or not first order, the step
            is not positive, ``x`` is not 1D, or ``dst`` or
            ``settings.origin_value`` have the wrong shape.
        TypeError: If ``function`` is not callable or ``settings`` has the
            wrong type.
    """
    check_callable(function)
    settings = check_settings(settings, JacobianSettings)
    formula = require_first_order(resolve_formula(settings.formula), "jacobian")
    h = resolve_step(settings, formula)
    m = validate_output_dimension(m)
    x = validate_point(x)
    n = x.size
    validate_output_matrix(dst, m, n)

    origin = None
    if settings.origin_value is not None:
        origin = np.array(settings.origin_value, dtype=float)
        if origin.shape != (m,):
            raise ValueError(
                f"mismatched origin value: expected shape ({m},), got {origin.shape}."
            )

    if dst is None:
        dst = np.empty((m, n), dtype=float)
    if n == 0:
        return dst

    for xj in x:
        check_step_resolves(float(xj), h, formula)

    if formula.uses_origin and origin is None:
        origin = np.zeros(m, dtype=float)
        function(origin, x.copy())
    if origin is not None:
        origin.flags.writeable = False

    outer_workers = resolve_workers(settings.concurrent, settings.workers, n)
    fdkit_logger.debug(
        "jacobian: %dx%d, %d-point stencil, h=%g, workers=%d",
        m,
        n,
        len(formula.stencil),
        h,
        outer_workers,
    )

    worker = partial(
        _fill_column,
        dst=dst,
        function=function,
        x=x,
        m=m,
        formula=formula,
        step=h,
        origin=origin,
    )
    parallel_execute(
        worker,
        arg_tuples=[(j,) for j in range(n)],
        outer_workers=outer_workers,
    )
    return dst


def _fill_column(
    j: int,
    dst: NDArray[np.floating],
    function: Callable[[NDArray[np.float64], NDArray[np.float64]], None],
    x: NDArray[np.float64],
    m: int,
    formula: Formula,
    step: float,
    origin: NDArray[np.float64] | None,
) -> None:
    """Accumulates column ``j`` in a private buffer and writes it to ``dst``.

    The column is the only part of ``dst`` this task touches, so columns
    can be filled from different threads without a lock.
    """
    col = np.zeros(m, dtype=float)
    for p in formula.stencil:
        if p.loc == 0:
            y = origin
        else:
            y = np.zeros(m, dtype=float)
            function(y, perturbed_point(x, j, p.loc * step))
        col += p.coeff * y
    dst[:, j] = col / step

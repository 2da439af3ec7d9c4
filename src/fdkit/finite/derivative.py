"""Provides the scalar finite-difference derivative.

The user supplies the function to differentiate, the point at which the
derivative is evaluated and, optionally, a :class:`~fdkit.finite.settings.Settings`.

Examples:
--------
First derivative with the default (central) formula:

>>> import math
>>> from fdkit.finite.derivative import derivative
>>> round(derivative(math.sin, 0.0), 8)
1.0

Second derivative, concurrent evaluation, and a known value at ``x0``:

>>> from fdkit.finite.settings import Settings
>>> f = lambda x: math.cos(x) ** 3
>>> d2 = derivative(f, 0.0, Settings(
...     formula="central2nd",
...     concurrent=True,
...     origin_known=True,
...     origin_value=f(0.0),
... ))
>>> abs(d2 + 3.0) < 1e-6
True
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import replace
from typing import Any

from fdkit.finite.batch_eval import eval_points
from fdkit.finite.settings import Settings, check_settings, resolve_origin_value
from fdkit.finite.stencil import resolve_formula
from fdkit.finite.step import check_step_resolves, resolve_step
from fdkit.logger import fdkit_logger
from fdkit.utils.validate import check_callable

__all__ = ["derivative", "FiniteDifferenceDerivative"]


def derivative(
    function: Callable[[float], float],
    x0: float,
    settings: Settings | None = None,
) -> float:
    """Estimates the derivative of ``function`` at ``x0``.

    Settings are validated before the function is evaluated for the first
    time. Function values are combined in the stencil's declared order, so
    concurrent and serial evaluation give bit-identical results.

    Args:
        function: Scalar function of one float. Assumed deterministic;
            any exception it raises propagates unchanged.
        x0: Point at which the derivative is evaluated.
        settings: Optional configuration. ``None`` uses the central
            formula with its default step.

    Returns:
        The estimated first or second derivative, depending on the formula.

    Raises:
        ValueError: If the formula is unknown or invalid, or the step is
            not positive.
        TypeError: If ``function`` is not callable or ``settings`` has the
            wrong type.
    """
    check_callable(function)
    settings = check_settings(settings, Settings)
    formula = resolve_formula(settings.formula)
    h = resolve_step(settings, formula)
    origin_value = resolve_origin_value(settings)
    x0 = float(x0)
    check_step_resolves(x0, h, formula)

    fdkit_logger.debug(
        "derivative: order=%d, %d-point stencil, h=%g, concurrent=%s",
        formula.derivative,
        len(formula.stencil),
        h,
        settings.concurrent,
    )

    reuse_origin = origin_value is not None
    todo = [
        i for i, p in enumerate(formula.stencil)
        if not (reuse_origin and p.loc == 0)
    ]
    values = eval_points(
        function,
        [x0 + formula.stencil[i].loc * h for i in todo],
        concurrent=settings.concurrent,
        workers=settings.workers,
    )
    fvals = dict(zip(todo, values))

    deriv = 0.0
    for i, p in enumerate(formula.stencil):
        fi = fvals[i] if i in fvals else origin_value
        deriv += p.coeff * fi

    if formula.derivative == 1:
        return deriv / h
    return deriv / (h * h)


class FiniteDifferenceDerivative:
    """Computes fixed-step finite-difference derivatives of a scalar function.

    Attributes:
        function: The function to differentiate. Must accept a single
            float and return a float.
        x0: The point at which the derivative is evaluated.

    Examples:
    ---------
    >>> import math
    >>> d = FiniteDifferenceDerivative(function=math.exp, x0=0.0)
    >>> abs(d.differentiate(formula="forward", step=1e-6) - 1.0) < 1e-5
    True
    """

    def __init__(
        self,
        function: Callable[[float], float],
        x0: float,
    ) -> None:
        """Initialises the class based on function and central value.

        Arguments:
            function: The function to differentiate.
            x0: The point at which the derivative is evaluated.
        """
        self.function = function
        self.x0 = x0

    def differentiate(
        self,
        settings: Settings | None = None,
        **overrides: Any,
    ) -> float:
        """Computes the derivative at ``x0``.

        Args:
            settings: Base configuration. Defaults to :class:`Settings`.
            **overrides: Field values replacing those of ``settings``,
                e.g. ``formula="backward"`` or ``step=1e-4``.

        Returns:
            The estimated derivative.

        Raises:
            TypeError: If an override names a field that does not exist.
        """
        settings = check_settings(settings, Settings)
        if overrides:
            settings = replace(settings, **overrides)
        return derivative(self.function, self.x0, settings)

"""Step-size policy for the finite-difference evaluators.

The step is absolute: it is added to the evaluation point through the
stencil offsets and never rescaled by ``|x0|`` or by the size of the
function values. At large evaluation points a small step can vanish in
floating point; :func:`check_step_resolves` reports this through the
package logger instead of silently changing h.
"""

from __future__ import annotations

from typing import Any

import numpy as np

from fdkit.finite.stencil import Formula, resolve_formula
from fdkit.logger import fdkit_logger

__all__ = ["resolve_step", "check_step_resolves"]


def resolve_step(settings: Any, formula: Formula | None = None) -> float:
    """Returns the step size to use for one evaluation.

    Args:
        settings: A settings object with a ``step`` attribute.
        formula: The already resolved formula, whose default step is used
            when ``settings.step`` is ``None``. If None, it is resolved from
            ``settings.formula``.

    Returns:
        The step size h.

    Raises:
        ValueError: If an explicit step is zero, negative, not finite or
            a bool.
    """
    step = settings.step
    if isinstance(step, bool):
        raise ValueError(f"step must be a positive number; got {step!r}.")
    if step is None:
        if formula is None:
            formula = resolve_formula(settings.formula)
        return float(formula.step)
    try:
        h = float(step)
    except (TypeError, ValueError):
        raise ValueError(f"step must be a positive number; got {step!r}.") from None
    if not np.isfinite(h) or h <= 0:
        raise ValueError(f"step must be positive; got {step!r}.")
    return h


def check_step_resolves(x0: float, step: float, formula: Formula) -> bool:
    """Checks that every non-zero stencil offset moves ``x0``.

    Args:
        x0: Evaluation point (one coordinate).
        step: Step size h.
        formula: The formula in use.

    Returns:
        False if some perturbed point rounds back to ``x0``.
    """
    for p in formula.stencil:
        if p.loc != 0 and x0 + p.loc * step == x0:
            fdkit_logger.warning(
                "Step %g is below the floating-point resolution at x=%g; "
                "the finite difference will be meaningless. Pass a larger step.",
                step,
                x0,
            )
            return False
    return True

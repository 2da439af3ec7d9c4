"""Core utilities shared by the gradient and Jacobian builders.

Both builders apply one first-derivative stencil independently along
each input dimension, holding the other coordinates fixed.
"""

from __future__ import annotations

import numpy as np
from numpy.typing import NDArray

from fdkit.finite.stencil import Formula

__all__ = [
    "require_first_order",
    "perturbed_point",
]


def require_first_order(formula: Formula, caller: str) -> Formula:
    """Rejects second-derivative formulas for multivariate builders.

    Raises:
        ValueError: If ``formula`` does not approximate a first derivative.
    """
    if formula.derivative != 1:
        raise ValueError(
            f"{caller} requires a first-derivative formula; "
            f"got a formula of derivative order {formula.derivative}."
        )
    return formula


def perturbed_point(
    x: NDArray[np.float64],
    j: int,
    delta: float,
) -> NDArray[np.float64]:
    """Returns a private copy of ``x`` with ``x[j]`` shifted by ``delta``."""
    xp = x.copy()
    xp[j] += delta
    return xp

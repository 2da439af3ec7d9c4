"""Stencil definitions for the supported finite-difference formulas.

Each formula is a fixed set of points ``(loc, coeff)`` around the
evaluation point ``x0``. The derivative estimate is

    sum(coeff * f(x0 + loc * h)) / h**derivative

The registry is built once at import time and never mutated.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, NamedTuple

import numpy as np
from numpy.typing import NDArray

from fdkit.logger import fdkit_logger

__all__ = [
    "Point",
    "Formula",
    "FormulaName",
    "FORWARD",
    "BACKWARD",
    "CENTRAL",
    "CENTRAL_2ND",
    "lookup",
    "resolve_formula",
    "validate_formula",
    "truncation_order_from_coeffs",
]


class Point(NamedTuple):
    """A single stencil point: offset as a multiple of h and its weight."""

    loc: float
    coeff: float


class FormulaName(Enum):
    """Identifiers of the built-in finite-difference formulas."""

    FORWARD = "forward"
    BACKWARD = "backward"
    CENTRAL = "central"
    CENTRAL_2ND = "central2nd"


def truncation_order_from_coeffs(
    offsets: NDArray[np.float64],
    coeffs: NDArray[np.float64],
    deriv_order: int,
    tol: float = 1e-12,
) -> int:
    """Computes the truncation order from the coefficients and offsets, for some numerical tolerance.

    Args:
        offsets: Array of offsets for the finite difference stencil.
        coeffs: Array of finite difference coefficients (unscaled by h).
        deriv_order: The requested derivative order.
        tol: Numerical tolerance used to determine the truncation order.

    Returns:
        The truncation order for the given numerical tolerance.
    """
    offsets = np.asarray(offsets, dtype=float)
    coeffs = np.asarray(coeffs, dtype=float)
    m = deriv_order
    max_r = 40

    for r in range(m + 1, max_r + 1):
        moment = float(np.dot(coeffs, offsets**r))
        if abs(moment) > tol:
            return r - m
    raise RuntimeError("Could not detect truncation order.")


@dataclass(frozen=True)
class Formula:
    """A finite-difference stencil.

    Attributes:
        stencil: Points in declaration order. The weighted sum is always
            accumulated in this order.
        derivative: Order of the derivative the formula approximates (1 or 2).
        step: Default step size used when the caller does not give one.
    """

    stencil: tuple[Point, ...]
    derivative: int
    step: float

    @property
    def uses_origin(self) -> bool:
        """True if the stencil evaluates the function at ``x0`` itself."""
        return any(p.loc == 0 for p in self.stencil)

    @property
    def truncation_order(self) -> int:
        """Leading power of h in the truncation error."""
        locs = np.array([p.loc for p in self.stencil], dtype=float)
        coeffs = np.array([p.coeff for p in self.stencil], dtype=float)
        return truncation_order_from_coeffs(locs, coeffs, self.derivative)


def _formula(points, derivative: int, step: float) -> Formula:
    return Formula(
        stencil=tuple(Point(float(loc), float(c)) for loc, c in points),
        derivative=derivative,
        step=step,
    )


# Default steps balance truncation and cancellation error: near sqrt(eps)
# for the one-sided formulas, near eps**(1/3) for the symmetric ones. The
# optimal step grows with the truncation order, so the second-order central
# default is larger than the first-order one-sided default.
FORWARD = _formula([(0, -1), (1, 1)], derivative=1, step=2e-8)
BACKWARD = _formula([(-1, -1), (0, 1)], derivative=1, step=2e-8)
CENTRAL = _formula([(-1, -0.5), (1, 0.5)], derivative=1, step=6e-6)
CENTRAL_2ND = _formula([(-1, 1), (0, -2), (1, 1)], derivative=2, step=1e-4)

_REGISTRY: dict[FormulaName, Formula] = {
    FormulaName.FORWARD: FORWARD,
    FormulaName.BACKWARD: BACKWARD,
    FormulaName.CENTRAL: CENTRAL,
    FormulaName.CENTRAL_2ND: CENTRAL_2ND,
}

_ALIASES: dict[str, FormulaName] = {
    "forward": FormulaName.FORWARD,
    "fwd": FormulaName.FORWARD,
    "backward": FormulaName.BACKWARD,
    "bwd": FormulaName.BACKWARD,
    "central": FormulaName.CENTRAL,
    "centered": FormulaName.CENTRAL,
    "central2nd": FormulaName.CENTRAL_2ND,
    "second": FormulaName.CENTRAL_2ND,
}


def _norm(s: str) -> str:
    """Normalize a formula string for robust matching (case/spacing/punct insensitive)."""
    return re.sub(r"[^a-z0-9]+", "", s.lower())


def lookup(name: FormulaName) -> Formula:
    """Returns the built-in formula registered under ``name``."""
    return _REGISTRY[name]


def _coerce_stencil(stencil: Any) -> tuple[Point, ...]:
    """Returns ``stencil`` as a tuple of :class:`Point`.

    Plain ``(loc, coeff)`` pairs are accepted and converted.
    """
    try:
        items = tuple(stencil)
    except TypeError:
        raise ValueError(
            f"bad formula: stencil must be a sequence of (loc, coeff) pairs; "
            f"got {type(stencil).__name__}."
        ) from None
    points = []
    for item in items:
        if isinstance(item, Point):
            points.append(item)
            continue
        try:
            loc, coeff = item
            points.append(Point(float(loc), float(coeff)))
        except (TypeError, ValueError):
            raise ValueError(
                f"bad formula: stencil point must be a (loc, coeff) pair; got {item!r}."
            ) from None
    return tuple(points)


def validate_formula(formula: Formula) -> Formula:
    """Validates a custom formula.

    A usable formula has a non-empty stencil, approximates a first or second
    derivative, carries a positive default step, and its weights satisfy the
    Taylor moment conditions up to the derivative order (in particular they
    sum to zero, so constant functions differentiate to zero).

    Args:
        formula: Formula to check. Stencil entries may be :class:`Point`
            instances or plain ``(loc, coeff)`` pairs.

    Returns:
        ``formula`` itself when its stencil is already made of points,
        otherwise a copy whose stencil has been converted to points.

    Raises:
        ValueError: If any of the conditions above does not hold.
    """
    stencil = _coerce_stencil(formula.stencil)
    if not stencil:
        raise ValueError("bad formula: empty stencil.")
    if isinstance(formula.derivative, bool) or formula.derivative not in (1, 2):
        raise ValueError(
            f"bad formula: derivative order must be 1 or 2; got {formula.derivative}."
        )
    if not (np.isfinite(formula.step) and formula.step > 0):
        raise ValueError(
            f"bad formula: default step must be positive; got {formula.step}."
        )

    locs = np.array([p.loc for p in stencil], dtype=float)
    coeffs = np.array([p.coeff for p in stencil], dtype=float)
    scale = max(1.0, float(np.max(np.abs(coeffs))))
    for k in range(formula.derivative + 1):
        moment = float(np.dot(coeffs, locs**k)) / math.factorial(k)
        target = 1.0 if k == formula.derivative else 0.0
        if abs(moment - target) > 1e-12 * scale:
            raise ValueError(
                f"bad formula: stencil does not approximate a derivative of "
                f"order {formula.derivative} (moment {k} is {moment})."
            )

    fdkit_logger.debug(
        "custom formula: %d points, derivative order %d, truncation order %d",
        len(stencil),
        formula.derivative,
        truncation_order_from_coeffs(locs, coeffs, formula.derivative, tol=1e-12 * scale),
    )
    if all(a is b for a, b in zip(stencil, formula.stencil)) and isinstance(
        formula.stencil, tuple
    ):
        return formula
    return replace(formula, stencil=stencil)


def resolve_formula(formula: Any) -> Formula:
    """Maps a user-facing formula choice to a :class:`Formula`.

    Args:
        formula: ``None`` (central), a :class:`FormulaName`, a name or alias
            such as ``"forward"`` or ``"central-2nd"``, or a custom
            :class:`Formula`.

    Returns:
        The resolved formula.

    Raises:
        ValueError: If the identifier is unknown or a custom formula is invalid.
    """
    if formula is None:
        return CENTRAL
    if isinstance(formula, Formula):
        return validate_formula(formula)
    if isinstance(formula, FormulaName):
        return lookup(formula)
    if isinstance(formula, str):
        try:
            return lookup(_ALIASES[_norm(formula)])
        except KeyError:
            opts = ", ".join(n.value for n in FormulaName)
            raise ValueError(
                f"Unknown finite-difference formula '{formula}'. Choose one of {{{opts}}}."
            ) from None
    raise ValueError(f"Unknown finite-difference formula {formula!r}.")

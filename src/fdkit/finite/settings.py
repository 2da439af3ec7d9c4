"""Per-call configuration for the finite-difference evaluators.

Settings are frozen: they are built by the caller for one call (or reused
across calls) and only read during evaluation.

``step`` is the only field with an "unset vs explicit zero" ambiguity.
``None`` means unset and selects the formula default; any explicit
value must be positive, so ``0.0`` is rejected rather than treated as unset.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from numpy.typing import ArrayLike

__all__ = ["Settings", "JacobianSettings", "check_settings", "resolve_origin_value"]


@dataclass(frozen=True)
class Settings:
    """Configuration of a scalar derivative or a gradient.

    Attributes:
        formula: A :class:`~fdkit.finite.stencil.FormulaName`, a formula
            name or alias, a custom :class:`~fdkit.finite.stencil.Formula`,
            or ``None`` for the central formula.
        step: Step size h. ``None`` uses the formula default.
        concurrent: Evaluate the stencil points (or, for a gradient, the
            input dimensions) in parallel threads.
        origin_known: Whether ``origin_value`` holds ``f(x0)``.
        origin_value: Function value at the evaluation point. Only read
            when ``origin_known`` is True.
        workers: Upper bound on the number of threads used when
            ``concurrent`` is set. ``None`` uses the detected number of
            hardware threads.
    """

    formula: Any = None
    step: float | None = None
    concurrent: bool = False
    origin_known: bool = False
    origin_value: float = 0.0
    workers: int | None = None


@dataclass(frozen=True)
class JacobianSettings:
    """Configuration of a Jacobian, applied uniformly to every entry.

    Attributes:
        formula: As for :class:`Settings`; must be a first-derivative formula.
        step: Step size h. ``None`` uses the formula default.
        concurrent: Evaluate the input dimensions in parallel threads.
        origin_value: Optional precomputed ``f(x)`` vector. When ``None`` and
            the formula uses the origin, it is computed once and shared by
            every column.
        workers: Upper bound on the number of threads used when
            ``concurrent`` is set.
    """

    formula: Any = None
    step: float | None = None
    concurrent: bool = False
    origin_value: ArrayLike | None = None
    workers: int | None = None


def check_settings(settings: Any, cls: type) -> Any:
    """Returns ``settings`` or a default instance of ``cls``.

    Raises:
        TypeError: If ``settings`` is neither ``None`` nor an instance of ``cls``.
    """
    if settings is None:
        return cls()
    if not isinstance(settings, cls):
        raise TypeError(
            f"settings must be a {cls.__name__} or None; got {type(settings).__name__}."
        )
    return settings


def resolve_origin_value(settings: Settings) -> float | None:
    """Returns the known function value at the evaluation point, if any.

    Args:
        settings: Scalar settings.

    Returns:
        ``settings.origin_value`` as a float when ``origin_known`` is set,
        otherwise None.

    Raises:
        ValueError: If ``origin_known`` is set and ``origin_value`` is not a
            real number.
    """
    if not settings.origin_known:
        return None
    value = settings.origin_value
    if isinstance(value, bool):
        raise ValueError(f"origin_value must be a real number; got {value!r}.")
    try:
        return float(value)
    except (TypeError, ValueError):
        raise ValueError(
            f"origin_value must be a real number; got {value!r}."
        ) from None

"""Validation utilities for fdkit."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import numpy as np
from numpy.typing import ArrayLike, NDArray

__all__ = [
    "check_callable",
    "validate_point",
    "validate_output_dimension",
    "validate_output_vector",
    "validate_output_matrix",
]


def check_callable(function: Any, name: str = "function") -> Callable:
    """Raises ``TypeError`` unless ``function`` is callable."""
    if not callable(function):
        raise TypeError(f"{name} must be callable; got {type(function).__name__}.")
    return function


def validate_point(x: ArrayLike) -> NDArray[np.float64]:
    """Converts an evaluation point to a private 1D float array.

    Args:
        x: Array-like evaluation point.

    Returns:
        A fresh 1D float64 copy of ``x``.

    Raises:
        ValueError: If ``x`` is not one-dimensional.
    """
    arr = np.array(x, dtype=float)
    if arr.ndim != 1:
        raise ValueError(f"x must be 1D; got shape {arr.shape}.")
    return arr


def validate_output_dimension(m: Any) -> int:
    """Checks that the output dimension is a non-negative integer."""
    if isinstance(m, bool) or not isinstance(m, (int, np.integer)):
        raise ValueError(f"output dimension must be an integer; got {m!r}.")
    if m < 0:
        raise ValueError(f"output dimension must be non-negative; got {m}.")
    return int(m)


def validate_output_vector(dst: Any, n: int) -> NDArray[np.floating] | None:
    """Checks a caller-supplied gradient container without touching its contents.

    Args:
        dst: ``None`` or a NumPy array.
        n: Required length.

    Returns:
        ``dst`` unchanged.

    Raises:
        ValueError: If ``dst`` is not a floating-point 1D array of length ``n``.
    """
    if dst is None:
        return None
    if not isinstance(dst, np.ndarray):
        raise ValueError(
            f"dst must be a numpy array or None; got {type(dst).__name__}."
        )
    if dst.shape != (n,):
        raise ValueError(
            f"mismatched output vector: expected shape ({n},), got {dst.shape}."
        )
    _check_float_dtype(dst)
    return dst


def validate_output_matrix(dst: Any, m: int, n: int) -> NDArray[np.floating] | None:
    """Checks a caller-supplied Jacobian container without touching its contents.

    Args:
        dst: ``None`` or a NumPy array.
        m: Required number of rows (output dimension).
        n: Required number of columns (input dimension).

    Returns:
        ``dst`` unchanged.

    Raises:
        ValueError: If ``dst`` is not a floating-point 2D array of shape
            ``(m, n)``.
    """
    if dst is None:
        return None
    if not isinstance(dst, np.ndarray):
        raise ValueError(
            f"dst must be a numpy array or None; got {type(dst).__name__}."
        )
    if dst.shape != (m, n):
        raise ValueError(
            f"mismatched output matrix: expected shape ({m}, {n}), got {dst.shape}."
        )
    _check_float_dtype(dst)
    return dst


def _check_float_dtype(dst: NDArray) -> None:
    """Rejects containers that would truncate derivative values on write."""
    if not np.issubdtype(dst.dtype, np.floating):
        raise ValueError(
            f"dst must have a floating-point dtype; got {dst.dtype}."
        )

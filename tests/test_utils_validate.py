"""Tests for fdkit.utils.validate."""

from __future__ import annotations

import numpy as np
import pytest

from fdkit.utils.validate import (
    check_callable,
    validate_output_dimension,
    validate_output_matrix,
    validate_output_vector,
    validate_point,
)


def test_check_callable():
    """Callables pass through; anything else raises TypeError."""
    assert check_callable(len) is len
    with pytest.raises(TypeError, match="function must be callable"):
        check_callable(3)


def test_validate_point_returns_private_copy():
    """The returned array is a float copy of the input."""
    x = np.array([1, 2, 3])
    out = validate_point(x)
    assert out.dtype == np.float64
    out[0] = 99.0
    assert x[0] == 1


@pytest.mark.parametrize("bad", [1.0, [[1.0, 2.0]]])
def test_validate_point_rejects_non_1d(bad):
    """Scalars and matrices are not evaluation points."""
    with pytest.raises(ValueError):
        validate_point(bad)


def test_validate_output_dimension():
    """Non-negative integers are accepted, others rejected."""
    assert validate_output_dimension(0) == 0
    assert validate_output_dimension(np.int64(4)) == 4
    for bad in (-1, 1.5, "3", False):
        with pytest.raises(ValueError):
            validate_output_dimension(bad)


def test_validate_output_vector():
    """None passes; arrays must have shape (n,)."""
    assert validate_output_vector(None, 3) is None
    v = np.zeros(3)
    assert validate_output_vector(v, 3) is v
    with pytest.raises(ValueError, match="mismatched output vector"):
        validate_output_vector(np.zeros((3, 1)), 3)
    with pytest.raises(ValueError):
        validate_output_vector([0.0, 0.0, 0.0], 3)


def test_validate_output_matrix():
    """None passes; arrays must have shape (m, n)."""
    assert validate_output_matrix(None, 2, 3) is None
    a = np.zeros((2, 3))
    assert validate_output_matrix(a, 2, 3) is a
    with pytest.raises(ValueError, match="mismatched output matrix"):
        validate_output_matrix(np.zeros((3, 2)), 2, 3)
    with pytest.raises(ValueError):
        validate_output_matrix(np.zeros(6), 2, 3)


@pytest.mark.parametrize("dtype", [int, np.int32, bool, complex])
def test_validate_output_containers_reject_non_float_dtype(dtype):
    """Containers of the right shape must still hold real floating-point values."""
    with pytest.raises(ValueError, match="floating-point"):
        validate_output_vector(np.zeros(3, dtype=dtype), 3)
    with pytest.raises(ValueError, match="floating-point"):
        validate_output_matrix(np.zeros((2, 3), dtype=dtype), 2, 3)
    v = np.zeros(3, dtype=np.float32)
    assert validate_output_vector(v, 3) is v

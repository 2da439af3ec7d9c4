"""Unit tests for fdkit.calculus.gradient."""

from __future__ import annotations

import math

import numpy as np
import pytest

from fdkit.calculus.gradient import gradient
from fdkit.finite.settings import JacobianSettings, Settings


def f_mixed(x: np.ndarray) -> float:
    """Returns x0^2 + 3 x0 x1 + sin(x2)."""
    return x[0] ** 2 + 3.0 * x[0] * x[1] + math.sin(x[2])


def grad_mixed(x) -> np.ndarray:
    """Analytic gradient of f_mixed."""
    return np.array([2.0 * x[0] + 3.0 * x[1], 3.0 * x[0], math.cos(x[2])])


X0 = np.array([1.0, 2.0, 0.5])


def test_gradient_default_central():
    """Tests the gradient with default settings."""
    np.testing.assert_allclose(gradient(None, f_mixed, X0), grad_mixed(X0), atol=1e-8)


@pytest.mark.parametrize("formula", ["forward", "backward"])
def test_gradient_one_sided(formula):
    """Tests one-sided formulas with an explicit step."""
    g = gradient(None, f_mixed, X0, Settings(formula=formula, step=1e-6))
    np.testing.assert_allclose(g, grad_mixed(X0), atol=1e-4)


def test_gradient_quadratic_form():
    """Tests the gradient of x^T A x against (A + A^T) x."""
    rng = np.random.default_rng(42)
    a = rng.normal(size=(5, 5))
    x = rng.normal(size=5)
    g = gradient(None, lambda v: float(v @ a @ v), x, Settings(step=1e-4))
    np.testing.assert_allclose(g, (a + a.T) @ x, atol=1e-8)


def test_gradient_writes_into_dst():
    """Tests that a correctly shaped vector is filled and returned."""
    dst = np.full(3, np.nan)
    out = gradient(dst, f_mixed, X0)
    assert out is dst
    assert np.isfinite(dst).all()


def test_gradient_mismatched_dst(counting):
    """Tests that a wrong-length vector is rejected without writes or calls."""
    dst = np.array([7.0, 8.0])
    f = counting(f_mixed)
    with pytest.raises(ValueError):
        gradient(dst, f, X0)
    np.testing.assert_array_equal(dst, [7.0, 8.0])
    assert f.calls == 0


def test_gradient_empty_point():
    """Tests that an empty point yields an empty gradient."""
    g = gradient(None, f_mixed, [])
    assert g.shape == (0,)


def test_gradient_rejects_second_order():
    """Tests that the second-derivative formula is rejected."""
    with pytest.raises(ValueError):
        gradient(None, f_mixed, X0, Settings(formula="central2nd"))


def test_gradient_rejects_jacobian_settings():
    """Tests that JacobianSettings are not accepted for gradients."""
    with pytest.raises(TypeError):
        gradient(None, f_mixed, X0, JacobianSettings())


def test_gradient_known_origin(counting):
    """Tests that a known origin value saves the origin evaluation."""
    f = counting(f_mixed)
    s = Settings(formula="forward", origin_known=True, origin_value=f_mixed(X0))
    a = gradient(None, f, X0, s)
    b = gradient(None, f_mixed, X0, Settings(formula="forward"))
    assert f.calls == X0.size
    np.testing.assert_array_equal(a, b)


@pytest.mark.parallel
def test_gradient_concurrent_matches_serial():
    """Tests that concurrent components reproduce the serial gradient exactly."""
    x = np.linspace(0.1, 2.0, 9)
    f = lambda v: float(np.sum(np.exp(-v) * v**2))  # noqa: E731
    serial = gradient(None, f, x)
    par = gradient(None, f, x, Settings(concurrent=True, workers=4))
    np.testing.assert_array_equal(par, serial)


@pytest.mark.parametrize("bad", [None, "origin", False])
def test_gradient_bad_origin_value_rejected_before_evaluation(bad, counting):
    """Tests that an unusable known origin value aborts before any call or write."""
    dst = np.full(3, 5.0)
    f = counting(f_mixed)
    with pytest.raises(ValueError, match="origin_value"):
        gradient(dst, f, X0, Settings(formula="forward", origin_known=True, origin_value=bad))
    assert f.calls == 0
    np.testing.assert_array_equal(dst, [5.0, 5.0, 5.0])


def test_gradient_integer_dst_rejected(counting):
    """Tests that an integer container is rejected rather than truncating the gradient."""
    dst = np.array([7, 8, 9])
    f = counting(f_mixed)
    with pytest.raises(ValueError, match="floating-point"):
        gradient(dst, f, X0)
    np.testing.assert_array_equal(dst, [7, 8, 9])
    assert f.calls == 0

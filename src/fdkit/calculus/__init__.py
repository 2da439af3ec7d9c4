"""Calculus utilities.

Provides constructors for gradient and Jacobian computations.
"""

from .gradient import gradient
from .jacobian import jacobian

__all__ = ["gradient", "jacobian"]

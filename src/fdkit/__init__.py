"""Provides all fdkit methods."""

from importlib.metadata import PackageNotFoundError, version

from fdkit.calculus.gradient import gradient
from fdkit.calculus.jacobian import jacobian
from fdkit.finite.derivative import FiniteDifferenceDerivative, derivative
from fdkit.finite.settings import JacobianSettings, Settings
from fdkit.finite.stencil import (
    BACKWARD,
    CENTRAL,
    CENTRAL_2ND,
    FORWARD,
    Formula,
    FormulaName,
    Point,
    lookup,
)

try:
    __version__ = version("fdkit")
except PackageNotFoundError:
    pass

__all__ = [
    "derivative",
    "gradient",
    "jacobian",
    "FiniteDifferenceDerivative",
    "Settings",
    "JacobianSettings",
    "Formula",
    "FormulaName",
    "Point",
    "lookup",
    "FORWARD",
    "BACKWARD",
    "CENTRAL",
    "CENTRAL_2ND",
]

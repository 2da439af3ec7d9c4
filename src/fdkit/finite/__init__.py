"""Fixed-step finite-difference formulas and the scalar derivative."""

from .derivative import FiniteDifferenceDerivative, derivative
from .settings import JacobianSettings, Settings
from .step import resolve_step
from .stencil import Formula, FormulaName, lookup, resolve_formula

__all__ = [
    "derivative",
    "FiniteDifferenceDerivative",
    "Settings",
    "JacobianSettings",
    "resolve_step",
    "Formula",
    "FormulaName",
    "lookup",
    "resolve_formula",
]

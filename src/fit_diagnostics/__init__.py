"""fit_diagnostics — Eigen-diagnostics for ill-conditioned model fits.

When a fitted model warns about a singular covariance matrix or a
non-positive-definite Hessian, these routines decompose the offending
matrix and report which named parameters load onto the flat or
negative eigen-directions, so the model can be rescaled or simplified
before its standard errors, p-values or confidence intervals are
trusted.

Public API:
    .. autosummary::
        diagnose_vcov
        diagnose_hessian
        diagnose_fitted_model
        numerical_hessian
        compute_standard_errors
        nonfinite_parameters
        eigen_decompose
        print_vcov_report
        print_hessian_report
        print_fit_diagnostics
        get_backend
        set_backend
        VcovReport
        EigenDirection
        HessianReport
        HessianDirection
        FitDiagnostics
        ConfigurationError
        NumericalError
"""

from ._config import get_backend, set_backend
from ._linalg import compute_standard_errors, eigen_decompose, nonfinite_parameters
from ._results import (
    EigenDirection,
    FitDiagnostics,
    HessianDirection,
    HessianReport,
    VcovReport,
)
from .adapters import diagnose_fitted_model
from .display import print_fit_diagnostics, print_hessian_report, print_vcov_report
from .exceptions import ConfigurationError, NumericalError
from .hessian import diagnose_hessian, numerical_hessian
from .vcov import diagnose_vcov

__all__ = [
    "diagnose_vcov",
    "diagnose_hessian",
    "diagnose_fitted_model",
    "numerical_hessian",
    "compute_standard_errors",
    "nonfinite_parameters",
    "eigen_decompose",
    "print_vcov_report",
    "print_hessian_report",
    "print_fit_diagnostics",
    "get_backend",
    "set_backend",
    "VcovReport",
    "EigenDirection",
    "HessianReport",
    "HessianDirection",
    "FitDiagnostics",
    "ConfigurationError",
    "NumericalError",
]

__version__ = "0.1.0"

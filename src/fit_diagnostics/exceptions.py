"""Exception types raised by the fit_diagnostics package.

Only missing inputs or missing capabilities are hard errors.  Numerical
irregularities in the matrices themselves (singular Hessians, negative
variances, empty bad-direction sets) are reported as data (NaN
standard errors, empty entry lists) so the diagnostics can run on
degenerate fits.
"""

from __future__ import annotations


class ConfigurationError(ValueError):
    """A required input for the requested analysis was not supplied.

    Raised by :func:`~fit_diagnostics.diagnose_vcov` when the
    covariance matrix contains non-finite entries and no fallback
    Hessian function was provided.
    """


class NumericalError(ArithmeticError):
    """A numerical capability needed for the analysis is unavailable.

    Raised when the requested differentiation backend cannot be
    imported, when a matrix cannot be decomposed at all, or when the
    Hessian inversion throws even on the pseudo-inverse path.
    """

"""One-call diagnosis of a fitted statsmodels likelihood model.

Runs the usual troubleshooting sequence on a results object: first the
covariance matrix, then the Hessian of the negative log-likelihood,
cross-referencing the parameters whose standard errors the fitting
library already reported as non-finite.

Works with any results object exposing the statsmodels
``LikelihoodModelResults`` surface:

* ``results.params`` — point estimates (Series or array)
* ``results.cov_params()`` — covariance matrix (DataFrame or array)
* ``results.bse`` — standard errors
* ``results.model.score(params)`` — gradient of the log-likelihood
* ``results.model.hessian(params)`` — Hessian of the log-likelihood

``Logit``, ``Probit``, ``Poisson``, ``NegativeBinomial``, ``GLM`` and
``OLS`` results all qualify.  The diagnostics analyse the *negative*
log-likelihood, whose Hessian is positive definite at a minimum, so
the model's score and Hessian are negated.

``MixedLM`` is not covered: its ``score``/``hessian`` take packed
parameter vectors (fixed effects plus Cholesky factors of the random-
effect covariance) rather than ``results.params``.  For mixed models,
call :func:`~fit_diagnostics.diagnose_vcov` and
:func:`~fit_diagnostics.diagnose_hessian` directly with the matching
gradient.
"""

from __future__ import annotations

import logging
import warnings
from typing import Any

import numpy as np
import pandas as pd
from statsmodels.tools.sm_exceptions import HessianInversionWarning

from ._compat import as_labelled_vector
from ._linalg import nonfinite_parameters
from ._results import FitDiagnostics
from .hessian import diagnose_hessian
from .vcov import diagnose_vcov

logger = logging.getLogger(__name__)


def _param_labels(results: Any) -> list[str]:
    params = results.params
    if isinstance(params, pd.Series):
        return [str(i) for i in params.index]
    names = getattr(results.model, "exog_names", None)
    if names is not None and len(names) == np.size(params):
        return [str(n) for n in names]
    _, labels = as_labelled_vector(params)
    return labels


def diagnose_fitted_model(
    results: Any,
    *,
    tolerance: float = 1e-5,
    digits: int = 2,
    eigen_tol: float = 1e-5,
    vector_tol: float = 1e-2,
    backend: str | None = None,
) -> FitDiagnostics:
    """Covariance and Hessian diagnostics for a fitted statsmodels model.

    Args:
        results: A fitted statsmodels likelihood-model results object.
        tolerance: Absolute eigenvalue tolerance for the covariance
            diagnostics.
        digits: Decimal places kept in covariance loadings.
        eigen_tol: Relative eigenvalue tolerance for the Hessian
            diagnostics.
        vector_tol: Eigenvector component threshold for the Hessian
            diagnostics.
        backend: Differentiation backend override.  Statsmodels score
            functions are NumPy code, so only ``"numpy"`` (the
            default) applies here.

    Returns:
        A :class:`~fit_diagnostics.FitDiagnostics` holding both reports.
    """
    labels = _param_labels(results)
    params = np.asarray(results.params, dtype=np.float64)
    model = results.model

    def gradient_fn(p: np.ndarray) -> np.ndarray:
        return -np.asarray(model.score(np.asarray(p)), dtype=np.float64)

    def fallback_hessian_fn() -> np.ndarray:
        return -np.asarray(model.hessian(params), dtype=np.float64)

    # cov_params() warns (HessianInversionWarning / RuntimeWarning)
    # when the Hessian is singular; the diagnostics report that case
    # themselves.
    with warnings.catch_warnings():
        warnings.simplefilter("ignore", HessianInversionWarning)
        warnings.simplefilter("ignore", RuntimeWarning)
        cov = np.asarray(results.cov_params(), dtype=np.float64)
        bse = np.asarray(results.bse, dtype=np.float64)

    vcov_report = diagnose_vcov(
        cov,
        labels,
        tolerance=tolerance,
        digits=digits,
        fallback_hessian_fn=fallback_hessian_fn,
    )

    flagged = nonfinite_parameters(bse, labels)
    if flagged:
        logger.debug("Fitted model reports non-finite SEs for: %s", flagged)

    hessian_report = diagnose_hessian(
        gradient_fn,
        params,
        labels,
        eigen_tol=eigen_tol,
        vector_tol=vector_tol,
        flagged_parameters=flagged,
        backend=backend,
    )
    return FitDiagnostics(vcov=vcov_report, hessian=hessian_report)

"""Eigen-diagnostics of the Hessian of a model's objective.

At a proper minimum of the negative log-likelihood the Hessian ``H``
is positive definite.  Its eigenvalues measure curvature along each
eigen-direction; what matters for identifiability is curvature
*relative to the stiffest direction*, so every eigenvalue is divided
by the largest one:

    r_k = λ_k / λ_max

A relative value at or below ``eigen_tol`` (default 1e-5, i.e. a
condition number of 1e5 or worse) marks a direction along which the
objective is numerically flat: the optimiser stopped somewhere along
a ridge, and the Wald standard errors of the parameters on that ridge
are meaningless.  A negative relative value marks a saddle: the fit
did not converge to a minimum at all.

Unlike :func:`~fit_diagnostics.diagnose_vcov`, which reports worst-
first, bad directions here keep the index order of the descending
decomposition, so ``index`` can be used directly against
``report.eigenvalues`` and ``report.eigenvectors``.

Computing the Hessian
---------------------
When no Hessian is passed, it is the Jacobian of ``gradient_fn`` at
``parameters``, computed by the active differentiation backend (see
:mod:`fit_diagnostics._config`): centred finite differences by
default, or JAX forward-mode autodiff for ``jax.numpy`` gradients.
The result is symmetrised before decomposition.

Standard errors
---------------
``SE_j = √[(H⁻¹)_jj]`` via :func:`~fit_diagnostics.compute_standard_errors`.
Singular or indefinite Hessians give NaN entries for the affected
parameters rather than an exception; they are informational.

Cross-referencing upstream flags
--------------------------------
Fitting libraries often report a list of parameters whose standard
errors came out NaN.  Passing that list as ``flagged_parameters``
surfaces it in the report next to the parameters this analysis found,
and ``unexplained_flags`` lists any flagged parameter that does not
load on a bad direction.  The two sources use different numerics and
may disagree; disagreement is logged, never raised.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

import numpy as np

from ._backends import resolve_backend
from ._compat import as_labelled_matrix, as_labelled_vector
from ._linalg import (
    compute_standard_errors,
    eigen_decompose,
    loading_parameters,
    symmetrize,
)
from ._results import HessianDirection, HessianReport
from ._typing import GradientFn, MatrixLike, VectorLike

logger = logging.getLogger(__name__)


def numerical_hessian(
    gradient_fn: GradientFn,
    parameters: VectorLike,
    backend: str | None = None,
) -> np.ndarray:
    """Hessian as the symmetrised Jacobian of *gradient_fn* at *parameters*.

    Args:
        gradient_fn: Gradient of the objective, ``(n,) -> (n,)``.
        parameters: Evaluation point, length ``n``.
        backend: ``"numpy"``, ``"jax"``, or ``None`` for the
            configured default.

    Returns:
        Symmetric Hessian ``(n, n)``.

    Raises:
        NumericalError: If the requested backend is unavailable.
        ValueError: If the gradient length does not match the number
            of parameters.
    """
    x, _ = as_labelled_vector(parameters)
    jac = resolve_backend(backend).jacobian(gradient_fn, x)
    if jac.shape != (x.shape[0], x.shape[0]):
        raise ValueError(
            f"gradient_fn returned {jac.shape[0]} values for "
            f"{x.shape[0]} parameters; expected a gradient of the same length."
        )
    return symmetrize(jac)


def _relative_eigenvalues(values: np.ndarray) -> np.ndarray:
    """``λ_k / λ_max``; all NaN when ``λ_max`` is not positive."""
    if values.size == 0 or not values[0] > 0:
        return np.full(values.shape, np.nan)
    result: np.ndarray = values / values[0]
    return result


def diagnose_hessian(
    gradient_fn: GradientFn | None,
    parameters: VectorLike,
    labels: Sequence[str] | None = None,
    hessian: MatrixLike | None = None,
    eigen_tol: float = 1e-5,
    vector_tol: float = 1e-2,
    flagged_parameters: Sequence[str] | None = None,
    backend: str | None = None,
) -> HessianReport:
    """Find flat or wrong-way-curved directions of the objective.

    Args:
        gradient_fn: Gradient of the objective (negative
            log-likelihood) with respect to the parameters.  Only
            called when *hessian* is ``None``.
        parameters: Parameter vector at the candidate optimum.  A
            ``pandas.Series`` supplies labels from its index.
        labels: Parameter names; default from *parameters* or
            ``par1 … parN``.
        hessian: Precomputed Hessian ``(n, n)``; skips differentiation.
        eigen_tol: Relative eigenvalue (λ / λ_max) at or below which a
            direction is bad.
        vector_tol: Eigenvector component above which a parameter is
            reported as part of a bad direction.
        flagged_parameters: Parameters flagged upstream (e.g. with
            non-finite standard errors), surfaced for cross-reference.
        backend: Differentiation backend override (``"numpy"`` or
            ``"jax"``).

    Returns:
        A :class:`~fit_diagnostics.HessianReport`.

    Raises:
        NumericalError: If the Hessian must be computed and the
            differentiation backend is unavailable, or the Hessian
            cannot be decomposed or pseudo-inverted.
        ValueError: On shape or label mismatches, or when neither
            *gradient_fn* nor *hessian* is given.
    """
    _, out_labels = as_labelled_vector(parameters, labels)

    if hessian is None:
        if gradient_fn is None:
            raise ValueError("Either gradient_fn or hessian must be supplied.")
        h = numerical_hessian(gradient_fn, parameters, backend=backend)
    else:
        h, _ = as_labelled_matrix(hessian, out_labels, name="hessian")
        h = symmetrize(h)

    values, vectors = eigen_decompose(h)
    relative = _relative_eigenvalues(values)

    # NaN relative values (no positive curvature anywhere) fail the
    # comparison and so count as bad.
    bad_idx = np.flatnonzero(~(relative > eigen_tol))
    bad_directions = [
        HessianDirection(
            index=int(k),
            eigenvalue=float(values[k]),
            relative_value=float(relative[k]),
            parameters=loading_parameters(vectors[:, k], out_labels, vector_tol),
        )
        for k in bad_idx
    ]

    standard_errors = compute_standard_errors(
        h, out_labels, eigen_tol=eigen_tol, vector_tol=vector_tol
    )

    flagged = [str(p) for p in flagged_parameters] if flagged_parameters else []
    implicated = {p for d in bad_directions for p in d.parameters}
    unexplained = [p for p in flagged if p not in implicated]
    if unexplained:
        logger.info(
            "Flagged parameters not on any bad Hessian direction: %s",
            ", ".join(unexplained),
        )

    logger.debug(
        "Hessian diagnostics: %d of %d relative eigenvalues <= %g",
        len(bad_directions),
        len(out_labels),
        eigen_tol,
    )

    return HessianReport(
        ok=not bad_directions,
        labels=out_labels,
        eigenvalues=values,
        eigenvectors=vectors,
        bad_directions=bad_directions,
        standard_errors=standard_errors,
        eigen_tol=eigen_tol,
        vector_tol=vector_tol,
        flagged_parameters=flagged,
        unexplained_flags=unexplained,
        hessian=h,
    )

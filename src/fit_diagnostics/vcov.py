"""Eigen-diagnostics of a fitted model's variance-covariance matrix.

When a fitting library warns that the covariance matrix is singular or
not positive definite, the warning rarely says *why*.  The eigen-
decomposition ``Σ = V Λ Vᵀ`` does: every eigenvalue at or below a
small tolerance marks a linear combination of parameters that has no
(or negative) sampling variance, and the corresponding eigenvector
names the parameters involved.

Typical culprits surfaced this way:

* **Aliased fixed effects** — two predictors that are exact linear
  combinations of each other load with equal and opposite weights.
* **Boundary variance components** — a random-effect variance or
  correlation estimated at zero (or ±1) loads alone on a direction.
* **Badly scaled predictors** — a covariate measured in large units
  has a coefficient variance many orders of magnitude below the rest;
  rescaling it moves the eigenvalue back above tolerance.

Non-finite covariance matrices
------------------------------
A covariance matrix full of NaN means the fitting library could not
invert its Hessian at all, so there is nothing to decompose.  The
caller must then supply ``fallback_hessian_fn``, a zero-argument
callable returning the Hessian of the objective (negative
log-likelihood).  The same eigen-analysis is applied to it and the
report is tagged ``source="hessian"``.  The reading changes: a Hessian
eigenvalue near zero or negative *is* a flat or wrong-way-curved
direction, with no inversion in between, so small values still mean
"bad" but on the curvature scale rather than the variance scale.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence

import numpy as np

from ._compat import as_labelled_matrix
from ._linalg import direction_loadings, eigen_decompose
from ._results import EigenDirection, VcovReport
from ._typing import MatrixLike
from .exceptions import ConfigurationError

logger = logging.getLogger(__name__)


def _bad_directions(
    matrix: np.ndarray,
    labels: list[str],
    tolerance: float,
    digits: int,
) -> list[EigenDirection]:
    """Eigen-directions with eigenvalue ≤ *tolerance*, worst first."""
    values, vectors = eigen_decompose(matrix)

    # The decomposition is descending; walk it backwards so the most
    # negative eigenvalue is reported first.
    bad = [k for k in range(values.shape[0] - 1, -1, -1) if values[k] <= tolerance]
    return [
        EigenDirection(
            eigenvalue=float(values[k]),
            loadings=direction_loadings(vectors[:, k], labels, digits),
        )
        for k in bad
    ]


def diagnose_vcov(
    matrix: MatrixLike,
    labels: Sequence[str] | None = None,
    tolerance: float = 1e-5,
    digits: int = 2,
    fallback_hessian_fn: Callable[[], MatrixLike] | None = None,
) -> VcovReport:
    """Find the parameters behind a singular covariance matrix.

    Args:
        matrix: Covariance matrix ``(n, n)``: NumPy array, nested
            sequence, or a pandas/Polars DataFrame whose columns name
            the parameters (statsmodels ``results.cov_params()``).
        labels: Parameter names, one per row/column.  Inferred from
            DataFrame columns, else ``par1 … parN``.
        tolerance: Eigenvalues at or below this value are reported.
        digits: Decimal places kept in each loading.
        fallback_hessian_fn: Zero-argument callable returning the
            Hessian of the objective.  Required when *matrix* has
            non-finite entries.

    Returns:
        A :class:`~fit_diagnostics.VcovReport`.  ``report.ok`` is
        ``True`` (and ``report.entries`` empty) when every eigenvalue
        exceeds *tolerance*; otherwise ``report.entries`` lists one
        :class:`~fit_diagnostics.EigenDirection` per bad eigenvalue,
        most negative first.

    Raises:
        ConfigurationError: If *matrix* has non-finite entries and no
            *fallback_hessian_fn* was supplied.
        ValueError: If a matrix is not square or the label count does
            not match its dimension.
        NumericalError: If the fallback Hessian itself cannot be
            decomposed.

    Examples:
        >>> report = diagnose_vcov([[1.0, 0.0], [0.0, 1e-9]], ["a", "b"])
        >>> report.entries[0].dominant
        'b'
    """
    arr, out_labels = as_labelled_matrix(matrix, labels, name="matrix")

    source = "vcov"
    if not np.all(np.isfinite(arr)):
        if fallback_hessian_fn is None:
            raise ConfigurationError(
                "Covariance matrix has non-finite entries: cannot analyze; "
                "no fallback supplied.  Pass fallback_hessian_fn returning "
                "the Hessian of the objective."
            )
        logger.debug(
            "Covariance matrix has %d non-finite entries; analysing "
            "fallback Hessian instead",
            int(np.sum(~np.isfinite(arr))),
        )
        arr, _ = as_labelled_matrix(
            fallback_hessian_fn(), out_labels, name="fallback Hessian"
        )
        source = "hessian"

    entries = _bad_directions(arr, out_labels, tolerance, digits)
    logger.debug(
        "%s diagnostics: %d of %d eigenvalues <= %g",
        source,
        len(entries),
        len(out_labels),
        tolerance,
    )

    return VcovReport(
        ok=not entries,
        source=source,
        entries=entries,
        labels=out_labels,
        tolerance=tolerance,
        digits=digits,
    )

"""Shared linear-algebra helpers for the matrix diagnostics.

Both diagnostics rest on the same two facts about a symmetric matrix
``A = V Λ Vᵀ``:

* A near-zero (or negative) eigenvalue λ_k means ``A`` is flat (or
  curved the wrong way) along the eigenvector ``v_k``.  For a
  covariance matrix that is a linear combination of parameters with no
  variance, so the parameters are aliased.  For the Hessian of a
  negative log-likelihood it is a direction the data do not identify,
  or a saddle point rather than a minimum.

* The components of ``v_k`` say which parameters make up that
  direction.  A component near ±1 means the direction *is* that
  parameter; several components of similar size mean the parameters
  are confounded with each other.

Standard errors come from the inverse Hessian,
``SE_j = √[(H⁻¹)_jj]``.  When ``H`` is singular the inverse does not
exist, but the pseudo-inverse still gives valid variances for the
parameters orthogonal to the null space, so only the parameters that
load on a null direction are reported as NaN.
"""

from __future__ import annotations

import logging
import warnings
from collections.abc import Sequence
from typing import Any

import numpy as np
import pandas as pd
from scipy import linalg
from scipy.linalg import LinAlgWarning

from ._compat import as_labelled_matrix, default_labels
from .exceptions import NumericalError

logger = logging.getLogger(__name__)


def symmetrize(matrix: np.ndarray) -> np.ndarray:
    """Return ``(A + Aᵀ) / 2``.

    Finite-difference Hessians and covariance matrices read back from
    text are symmetric only to rounding error; ``eigh`` reads a single
    triangle, so averaging first keeps both triangles in play.
    """
    result: np.ndarray = (matrix + matrix.T) / 2.0
    return result


def eigen_decompose(matrix: Any) -> tuple[np.ndarray, np.ndarray]:
    """Eigen-decomposition of a symmetric matrix, sorted descending.

    Args:
        matrix: Square symmetric matrix ``(n, n)``.

    Returns:
        ``(values, vectors)`` where ``values`` has shape ``(n,)`` in
        descending order and column ``vectors[:, k]`` is the unit
        eigenvector for ``values[k]``.

    Raises:
        NumericalError: If the matrix has non-finite entries or LAPACK
            fails to converge.
    """
    arr = np.asarray(matrix, dtype=np.float64)
    if not np.all(np.isfinite(arr)):
        raise NumericalError(
            "Cannot eigen-decompose a matrix with non-finite entries."
        )
    try:
        values, vectors = linalg.eigh(symmetrize(arr))
    except linalg.LinAlgError as exc:
        raise NumericalError(f"Eigen-decomposition failed: {exc}") from exc

    # eigh returns ascending order.
    order = np.argsort(values)[::-1]
    return values[order], vectors[:, order]


def direction_loadings(
    vector: np.ndarray,
    labels: Sequence[str],
    digits: int = 2,
) -> dict[str, float]:
    """Label, sort and round the components of one eigenvector.

    Components are ordered by descending absolute value *before*
    rounding, so the order reflects the true magnitudes even when
    several components round to the same value.  Eigenvectors are only
    defined up to sign; the sign is fixed so that the dominant
    component is positive.

    Args:
        vector: Unit eigenvector, shape ``(n,)``.
        labels: Parameter names, length ``n``.
        digits: Decimal places to keep.

    Returns:
        Insertion-ordered ``{label: loading}``.
    """
    v = np.asarray(vector, dtype=np.float64)
    order = np.argsort(-np.abs(v), kind="stable")
    if v[order[0]] < 0:
        v = -v
    rounded = np.round(v, digits)
    # np.round(-0.001, 2) is -0.0; normalise so reports print "0.0".
    return {labels[i]: float(rounded[i]) + 0.0 for i in order}


def loading_parameters(
    vector: np.ndarray,
    labels: Sequence[str],
    vector_tol: float = 1e-2,
) -> list[str]:
    """Labels whose absolute eigenvector component exceeds *vector_tol*."""
    v = np.abs(np.asarray(vector, dtype=np.float64))
    return [labels[i] for i in np.flatnonzero(v > vector_tol)]


# ------------------------------------------------------------------ #
# Standard errors
# ------------------------------------------------------------------ #


def _rank_deficient(values: np.ndarray) -> bool:
    """Whether the spectrum is singular at machine precision.

    Uses the ``n · ε · max|λ|`` cutoff of ``numpy.linalg.matrix_rank``.
    Small but resolvable eigenvalues do not count; those matrices are
    inverted normally and give large standard errors.
    """
    scale = np.max(np.abs(values)) if values.size else 0.0
    if scale == 0.0:
        return True
    cutoff = values.shape[0] * np.finfo(np.float64).eps * scale
    return bool(np.any(np.abs(values) <= cutoff))


def _null_mask(
    values: np.ndarray,
    vectors: np.ndarray,
    eigen_tol: float,
    vector_tol: float,
) -> np.ndarray:
    """Boolean mask of parameters loading on a (numerically) null direction.

    A direction is null when ``|λ_k| ≤ eigen_tol · max|λ|``.  A zero
    matrix is null in every direction.
    """
    scale = np.max(np.abs(values)) if values.size else 0.0
    if scale == 0.0:
        return np.ones(values.shape[0], dtype=bool)
    null = np.abs(values) <= eigen_tol * scale
    if not np.any(null):
        return np.zeros(values.shape[0], dtype=bool)
    result: np.ndarray = np.any(np.abs(vectors[:, null]) > vector_tol, axis=1)
    return result


def compute_standard_errors(
    hessian: Any,
    labels: Sequence[str] | None = None,
    *,
    eigen_tol: float = 1e-5,
    vector_tol: float = 1e-2,
) -> pd.Series:
    """Standard errors ``√diag(H⁻¹)`` that degrade to NaN, not exceptions.

    * An invertible Hessian is inverted directly, however badly
      conditioned; negative variances (an indefinite Hessian) become
      NaN.
    * A Hessian that is singular at machine precision, or whose
      inversion raises or comes back non-finite, is inverted with the
      pseudo-inverse instead.  Only then are the parameters loading on
      its null directions (component above *vector_tol*) set to NaN;
      the rest keep finite values.

    Args:
        hessian: Square Hessian of the objective ``(n, n)``.
        labels: Parameter names; inferred from a DataFrame or
            defaulted to ``par1 … parN``.
        eigen_tol: Relative eigenvalue at or below which a direction
            is treated as null on the pseudo-inverse path.
        vector_tol: Component size above which a parameter is
            considered to load on a null direction.

    Returns:
        ``pandas.Series`` of standard errors indexed by label.

    Raises:
        NumericalError: If the Hessian has non-finite entries or the
            pseudo-inverse itself fails.
    """
    arr, out_labels = as_labelled_matrix(hessian, labels, name="hessian")
    sym = symmetrize(arr)
    values, vectors = eigen_decompose(sym)

    cov: np.ndarray | None = None
    if not _rank_deficient(values):
        with warnings.catch_warnings():
            warnings.simplefilter("ignore", LinAlgWarning)
            try:
                cov = linalg.inv(sym)
            except linalg.LinAlgError as exc:
                logger.debug("Hessian inversion failed, using pseudo-inverse: %s", exc)
        if cov is not None and not np.all(np.isfinite(cov)):
            logger.debug("Hessian inverse is non-finite, using pseudo-inverse")
            cov = None

    null_mask = np.zeros(values.shape[0], dtype=bool)
    if cov is None:
        null_mask = _null_mask(values, vectors, eigen_tol, vector_tol)
        try:
            cov = linalg.pinvh(sym, rtol=eigen_tol)
        except (linalg.LinAlgError, ValueError) as exc:
            raise NumericalError(f"Hessian pseudo-inversion failed: {exc}") from exc

    with np.errstate(invalid="ignore"):
        se = np.sqrt(np.diag(cov))
    se = np.where(null_mask, np.nan, se)
    return pd.Series(se, index=out_labels, name="std_err")


def nonfinite_parameters(
    standard_errors: Any,
    labels: Sequence[str] | None = None,
) -> list[str]:
    """Labels whose standard error is NaN or infinite.

    Accepts a labelled ``pandas.Series`` (e.g. statsmodels ``bse``) or
    a plain array with explicit *labels*.
    """
    if isinstance(standard_errors, pd.Series):
        values = standard_errors.to_numpy(dtype=np.float64)
        names = [str(i) for i in standard_errors.index] if labels is None else list(labels)
    else:
        values = np.atleast_1d(np.asarray(standard_errors, dtype=np.float64))
        names = default_labels(values.shape[0]) if labels is None else list(labels)
    if len(names) != values.shape[0]:
        raise ValueError(
            f"Got {len(names)} labels for {values.shape[0]} standard errors."
        )
    return [names[i] for i in np.flatnonzero(~np.isfinite(values))]

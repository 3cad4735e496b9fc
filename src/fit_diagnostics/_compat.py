"""Input compatibility layer for labelled matrices.

All public API functions accept a plain NumPy array plus an explicit
label list.  This module adds transparent support for labelled inputs:
a ``pandas.DataFrame`` (as returned by statsmodels ``cov_params()``)
carries its parameter names in its columns, and a ``pandas.Series`` of
parameters carries them in its index.  A ``polars.DataFrame`` (or
``polars.LazyFrame``) is converted to pandas at the boundary so that
internal code, which operates on NumPy arrays, remains unchanged.

Polars is **not** a required dependency.  If it is not installed, the
converter simply handles NumPy and pandas objects.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING, Any, TypeAlias

import numpy as np
import pandas as pd

if TYPE_CHECKING:
    import polars as pl

    DataFrameLike: TypeAlias = pd.DataFrame | pl.DataFrame | pl.LazyFrame
else:
    DataFrameLike: TypeAlias = pd.DataFrame

# Runtime detection; Polars stays an optional dependency.
try:
    import polars as pl

    _HAS_POLARS = True
except ImportError:
    _HAS_POLARS = False


def _ensure_pandas_df(obj: DataFrameLike, *, name: str = "input") -> pd.DataFrame:
    """Convert *obj* to a :class:`pandas.DataFrame` if necessary.

    Accepted types:
        * ``pandas.DataFrame`` — returned as-is.
        * ``polars.DataFrame`` — converted via ``.to_pandas()``.
        * ``polars.LazyFrame`` — collected then converted.

    Args:
        obj: A pandas or Polars DataFrame (or LazyFrame).
        name: Label used in error messages (e.g. ``"matrix"``).

    Returns:
        A pandas ``DataFrame``.

    Raises:
        TypeError: If *obj* is not a recognised DataFrame type.
    """
    if isinstance(obj, pd.DataFrame):
        return obj

    if _HAS_POLARS:
        if isinstance(obj, pl.LazyFrame):
            return obj.collect().to_pandas()
        if isinstance(obj, pl.DataFrame):
            return obj.to_pandas()

    raise TypeError(
        f"'{name}' must be a pandas DataFrame"
        + (" or Polars DataFrame/LazyFrame" if _HAS_POLARS else "")
        + f", got {type(obj).__name__}."
    )


def _is_dataframe_like(obj: Any) -> bool:
    if isinstance(obj, pd.DataFrame):
        return True
    return _HAS_POLARS and isinstance(obj, (pl.DataFrame, pl.LazyFrame))


def default_labels(n: int) -> list[str]:
    """Positional parameter names ``par1 … parN``."""
    return [f"par{i + 1}" for i in range(n)]


def as_labelled_matrix(
    matrix: Any,
    labels: Sequence[str] | None = None,
    *,
    name: str = "matrix",
) -> tuple[np.ndarray, list[str]]:
    """Coerce *matrix* to a square float array and its parameter labels.

    Label precedence: explicit *labels*, then DataFrame columns, then
    :func:`default_labels`.

    Args:
        matrix: NumPy array, nested sequence, pandas DataFrame, or
            Polars DataFrame/LazyFrame.
        labels: Parameter names, one per row/column.
        name: Label used in error messages.

    Returns:
        ``(array, labels)`` with ``array`` of shape ``(n, n)`` and
        dtype float64.

    Raises:
        ValueError: If the matrix is not square or the label count
            does not match its dimension.
    """
    inferred: list[str] | None = None
    if _is_dataframe_like(matrix):
        df = _ensure_pandas_df(matrix, name=name)
        inferred = [str(c) for c in df.columns]
        arr = df.to_numpy(dtype=np.float64)
    else:
        arr = np.asarray(matrix, dtype=np.float64)

    # A 1×1 problem is occasionally passed as a scalar.
    if arr.ndim == 0:
        arr = arr.reshape(1, 1)

    if arr.ndim != 2 or arr.shape[0] != arr.shape[1]:
        raise ValueError(f"'{name}' must be a square matrix, got shape {arr.shape}.")

    n = arr.shape[0]
    if labels is not None:
        out_labels = [str(lab) for lab in labels]
    elif inferred is not None:
        out_labels = inferred
    else:
        out_labels = default_labels(n)

    if len(out_labels) != n:
        raise ValueError(
            f"Got {len(out_labels)} labels for a {n}×{n} '{name}'; "
            "label count must equal the matrix dimension."
        )
    return arr, out_labels


def as_labelled_vector(
    vector: Any,
    labels: Sequence[str] | None = None,
    *,
    name: str = "parameters",
) -> tuple[np.ndarray, list[str]]:
    """Coerce *vector* to a 1-D float array and its labels.

    Label precedence: explicit *labels*, then the index of a
    ``pandas.Series``, then :func:`default_labels`.

    Raises:
        ValueError: If the label count does not match the length.
    """
    inferred: list[str] | None = None
    if isinstance(vector, pd.Series):
        inferred = [str(i) for i in vector.index]
        arr = vector.to_numpy(dtype=np.float64)
    else:
        arr = np.asarray(vector, dtype=np.float64)
    arr = np.atleast_1d(arr).ravel()

    if labels is not None:
        out_labels = [str(lab) for lab in labels]
    elif inferred is not None:
        out_labels = inferred
    else:
        out_labels = default_labels(arr.shape[0])

    if len(out_labels) != arr.shape[0]:
        raise ValueError(
            f"Got {len(out_labels)} labels for {arr.shape[0]} '{name}'."
        )
    return arr, out_labels

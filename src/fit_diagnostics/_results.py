"""Typed result objects for the matrix diagnostics.

Frozen dataclasses that provide:

* **Attribute access** — ``report.ok``, ``report.entries``, etc.
* **Dict-like access** — ``report["ok"]``, ``report.get("key")``,
  ``"key" in report`` for consumers that prefer bracket syntax.
* **Serialisation** — ``.to_dict()`` returns a plain ``dict[str, Any]``
  with all NumPy and pandas types converted to native Python.
* **Verdict** — ``bool(report)`` is the OK/not-OK gate, so
  ``if diagnose_vcov(...):`` reads as "if the covariance matrix is
  fine".

Two report types mirror the two diagnostics:

* :class:`VcovReport` — bad eigen-directions of a covariance matrix
  (or of the fallback Hessian), each an :class:`EigenDirection`.
* :class:`HessianReport` — relatively small eigenvalues of a Hessian,
  each a :class:`HessianDirection`, plus standard errors.

All types are frozen (immutable after construction) to communicate
that a report is a snapshot of one diagnostic call.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from typing import Any, ClassVar

import numpy as np
import pandas as pd

# ------------------------------------------------------------------ #
# Serialisation helper
# ------------------------------------------------------------------ #


def _numpy_to_python(obj: Any) -> Any:
    """Recursively convert NumPy/pandas values to Python-native types.

    Handles nested dicts, lists, dataclass reports, pd.Series,
    np.ndarray, np.integer and np.floating so that :meth:`to_dict`
    returns a fully JSON-serialisable structure.  Non-finite floats
    are kept as ``float("nan")`` / ``inf``.
    """
    if isinstance(obj, _DictAccessMixin):
        return obj.to_dict()
    if isinstance(obj, pd.Series):
        return {str(k): _numpy_to_python(v) for k, v in obj.items()}
    if isinstance(obj, np.ndarray):
        return obj.tolist()
    if isinstance(obj, np.bool_):
        return bool(obj)
    if isinstance(obj, np.integer):
        return int(obj)
    if isinstance(obj, np.floating):
        return float(obj)
    if isinstance(obj, dict):
        return {k: _numpy_to_python(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        converted = [_numpy_to_python(item) for item in obj]
        return type(obj)(converted)
    return obj


# ------------------------------------------------------------------ #
# Dict-compatibility mixin
# ------------------------------------------------------------------ #


class _DictAccessMixin:
    """Dict-like access convenience for result dataclasses.

    Supports three access patterns:

    1. ``result["key"]``     — raises ``KeyError`` on miss
    2. ``result.get(key, d)`` — returns *d* on miss (default ``None``)
    3. ``"key" in result``   — membership test
    """

    # Fields to exclude from to_dict() serialisation.
    _EXCLUDE_FROM_DICT: ClassVar[frozenset[str]] = frozenset()

    def __getitem__(self, key: str) -> Any:
        """Attribute lookup via bracket syntax."""
        try:
            return getattr(self, key)
        except AttributeError:
            raise KeyError(key) from None

    def get(self, key: str, default: Any = None) -> Any:
        """Attribute lookup with a fallback default."""
        return getattr(self, key, default)

    def __contains__(self, key: object) -> bool:
        """Membership test: ``"key" in result``."""
        if not isinstance(key, str):
            return False
        return hasattr(self, key)

    def to_dict(self) -> dict[str, Any]:
        """Convert to a plain dictionary of native Python values."""
        result: dict[str, Any] = {}
        for f in fields(self):  # type: ignore[arg-type]
            if f.name in self._EXCLUDE_FROM_DICT:
                continue
            result[f.name] = _numpy_to_python(getattr(self, f.name))
        return result


# ------------------------------------------------------------------ #
# Covariance-matrix diagnostics
# ------------------------------------------------------------------ #


@dataclass(frozen=True)
class EigenDirection(_DictAccessMixin):
    """One ill-conditioned eigen-direction of a covariance matrix."""

    eigenvalue: float
    """Eigenvalue of the direction (at or below the tolerance)."""

    loadings: dict[str, float]
    """``{label: loading}``, ordered by descending absolute loading
    and rounded to the report's digit count."""

    @property
    def dominant(self) -> str:
        """Label with the largest absolute loading."""
        return next(iter(self.loadings))


@dataclass(frozen=True)
class VcovReport(_DictAccessMixin):
    """Result of :func:`~fit_diagnostics.diagnose_vcov`.

    A report with ``ok=True`` and no entries is the "matrix OK"
    sentinel.  ``source`` is ``"hessian"`` when the covariance matrix
    was unusable and the fallback Hessian was analysed instead; the
    eigenvalues are then curvatures rather than variances.
    """

    ok: bool
    """``True`` when no eigenvalue is at or below ``tolerance``."""

    source: str
    """``"vcov"`` or ``"hessian"``."""

    entries: list[EigenDirection]
    """Bad directions, worst (smallest eigenvalue) first."""

    labels: list[str]
    """Parameter names, one per row/column of the analysed matrix."""

    tolerance: float
    """Absolute eigenvalue threshold."""

    digits: int
    """Decimal places kept in each loading."""

    SOURCES: ClassVar[frozenset[str]] = frozenset({"vcov", "hessian"})

    def __post_init__(self) -> None:
        if self.source not in self.SOURCES:
            raise ValueError(
                f"Unknown report source {self.source!r}. "
                f"Choose from: {sorted(self.SOURCES)}"
            )

    def __bool__(self) -> bool:
        return self.ok

    def __len__(self) -> int:
        return len(self.entries)

    @property
    def from_hessian(self) -> bool:
        """Whether the report was derived from the fallback Hessian."""
        return self.source == "hessian"

    @property
    def message(self) -> str:
        what = "Hessian" if self.from_hessian else "variance-covariance matrix"
        if self.ok:
            return f"{what} OK"
        n = len(self.entries)
        noun = "direction" if n == 1 else "directions"
        return (
            f"{what} has {n} eigen-{noun} with eigenvalue "
            f"<= {self.tolerance:g}"
        )


# ------------------------------------------------------------------ #
# Hessian diagnostics
# ------------------------------------------------------------------ #


@dataclass(frozen=True)
class HessianDirection(_DictAccessMixin):
    """One relatively flat eigen-direction of a Hessian."""

    index: int
    """Position in the descending eigen-decomposition."""

    eigenvalue: float
    """Raw eigenvalue."""

    relative_value: float
    """``eigenvalue / max eigenvalue`` (NaN when the largest
    eigenvalue is not positive)."""

    parameters: list[str]
    """Labels whose absolute eigenvector component exceeds
    ``vector_tol``, in parameter order."""


@dataclass(frozen=True)
class HessianReport(_DictAccessMixin):
    """Result of :func:`~fit_diagnostics.diagnose_hessian`."""

    ok: bool
    """``True`` when no relative eigenvalue is at or below ``eigen_tol``."""

    labels: list[str]
    """Parameter names."""

    eigenvalues: np.ndarray
    """All eigenvalues, descending, shape ``(n,)``."""

    eigenvectors: np.ndarray
    """Unit eigenvectors as columns, shape ``(n, n)``."""

    bad_directions: list[HessianDirection]
    """Bad directions in descending-eigenvalue order (not re-sorted)."""

    standard_errors: pd.Series
    """``√diag(H⁻¹)`` indexed by label; NaN where undefined."""

    eigen_tol: float
    """Relative eigenvalue threshold."""

    vector_tol: float
    """Eigenvector component threshold."""

    flagged_parameters: list[str] = field(default_factory=list)
    """Parameters flagged upstream (e.g. non-finite standard errors
    from the fitting library), surfaced for cross-referencing."""

    unexplained_flags: list[str] = field(default_factory=list)
    """Flagged parameters that do not load on any bad direction."""

    hessian: np.ndarray | None = field(default=None, repr=False, compare=False)
    """The analysed (symmetrised) Hessian.  Excluded from
    ``to_dict()``."""

    _EXCLUDE_FROM_DICT: ClassVar[frozenset[str]] = frozenset({"hessian"})

    def __bool__(self) -> bool:
        return self.ok

    @property
    def message(self) -> str:
        if self.ok:
            return "Hessian OK"
        n = len(self.bad_directions)
        noun = "eigenvalue" if n == 1 else "eigenvalues"
        return (
            f"Hessian has {n} relatively small {noun} "
            f"(<= {self.eigen_tol:g} of the largest)"
        )

    @property
    def bad_parameters(self) -> list[str]:
        """Union of parameters across bad directions, in label order."""
        seen = {p for d in self.bad_directions for p in d.parameters}
        return [lab for lab in self.labels if lab in seen]


# ------------------------------------------------------------------ #
# Fitted-model diagnostics
# ------------------------------------------------------------------ #


@dataclass(frozen=True)
class FitDiagnostics(_DictAccessMixin):
    """Covariance and Hessian diagnostics of one fitted model."""

    vcov: VcovReport
    hessian: HessianReport

    def __bool__(self) -> bool:
        return self.ok

    @property
    def ok(self) -> bool:
        """Both diagnostics passed; inferential outputs can be trusted."""
        return self.vcov.ok and self.hessian.ok

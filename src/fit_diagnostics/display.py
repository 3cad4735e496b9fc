"""Formatted ASCII table display utilities for diagnostic reports.

These tables mirror the statsmodels summary style: a title banner, a
one-line verdict, then one block per bad eigen-direction listing the
parameters that load on it.  The Hessian table adds the standard
errors computed from the Hessian inverse, with undefined values shown
as ``N/A``.

The tables are meant to be read next to the fitting library's own
summary: a parameter that shows up in a bad direction here and with a
huge (or missing) standard error there is the one to rescale, drop,
or simplify before refitting.
"""

from __future__ import annotations

import math
import textwrap
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ._results import FitDiagnostics, HessianReport, VcovReport

W = 80


def _truncate(name: str, max_len: int) -> str:
    """Truncate *name* to *max_len*, appending ``'...'`` if needed."""
    if len(name) <= max_len:
        return name
    return name[: max_len - 3] + "..."


def _fmt_num(val: object, fmt: str = ".4g") -> str:
    """Format a number for display; ``None``/NaN/inf become ``'N/A'``."""
    if val is None:
        return "N/A"
    try:
        fval = float(val)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return str(val)
    if not math.isfinite(fval):
        return "N/A"
    return format(fval, fmt)


def _wrap(text: str, width: int = W, indent: int = 2) -> str:
    """Word-wrap *text* to *width*, indenting continuation lines."""
    return textwrap.fill(
        text,
        width=width,
        initial_indent="",
        subsequent_indent=" " * indent,
    )


def _print_title(title: str) -> None:
    print("=" * W)
    for line in textwrap.wrap(title, width=W - 2):
        print(f"{line:^{W}}")
    print("=" * W)


def print_vcov_report(
    report: VcovReport,
    *,
    title: str = "Variance-Covariance Diagnostics",
) -> None:
    """Print a :class:`~fit_diagnostics.VcovReport` as an ASCII table.

    Each bad direction is printed as its eigenvalue followed by the
    parameter loadings, largest first, in the order and precision
    stored in the report.

    Args:
        report: Report returned by :func:`~fit_diagnostics.diagnose_vcov`.
        title: Title for the output table.
    """
    _print_title(title)
    print(_wrap(f"Verdict: {report.message}"))
    if report.from_hessian:
        print(
            "Note: covariance was non-finite; eigenvalues are Hessian curvatures."
        )
    print("-" * W)

    fc = 40
    for i, entry in enumerate(report.entries, start=1):
        print(f"Direction {i}  (eigenvalue = {_fmt_num(entry.eigenvalue, '.4e')})")
        for label, loading in entry.loadings.items():
            print(f"  {_truncate(label, fc):<{fc}}{loading:>12.{report.digits}f}")
        print("-" * W)

    if not report.entries:
        print(f"No eigenvalues at or below tolerance ({report.tolerance:g}).")
    print("=" * W)


def print_hessian_report(
    report: HessianReport,
    *,
    title: str = "Hessian Diagnostics",
) -> None:
    """Print a :class:`~fit_diagnostics.HessianReport` as an ASCII table.

    The table is structured in three sections:

    1. **Verdict** — "Hessian OK" or the count of bad eigenvalues.
    2. **Bad directions** — index, eigenvalue, relative value and the
       parameters loading above ``vector_tol``.
    3. **Standard errors** — ``√diag(H⁻¹)`` per parameter, with a
       marker on parameters flagged upstream.

    Args:
        report: Report returned by :func:`~fit_diagnostics.diagnose_hessian`.
        title: Title for the output table.
    """
    _print_title(title)
    print(_wrap(f"Verdict: {report.message}"))
    print("-" * W)

    if report.bad_directions:
        print(f"{'Index':>6} {'Eigenvalue':>14} {'Relative':>12}   Parameters")
        print("-" * W)
        for d in report.bad_directions:
            params = ", ".join(d.parameters) if d.parameters else "(none)"
            prefix = (
                f"{d.index:>6} {_fmt_num(d.eigenvalue, '.4e'):>14} "
                f"{_fmt_num(d.relative_value, '.3e'):>12}   "
            )
            print(
                textwrap.fill(
                    params,
                    width=W,
                    initial_indent=prefix,
                    subsequent_indent=" " * len(prefix),
                )
            )
        print("-" * W)

    flagged = set(report.flagged_parameters)
    fc = 40
    print(f"{'Parameter':<{fc}}{'Std Err':>14}")
    print("-" * W)
    for label, se in report.standard_errors.items():
        mark = "  [flagged]" if label in flagged else ""
        print(f"{_truncate(str(label), fc):<{fc}}{_fmt_num(se):>14}{mark}")
    print("=" * W)

    if report.unexplained_flags:
        print(
            _wrap(
                "Notes: flagged upstream but not on any bad direction: "
                + ", ".join(report.unexplained_flags)
            )
        )
        print("=" * W)


def print_fit_diagnostics(diagnostics: FitDiagnostics) -> None:
    """Print both reports of a :class:`~fit_diagnostics.FitDiagnostics`."""
    print_vcov_report(diagnostics.vcov)
    print()
    print_hessian_report(diagnostics.hessian)

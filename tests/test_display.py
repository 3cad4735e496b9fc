"""Tests for the display module."""

import numpy as np

from fit_diagnostics import (
    FitDiagnostics,
    diagnose_hessian,
    diagnose_vcov,
    print_fit_diagnostics,
    print_hessian_report,
    print_vcov_report,
)
from fit_diagnostics.display import _fmt_num, _truncate


class TestTruncate:
    def test_short_name_unchanged(self):
        assert _truncate("abc", 10) == "abc"

    def test_long_name_truncated(self):
        result = _truncate("abcdefghijk", 10)
        assert len(result) == 10
        assert result.endswith("...")


class TestFmtNum:
    def test_nan_is_na(self):
        assert _fmt_num(float("nan")) == "N/A"

    def test_none_is_na(self):
        assert _fmt_num(None) == "N/A"

    def test_inf_is_na(self):
        assert _fmt_num(np.inf) == "N/A"

    def test_number(self):
        assert _fmt_num(0.5) == "0.5"


class TestPrintVcovReport:
    def test_ok_report(self, capsys):
        print_vcov_report(diagnose_vcov(np.eye(2)))
        out = capsys.readouterr().out
        assert "variance-covariance matrix OK" in out
        assert "No eigenvalues at or below tolerance" in out

    def test_bad_direction_listed(self, capsys):
        report = diagnose_vcov(np.diag([1.0, 1e-9]), ["intercept", "dose"])
        print_vcov_report(report)
        out = capsys.readouterr().out
        assert "Direction 1" in out
        assert "dose" in out
        assert "1.00" in out
        assert all(len(line) <= 80 for line in out.splitlines())

    def test_hessian_source_noted(self, capsys):
        report = diagnose_vcov(
            np.full((2, 2), np.nan), fallback_hessian_fn=lambda: np.diag([1.0, 0.0])
        )
        print_vcov_report(report)
        out = capsys.readouterr().out
        assert "eigenvalues are Hessian curvatures" in out
        assert all(len(line) <= 80 for line in out.splitlines())


class TestPrintHessianReport:
    def test_ok_report(self, capsys):
        report = diagnose_hessian(None, np.zeros(2), ["a", "b"], hessian=np.eye(2))
        print_hessian_report(report)
        out = capsys.readouterr().out
        assert "Hessian OK" in out
        assert "Std Err" in out

    def test_nan_standard_error_shown_as_na(self, capsys):
        report = diagnose_hessian(
            None,
            np.zeros(3),
            ["a", "b", "c"],
            hessian=np.diag([4.0, 0.0, 9.0]),
            flagged_parameters=["b", "sigma"],
        )
        print_hessian_report(report)
        out = capsys.readouterr().out
        assert "N/A" in out
        assert "[flagged]" in out
        assert "sigma" in out  # unexplained flag note
        assert all(len(line) <= 80 for line in out.splitlines())

    def test_long_parameter_lists_wrap(self, capsys):
        labels = [f"very_long_parameter_name_{i}" for i in range(6)]
        v = np.ones(6) / np.sqrt(6)
        H = np.eye(6) - (1.0 - 1e-12) * np.outer(v, v)
        report = diagnose_hessian(None, np.zeros(6), labels, hessian=H)
        print_hessian_report(report)
        out = capsys.readouterr().out
        assert all(len(line) <= 80 for line in out.splitlines())
        assert "very_long_parameter_name_5" in out


class TestPrintFitDiagnostics:
    def test_prints_both_tables(self, capsys):
        fit = FitDiagnostics(
            vcov=diagnose_vcov(np.eye(2)),
            hessian=diagnose_hessian(None, np.zeros(2), hessian=np.eye(2)),
        )
        print_fit_diagnostics(fit)
        out = capsys.readouterr().out
        assert "Variance-Covariance Diagnostics" in out
        assert "Hessian Diagnostics" in out

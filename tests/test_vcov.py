"""Tests for the covariance-matrix diagnostics."""

import numpy as np
import pandas as pd
import pytest

from fit_diagnostics import ConfigurationError, NumericalError, diagnose_vcov

# ------------------------------------------------------------------ #
# Helpers
# ------------------------------------------------------------------ #


def _rank_one_deficient(v, small=1e-9):
    """Covariance with eigenvalue *small* along unit vector *v*, 1 elsewhere."""
    v = np.asarray(v, dtype=float)
    v = v / np.linalg.norm(v)
    return np.eye(v.size) - (1.0 - small) * np.outer(v, v)


def _aliased_covariance(n=200, seed=0):
    """Sample covariance of three predictors with x3 = x1 + x2."""
    rng = np.random.default_rng(seed)
    x1 = rng.standard_normal(n)
    x2 = rng.standard_normal(n)
    X = np.column_stack([x1, x2, x1 + x2])
    return np.cov(X, rowvar=False)


# ------------------------------------------------------------------ #
# Healthy matrices
# ------------------------------------------------------------------ #


class TestHealthyMatrix:
    def test_positive_definite_is_ok(self):
        cov = np.array([[2.0, 0.3, 0.1], [0.3, 1.0, 0.2], [0.1, 0.2, 0.5]])
        report = diagnose_vcov(cov, ["a", "b", "c"])
        assert report.ok
        assert bool(report)
        assert report.entries == []
        assert report.source == "vcov"

    def test_default_labels(self):
        report = diagnose_vcov(np.eye(3))
        assert report.labels == ["par1", "par2", "par3"]

    def test_labels_from_dataframe_columns(self):
        cov = pd.DataFrame(
            [[1.0, 0.0], [0.0, 1e-9]],
            index=["const", "x1"],
            columns=["const", "x1"],
        )
        report = diagnose_vcov(cov)
        assert report.labels == ["const", "x1"]
        assert report.entries[0].dominant == "x1"


# ------------------------------------------------------------------ #
# Bad directions
# ------------------------------------------------------------------ #


class TestBadDirections:
    def test_end_to_end_two_by_two(self):
        report = diagnose_vcov([[1.0, 0.0], [0.0, 1e-9]], ["a", "b"], tolerance=1e-5)
        assert not report.ok
        assert len(report.entries) == 1
        entry = report.entries[0]
        assert entry.eigenvalue == pytest.approx(1e-9, abs=1e-15)
        assert entry.dominant == "b"

    def test_diagonal_sub_tolerance_entry(self):
        cov = np.diag([1.0, 1e-9, 2.0])
        report = diagnose_vcov(cov, ["a", "b", "c"])
        assert len(report.entries) == 1
        loadings = report.entries[0].loadings
        assert list(loadings)[0] == "b"
        assert loadings["b"] == pytest.approx(1.0)
        assert loadings["a"] == pytest.approx(0.0)
        assert loadings["c"] == pytest.approx(0.0)

    def test_worst_first_ordering(self):
        cov = np.diag([2.0, 1e-7, -1e-3, 1.0])
        report = diagnose_vcov(cov, ["a", "b", "c", "d"])
        eigenvalues = [e.eigenvalue for e in report.entries]
        assert eigenvalues == sorted(eigenvalues)
        assert [e.dominant for e in report.entries] == ["c", "b"]

    def test_negative_eigenvalue_reported(self):
        cov = np.array([[1.0, 2.0], [2.0, 1.0]])  # eigenvalues 3, -1
        report = diagnose_vcov(cov, ["a", "b"])
        assert len(report.entries) == 1
        assert report.entries[0].eigenvalue == pytest.approx(-1.0)
        assert set(report.entries[0].loadings) == {"a", "b"}

    def test_aliased_predictors_share_direction(self):
        report = diagnose_vcov(_aliased_covariance(), ["x1", "x2", "x3"])
        assert len(report.entries) == 1
        loadings = report.entries[0].loadings
        # v ∝ (1, 1, −1)/√3
        np.testing.assert_allclose(
            sorted(abs(v) for v in loadings.values()), [0.58, 0.58, 0.58]
        )

    def test_tolerance_controls_detection(self):
        cov = np.diag([1.0, 1e-3])
        assert diagnose_vcov(cov, tolerance=1e-5).ok
        assert not diagnose_vcov(cov, tolerance=1e-2).ok


class TestLoadingsFormatting:
    def test_sorted_by_true_magnitude_before_rounding(self):
        # q and r both round to 0.60; r is larger before rounding.
        cov = _rank_one_deficient([0.51997, 0.6037, 0.6043])
        report = diagnose_vcov(cov, ["p", "q", "r"], digits=2)
        loadings = report.entries[0].loadings
        assert list(loadings) == ["r", "q", "p"]
        assert loadings == {"r": 0.6, "q": 0.6, "p": 0.52}

    def test_digits_respected(self):
        cov = _rank_one_deficient([1.0, 2.0])
        report = diagnose_vcov(cov, ["a", "b"], digits=4)
        loadings = report.entries[0].loadings
        assert loadings["b"] == pytest.approx(0.8944, abs=1e-12)
        assert loadings["a"] == pytest.approx(0.4472, abs=1e-12)

    def test_dominant_loading_is_positive(self):
        cov = _rank_one_deficient([-0.2, -0.9, 0.1])
        report = diagnose_vcov(cov, ["a", "b", "c"])
        loadings = report.entries[0].loadings
        assert loadings["b"] > 0


# ------------------------------------------------------------------ #
# Non-finite covariance matrices
# ------------------------------------------------------------------ #


class TestNonFiniteMatrix:
    def test_nan_without_fallback_raises(self):
        cov = np.array([[1.0, np.nan], [np.nan, 1.0]])
        with pytest.raises(ConfigurationError, match="no fallback supplied"):
            diagnose_vcov(cov, ["a", "b"])

    def test_configuration_error_is_value_error(self):
        with pytest.raises(ValueError):
            diagnose_vcov(np.full((2, 2), np.inf))

    def test_fallback_hessian_is_analysed(self):
        cov = np.full((2, 2), np.nan)
        calls = []

        def fallback():
            calls.append(1)
            return np.diag([3.0, 0.0])

        report = diagnose_vcov(cov, ["a", "b"], fallback_hessian_fn=fallback)
        assert calls == [1]
        assert report.source == "hessian"
        assert report.from_hessian
        assert len(report.entries) == 1
        assert report.entries[0].dominant == "b"

    def test_fallback_not_called_for_finite_matrix(self):
        def fallback():
            raise AssertionError("fallback should not be called")

        report = diagnose_vcov(np.eye(2), fallback_hessian_fn=fallback)
        assert report.ok
        assert report.source == "vcov"

    def test_healthy_fallback_gives_empty_report(self):
        cov = np.full((2, 2), np.nan)
        report = diagnose_vcov(cov, fallback_hessian_fn=lambda: np.eye(2) * 5.0)
        assert report.ok
        assert report.entries == []
        assert report.source == "hessian"

    def test_fallback_wrong_shape_raises(self):
        cov = np.full((2, 2), np.nan)
        with pytest.raises(ValueError, match="label count"):
            diagnose_vcov(cov, fallback_hessian_fn=lambda: np.eye(3))

    def test_non_finite_fallback_raises_numerical_error(self):
        cov = np.full((2, 2), np.nan)
        with pytest.raises(NumericalError):
            diagnose_vcov(cov, fallback_hessian_fn=lambda: np.full((2, 2), np.nan))


# ------------------------------------------------------------------ #
# Input validation
# ------------------------------------------------------------------ #


class TestValidation:
    def test_non_square_raises(self):
        with pytest.raises(ValueError, match="square"):
            diagnose_vcov(np.ones((2, 3)))

    def test_label_mismatch_raises(self):
        with pytest.raises(ValueError, match="label count"):
            diagnose_vcov(np.eye(2), ["a", "b", "c"])

"""Tests for the statsmodels fitted-model adapter."""

import math
from types import SimpleNamespace

import numpy as np
import pandas as pd
import pytest
import statsmodels.api as sm

from fit_diagnostics import diagnose_fitted_model

# ------------------------------------------------------------------ #
# Helpers
# ------------------------------------------------------------------ #


def _fit_logit(n=500, seed=42):
    rng = np.random.default_rng(seed)
    X = pd.DataFrame({"x1": rng.standard_normal(n), "x2": rng.standard_normal(n)})
    logits = 0.5 + 1.5 * X["x1"] - 0.8 * X["x2"]
    y = rng.binomial(1, 1.0 / (1.0 + np.exp(-logits)))
    return sm.Logit(y, sm.add_constant(X)).fit(disp=0)


class _QuadraticModel:
    """Log-likelihood −½ pᵀAp with an aliased pair (x1, x2)."""

    A = np.array([[1.0, 1.0, 0.0], [1.0, 1.0, 0.0], [0.0, 0.0, 2.0]])

    def score(self, params):
        return -self.A @ np.asarray(params)

    def hessian(self, params):
        return -self.A


def _degenerate_results():
    """Results whose covariance estimate failed (all NaN)."""
    labels = ["x1", "x2", "x3"]
    return SimpleNamespace(
        params=pd.Series([0.0, 0.0, 0.0], index=labels),
        bse=pd.Series([np.nan, np.nan, 0.7], index=labels),
        cov_params=lambda: pd.DataFrame(
            np.full((3, 3), np.nan), index=labels, columns=labels
        ),
        model=_QuadraticModel(),
    )


# ------------------------------------------------------------------ #
# Tests
# ------------------------------------------------------------------ #


class TestHealthyLogit:
    def test_both_reports_ok(self):
        fit = diagnose_fitted_model(_fit_logit())
        assert fit.ok
        assert fit.vcov.ok
        assert fit.vcov.source == "vcov"
        assert fit.hessian.ok
        assert fit.hessian.flagged_parameters == []

    def test_labels_from_params(self):
        fit = diagnose_fitted_model(_fit_logit())
        assert fit.vcov.labels == ["const", "x1", "x2"]
        assert fit.hessian.labels == ["const", "x1", "x2"]

    def test_standard_errors_match_statsmodels(self):
        results = _fit_logit()
        fit = diagnose_fitted_model(results, backend="numpy")
        np.testing.assert_allclose(
            fit.hessian.standard_errors.to_numpy(),
            results.bse.to_numpy(),
            rtol=1e-4,
        )


class TestDegenerateFit:
    def test_vcov_falls_back_to_hessian(self):
        fit = diagnose_fitted_model(_degenerate_results())
        assert fit.vcov.source == "hessian"
        assert len(fit.vcov.entries) == 1
        loadings = fit.vcov.entries[0].loadings
        assert set(loadings) == {"x1", "x2", "x3"}
        assert abs(loadings["x1"]) == 0.71
        assert abs(loadings["x2"]) == 0.71
        assert loadings["x3"] == 0.0

    def test_hessian_cross_references_flags(self):
        fit = diagnose_fitted_model(_degenerate_results())
        assert not fit.hessian.ok
        assert fit.hessian.bad_directions[0].parameters == ["x1", "x2"]
        assert fit.hessian.flagged_parameters == ["x1", "x2"]
        assert fit.hessian.unexplained_flags == []

    def test_unaffected_standard_error_survives(self):
        fit = diagnose_fitted_model(_degenerate_results())
        se = fit.hessian.standard_errors
        assert math.isnan(se["x1"])
        assert math.isnan(se["x2"])
        assert se["x3"] == pytest.approx(math.sqrt(0.5), rel=1e-6)

    def test_not_ok(self):
        assert not diagnose_fitted_model(_degenerate_results())

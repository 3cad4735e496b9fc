"""
Troubleshooting an ill-conditioned fit
Simulated dose-response data with a mixed-effects variant

Demonstrates:
- ``diagnose_fitted_model`` on a healthy logistic regression
- A badly scaled predictor (dose in micrograms) driving a covariance
  eigenvalue below tolerance, and the fix (rescaling to milligrams)
- ``diagnose_vcov`` on a ``MixedLM`` covariance matrix whose random-
  intercept variance sits on the boundary
- ``diagnose_hessian`` with a hand-written gradient
"""

import numpy as np
import pandas as pd
import statsmodels.api as sm
import statsmodels.formula.api as smf

from fit_diagnostics import (
    diagnose_fitted_model,
    diagnose_hessian,
    diagnose_vcov,
    print_fit_diagnostics,
    print_hessian_report,
    print_vcov_report,
)

rng = np.random.default_rng(2024)

# ============================================================================
# Simulated data
# ============================================================================

n = 400
dose_mg = rng.uniform(0.0, 5.0, n)
age = rng.normal(50.0, 10.0, n)
logits = -1.0 + 0.8 * dose_mg - 0.02 * (age - 50.0)
y = rng.binomial(1, 1.0 / (1.0 + np.exp(-logits)))

# ============================================================================
# 1. Healthy fit
# ============================================================================

X = sm.add_constant(pd.DataFrame({"dose_mg": dose_mg, "age": age}))
healthy = sm.Logit(y, X).fit(disp=0)
print_fit_diagnostics(diagnose_fitted_model(healthy))

# ============================================================================
# 2. Badly scaled predictor: dose in micrograms
# ============================================================================
# The coefficient on dose_ug is 1000x smaller than on dose_mg, so its
# variance is 10^6 times smaller and falls below the default tolerance.

X_ug = sm.add_constant(pd.DataFrame({"dose_ug": dose_mg * 1000.0, "age": age}))
scaled = sm.Logit(y, X_ug).fit(disp=0)
report = diagnose_vcov(scaled.cov_params())
print_vcov_report(report, title="Covariance diagnostics: dose in micrograms")

# ============================================================================
# 3. Mixed model with a boundary variance component
# ============================================================================
# No real clinic effect is simulated, so the random-intercept variance
# is estimated at (or near) zero.

df = pd.DataFrame(
    {
        "score": 2.0 + 0.5 * dose_mg + rng.standard_normal(n),
        "dose_mg": dose_mg,
        "clinic": rng.integers(0, 20, n),
    }
)
mixed = smf.mixedlm("score ~ dose_mg", df, groups=df["clinic"]).fit()
print_vcov_report(
    diagnose_vcov(mixed.cov_params()),
    title="Covariance diagnostics: random-intercept model",
)

# ============================================================================
# 4. Hessian diagnostics with a hand-written gradient
# ============================================================================
# Least squares with two copies of the same predictor: the objective is
# flat along beta_a = -beta_b.

Z = np.column_stack([np.ones(n), dose_mg, dose_mg])
target = 1.0 + 0.5 * dose_mg + rng.standard_normal(n)


def gradient(beta):
    return Z.T @ (Z @ beta - target)


beta_hat = np.linalg.lstsq(Z, target, rcond=None)[0]
print_hessian_report(
    diagnose_hessian(gradient, beta_hat, ["const", "dose_a", "dose_b"]),
    title="Hessian diagnostics: duplicated predictor",
)

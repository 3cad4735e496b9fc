"""NumPy / statsmodels finite-difference backend (always available).

Differentiates by centred finite differences using
:func:`statsmodels.tools.numdiff.approx_fprime`, the same utility
statsmodels uses for its own numerical Hessians.  Works with any
gradient function that accepts and returns array-likes: statsmodels
``model.score``, hand-written NumPy code, or closures around an
external optimiser.

Step size
~~~~~~~~~
``approx_fprime`` chooses a per-coordinate step
``h_k ∝ ε^(1/3) · max(|x_k|, 0.1)`` for centred differences, which
balances truncation error (O(h²)) against rounding error (O(ε/h)).
For a gradient evaluated to machine precision this gives Hessian
entries accurate to roughly ``ε^(2/3) ≈ 4e-11`` relative error, well
below the ``eigen_tol`` default of 1e-5.

Cost
~~~~
A centred Jacobian needs ``2n`` gradient evaluations for ``n``
parameters.  For the parameter counts typical of mixed models
(tens, not thousands) this is negligible next to the fit itself.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

import numpy as np
from statsmodels.tools.numdiff import approx_fprime


@dataclass(frozen=True)
class NumpyBackend:
    """Centred finite-difference differentiation backend.

    The class is a frozen dataclass with no instance state; it
    exists solely to namespace :meth:`jacobian` behind the
    :class:`~fit_diagnostics._backends.BackendProtocol` interface.
    Frozen = immutable = safe to cache in ``_BACKEND_CACHE``.
    """

    @property
    def name(self) -> str:
        return "numpy"

    @property
    def is_available(self) -> bool:  # noqa: PLR6301
        return True

    def jacobian(
        self,
        fn: Callable[[np.ndarray], np.ndarray],
        x: np.ndarray,
    ) -> np.ndarray:
        x = np.asarray(x, dtype=np.float64).ravel()
        n = x.shape[0]

        def _vector_fn(point: np.ndarray) -> np.ndarray:
            return np.asarray(fn(point), dtype=np.float64).ravel()

        jac = approx_fprime(x, _vector_fn, centered=True)

        # approx_fprime squeezes its output, so a scalar-output or
        # single-parameter problem comes back 1-D.  Restore (m, n).
        jac = np.asarray(jac, dtype=np.float64)
        return jac.reshape(-1, n)

"""JAX autodiff backend for numerical differentiation.

Computes the Jacobian of a gradient function with ``jax.jacfwd``.
Forward mode is the right choice here: the Jacobian of a gradient is
square (``n × n``), and forward mode needs ``n`` JVPs with no tape,
which is cheaper than reverse mode for square Jacobians of the small
sizes typical of model parameters.

The gradient function must be traceable by JAX (written with
``jax.numpy``).  A gradient that converts its input to a NumPy array
raises JAX's own tracer error, which is re-raised unchanged so the
caller sees what went wrong.

NumPy ↔ JAX boundary convention
~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~
* **Inbound:** ``jnp.asarray(x, dtype=jnp.float64)``.  Float64 is
  explicit because JAX defaults to float32, whose ~6e-8 epsilon would
  swamp the 1e-5 relative eigenvalue tolerance on ill-conditioned
  Hessians.
* **Outbound:** ``np.asarray(result)``.  Callers never see JAX types.

Graceful degradation
~~~~~~~~~~~~~~~~~~~~
If JAX is not installed, :class:`JaxBackend` can still be instantiated
(for introspection) but ``is_available`` returns ``False`` and
:func:`~fit_diagnostics._backends.resolve_backend` raises
:class:`~fit_diagnostics.exceptions.NumericalError`.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

import numpy as np

try:
    import jax
    import jax.numpy as jnp

    jax.config.update("jax_enable_x64", True)

    _CAN_IMPORT_JAX = True
except ImportError:
    _CAN_IMPORT_JAX = False


@dataclass(frozen=True)
class JaxBackend:
    """Forward-mode autodiff differentiation backend."""

    @property
    def name(self) -> str:
        return "jax"

    @property
    def is_available(self) -> bool:  # noqa: PLR6301
        return _CAN_IMPORT_JAX

    def jacobian(
        self,
        fn: Callable[[np.ndarray], np.ndarray],
        x: np.ndarray,
    ) -> np.ndarray:
        x_j = jnp.asarray(np.asarray(x, dtype=np.float64).ravel(), dtype=jnp.float64)
        n = x_j.shape[0]

        def _vector_fn(point):
            return jnp.ravel(jnp.asarray(fn(point), dtype=jnp.float64))

        jac = jax.jacfwd(_vector_fn)(x_j)
        return np.asarray(jac, dtype=np.float64).reshape(-1, n)

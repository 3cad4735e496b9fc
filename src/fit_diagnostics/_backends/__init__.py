"""Backend abstraction layer for numerical differentiation.

Each backend implements the :class:`BackendProtocol` interface: a
single :meth:`~BackendProtocol.jacobian` primitive that differentiates
a vector-valued function at a point.  :mod:`..hessian` calls it with
the gradient of the objective, so the Jacobian it returns *is* the
Hessian.  Callers dispatch through :func:`resolve_backend` rather than
importing a backend module directly.

Resolution follows the policy set by :mod:`._config`:

1. Programmatic override via :func:`~fit_diagnostics.set_backend`.
2. ``FIT_DIAGNOSTICS_BACKEND`` environment variable.
3. ``"numpy"``.

When ``"jax"`` is requested but JAX is not installed,
:class:`~fit_diagnostics.exceptions.NumericalError` is raised; an
explicit request is never silently degraded to finite differences.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Protocol, runtime_checkable

import numpy as np

from .._config import get_backend
from ..exceptions import NumericalError

# ------------------------------------------------------------------ #
# BackendProtocol
# ------------------------------------------------------------------ #


@runtime_checkable
class BackendProtocol(Protocol):
    """Interface that every differentiation backend must implement.

    Attributes:
        name: Short identifier (e.g. ``"numpy"``, ``"jax"``).
    """

    @property
    def name(self) -> str: ...

    @property
    def is_available(self) -> bool:
        """Whether the backend's dependencies are importable."""
        ...

    def jacobian(
        self,
        fn: Callable[[np.ndarray], np.ndarray],
        x: np.ndarray,
    ) -> np.ndarray:
        """Jacobian of *fn* evaluated at *x*.

        Args:
            fn: Function mapping a length-``n`` vector to a
                length-``m`` vector.
            x: Evaluation point, shape ``(n,)``.

        Returns:
            Jacobian matrix ``(m, n)`` as a float64 NumPy array.
        """
        ...


# ------------------------------------------------------------------ #
# Backend resolution
# ------------------------------------------------------------------ #

# Singleton cache, one instance per backend name.
_BACKEND_CACHE: dict[str, BackendProtocol] = {}


def resolve_backend(name: str | None = None) -> BackendProtocol:
    """Return a :class:`BackendProtocol` instance for *name*.

    When *name* is ``None`` (the default), the policy from
    :func:`~fit_diagnostics._config.get_backend` is used.

    Args:
        name: ``"numpy"``, ``"jax"``, or ``None`` for policy default.

    Returns:
        A backend instance ready for differentiation.

    Raises:
        NumericalError: If ``"jax"`` is requested but JAX is not
            installed.
        ValueError: If *name* is not a recognised backend.
    """
    if name is None:
        name = get_backend()
    name = name.strip().lower()

    if name in _BACKEND_CACHE:
        return _BACKEND_CACHE[name]

    if name == "numpy":
        from ._numpy import NumpyBackend

        backend: BackendProtocol = NumpyBackend()

    elif name == "jax":
        from ._jax import JaxBackend

        jax_backend = JaxBackend()
        if not jax_backend.is_available:
            msg = (
                "Backend 'jax' was requested for numerical "
                "differentiation but JAX is not installed.  Install JAX "
                "(`pip install jax`) or use set_backend('numpy')."
            )
            raise NumericalError(msg)
        backend = jax_backend

    else:
        msg = f"Unknown backend {name!r}.  Choose 'numpy' or 'jax'."
        raise ValueError(msg)

    _BACKEND_CACHE[name] = backend
    return backend


__all__ = ["BackendProtocol", "resolve_backend"]

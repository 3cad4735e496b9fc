"""Choice of differentiation backend for numerical Hessians.

:func:`~fit_diagnostics.diagnose_hessian` differentiates a gradient
function when it is not handed a precomputed Hessian.  Two backends
can do that:

``"numpy"``
    Centred finite differences through statsmodels.  Works with any
    gradient that accepts and returns arrays, including statsmodels
    ``model.score``.  This is the default.

``"jax"``
    Forward-mode autodiff (``jax.jacfwd``).  Exact, but the gradient
    must be written with ``jax.numpy`` to be traceable, so it is only
    used when asked for.

The active name is taken from :func:`set_backend` if it was called
with ``"jax"`` or ``"numpy"``, otherwise from the
``FIT_DIAGNOSTICS_BACKEND`` environment variable, otherwise
``"numpy"``.  ``set_backend("auto")`` clears the programmatic choice.

Example::

    import fit_diagnostics
    fit_diagnostics.set_backend("jax")
"""

from __future__ import annotations

import os

_ENV_VAR = "FIT_DIAGNOSTICS_BACKEND"
_DEFAULT_BACKEND = "numpy"
_CONCRETE_BACKENDS = ("jax", "numpy")
_VALID_BACKENDS = {*_CONCRETE_BACKENDS, "auto"}

# None until set_backend() picks a concrete backend.
_backend_override: str | None = None


def _backend_from_env() -> str | None:
    value = os.environ.get(_ENV_VAR, "").strip().lower()
    return value if value in _CONCRETE_BACKENDS else None


def get_backend() -> str:
    """Name of the differentiation backend in effect.

    Unrecognised values of ``FIT_DIAGNOSTICS_BACKEND`` are ignored.

    Returns:
        ``"jax"`` or ``"numpy"``.
    """
    if _backend_override in _CONCRETE_BACKENDS:
        return _backend_override
    return _backend_from_env() or _DEFAULT_BACKEND


def set_backend(name: str) -> None:
    """Pin the differentiation backend for this process.

    Args:
        name: ``"jax"``, ``"numpy"`` or ``"auto"``, in any case.
            ``"auto"`` drops the pin so the environment variable and
            the ``"numpy"`` default apply again.

    Raises:
        ValueError: If *name* is none of these.
    """
    global _backend_override
    normalised = name.strip().lower()
    if normalised not in _VALID_BACKENDS:
        raise ValueError(
            f"Unknown backend '{name}'. Choose from: {sorted(_VALID_BACKENDS)}"
        )
    _backend_override = None if normalised == "auto" else normalised

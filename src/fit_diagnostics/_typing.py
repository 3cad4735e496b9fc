"""Shared type aliases for the fit_diagnostics package."""

from collections.abc import Callable, Sequence

import numpy as np
import pandas as pd

# Matrix inputs accepted by the public API.
MatrixLike = np.ndarray | pd.DataFrame | Sequence[Sequence[float]]

# Parameter vectors accepted by the public API.
VectorLike = np.ndarray | pd.Series | Sequence[float]

# Gradient of the objective: parameters -> gradient vector.
GradientFn = Callable[[np.ndarray], np.ndarray]

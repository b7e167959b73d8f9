"""Centering and scaling bound to the training rows they were fit on.

Models only accept :class:`TransformedFeatures`, and the only way to obtain one is
through a :class:`Preprocessor` that was fit on a specific training subset. This
keeps holdout and test rows out of the centering and scaling statistics.
"""

from dataclasses import dataclass, field
from typing import Sequence

import numpy as np
import numpy.typing as npt
import pandas as pd
from sklearn.preprocessing import StandardScaler


@dataclass(frozen=True)
class TransformedFeatures:
    """Feature matrix produced by a fitted :class:`Preprocessor`.

    Attributes:
        values: Transformed feature matrix
        columns: Feature names, in column order
        transform_id: Identity of the preprocessor that produced the matrix
    """
    values: npt.NDArray[np.float64]
    columns: tuple[str, ...]
    transform_id: int = field(repr=False)

    def __len__(self) -> int:
        return self.values.shape[0]


class Preprocessor:
    """Center and/or scale raw predictors using statistics from one training subset."""

    def __init__(self, steps: Sequence[str] = ("center", "scale")):
        unknown = set(steps) - {"center", "scale"}
        if unknown:
            raise ValueError(f"Unknown preprocessing steps: {sorted(unknown)}")
        self.steps = tuple(steps)
        self._scaler = StandardScaler(with_mean="center" in self.steps, with_std="scale" in self.steps)
        self._columns: tuple[str, ...] | None = None

    @property
    def is_fitted(self) -> bool:
        return self._columns is not None

    def fit(self, X: pd.DataFrame) -> "Preprocessor":
        """Learn the transform statistics from raw training features."""
        self._columns = tuple(X.columns)
        self._scaler.fit(X.to_numpy(dtype=float))
        return self

    def transform(self, X: pd.DataFrame) -> TransformedFeatures:
        """Apply the frozen statistics to raw features."""
        if self._columns is None:
            raise RuntimeError("Preprocessor must be fit before transform")
        if tuple(X.columns) != self._columns:
            raise ValueError(f"Expected columns {list(self._columns)}, got {list(X.columns)}")
        values = self._scaler.transform(X.to_numpy(dtype=float))
        return TransformedFeatures(values=values, columns=self._columns, transform_id=id(self))

    def fit_transform(self, X: pd.DataFrame) -> TransformedFeatures:
        return self.fit(X).transform(X)

    @property
    def center_(self) -> npt.NDArray[np.float64] | None:
        return getattr(self._scaler, "mean_", None)

    @property
    def scale_(self) -> npt.NDArray[np.float64] | None:
        return getattr(self._scaler, "scale_", None)

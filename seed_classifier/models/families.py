"""Model families available to the tuning engine.

A family knows how to propose a hyperparameter grid, build an estimator for one
grid point, and rank grid points by complexity for tie-breaking. New families are
added by subclassing :class:`ModelFamily` and decorating with :func:`register_family`.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any

import numpy as np
import numpy.typing as npt
import pandas as pd
from lightgbm import LGBMClassifier
from sklearn.base import ClassifierMixin
from sklearn.metrics import pairwise_distances
from sklearn.neighbors import KNeighborsClassifier
from sklearn.preprocessing import StandardScaler
from sklearn.svm import SVC

from seed_classifier.constants import (
    KNN_FIRST_K,
    KNN_K_STEP,
    LGBM_FIRST_ESTIMATORS,
    LGBM_MAX_DEPTH_CANDIDATES,
    SVM_FIRST_COST_EXPONENT,
    SVM_GAMMA_QUANTILES,
    SVM_MAX_GAMMA_CANDIDATES,
)
from seed_classifier.models.preprocessing import TransformedFeatures

logger = logging.getLogger(__name__)

_REGISTRY: dict[str, type["ModelFamily"]] = {}


class ModelFamily(ABC):
    """Capability contract shared by every tunable model family."""

    name: str = ""

    def __init__(self, max_secondary_candidates: int = SVM_MAX_GAMMA_CANDIDATES):
        # Caps the second grid axis of two-parameter families
        self.max_secondary_candidates = max_secondary_candidates

    @abstractmethod
    def param_grid(self, X: pd.DataFrame, y: pd.Series, tune_length: int) -> list[dict[str, Any]]:
        """Return the ordered candidate grid for the given training data."""

    @abstractmethod
    def build_estimator(self, params: dict[str, Any], random_state: int) -> ClassifierMixin:
        """Create an unfitted estimator for one grid point."""

    @abstractmethod
    def complexity(self, params: dict[str, Any]) -> tuple:
        """Sort key where smaller means a simpler model."""

    def fit(
        self,
        features: TransformedFeatures,
        y: pd.Series | npt.ArrayLike,
        params: dict[str, Any],
        random_state: int,
    ) -> ClassifierMixin:
        if not isinstance(features, TransformedFeatures):
            raise TypeError(f"{self.name} must be trained on TransformedFeatures, got {type(features).__name__}")
        estimator = self.build_estimator(params, random_state)
        estimator.fit(features.values, np.asarray(y))
        return estimator

    def predict(self, estimator: ClassifierMixin, features: TransformedFeatures) -> np.ndarray:
        if not isinstance(features, TransformedFeatures):
            raise TypeError(f"{self.name} must predict from TransformedFeatures, got {type(features).__name__}")
        return estimator.predict(features.values)


def register_family(cls: type[ModelFamily]) -> type[ModelFamily]:
    """Class decorator adding a family to the registry under ``cls.name``."""
    if not cls.name:
        raise ValueError(f"{cls.__name__} must define a non-empty name")
    if cls.name in _REGISTRY and _REGISTRY[cls.name] is not cls:
        raise ValueError(f"Model family '{cls.name}' is already registered by {_REGISTRY[cls.name].__name__}")
    _REGISTRY[cls.name] = cls
    return cls


def get_family(name: str, **options: Any) -> ModelFamily:
    """Instantiate a registered family by name."""
    try:
        return _REGISTRY[name](**options)
    except KeyError:
        raise KeyError(f"Unknown model family '{name}'; registered: {available_families()}") from None


def available_families() -> list[str]:
    return sorted(_REGISTRY)


@register_family
class KNearestNeighborsFamily(ModelFamily):
    """k-nearest neighbours with odd k = 5, 7, 9, ..."""

    name = "knn"

    def param_grid(self, X, y, tune_length):
        return [{"n_neighbors": KNN_FIRST_K + KNN_K_STEP * i} for i in range(tune_length)]

    def build_estimator(self, params, random_state):
        return KNeighborsClassifier(n_neighbors=params["n_neighbors"])

    def complexity(self, params):
        # More neighbours give a smoother decision boundary
        return (-params["n_neighbors"],)


@register_family
class SVMRadialFamily(ModelFamily):
    """Support vector machine with a radial basis kernel.

    The cost grid doubles from 2 ** -2. Kernel widths are spread geometrically
    between the inverse quantiles of squared pairwise distances of the scaled
    training rows, so the range adapts to the data.
    """

    name = "svm_radial"

    def gamma_candidates(self, X: pd.DataFrame, n: int) -> list[float]:
        scaled = StandardScaler().fit_transform(X.to_numpy(dtype=float))
        sq_dist = pairwise_distances(scaled, metric="sqeuclidean")
        sq_dist = sq_dist[np.triu_indices_from(sq_dist, k=1)]
        sq_dist = sq_dist[sq_dist > 0]
        if sq_dist.size == 0:
            return [1.0 / max(X.shape[1], 1)]
        lo_q, hi_q = np.quantile(sq_dist, SVM_GAMMA_QUANTILES)
        if n == 1 or np.isclose(lo_q, hi_q):
            return [float(1.0 / np.median(sq_dist))]
        return [float(g) for g in np.geomspace(1.0 / hi_q, 1.0 / lo_q, n)]

    def param_grid(self, X, y, tune_length):
        costs = [2.0 ** (SVM_FIRST_COST_EXPONENT + i) for i in range(tune_length)]
        gammas = self.gamma_candidates(X, min(tune_length, self.max_secondary_candidates))
        return [{"C": c, "gamma": g} for g in gammas for c in costs]

    def build_estimator(self, params, random_state):
        return SVC(kernel="rbf", C=params["C"], gamma=params["gamma"], random_state=random_state)

    def complexity(self, params):
        return (params["C"], params["gamma"])


@register_family
class GradientBoostingFamily(ModelFamily):
    """LightGBM gradient boosted trees over boosting rounds and tree depth."""

    name = "lgbm"

    def param_grid(self, X, y, tune_length):
        rounds = [LGBM_FIRST_ESTIMATORS * (i + 1) for i in range(tune_length)]
        depths = LGBM_MAX_DEPTH_CANDIDATES[:self.max_secondary_candidates]
        return [{"n_estimators": r, "max_depth": d} for d in depths for r in rounds]

    def build_estimator(self, params, random_state):
        return LGBMClassifier(
            n_estimators=params["n_estimators"],
            max_depth=params["max_depth"],
            num_leaves=2 ** params["max_depth"],
            learning_rate=0.1,
            min_child_samples=5,
            random_state=random_state,
            n_jobs=1,
            verbose=-1,
        )

    def complexity(self, params):
        return (params["max_depth"], params["n_estimators"])

"""Repeated stratified k-fold hyperparameter search.

Every (repeat, fold, candidate) combination is an independent task executed by a
joblib worker pool. Tasks receive the raw training rows of their fold, fit the
preprocessing on those rows only, and return a pair of scores for the holdout.
Results are assembled in task order after the pool finishes, so the outcome does
not depend on the number of workers. An interrupted search returns nothing.
"""

import hashlib
import logging
import warnings
from dataclasses import dataclass
from typing import Any, Optional, Sequence

import joblib
import numpy as np
import numpy.typing as npt
import pandas as pd
from joblib import Parallel, delayed
from sklearn.base import ClassifierMixin
from sklearn.exceptions import ConvergenceWarning
from sklearn.metrics import accuracy_score, cohen_kappa_score
from sklearn.model_selection import StratifiedKFold

from seed_classifier.data.partition import PartitionError
from seed_classifier.models.families import ModelFamily
from seed_classifier.models.preprocessing import Preprocessor

logger = logging.getLogger(__name__)

METRICS = ("Accuracy", "Kappa")


class FittingFailure(Exception):
    """Raised when no candidate of a model family can be fit for some resample."""

    def __init__(self, family: str, message: str, repeat: Optional[int] = None, fold: Optional[int] = None):
        self.family = family
        self.repeat = repeat
        self.fold = fold
        where = f" (repeat {repeat}, fold {fold})" if repeat is not None else ""
        super().__init__(f"{family}{where}: {message}")


@dataclass(frozen=True)
class ResampleSplit:
    """One fold of one repeat: row positions into the training partition."""
    repeat: int
    fold: int
    train_idx: npt.NDArray[np.int64]
    holdout_idx: npt.NDArray[np.int64]
    seed: int


@dataclass(frozen=True)
class ResamplingPlan:
    """Fixed fold assignments shared by every model family being compared."""
    n_folds: int
    n_repeats: int
    random_state: int
    splits: tuple[ResampleSplit, ...]

    @property
    def fingerprint(self) -> str:
        digest = hashlib.sha256()
        for split in self.splits:
            digest.update(f"{split.repeat}:{split.fold}:".encode())
            digest.update(np.ascontiguousarray(split.holdout_idx, dtype=np.int64).tobytes())
        return digest.hexdigest()


def make_resampling_plan(
    y: pd.Series | npt.ArrayLike,
    n_folds: int = 5,
    n_repeats: int = 5,
    random_state: int = 42,
) -> ResamplingPlan:
    """Generate repeated stratified k-fold assignments from a single seed.

    Raises:
        PartitionError: If some class has fewer samples than folds
    """
    y = np.asarray(y)
    classes, counts = np.unique(y, return_counts=True)
    too_small = {str(c): int(n) for c, n in zip(classes, counts) if n < n_folds}
    if too_small:
        raise PartitionError(f"Cannot build {n_folds} stratified folds; class sizes too small: {too_small}")

    rng = np.random.default_rng(random_state)
    repeat_seeds = rng.integers(0, 2**31 - 1, size=n_repeats)
    task_seeds = rng.integers(0, 2**31 - 1, size=(n_repeats, n_folds))

    splits = []
    placeholder = np.zeros(len(y))
    for r, seed in enumerate(repeat_seeds):
        skf = StratifiedKFold(n_splits=n_folds, shuffle=True, random_state=int(seed))
        for f, (train_idx, holdout_idx) in enumerate(skf.split(placeholder, y)):
            splits.append(ResampleSplit(
                repeat=r + 1,
                fold=f + 1,
                train_idx=train_idx,
                holdout_idx=holdout_idx,
                seed=int(task_seeds[r, f]),
            ))

    return ResamplingPlan(n_folds=n_folds, n_repeats=n_repeats, random_state=random_state, splits=tuple(splits))


@dataclass(frozen=True)
class FittedModel:
    """A trained estimator with the preprocessing fitted on the same training rows."""
    family: ModelFamily
    params: dict[str, Any]
    preprocessor: Preprocessor
    estimator: ClassifierMixin
    feature_names: tuple[str, ...]

    @property
    def family_name(self) -> str:
        return self.family.name

    @property
    def classes(self) -> list:
        return list(self.estimator.classes_)

    def predict(self, X: pd.DataFrame) -> np.ndarray:
        """Predict labels for raw features using the frozen training transform."""
        features = self.preprocessor.transform(X[list(self.feature_names)])
        return self.family.predict(self.estimator, features)


@dataclass(frozen=True)
class TuningResult:
    """Everything a search produced for one model family.

    Attributes:
        family: Name of the tuned family
        metric: Metric used to select the best candidate
        best_candidate: Position of the selected candidate in the grid
        best_params: Selected hyperparameters
        model: Final model refit on the whole training partition
        metrics: One row per (repeat, fold, candidate) with Accuracy, Kappa and any error
        summary: One row per candidate with mean and standard deviation of each metric
        plan: Resampling plan the search ran on
    """
    family: str
    metric: str
    best_candidate: int
    best_params: dict[str, Any]
    model: FittedModel
    metrics: pd.DataFrame
    summary: pd.DataFrame
    plan: ResamplingPlan

    def resamples(self) -> pd.DataFrame:
        """Per-fold scores of the selected candidate."""
        rows = self.metrics[self.metrics["candidate"] == self.best_candidate]
        return rows[["repeat", "fold", *METRICS]].reset_index(drop=True)


def _evaluate_candidate(
    family: ModelFamily,
    X: pd.DataFrame,
    y: pd.Series,
    split: ResampleSplit,
    candidate: int,
    params: dict[str, Any],
    preprocess: Sequence[str],
) -> dict[str, Any]:
    row = {"repeat": split.repeat, "fold": split.fold, "candidate": candidate}
    X_fit, y_fit = X.iloc[split.train_idx], y.iloc[split.train_idx]
    X_hold, y_hold = X.iloc[split.holdout_idx], y.iloc[split.holdout_idx]

    try:
        with warnings.catch_warnings():
            warnings.simplefilter("error", ConvergenceWarning)
            preprocessor = Preprocessor(preprocess).fit(X_fit)
            estimator = family.fit(preprocessor.transform(X_fit), y_fit, params, split.seed)
            y_pred = family.predict(estimator, preprocessor.transform(X_hold))
    except Exception as e:
        row.update({"Accuracy": np.nan, "Kappa": np.nan, "error": f"{type(e).__name__}: {e}"})
        return row

    row.update({
        "Accuracy": accuracy_score(y_hold, y_pred),
        "Kappa": cohen_kappa_score(y_hold, y_pred),
        "error": None,
    })
    return row


def _resolve_workers(n_jobs: Optional[int]) -> int:
    return joblib.cpu_count() if n_jobs is None else n_jobs


def tune_model(
    family: ModelFamily,
    X: pd.DataFrame,
    y: pd.Series,
    plan: ResamplingPlan,
    preprocess: Sequence[str] = ("center", "scale"),
    tune_length: int = 10,
    metric: str = "Accuracy",
    n_jobs: Optional[int] = None,
    random_state: int = 42,
) -> TuningResult:
    """Search a family's grid with the given resampling plan and refit the winner.

    The selected candidate has the best mean ``metric`` over all resamples, ignoring
    failed cells. Ties go to the candidate with the smallest ``family.complexity``,
    then to the earliest grid position.

    Args:
        family: Model family to tune
        X: Raw training features
        y: Training labels
        plan: Fold assignments over the rows of ``X``
        preprocess: Preprocessing steps fit inside every fold
        tune_length: Grid size passed to the family
        metric: "Accuracy" or "Kappa"
        n_jobs: Worker count; None uses every available core
        random_state: Seed of the final refit

    Returns:
        TuningResult with the refit model and the full metric table

    Raises:
        FittingFailure: If every candidate fails for some (repeat, fold), or the final refit fails
    """
    if metric not in METRICS:
        raise ValueError(f"metric must be one of {METRICS}, got {metric!r}")
    X = X.reset_index(drop=True)
    y = y.reset_index(drop=True)

    grid = family.param_grid(X, y, tune_length)
    if not grid:
        raise FittingFailure(family.name, "empty hyperparameter grid")

    n_workers = _resolve_workers(n_jobs)
    n_tasks = len(plan.splits) * len(grid)
    logger.info(
        f"Tuning {family.name}: {len(grid)} candidates x {plan.n_repeats} repeats x "
        f"{plan.n_folds} folds = {n_tasks} fits on {n_workers} workers"
    )

    rows = Parallel(n_jobs=n_workers)(
        delayed(_evaluate_candidate)(family, X, y, split, candidate, params, preprocess)
        for split in plan.splits
        for candidate, params in enumerate(grid)
    )
    metrics = pd.DataFrame(rows)
    params_table = pd.DataFrame(grid)
    metrics = metrics.join(params_table, on="candidate")

    failed = metrics[metrics["error"].notna()]
    for _, row in failed.iterrows():
        logger.debug(
            f"{family.name} candidate {grid[row['candidate']]} failed on repeat {row['repeat']}, "
            f"fold {row['fold']}: {row['error']}"
        )
    if len(failed):
        logger.warning(f"{family.name}: {len(failed)} of {n_tasks} fits failed and were excluded")

    for (repeat, fold), group in metrics.groupby(["repeat", "fold"]):
        if group["Accuracy"].isna().all():
            first_error = group["error"].iloc[0]
            raise FittingFailure(family.name, f"all {len(grid)} candidates failed; first error: {first_error}",
                                 repeat=repeat, fold=fold)

    summary = _summarize(metrics, params_table)
    best_candidate = _select_best(summary, grid, family, metric)
    best_params = grid[best_candidate]
    logger.info(
        f"Selected {family.name} {best_params}: "
        f"Accuracy={summary.loc[best_candidate, 'Accuracy']:.4f}, Kappa={summary.loc[best_candidate, 'Kappa']:.4f}"
    )

    preprocessor = Preprocessor(preprocess).fit(X)
    try:
        estimator = family.fit(preprocessor.transform(X), y, best_params, random_state)
    except Exception as e:
        raise FittingFailure(family.name, f"final refit with {best_params} failed: {e}") from e

    model = FittedModel(
        family=family,
        params=best_params,
        preprocessor=preprocessor,
        estimator=estimator,
        feature_names=tuple(X.columns),
    )
    return TuningResult(
        family=family.name,
        metric=metric,
        best_candidate=best_candidate,
        best_params=best_params,
        model=model,
        metrics=metrics,
        summary=summary,
        plan=plan,
    )


def _summarize(metrics: pd.DataFrame, params_table: pd.DataFrame) -> pd.DataFrame:
    grouped = metrics.groupby("candidate")
    summary = pd.DataFrame({
        "Accuracy": grouped["Accuracy"].mean(),
        "Kappa": grouped["Kappa"].mean(),
        "AccuracySD": grouped["Accuracy"].std(),
        "KappaSD": grouped["Kappa"].std(),
        "n_missing": grouped["Accuracy"].apply(lambda s: int(s.isna().sum())),
    })
    return params_table.join(summary)


def _select_best(summary: pd.DataFrame, grid: list[dict[str, Any]], family: ModelFamily, metric: str) -> int:
    valid = summary.index[summary[metric].notna()]
    if len(valid) == 0:
        raise FittingFailure(family.name, f"no candidate produced a defined {metric}")
    ranked = sorted(valid, key=lambda c: (-summary.loc[c, metric], family.complexity(grid[c]), c))
    return int(ranked[0])

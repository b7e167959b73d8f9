"""End-to-end workflow: load, partition, screen, tune, compare, evaluate."""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import pandas as pd

from seed_classifier.config import Config
from seed_classifier.data import get_dataset, partition_dataset, split_features_target
from seed_classifier.models import (
    EvaluationResults,
    FittingFailure,
    ModelComparison,
    TuningResult,
    compare_models,
    evaluate_model,
    get_family,
    make_resampling_plan,
    tune_model,
)
from seed_classifier.screening import ScreeningReport, screen_predictors
from seed_classifier.validation import validate_train_test_split

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PipelineResults:
    """Outputs of every workflow stage."""
    split: dict
    screening: ScreeningReport
    features: list[str]
    tuning: dict[str, Optional[TuningResult]]
    comparison: ModelComparison
    best_family: str
    evaluation: EvaluationResults


def select_best_family(comparison: ModelComparison, metric: str = "Accuracy") -> str:
    """Family with the highest mean resampled metric; earlier families win ties."""
    means = comparison.values.groupby("model", sort=False)[metric].mean()
    return str(means.idxmax())


def tune_families(
    cfg: Config,
    X_train: pd.DataFrame,
    y_train: pd.Series,
) -> dict[str, Optional[TuningResult]]:
    """Tune every configured family on one shared resampling plan.

    A family whose search raises FittingFailure is logged and recorded as None.
    """
    tuning_cfg = cfg.tuning
    plan = make_resampling_plan(
        y_train,
        n_folds=tuning_cfg.cv_folds,
        n_repeats=tuning_cfg.cv_repeats,
        random_state=cfg.random_state,
    )

    results: dict[str, Optional[TuningResult]] = {}
    for name in tuning_cfg.families:
        family = get_family(name, max_secondary_candidates=tuning_cfg.max_secondary_candidates)
        try:
            results[name] = tune_model(
                family,
                X_train,
                y_train,
                plan,
                preprocess=tuning_cfg.preprocess,
                tune_length=tuning_cfg.tune_length,
                metric=tuning_cfg.metric,
                n_jobs=tuning_cfg.n_jobs,
                random_state=cfg.random_state,
            )
        except FittingFailure as e:
            logger.error(f"Tuning failed for {name}: {e}")
            results[name] = None
    return results


def run_pipeline(cfg: Config, data_path: Optional[str | Path] = None) -> PipelineResults:
    df = get_dataset(cfg, data_path)
    logger.info(f"Dataset: {len(df)} samples, classes: {df[cfg.dataset.target_col].value_counts().to_dict()}")

    X, y = split_features_target(df, cfg)
    X_train, X_test, y_train, y_test = partition_dataset(
        X, y, train_fraction=cfg.partition.train_fraction, random_state=cfg.random_state
    )
    split = validate_train_test_split(X_train, X_test, y_train, y_test)

    screening = screen_predictors(
        X_train,
        freq_cut=cfg.screening.freq_cut,
        unique_cut=cfg.screening.unique_cut,
        correlation_cutoff=cfg.screening.correlation_cutoff,
    )
    features = list(X_train.columns)
    if cfg.screening.drop_correlated and screening.correlated_names:
        features = [c for c in features if c not in screening.correlated_names]
        logger.info(f"Dropping correlated predictors {screening.correlated_names}; keeping {features}")
    X_train, X_test = X_train[features], X_test[features]

    tuning = tune_families(cfg, X_train, y_train)
    comparison = compare_models(tuning)
    logger.info("\nResampling summary:\n" + comparison.summary().to_string(float_format="{:.4f}".format))

    best_family = select_best_family(comparison, metric=cfg.tuning.metric)
    logger.info(f"Best family by resampled {cfg.tuning.metric}: {best_family}")

    evaluation = evaluate_model(tuning[best_family].model, X_test, y_test, labels=cfg.dataset.class_labels)

    return PipelineResults(
        split=split,
        screening=screening,
        features=features,
        tuning=tuning,
        comparison=comparison,
        best_family=best_family,
        evaluation=evaluation,
    )

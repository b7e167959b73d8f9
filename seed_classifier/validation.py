"""Data validation module for ensuring dataset quality and integrity.

This module provides validation functions to check:
- Schema compliance (expected columns and types)
- Missing and infinite values
- Target variable properties
- Train/test split proportions

Usage:
    from seed_classifier.validation import validate_dataset, DataSchemaError

    try:
        validate_dataset(df, config)
    except DataSchemaError as e:
        print(f"Validation failed: {e}")
"""

import logging
from typing import Any, Iterable

import numpy as np
import pandas as pd

from seed_classifier.config import Config

logger = logging.getLogger(__name__)


class DataSchemaError(Exception):
    """Raised when a loaded table does not match the expected columns, types or labels."""

    def __init__(self, message: str, stage: str = "load"):
        self.stage = stage
        super().__init__(f"[{stage}] {message}")


def validate_schema(df: pd.DataFrame, expected_cols: list[str], strict: bool = True, stage: str = "load") -> None:
    """Validate that DataFrame has expected columns.

    Args:
        df: DataFrame to validate
        expected_cols: List of expected column names
        strict: If True, DataFrame must have exactly these columns.
                If False, only checks that expected columns exist.
        stage: Pipeline stage reported in error messages

    Raises:
        DataSchemaError: If schema validation fails
    """
    df_cols = set(df.columns)
    expected_cols_set = set(expected_cols)

    missing_cols = expected_cols_set - df_cols
    if missing_cols:
        raise DataSchemaError(f"Missing required columns: {sorted(missing_cols)}", stage=stage)

    if strict:
        extra_cols = df_cols - expected_cols_set
        if extra_cols:
            raise DataSchemaError(f"Unexpected columns found: {sorted(extra_cols)}", stage=stage)

    logger.debug(f"Schema validation passed: {len(expected_cols)} columns verified")


def validate_target_column(
    df: pd.DataFrame,
    target_col: str,
    expected_values: Iterable[Any],
    min_class_samples: int = 2,
    stage: str = "load",
) -> None:
    """Validate target column properties.

    Args:
        df: DataFrame containing target column
        target_col: Name of target column
        expected_values: Allowed label values
        min_class_samples: Minimum samples required per class
        stage: Pipeline stage reported in error messages

    Raises:
        DataSchemaError: If target validation fails
    """
    if target_col not in df.columns:
        raise DataSchemaError(f"Target column '{target_col}' not found in DataFrame", stage=stage)

    nan_count = df[target_col].isna().sum()
    if nan_count > 0:
        raise DataSchemaError(f"Target column contains {nan_count} NaN values", stage=stage)

    expected = set(expected_values)
    unique_values = set(df[target_col].unique())
    if not unique_values.issubset(expected):
        raise DataSchemaError(
            f"Target column contains unexpected values. "
            f"Expected: {sorted(expected)}, Found: {sorted(map(str, unique_values - expected))}",
            stage=stage,
        )

    value_counts = df[target_col].value_counts()
    for class_val, count in value_counts.items():
        if count < min_class_samples:
            raise DataSchemaError(
                f"Class {class_val} has only {count} samples (minimum: {min_class_samples})",
                stage=stage,
            )

    logger.debug(f"Target validation passed: {value_counts.to_dict()}")


def validate_feature_types(df: pd.DataFrame, numeric_cols: list[str], stage: str = "load") -> None:
    """Validate that specified columns are numeric.

    Raises:
        DataSchemaError: If any column is missing or not numeric
    """
    for col in numeric_cols:
        if col not in df.columns:
            raise DataSchemaError(f"Feature column '{col}' not found in DataFrame", stage=stage)

        if not pd.api.types.is_numeric_dtype(df[col]):
            raise DataSchemaError(f"Feature '{col}' is not numeric (type: {df[col].dtype})", stage=stage)

    logger.debug(f"Feature type validation passed for {len(numeric_cols)} columns")


def validate_complete_features(df: pd.DataFrame, feature_cols: list[str], stage: str = "load") -> None:
    """Check that every sample carries a finite value for every feature.

    Raises:
        DataSchemaError: If NaN or infinite values are found
    """
    for col in feature_cols:
        nan_count = df[col].isna().sum()
        if nan_count > 0:
            raise DataSchemaError(f"Feature '{col}' contains {nan_count} missing values", stage=stage)

        inf_count = np.isinf(df[col]).sum()
        if inf_count > 0:
            raise DataSchemaError(f"Feature '{col}' contains {inf_count} infinite values", stage=stage)


def validate_dataset(df: pd.DataFrame, cfg: Config, stage: str = "load") -> dict[str, Any]:
    """Validate a loaded seeds table against the configured schema.

    Args:
        df: DataFrame to validate
        cfg: Configuration object
        stage: Pipeline stage reported in log and error messages

    Returns:
        Dictionary with validation results and statistics

    Raises:
        DataSchemaError: If any validation check fails
    """
    logger.info(f"Starting dataset validation (stage: {stage})...")

    feature_cols = cfg.dataset.feature_cols
    target_col = cfg.dataset.target_col

    if df.empty:
        raise DataSchemaError("Dataset contains no rows", stage=stage)

    validate_schema(df, feature_cols + [target_col], strict=True, stage=stage)
    validate_feature_types(df, feature_cols, stage=stage)
    validate_complete_features(df, feature_cols, stage=stage)
    validate_target_column(df, target_col, expected_values=cfg.dataset.class_labels, stage=stage)

    results = {
        "stage": stage,
        "n_rows": len(df),
        "n_cols": len(df.columns),
        "target_distribution": df[target_col].value_counts().to_dict(),
        "validation_passed": True,
    }

    logger.info(f"✓ Validation passed: {results['n_rows']:,} rows, {results['n_cols']} columns")
    return results


def validate_train_test_split(
    X_train: pd.DataFrame,
    X_test: pd.DataFrame,
    y_train: pd.Series,
    y_test: pd.Series,
) -> dict[str, Any]:
    """Summarize a train/test split and check the two sides are disjoint and aligned.

    Returns:
        Dictionary with split statistics

    Raises:
        DataSchemaError: If feature columns differ or a row appears on both sides
    """
    if list(X_train.columns) != list(X_test.columns):
        raise DataSchemaError("Train and test feature columns do not match", stage="partition")

    overlap = X_train.index.intersection(X_test.index)
    if len(overlap) > 0:
        raise DataSchemaError(f"{len(overlap)} rows appear in both train and test", stage="partition")

    total_samples = len(X_train) + len(X_test)
    test_ratio = len(X_test) / total_samples

    results = {
        "total_samples": total_samples,
        "train_samples": len(X_train),
        "test_samples": len(X_test),
        "test_ratio": test_ratio,
        "train_class_distribution": y_train.value_counts().to_dict(),
        "test_class_distribution": y_test.value_counts().to_dict(),
    }

    logger.info(
        f"✓ Split validation passed: {len(X_train):,} train, {len(X_test):,} test "
        f"({test_ratio:.1%} test ratio)"
    )

    return results

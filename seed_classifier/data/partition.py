"""Stratified train/test partitioning."""

import logging

import numpy as np
import numpy.typing as npt
import pandas as pd

logger = logging.getLogger(__name__)


class PartitionError(Exception):
    """Raised when the labels cannot be stratified at the requested train fraction."""
    pass


def stratified_split(
    labels: pd.Series | npt.ArrayLike,
    train_fraction: float = 0.7,
    random_state: int = 42,
) -> npt.NDArray[np.bool_]:
    """Draw a stratified training mask.

    Within each class ``round(train_fraction * n_class)`` samples are drawn without
    replacement, so the per-class train proportion differs from ``train_fraction``
    by at most half a sample.

    Args:
        labels: Class label of every sample
        train_fraction: Fraction of each class assigned to the training side
        random_state: Seed of the generator that picks the training rows

    Returns:
        Boolean array, True for training rows

    Raises:
        PartitionError: If the fraction is outside (0, 1) or a class is too small
            to place at least one sample on each side
    """
    if not 0.0 < train_fraction < 1.0:
        raise PartitionError(f"train_fraction must be in (0, 1), got {train_fraction}")

    y = np.asarray(labels)
    if y.size == 0:
        raise PartitionError("Cannot partition an empty label sequence")

    rng = np.random.default_rng(random_state)
    mask = np.zeros(y.shape[0], dtype=bool)

    classes, counts = np.unique(y, return_counts=True)
    for cls, n_class in zip(classes, counts):
        n_train = int(np.floor(train_fraction * n_class + 0.5))
        if n_class < 2 or n_train == 0 or n_train == n_class:
            raise PartitionError(
                f"Class '{cls}' has {n_class} samples; a {train_fraction:.0%} split would put "
                f"{n_train} in train and {n_class - n_train} in test"
            )
        class_idx = np.flatnonzero(y == cls)
        mask[rng.choice(class_idx, size=n_train, replace=False)] = True

    logger.debug(f"Stratified split: {mask.sum()} train / {(~mask).sum()} test over {len(classes)} classes")
    return mask


def partition_dataset(
    X: pd.DataFrame,
    y: pd.Series,
    train_fraction: float = 0.7,
    random_state: int = 42,
) -> tuple[pd.DataFrame, pd.DataFrame, pd.Series, pd.Series]:
    """Apply :func:`stratified_split` and return ``X_train, X_test, y_train, y_test``."""
    mask = stratified_split(y, train_fraction=train_fraction, random_state=random_state)
    return X[mask], X[~mask], y[mask], y[~mask]

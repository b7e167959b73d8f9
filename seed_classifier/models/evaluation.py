"""Test-set evaluation: confusion matrix and derived classification statistics."""

import logging
from typing import Any, Optional, Sequence, TypedDict

import numpy as np
import numpy.typing as npt
import pandas as pd
from scipy import stats
from sklearn.metrics import classification_report, confusion_matrix

from seed_classifier.constants import CONFIDENCE_LEVEL
from seed_classifier.models.tuning import FittedModel

logger = logging.getLogger(__name__)


class OverallStats(TypedDict):
    """Overall statistics of a confusion matrix.

    Attributes:
        accuracy: Fraction of correctly classified samples
        accuracy_lower: Lower bound of the exact binomial interval for accuracy
        accuracy_upper: Upper bound of the exact binomial interval for accuracy
        no_information_rate: Share of the largest true class
        p_value_acc_greater_nir: One-sided binomial test of accuracy > no information rate
        kappa: Cohen's kappa
    """
    accuracy: float
    accuracy_lower: float
    accuracy_upper: float
    no_information_rate: float
    p_value_acc_greater_nir: float
    kappa: float


class EvaluationResults(TypedDict):
    """Type definition for model evaluation results.

    Attributes:
        y_pred: Predicted labels for the test rows
        confusion: Counts with true labels as rows and predicted labels as columns
        overall: Accuracy, its confidence interval, no information rate and kappa
        by_class: One row per class with one-vs-rest statistics
    """
    y_pred: npt.NDArray[Any]
    confusion: pd.DataFrame
    overall: OverallStats
    by_class: pd.DataFrame


def _ratio(num: float, den: float) -> float:
    return float(num / den) if den else float("nan")


def confusion_matrix_stats(
    matrix: pd.DataFrame | npt.ArrayLike,
    labels: Optional[Sequence[Any]] = None,
    confidence: float = CONFIDENCE_LEVEL,
) -> tuple[OverallStats, pd.DataFrame]:
    """Derive overall and per-class statistics from a square count matrix.

    Rows of ``matrix`` are true classes and columns are predicted classes.

    Args:
        matrix: Square matrix of non-negative counts
        labels: Class names; taken from the DataFrame index when omitted
        confidence: Level of the Clopper-Pearson interval around accuracy

    Returns:
        Tuple of (overall statistics, per-class DataFrame)

    Raises:
        ValueError: If the matrix is not square or holds no samples
    """
    if labels is None and isinstance(matrix, pd.DataFrame):
        labels = list(matrix.index)
    m = np.asarray(matrix, dtype=np.int64)
    if m.ndim != 2 or m.shape[0] != m.shape[1]:
        raise ValueError(f"Confusion matrix must be square, got shape {m.shape}")
    if labels is None:
        labels = list(range(m.shape[0]))

    total = int(m.sum())
    if total == 0:
        raise ValueError("Confusion matrix holds no samples")

    correct = int(np.trace(m))
    row_sums = m.sum(axis=1)
    col_sums = m.sum(axis=0)

    accuracy = correct / total
    test = stats.binomtest(correct, total)
    ci = test.proportion_ci(confidence_level=confidence, method="exact")
    nir = float(row_sums.max() / total)
    p_nir = float(stats.binomtest(correct, total, p=nir, alternative="greater").pvalue)
    expected = float((row_sums * col_sums).sum() / total**2)
    kappa = _ratio(accuracy - expected, 1.0 - expected)

    overall: OverallStats = {
        "accuracy": float(accuracy),
        "accuracy_lower": float(ci.low),
        "accuracy_upper": float(ci.high),
        "no_information_rate": nir,
        "p_value_acc_greater_nir": p_nir,
        "kappa": kappa,
    }

    rows = []
    for i, label in enumerate(labels):
        tp = m[i, i]
        fn = row_sums[i] - tp
        fp = col_sums[i] - tp
        tn = total - tp - fn - fp
        sensitivity = _ratio(tp, tp + fn)
        specificity = _ratio(tn, tn + fp)
        rows.append({
            "class": label,
            "sensitivity": sensitivity,
            "specificity": specificity,
            "precision": _ratio(tp, tp + fp),
            "neg_pred_value": _ratio(tn, tn + fn),
            "prevalence": _ratio(tp + fn, total),
            "detection_rate": _ratio(tp, total),
            "detection_prevalence": _ratio(tp + fp, total),
            "balanced_accuracy": (sensitivity + specificity) / 2,
        })

    return overall, pd.DataFrame(rows).set_index("class")


def evaluate_model(
    model: FittedModel,
    X_test: pd.DataFrame,
    y_test: pd.Series,
    labels: Optional[Sequence[Any]] = None,
    confidence: float = CONFIDENCE_LEVEL,
) -> EvaluationResults:
    """Predict the test partition and summarize the result.

    The model's stored preprocessing is applied as fitted on the training partition.

    Args:
        model: Final model from the tuning engine
        X_test: Raw test features
        y_test: True test labels
        labels: Class order of the confusion matrix; defaults to the model's classes
        confidence: Level of the accuracy confidence interval

    Returns:
        EvaluationResults dictionary
    """
    y_pred = model.predict(X_test)
    labels = list(labels) if labels is not None else model.classes

    cm = confusion_matrix(y_test, y_pred, labels=labels)
    confusion = pd.DataFrame(
        cm,
        index=pd.Index(labels, name="true"),
        columns=pd.Index(labels, name="predicted"),
    )
    overall, by_class = confusion_matrix_stats(confusion, confidence=confidence)

    logger.info(
        f"{model.family_name} test accuracy: {overall['accuracy']:.4f} "
        f"({confidence:.0%} CI {overall['accuracy_lower']:.4f}-{overall['accuracy_upper']:.4f}), "
        f"Kappa: {overall['kappa']:.4f}"
    )
    logger.info("\nClassification report:\n" + classification_report(y_test, y_pred, labels=labels, zero_division=0))

    return {
        "y_pred": y_pred,
        "confusion": confusion,
        "overall": overall,
        "by_class": by_class,
    }

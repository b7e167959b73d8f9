"""Predictor quality screening: near-zero-variance and high-correlation checks.

Both checks are advisory. They report which predictors look uninformative or
redundant on the training partition; dropping them is left to the caller.
"""

import logging
from dataclasses import dataclass

import numpy as np
import numpy.typing as npt
import pandas as pd

from seed_classifier.constants import CORRELATION_CUTOFF, NZV_FREQ_CUT, NZV_UNIQUE_CUT

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScreeningReport:
    """Result of screening the training predictors.

    Attributes:
        near_zero_variance: One row per predictor with freq_ratio, percent_unique, zero_var, nzv
        correlation: Pearson correlation matrix of the predictors
        correlated_indices: Column indices recommended for removal, in removal order
        correlated_names: Column names matching ``correlated_indices``
    """
    near_zero_variance: pd.DataFrame
    correlation: pd.DataFrame
    correlated_indices: list[int]
    correlated_names: list[str]

    @property
    def nzv_names(self) -> list[str]:
        return self.near_zero_variance.index[self.near_zero_variance["nzv"]].tolist()


def near_zero_variance(
    X: pd.DataFrame,
    freq_cut: float = NZV_FREQ_CUT,
    unique_cut: float = NZV_UNIQUE_CUT,
) -> pd.DataFrame:
    """Compute near-zero-variance statistics for every predictor.

    For each column:
    - freq_ratio: count of the most frequent value over the count of the second most
      frequent value (0 when the column holds a single value)
    - percent_unique: distinct values as a percentage of the sample count
    - zero_var: the column holds a single distinct value
    - nzv: zero_var, or freq_ratio > freq_cut and percent_unique < unique_cut

    Missing values are ignored when counting.

    Args:
        X: Predictor table
        freq_cut: Frequency ratio threshold
        unique_cut: Distinct value percentage threshold

    Returns:
        DataFrame indexed by predictor name
    """
    rows = []
    for col in X.columns:
        counts = X[col].value_counts(dropna=True)
        n_distinct = len(counts)
        if n_distinct <= 1:
            freq_ratio = 0.0
        else:
            top_two = counts.nlargest(2).to_numpy()
            freq_ratio = float(top_two[0] / top_two[1])
        percent_unique = 100.0 * n_distinct / len(X) if len(X) else 0.0
        zero_var = n_distinct <= 1
        nzv = zero_var or (freq_ratio > freq_cut and percent_unique < unique_cut)
        rows.append({
            "predictor": col,
            "freq_ratio": freq_ratio,
            "percent_unique": percent_unique,
            "zero_var": zero_var,
            "nzv": nzv,
        })

    result = pd.DataFrame(rows).set_index("predictor")
    flagged = result.index[result["nzv"]].tolist()
    if flagged:
        logger.warning(f"Near-zero-variance predictors: {flagged}")
    else:
        logger.info("No near-zero-variance predictors found")
    return result


def find_correlation(corr: pd.DataFrame | npt.ArrayLike, cutoff: float = CORRELATION_CUTOFF) -> list[int]:
    """Greedily pick predictors to drop until no pairwise correlation exceeds the cutoff.

    Each round takes the remaining pair with the largest absolute correlation
    (ties go to the lowest row, then column, index) and drops whichever member has
    the larger mean absolute correlation with the other remaining predictors. On
    equal means the later column is dropped.

    Args:
        corr: Square, symmetric correlation matrix
        cutoff: Absolute correlation above which a pair is redundant

    Returns:
        Column indices to remove, in the order they were removed

    Raises:
        ValueError: If the matrix is not square and symmetric
    """
    x = np.abs(np.asarray(corr, dtype=float))
    if x.ndim != 2 or x.shape[0] != x.shape[1]:
        raise ValueError(f"Correlation matrix must be square, got shape {x.shape}")
    if not np.allclose(x, x.T, equal_nan=True):
        raise ValueError("Correlation matrix is not symmetric")

    n = x.shape[0]
    remaining = list(range(n))
    removed: list[int] = []

    while len(remaining) > 1:
        sub = x[np.ix_(remaining, remaining)]
        upper = np.triu(np.nan_to_num(sub, nan=0.0), k=1)
        # argmax returns the first maximum in row-major order
        flat = int(np.argmax(upper))
        i, j = divmod(flat, len(remaining))
        if upper[i, j] <= cutoff:
            break

        off_diag = sub.copy()
        np.fill_diagonal(off_diag, np.nan)
        mean_i = np.nanmean(off_diag[i])
        mean_j = np.nanmean(off_diag[j])
        drop = i if mean_i > mean_j else j

        removed.append(remaining[drop])
        del remaining[drop]

    return removed


def screen_predictors(
    X: pd.DataFrame,
    freq_cut: float = NZV_FREQ_CUT,
    unique_cut: float = NZV_UNIQUE_CUT,
    correlation_cutoff: float = CORRELATION_CUTOFF,
) -> ScreeningReport:
    """Run both screening checks over the training predictors."""
    nzv = near_zero_variance(X, freq_cut=freq_cut, unique_cut=unique_cut)

    corr = X.corr(method="pearson")
    indices = find_correlation(corr, cutoff=correlation_cutoff)
    names = [X.columns[i] for i in indices]
    logger.info(f"Predictors correlated above {correlation_cutoff}: {names or 'none'}")

    return ScreeningReport(
        near_zero_variance=nzv,
        correlation=corr,
        correlated_indices=indices,
        correlated_names=names,
    )

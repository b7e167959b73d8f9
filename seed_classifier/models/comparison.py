"""Cross-validation comparison of tuned model families."""

import logging
from dataclasses import dataclass, field
from itertools import combinations
from typing import Mapping, Optional

import numpy as np
import pandas as pd
from scipy import stats

from seed_classifier.models.tuning import METRICS, TuningResult

logger = logging.getLogger(__name__)


class ComparisonError(Exception):
    """Raised when there is nothing to compare."""
    pass


class MismatchedResamplingPlan(ComparisonError):
    """Raised when tuning results were produced under different fold structures."""
    pass


@dataclass(frozen=True)
class ModelComparison:
    """Resampling results of several families on identical folds.

    Attributes:
        values: Long table with columns model, repeat, fold, Accuracy, Kappa
        models: Families included, in input order
        skipped: Families whose tuning failed and were left out
    """
    values: pd.DataFrame
    models: list[str]
    skipped: list[str] = field(default_factory=list)

    def summary(self) -> pd.DataFrame:
        """Five-number summary, mean and missing count of each metric per model."""
        rows = []
        for metric in METRICS:
            for model in self.models:
                scores = self.values.loc[self.values["model"] == model, metric]
                present = scores.dropna()
                q = present.quantile([0.0, 0.25, 0.5, 0.75, 1.0]).to_numpy() if len(present) else [np.nan] * 5
                rows.append({
                    "metric": metric,
                    "model": model,
                    "Min": q[0],
                    "1st Qu.": q[1],
                    "Median": q[2],
                    "Mean": present.mean(),
                    "3rd Qu.": q[3],
                    "Max": q[4],
                    "NA's": int(scores.isna().sum()),
                })
        return pd.DataFrame(rows).set_index(["metric", "model"])

    def differences(self, metric: str = "Accuracy", confidence: float = 0.95) -> pd.DataFrame:
        """Paired per-resample differences between every pair of models.

        Each pair is tested with a paired t-test; p-values are Bonferroni adjusted for
        the number of pairs.

        Returns:
            One row per pair with mean difference, confidence bounds, t statistic,
            raw and adjusted p-value
        """
        if metric not in METRICS:
            raise ValueError(f"metric must be one of {METRICS}, got {metric!r}")

        columns = ["model_a", "model_b", "estimate", "lower", "upper", "statistic", "p_value", "p_adjusted"]
        pairs = list(combinations(self.models, 2))
        if not pairs:
            return pd.DataFrame(columns=columns)

        wide = self.values.pivot_table(index=["repeat", "fold"], columns="model", values=metric, dropna=False)
        rows = []
        for a, b in pairs:
            paired = wide[[a, b]].dropna()
            diff = paired[a] - paired[b]
            n = len(diff)
            estimate = float(diff.mean()) if n else np.nan
            if n > 1 and diff.std(ddof=1) > 0:
                result = stats.ttest_rel(paired[a], paired[b])
                statistic, p_value = float(result.statistic), float(result.pvalue)
                half_width = stats.t.ppf(0.5 + confidence / 2, df=n - 1) * diff.std(ddof=1) / np.sqrt(n)
            else:
                statistic, p_value, half_width = np.nan, np.nan, np.nan
            rows.append({
                "model_a": a,
                "model_b": b,
                "estimate": estimate,
                "lower": estimate - half_width,
                "upper": estimate + half_width,
                "statistic": statistic,
                "p_value": p_value,
                "p_adjusted": min(1.0, p_value * len(pairs)) if not np.isnan(p_value) else np.nan,
            })
        return pd.DataFrame(rows, columns=columns)


def compare_models(results: Mapping[str, Optional[TuningResult]]) -> ModelComparison:
    """Combine tuning results that share one resampling plan.

    Args:
        results: Family name to tuning result; None marks a family that failed to tune

    Returns:
        ModelComparison over the successful families

    Raises:
        ComparisonError: If no family succeeded
        MismatchedResamplingPlan: If the successful results used different folds
    """
    skipped = [name for name, result in results.items() if result is None]
    succeeded = {name: result for name, result in results.items() if result is not None}
    for name in skipped:
        logger.warning(f"Skipping {name} in comparison: tuning failed")
    if not succeeded:
        raise ComparisonError(f"No tuned models to compare (skipped: {skipped})")

    reference_name, reference = next(iter(succeeded.items()))
    for name, result in succeeded.items():
        plan, ref_plan = result.plan, reference.plan
        if (plan.n_folds, plan.n_repeats) != (ref_plan.n_folds, ref_plan.n_repeats):
            raise MismatchedResamplingPlan(
                f"{name} used {plan.n_repeats} repeats of {plan.n_folds} folds but "
                f"{reference_name} used {ref_plan.n_repeats} repeats of {ref_plan.n_folds} folds"
            )
        if plan.fingerprint != ref_plan.fingerprint:
            raise MismatchedResamplingPlan(
                f"{name} and {reference_name} have the same fold counts but different fold assignments"
            )

    frames = [result.resamples().assign(model=name) for name, result in succeeded.items()]
    values = pd.concat(frames, ignore_index=True)[["model", "repeat", "fold", *METRICS]]

    logger.info(f"Comparing {list(succeeded)} over {len(values) // len(succeeded)} resamples each")
    return ModelComparison(values=values, models=list(succeeded), skipped=skipped)

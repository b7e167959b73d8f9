"""Integration tests for the end-to-end workflow."""

import pandas as pd
import pytest

from seed_classifier import workflow
from seed_classifier.config import Config
from seed_classifier.models import ComparisonError, FittingFailure, ModelComparison
from seed_classifier.workflow import run_pipeline, select_best_family, tune_families


@pytest.fixture(scope="module")
def results():
    cfg = Config.from_yaml("config/model_config.yaml")
    tuning = cfg.tuning.model_copy(update={
        "cv_folds": 3, "cv_repeats": 2, "tune_length": 3, "max_secondary_candidates": 2, "n_jobs": 1,
    })
    return run_pipeline(cfg.model_copy(update={"tuning": tuning}))


class TestRunPipeline:
    """Tests for run_pipeline on the synthetic seeds data."""

    def test_split(self, results):
        assert results.split["train_samples"] == 147
        assert results.split["test_samples"] == 63

    def test_screening(self, results):
        assert results.screening.nzv_names == []
        assert len(results.screening.correlated_names) > 0
        assert len(results.features) == 7

    def test_both_families_compared(self, results):
        assert results.comparison.models == ["knn", "svm_radial"]
        assert results.comparison.skipped == []
        assert set(results.tuning) == {"knn", "svm_radial"}

    def test_best_family_was_evaluated(self, results):
        assert results.best_family in ("knn", "svm_radial")
        assert results.evaluation["overall"]["accuracy"] > 0.7

    def test_confusion_covers_test_partition(self, results):
        confusion = results.evaluation["confusion"]
        assert list(confusion.index) == ["Kama", "Rosa", "Canadian"]
        assert confusion.to_numpy().sum() == 63


class TestDropCorrelated:
    """Tests for removing correlated predictors before tuning."""

    def test_features_reduced(self, fast_config):
        screening = fast_config.screening.model_copy(update={"drop_correlated": True})
        tuning = fast_config.tuning.model_copy(update={"families": ["knn"]})
        cfg = fast_config.model_copy(update={"screening": screening, "tuning": tuning})

        results = run_pipeline(cfg)

        assert set(results.features).isdisjoint(results.screening.correlated_names)
        assert results.tuning["knn"].model.feature_names == tuple(results.features)


class TestSelectBestFamily:
    """Tests for select_best_family function."""

    def test_highest_mean(self):
        values = pd.DataFrame({
            "model": ["a", "a", "b", "b"],
            "repeat": [1, 1, 1, 1],
            "fold": [1, 2, 1, 2],
            "Accuracy": [0.8, 0.9, 0.9, 0.95],
            "Kappa": [0.7, 0.8, 0.6, 0.6],
        })
        comparison = ModelComparison(values=values, models=["a", "b"])

        assert select_best_family(comparison, "Accuracy") == "b"
        assert select_best_family(comparison, "Kappa") == "a"

    def test_tie_goes_to_first(self):
        values = pd.DataFrame({
            "model": ["b", "a"], "repeat": [1, 1], "fold": [1, 1], "Accuracy": [0.9, 0.9], "Kappa": [0.8, 0.8],
        })
        comparison = ModelComparison(values=values, models=["b", "a"])
        assert select_best_family(comparison) == "b"


class TestTuneFamilies:
    """Tests for tune_families function."""

    def test_shared_plan(self, fast_config, train_test_data):
        X_train, _, y_train, _ = train_test_data
        results = tune_families(fast_config, X_train, y_train)

        assert results["knn"].plan.fingerprint == results["svm_radial"].plan.fingerprint

    def test_failure_recorded_as_none(self, fast_config, train_test_data, monkeypatch):
        def failing_tune(family, *args, **kwargs):
            raise FittingFailure(family.name, "all candidates failed")

        monkeypatch.setattr(workflow, "tune_model", failing_tune)
        X_train, _, y_train, _ = train_test_data
        results = tune_families(fast_config, X_train, y_train)

        assert results == {"knn": None, "svm_radial": None}
        with pytest.raises(ComparisonError):
            workflow.compare_models(results)

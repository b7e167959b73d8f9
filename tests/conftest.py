"""Shared pytest fixtures for test suite."""

import pytest

from seed_classifier.config import Config
from seed_classifier.data import create_dataset, partition_dataset, split_features_target


@pytest.fixture
def config():
    """Load test configuration from YAML."""
    return Config.from_yaml("config/model_config.yaml")


@pytest.fixture
def fast_config(config):
    """Configuration with a small search so tuning tests stay quick."""
    tuning = config.tuning.model_copy(update={
        "cv_folds": 3,
        "cv_repeats": 2,
        "tune_length": 3,
        "max_secondary_candidates": 2,
        "n_jobs": 1,
    })
    return config.model_copy(update={"tuning": tuning})


@pytest.fixture
def seeds_df(config):
    """Synthetic 210-sample, 3-variety seeds table."""
    return create_dataset(config)


@pytest.fixture
def train_test_data(seeds_df, config):
    """Stratified 70/30 split of the synthetic seeds table."""
    X, y = split_features_target(seeds_df, config)
    return partition_dataset(X, y, train_fraction=0.7, random_state=config.random_state)

"""Tests for stratified partitioning."""

import numpy as np
import pandas as pd
import pytest

from seed_classifier.data import PartitionError, partition_dataset, stratified_split


@pytest.fixture
def labels():
    return pd.Series(["Kama"] * 70 + ["Rosa"] * 70 + ["Canadian"] * 70)


class TestStratifiedSplit:
    """Tests for stratified_split function."""

    def test_returns_boolean_mask(self, labels):
        mask = stratified_split(labels, 0.7, random_state=42)
        assert mask.dtype == bool
        assert mask.shape == (210,)

    def test_seeds_split_sizes(self, labels):
        """210 balanced samples split 70/30 give 147 train and 63 test."""
        mask = stratified_split(labels, 0.7, random_state=42)
        assert mask.sum() == 147
        assert (~mask).sum() == 63

    def test_per_class_counts(self, labels):
        mask = stratified_split(labels, 0.7, random_state=42)
        train_counts = labels[mask].value_counts().to_dict()
        assert train_counts == {"Kama": 49, "Rosa": 49, "Canadian": 49}

    def test_determinism(self, labels):
        np.testing.assert_array_equal(
            stratified_split(labels, 0.7, random_state=42),
            stratified_split(labels, 0.7, random_state=42),
        )

    def test_seed_changes_split(self, labels):
        assert not np.array_equal(
            stratified_split(labels, 0.7, random_state=42),
            stratified_split(labels, 0.7, random_state=43),
        )

    @pytest.mark.parametrize("fraction", [0.1, 0.25, 0.5, 0.66, 0.7, 0.8, 0.95])
    def test_fraction_bounds(self, fraction):
        """Overall and per-class train fractions stay within one sample of the target."""
        y = pd.Series(["a"] * 23 + ["b"] * 41 + ["c"] * 60)
        mask = stratified_split(y, fraction, random_state=0)
        min_class = y.value_counts().min()

        assert abs(mask.mean() - fraction) <= 1 / min_class
        for cls, n_class in y.value_counts().items():
            class_fraction = mask[(y == cls).to_numpy()].mean()
            assert abs(class_fraction - fraction) <= 1 / n_class

    def test_accepts_numpy_labels(self):
        y = np.array([1, 1, 1, 2, 2, 2, 3, 3, 3, 3])
        mask = stratified_split(y, 0.5, random_state=1)
        # Half of 3 rounds up to 2 for the first two classes
        assert mask.sum() == 6

    def test_class_too_small(self):
        y = ["a"] * 10 + ["b"]
        with pytest.raises(PartitionError, match="Class 'b' has 1 samples"):
            stratified_split(y, 0.7)

    def test_fraction_leaves_empty_side(self):
        y = ["a"] * 10 + ["b"] * 2
        with pytest.raises(PartitionError, match="Class 'b'"):
            stratified_split(y, 0.9)

    @pytest.mark.parametrize("fraction", [0.0, 1.0, 1.3])
    def test_invalid_fraction(self, fraction, labels):
        with pytest.raises(PartitionError, match="train_fraction"):
            stratified_split(labels, fraction)

    def test_empty_labels(self):
        with pytest.raises(PartitionError, match="empty"):
            stratified_split([], 0.5)


class TestPartitionDataset:
    """Tests for partition_dataset function."""

    def test_disjoint_and_complete(self, seeds_df, config):
        X = seeds_df[config.dataset.feature_cols]
        y = seeds_df[config.dataset.target_col]
        X_train, X_test, y_train, y_test = partition_dataset(X, y, 0.7, random_state=42)

        assert X_train.index.intersection(X_test.index).empty
        assert sorted(X_train.index.tolist() + X_test.index.tolist()) == list(range(210))
        assert (X_train.index == y_train.index).all()
        assert (X_test.index == y_test.index).all()

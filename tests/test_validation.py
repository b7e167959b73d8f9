"""Tests for data validation module."""

import numpy as np
import pandas as pd
import pytest

from seed_classifier.validation import (
    DataSchemaError,
    validate_complete_features,
    validate_dataset,
    validate_feature_types,
    validate_schema,
    validate_target_column,
    validate_train_test_split,
)


@pytest.fixture
def valid_df(seeds_df):
    return seeds_df.copy()


class TestValidateSchema:
    """Test schema validation."""

    def test_valid_schema_strict(self, valid_df, config):
        expected_cols = config.dataset.feature_cols + [config.dataset.target_col]
        validate_schema(valid_df, expected_cols, strict=True)

    def test_missing_columns(self, valid_df, config):
        df_missing = valid_df.drop(columns=["area"])
        expected_cols = config.dataset.feature_cols + [config.dataset.target_col]

        with pytest.raises(DataSchemaError, match="Missing required columns"):
            validate_schema(df_missing, expected_cols, strict=True)

    def test_extra_columns_strict(self, valid_df, config):
        valid_df["extra_column"] = 1
        expected_cols = config.dataset.feature_cols + [config.dataset.target_col]

        with pytest.raises(DataSchemaError, match="Unexpected columns found"):
            validate_schema(valid_df, expected_cols, strict=True)

    def test_extra_columns_non_strict(self, valid_df, config):
        valid_df["extra_column"] = 1
        expected_cols = config.dataset.feature_cols + [config.dataset.target_col]
        validate_schema(valid_df, expected_cols, strict=False)

    def test_error_names_stage(self, valid_df):
        with pytest.raises(DataSchemaError, match=r"^\[partition\]") as excinfo:
            validate_schema(valid_df, ["not_there"], stage="partition")
        assert excinfo.value.stage == "partition"


class TestValidateTargetColumn:
    """Test target column validation."""

    def test_valid_target(self, valid_df, config):
        validate_target_column(valid_df, config.dataset.target_col, config.dataset.class_labels)

    def test_missing_target_column(self, valid_df, config):
        with pytest.raises(DataSchemaError, match="Target column .* not found"):
            validate_target_column(valid_df, "non_existent_target", config.dataset.class_labels)

    def test_target_with_nan(self, valid_df, config):
        valid_df.loc[0, config.dataset.target_col] = np.nan

        with pytest.raises(DataSchemaError, match="Target column contains .* NaN values"):
            validate_target_column(valid_df, config.dataset.target_col, config.dataset.class_labels)

    def test_unexpected_target_values(self, valid_df, config):
        valid_df.loc[0, config.dataset.target_col] = "Spelt"

        with pytest.raises(DataSchemaError, match="unexpected values"):
            validate_target_column(valid_df, config.dataset.target_col, config.dataset.class_labels)

    def test_insufficient_class_samples(self):
        df = pd.DataFrame({"variety": ["Kama", "Kama", "Rosa"]})

        with pytest.raises(DataSchemaError, match="Class Rosa has only 1 samples"):
            validate_target_column(df, "variety", ["Kama", "Rosa"], min_class_samples=2)


class TestValidateFeatures:
    """Test feature type and completeness validation."""

    def test_all_numeric(self, valid_df, config):
        validate_feature_types(valid_df, config.dataset.feature_cols)

    def test_non_numeric_feature(self, valid_df, config):
        valid_df["area"] = valid_df["area"].astype(str)

        with pytest.raises(DataSchemaError, match="is not numeric"):
            validate_feature_types(valid_df, config.dataset.feature_cols)

    def test_missing_feature(self, valid_df):
        with pytest.raises(DataSchemaError, match="not found"):
            validate_feature_types(valid_df, ["area", "seed_mass"])

    def test_missing_values_rejected(self, valid_df, config):
        valid_df.loc[3, "perimeter"] = np.nan

        with pytest.raises(DataSchemaError, match="'perimeter' contains 1 missing values"):
            validate_complete_features(valid_df, config.dataset.feature_cols)

    def test_infinite_values_rejected(self, valid_df, config):
        valid_df.loc[0, "asymmetry"] = -np.inf

        with pytest.raises(DataSchemaError, match="infinite values"):
            validate_complete_features(valid_df, config.dataset.feature_cols)


class TestValidateDataset:
    """Test comprehensive dataset validation."""

    def test_valid_dataset(self, valid_df, config):
        results = validate_dataset(valid_df, config, stage="load")
        assert results["validation_passed"] is True
        assert results["n_rows"] == 210
        assert results["target_distribution"] == {"Kama": 70, "Rosa": 70, "Canadian": 70}

    def test_empty_dataset(self, valid_df, config):
        with pytest.raises(DataSchemaError, match="no rows"):
            validate_dataset(valid_df.iloc[0:0], config)


class TestValidateTrainTestSplit:
    """Test split validation."""

    def test_valid_split(self, train_test_data):
        X_train, X_test, y_train, y_test = train_test_data
        results = validate_train_test_split(X_train, X_test, y_train, y_test)
        assert results["total_samples"] == 210
        assert results["train_samples"] == 147
        assert results["test_samples"] == 63

    def test_overlapping_rows(self, train_test_data):
        X_train, X_test, y_train, y_test = train_test_data
        X_test = pd.concat([X_test, X_train.iloc[:1]])
        y_test = pd.concat([y_test, y_train.iloc[:1]])

        with pytest.raises(DataSchemaError, match="appear in both"):
            validate_train_test_split(X_train, X_test, y_train, y_test)

    def test_mismatched_columns(self, train_test_data):
        X_train, X_test, y_train, y_test = train_test_data

        with pytest.raises(DataSchemaError, match="do not match"):
            validate_train_test_split(X_train, X_test.drop(columns=["area"]), y_train, y_test)

"""Tests for constants module.

These tests pin the documented defaults of the screening and tuning stages.
"""


from seed_classifier.constants import (
    AREA_SHAPE_FACTOR,
    CLASS_LABELS,
    CONFIDENCE_LEVEL,
    CORRELATION_CUTOFF,
    FEATURE_COLUMNS,
    KNN_FIRST_K,
    KNN_K_STEP,
    NZV_FREQ_CUT,
    NZV_UNIQUE_CUT,
    SVM_MAX_GAMMA_CANDIDATES,
    UCI_LABEL_CODES,
)


class TestDatasetConstants:
    """Test dataset schema constants."""

    def test_seven_features(self):
        assert len(FEATURE_COLUMNS) == 7
        assert len(set(FEATURE_COLUMNS)) == 7

    def test_three_varieties(self):
        assert CLASS_LABELS == ["Kama", "Rosa", "Canadian"]

    def test_uci_codes_cover_all_labels(self):
        assert set(UCI_LABEL_CODES.values()) == set(CLASS_LABELS)

    def test_area_shape_factor_below_rectangle(self):
        """An elliptical kernel covers less than its bounding rectangle."""
        assert 0 < AREA_SHAPE_FACTOR < 1


class TestScreeningConstants:
    """Test screening thresholds."""

    def test_freq_cut_is_95_to_5(self):
        assert NZV_FREQ_CUT == 95 / 5

    def test_unique_cut(self):
        assert NZV_UNIQUE_CUT == 10

    def test_correlation_cutoff(self):
        assert CORRELATION_CUTOFF == 0.75


class TestTuningConstants:
    """Test tuning grid constants."""

    def test_knn_candidates_are_odd(self):
        assert KNN_FIRST_K % 2 == 1
        assert KNN_K_STEP % 2 == 0

    def test_gamma_cap(self):
        assert SVM_MAX_GAMMA_CANDIDATES == 6

    def test_confidence_level(self):
        assert CONFIDENCE_LEVEL == 0.95

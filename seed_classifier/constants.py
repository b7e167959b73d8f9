"""Constants used throughout the seed variety classification workflow.

This module centralizes all magic numbers so that the defaults of the
screening and tuning stages are explicit in one place.
"""

# Dataset Constants
# =================

FEATURE_COLUMNS = [
    "area",
    "perimeter",
    "compactness",
    "kernel_length",
    "kernel_width",
    "asymmetry",
    "groove_length",
]
"""The seven morphological measurements of a wheat kernel, in file order."""

TARGET_COLUMN = "variety"
"""Name of the categorical label column."""

CLASS_LABELS = ["Kama", "Rosa", "Canadian"]
"""Allowed wheat varieties."""

UCI_LABEL_CODES = {1: "Kama", 2: "Rosa", 3: "Canadian"}
"""Integer codes used by the headerless UCI distribution of the dataset."""

# Synthetic data shape
AREA_SHAPE_FACTOR = 0.80
"""Ratio of kernel area to length * width observed across all three varieties."""

# Screening Defaults
# ==================

NZV_FREQ_CUT = 19.0
"""Most/second-most frequent value ratio above which a predictor may be near-zero-variance
(95/5 split)."""

NZV_UNIQUE_CUT = 10.0
"""Percentage of distinct values below which a predictor may be near-zero-variance."""

CORRELATION_CUTOFF = 0.75
"""Absolute Pearson correlation above which a predictor pair is considered redundant."""

# Tuning Defaults
# ===============

KNN_FIRST_K = 5
"""Smallest neighbour count tried for k-NN; later candidates step by KNN_K_STEP."""

KNN_K_STEP = 2
"""Step between k-NN candidates. Odd k avoids ties in three-class voting."""

SVM_FIRST_COST_EXPONENT = -2
"""Cost candidates for the RBF SVM are 2 ** (SVM_FIRST_COST_EXPONENT + i)."""

SVM_MAX_GAMMA_CANDIDATES = 6
"""Upper bound on the number of kernel width candidates for the RBF SVM."""

SVM_GAMMA_QUANTILES = (0.1, 0.9)
"""Quantiles of squared pairwise distances that bound the gamma search range."""

LGBM_FIRST_ESTIMATORS = 50
"""Smallest boosting round count tried for LightGBM; later candidates step by the same amount."""

LGBM_MAX_DEPTH_CANDIDATES = (2, 3, 4)
"""Tree depths tried for LightGBM."""

# Evaluation
# ==========

CONFIDENCE_LEVEL = 0.95
"""Confidence level of the exact binomial interval around test accuracy."""

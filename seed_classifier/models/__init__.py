"""Model families, hyperparameter tuning, comparison and evaluation modules."""

from .comparison import ComparisonError, MismatchedResamplingPlan, ModelComparison, compare_models
from .evaluation import EvaluationResults, confusion_matrix_stats, evaluate_model
from .families import ModelFamily, available_families, get_family, register_family
from .preprocessing import Preprocessor, TransformedFeatures
from .tuning import (
    FittedModel,
    FittingFailure,
    ResamplingPlan,
    TuningResult,
    make_resampling_plan,
    tune_model,
)

__all__ = [
    "ComparisonError",
    "MismatchedResamplingPlan",
    "ModelComparison",
    "compare_models",
    "EvaluationResults",
    "confusion_matrix_stats",
    "evaluate_model",
    "ModelFamily",
    "available_families",
    "get_family",
    "register_family",
    "Preprocessor",
    "TransformedFeatures",
    "FittedModel",
    "FittingFailure",
    "ResamplingPlan",
    "TuningResult",
    "make_resampling_plan",
    "tune_model",
]

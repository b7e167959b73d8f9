"""
Configuration management using Pydantic models.
This module defines type-safe configuration models that can be loaded from YAML files
and validated at runtime.
"""

from pathlib import Path
from typing import Literal, Optional

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator

from seed_classifier.constants import (
    CLASS_LABELS,
    CORRELATION_CUTOFF,
    FEATURE_COLUMNS,
    NZV_FREQ_CUT,
    NZV_UNIQUE_CUT,
    SVM_MAX_GAMMA_CANDIDATES,
    TARGET_COLUMN,
    UCI_LABEL_CODES,
)


class DatasetConfig(BaseModel):
    path: Optional[Path] = Field(
        default=None, description="Dataset file; a synthetic seeds-like table is generated when unset"
    )
    feature_cols: list[str] = Field(default_factory=lambda: list(FEATURE_COLUMNS), min_length=1)
    target_col: str = Field(default=TARGET_COLUMN)
    class_labels: list[str] = Field(default_factory=lambda: list(CLASS_LABELS), min_length=2)
    label_codes: dict[int, str] = Field(default_factory=lambda: dict(UCI_LABEL_CODES))
    n_per_class: int = Field(default=70, gt=1, le=10_000, description="Synthetic samples per variety")

    @field_validator("class_labels")
    @classmethod
    def validate_class_labels(cls, v: list[str]) -> list[str]:
        if len(set(v)) != len(v):
            raise ValueError(f"class_labels must be unique, got {v}")
        return v

    @model_validator(mode="after")
    def validate_label_codes(self) -> "DatasetConfig":
        unknown = set(self.label_codes.values()) - set(self.class_labels)
        if unknown:
            raise ValueError(f"label_codes maps to labels not in class_labels: {sorted(unknown)}")
        if self.target_col in self.feature_cols:
            raise ValueError(f"target_col '{self.target_col}' cannot also be a feature column")
        return self


class PartitionConfig(BaseModel):
    train_fraction: float = Field(default=0.7, gt=0.0, lt=1.0)


class ScreeningConfig(BaseModel):
    freq_cut: float = Field(default=NZV_FREQ_CUT, gt=1.0)
    unique_cut: float = Field(default=NZV_UNIQUE_CUT, gt=0.0, le=100.0)
    correlation_cutoff: float = Field(default=CORRELATION_CUTOFF, gt=0.0, lt=1.0)
    drop_correlated: bool = Field(default=False, description="Remove flagged predictors before tuning")


class TuningConfig(BaseModel):
    families: list[str] = Field(default_factory=lambda: ["knn", "svm_radial"], min_length=1)
    cv_folds: int = Field(default=5, gt=1, le=20)
    cv_repeats: int = Field(default=5, gt=0, le=50)
    tune_length: int = Field(default=10, gt=0, le=50)
    max_secondary_candidates: int = Field(default=SVM_MAX_GAMMA_CANDIDATES, gt=0, le=20)
    preprocess: list[Literal["center", "scale"]] = Field(default_factory=lambda: ["center", "scale"])
    metric: Literal["Accuracy", "Kappa"] = Field(default="Accuracy")
    n_jobs: Optional[int] = Field(default=None, description="Worker count; None uses every available core")

    @field_validator("families")
    @classmethod
    def validate_families(cls, v: list[str]) -> list[str]:
        from seed_classifier.models.families import available_families

        known = available_families()
        unknown = [name for name in v if name not in known]
        if unknown:
            raise ValueError(f"Unknown model families {unknown}; registered: {known}")
        if len(set(v)) != len(v):
            raise ValueError(f"families must be unique, got {v}")
        return v

    @field_validator("n_jobs")
    @classmethod
    def validate_n_jobs(cls, v: Optional[int]) -> Optional[int]:
        if v is not None and v == 0:
            raise ValueError("n_jobs must be a non-zero integer or None")
        return v


class Config(BaseModel):
    dataset: DatasetConfig = Field(default_factory=DatasetConfig)
    partition: PartitionConfig = Field(default_factory=PartitionConfig)
    screening: ScreeningConfig = Field(default_factory=ScreeningConfig)
    tuning: TuningConfig = Field(default_factory=TuningConfig)
    random_state: int = Field(default=42, ge=0)

    @classmethod
    def from_yaml(cls, path: str | Path) -> "Config":
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")
        with open(path) as f:
            config_dict = yaml.safe_load(f) or {}
        return cls(**config_dict)

"""Dataset loading and synthetic dataset creation."""

import logging
from pathlib import Path
from typing import Optional

import numpy as np
import pandas as pd

from seed_classifier.config import Config
from seed_classifier.constants import AREA_SHAPE_FACTOR, FEATURE_COLUMNS
from seed_classifier.validation import DataSchemaError, validate_dataset

logger = logging.getLogger(__name__)

# Per-variety means and within-variety spreads of the independently drawn measurements
_VARIETY_PROFILES = {
    "Kama": {"length": (5.51, 0.23), "width": (3.24, 0.18), "compactness": (0.880, 0.016),
             "asymmetry": (2.67, 1.17), "groove": (5.09, 0.26)},
    "Rosa": {"length": (6.15, 0.27), "width": (3.68, 0.19), "compactness": (0.884, 0.016),
             "asymmetry": (3.64, 1.18), "groove": (6.02, 0.25)},
    "Canadian": {"length": (5.23, 0.14), "width": (2.85, 0.15), "compactness": (0.849, 0.022),
                 "asymmetry": (4.79, 1.34), "groove": (5.12, 0.16)},
}


def create_dataset(cfg: Config) -> pd.DataFrame:
    """Create a synthetic wheat-seed dataset with realistic geometric structure.

    Kernel length and width are drawn per variety; area follows from their product,
    perimeter from area and compactness, and groove length tracks kernel length.
    The size-derived columns are therefore strongly correlated, as in the real data.

    Args:
        cfg: Configuration object with dataset parameters

    Returns:
        DataFrame with the configured feature columns and target column
    """
    if len(cfg.dataset.feature_cols) != len(FEATURE_COLUMNS):
        raise DataSchemaError(
            f"Synthetic data has {len(FEATURE_COLUMNS)} measurements, "
            f"config names {len(cfg.dataset.feature_cols)} feature columns",
            stage="create",
        )

    rng = np.random.default_rng(cfg.random_state)
    n = cfg.dataset.n_per_class
    frames = []

    for label in cfg.dataset.class_labels:
        profile = _VARIETY_PROFILES.get(label)
        if profile is None:
            raise DataSchemaError(f"No synthetic profile for variety '{label}'", stage="create")

        length = rng.normal(*profile["length"], size=n)
        width = rng.normal(*profile["width"], size=n)
        compactness = rng.normal(*profile["compactness"], size=n)
        area = AREA_SHAPE_FACTOR * length * width * rng.normal(1.0, 0.01, size=n)
        perimeter = np.sqrt(4 * np.pi * area / compactness)
        groove_mean, groove_sd = profile["groove"]
        groove = groove_mean + 0.6 * (length - profile["length"][0]) + rng.normal(0.0, groove_sd * 0.8, size=n)
        asymmetry = np.abs(rng.normal(*profile["asymmetry"], size=n))

        frames.append(pd.DataFrame({
            "area": area,
            "perimeter": perimeter,
            "compactness": compactness,
            "kernel_length": length,
            "kernel_width": width,
            "asymmetry": asymmetry,
            "groove_length": groove,
        }).round(4).assign(**{cfg.dataset.target_col: label}))

    df = pd.concat(frames, ignore_index=True)
    df = df.rename(columns=dict(zip(FEATURE_COLUMNS, cfg.dataset.feature_cols)))
    return df[cfg.dataset.feature_cols + [cfg.dataset.target_col]]


def load_dataset(path: str | Path, cfg: Config) -> pd.DataFrame:
    """Load the seeds table from disk and validate it.

    Two layouts are accepted:
    - a headered CSV whose columns match the configured feature and target names
    - the headerless, whitespace-separated UCI file whose last column holds integer
      variety codes (mapped through ``cfg.dataset.label_codes``)

    Args:
        path: Path to the dataset file
        cfg: Configuration object

    Returns:
        Validated DataFrame with feature columns followed by the target column

    Raises:
        FileNotFoundError: If the file does not exist
        DataSchemaError: If the table does not match the configured schema
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Dataset file not found: {path}")

    expected_cols = cfg.dataset.feature_cols + [cfg.dataset.target_col]

    if path.suffix.lower() == ".csv":
        df = pd.read_csv(path)
    else:
        df = pd.read_csv(path, sep=r"\s+", header=None, engine="python")
        if df.shape[1] != len(expected_cols):
            raise DataSchemaError(
                f"{path.name} has {df.shape[1]} columns, expected {len(expected_cols)} "
                f"({', '.join(expected_cols)})"
            )
        df.columns = expected_cols
        df[cfg.dataset.target_col] = _decode_labels(df[cfg.dataset.target_col], cfg.dataset.label_codes)

    logger.info(f"Loaded {path.name}: {df.shape[0]} samples, {df.shape[1]} columns")
    validate_dataset(df, cfg, stage="load")
    return df[expected_cols]


def _decode_labels(codes: pd.Series, label_codes: dict[int, str]) -> pd.Series:
    unknown = sorted(set(codes.unique()) - set(label_codes))
    if unknown:
        raise DataSchemaError(f"Unknown variety codes {unknown}; expected one of {sorted(label_codes)}")
    return codes.map(label_codes)


def get_dataset(cfg: Config, path: Optional[str | Path] = None) -> pd.DataFrame:
    """Load the configured dataset file, or create a synthetic one when no path is set."""
    path = path or cfg.dataset.path
    if path is not None:
        return load_dataset(path, cfg)

    logger.info("No dataset path configured, generating synthetic seeds data")
    df = create_dataset(cfg)
    validate_dataset(df, cfg, stage="create")
    return df


def split_features_target(df: pd.DataFrame, cfg: Config) -> tuple[pd.DataFrame, pd.Series]:
    """Split DataFrame into features (X) and target (y)."""
    X = df[cfg.dataset.feature_cols].copy()
    y = df[cfg.dataset.target_col].copy()
    return X, y

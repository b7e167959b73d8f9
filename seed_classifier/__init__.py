"""
Wheat Seed Variety Classification

Repeated cross-validated tuning and comparison of classifiers on the seeds dataset.

Modules:
    - config: Pydantic configuration loaded from YAML
    - data: Dataset loading and stratified partitioning
    - screening: Near-zero-variance and correlation checks
    - models: Model families, tuning, comparison and evaluation
    - workflow: End-to-end orchestration
"""

__version__ = "1.0.0"

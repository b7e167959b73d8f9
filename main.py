"""
Wheat seed variety classification workflow.

Partitions the seeds data, screens predictors, tunes k-NN and RBF SVM classifiers
with repeated cross-validation, compares them and evaluates the best one on the
held-out test set.

Usage:
    python main.py
    python main.py --config config/model_config.yaml --data-path seeds_dataset.txt
"""

import argparse
import logging
import warnings

from seed_classifier.config import Config
from seed_classifier.workflow import run_pipeline

warnings.filterwarnings("ignore", category=UserWarning, module="sklearn")

logger = logging.getLogger(__name__)
logging.basicConfig(
    level=logging.INFO,
    format="%(name)s | %(asctime)s | %(levelname)-8s | %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)


def parse_args():
    parser = argparse.ArgumentParser(description="Seed variety classification")
    parser.add_argument("--config", "-c", type=str, default="config/model_config.yaml",
                        help="Path to YAML configuration")
    parser.add_argument("--data-path", "-d", type=str, default=None,
                        help="Dataset file (overrides dataset.path)")
    return parser.parse_args()


def main():
    args = parse_args()

    logger.info("Loading config")
    config = Config.from_yaml(args.config)

    results = run_pipeline(config, data_path=args.data_path)

    evaluation = results.evaluation
    logger.info("\nConfusion matrix (rows: true, columns: predicted):\n" + evaluation["confusion"].to_string())
    logger.info("\nPer-class statistics:\n" + evaluation["by_class"].to_string(float_format="{:.4f}".format))
    if results.comparison.skipped:
        logger.warning(f"Skipped families: {results.comparison.skipped}")
    logger.info("Pipeline complete")


if __name__ == "__main__":
    main()

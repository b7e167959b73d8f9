"""Data loading and partitioning modules."""

from .dataset import create_dataset, get_dataset, load_dataset, split_features_target
from .partition import PartitionError, partition_dataset, stratified_split

__all__ = [
    "create_dataset",
    "get_dataset",
    "load_dataset",
    "split_features_target",
    "PartitionError",
    "partition_dataset",
    "stratified_split",
]

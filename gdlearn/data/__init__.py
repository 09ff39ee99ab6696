"""Dataset registry and the built-in synthetic datasets."""

# Ensure built-in datasets register themselves when the package is imported.
from . import synthetic as _synthetic  # noqa: F401
from .registry import Dataset, available_datasets, get_dataset, register_dataset
from .synthetic import sphere_features

__all__ = [
    "Dataset",
    "available_datasets",
    "get_dataset",
    "register_dataset",
    "sphere_features",
]

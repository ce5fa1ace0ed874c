"""Dataset registry and loader helpers."""

# Ensure built-in datasets register themselves when the package is imported.
from . import csv_table as _csv_table  # noqa: F401
from . import synthetic as _synthetic  # noqa: F401
from .registry import (
    DatasetSpec,
    DataSpec,
    available_datasets,
    get,
    get_dataset,
    register_dataset,
)
from .utils import SplitIndices, deterministic_split

__all__ = [
    "DataSpec",
    "DatasetSpec",
    "SplitIndices",
    "available_datasets",
    "deterministic_split",
    "get",
    "get_dataset",
    "register_dataset",
]

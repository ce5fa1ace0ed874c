"""Utility helpers for dataset loaders."""

from __future__ import annotations

import hashlib
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping

import numpy as np


@dataclass(frozen=True)
class SplitIndices:
    """Indices for train/validation partitions."""

    train: np.ndarray
    val: np.ndarray

    @property
    def sizes(self) -> Mapping[str, int]:
        return {"train": int(self.train.size), "val": int(self.val.size)}


def deterministic_split(
    n_samples: int,
    *,
    val_split: float = 0.0,
    seed: int = 0,
) -> SplitIndices:
    """Return deterministic train/validation indices for ``n_samples`` rows.

    With ``val_split == 0`` every row is used for training, in file order.
    """

    if not 0 <= val_split < 1:
        raise ValueError("val_split must be in [0, 1)")
    if n_samples <= 0:
        raise ValueError("Not enough samples for the requested splits")
    if val_split == 0:
        return SplitIndices(train=np.arange(n_samples), val=np.arange(0))

    rng = np.random.default_rng(seed)
    indices = np.arange(n_samples)
    rng.shuffle(indices)

    val_size = int(round(n_samples * val_split))
    # Ensure at least one validation sample when one was requested
    val_size = min(max(val_size, 1), n_samples)
    train_size = n_samples - val_size
    if train_size <= 0:
        raise ValueError("Not enough samples for the requested splits")

    val_idx = np.sort(indices[:val_size])
    train_idx = np.sort(indices[val_size:])
    return SplitIndices(train=train_idx, val=val_idx)


def as_matrix(values: Any) -> np.ndarray:
    """Return ``values`` as a 2-D float64 array, one row per sample."""

    array = np.asarray(values, dtype=np.float64)
    if array.ndim == 1:
        array = array.reshape(-1, 1)
    return array


def checksum_path(path: Path) -> str:
    digest = hashlib.sha256()
    with path.open("rb") as handle:
        for chunk in iter(lambda: handle.read(8192), b""):
            digest.update(chunk)
    return digest.hexdigest()


def standardize(
    array: np.ndarray,
    *,
    mean: np.ndarray | None = None,
    std: np.ndarray | None = None,
) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Apply standard scaling returning the scaled array and parameters."""

    if mean is None or std is None:
        mean = array.mean(axis=0, keepdims=True)
        std = array.std(axis=0, keepdims=True)
        std = np.where(std == 0, 1.0, std)
    scaled = (array - mean) / std
    return scaled.astype(np.float64), mean.astype(np.float64), std.astype(np.float64)


__all__ = ["SplitIndices", "as_matrix", "checksum_path", "deterministic_split", "standardize"]

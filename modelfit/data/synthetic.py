"""Pure in-memory synthetic datasets."""

from __future__ import annotations

import numpy as np

from .registry import DataSpec, DatasetSpec, register_dataset
from .utils import deterministic_split

_XOR_TABLE = np.array([[0.0, 0.0], [0.0, 1.0], [1.0, 0.0], [1.0, 1.0]])


def _make_xor(encoding: str) -> tuple[np.ndarray, np.ndarray]:
    bits = _XOR_TABLE
    labels = np.logical_xor(bits[:, 0], bits[:, 1]).astype(np.float64).reshape(-1, 1)
    if encoding == "bipolar":
        return 2.0 * bits - 1.0, 2.0 * labels - 1.0
    if encoding == "unipolar":
        return bits.copy(), labels
    raise ValueError(f"Unknown XOR encoding: {encoding!r} (use 'bipolar' or 'unipolar')")


@register_dataset("xor")
def load_xor(*, encoding: str = "bipolar", repeats: int = 1, **_: object) -> DatasetSpec:
    """The four XOR patterns, ``repeats`` times over.

    ``bipolar`` uses -1/1 for both inputs and targets, ``unipolar`` uses 0/1.
    """

    if repeats <= 0:
        raise ValueError("repeats must be positive")
    x, y = _make_xor(encoding)
    x = np.tile(x, (repeats, 1))
    y = np.tile(y, (repeats, 1))
    splits = deterministic_split(x.shape[0])

    return DatasetSpec(
        name="xor",
        inputs=x,
        targets=y,
        data_spec=DataSpec(d_in=2, d_out=1, task_type="regression"),
        provenance={"type": "synthetic", "encoding": encoding, "repeats": repeats},
        splits=splits,
    )


def _make_sine(
    freq: float, amplitude: float, n_points: int, noise: float, seed: int
) -> tuple[np.ndarray, np.ndarray]:
    rng = np.random.default_rng(seed)
    x = np.linspace(-1.0, 1.0, n_points, dtype=np.float64).reshape(-1, 1)
    y = amplitude * np.sin(freq * np.pi * x)
    if noise > 0:
        y = y + noise * rng.standard_normal(size=y.shape)
    return x, y


@register_dataset("sine")
def load_sine(
    *,
    freq: float = 1.0,
    amplitude: float = 0.8,
    n_points: int = 64,
    noise: float = 0.0,
    seed: int = 0,
    val_split: float = 0.25,
    **_: object,
) -> DatasetSpec:
    """Samples of ``amplitude * sin(freq * pi * x)`` on ``[-1, 1]``."""

    x, y = _make_sine(freq, amplitude, n_points, noise, seed)
    splits = deterministic_split(x.shape[0], val_split=val_split, seed=seed)

    provenance = {
        "type": "synthetic",
        "freq": freq,
        "amplitude": amplitude,
        "n_points": n_points,
        "noise": noise,
        "seed": seed,
        "val_split": val_split,
    }

    return DatasetSpec(
        name="sine",
        inputs=x,
        targets=y,
        data_spec=DataSpec(d_in=1, d_out=1, task_type="regression"),
        provenance=provenance,
        splits=splits,
    )


__all__ = ["load_sine", "load_xor"]

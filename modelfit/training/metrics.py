"""Metric helpers for evaluating trained networks."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, List, Mapping, Sequence

import numpy as np

from ..core.types import Array, NetworkAccess, Vector


@dataclass(frozen=True)
class MetricResult:
    name: str
    value: float


def default_metrics(task_type: str) -> List[str]:
    if task_type == "regression":
        return ["error", "mae", "rmse", "r2", "max_abs_error"]
    if task_type == "classification":
        return ["error", "accuracy", "mae"]
    raise ValueError(f"Unknown task type: {task_type}")


def _class_indices(values: Array) -> Array:
    if values.shape[1] > 1:
        return np.argmax(values, axis=1)
    return np.rint(values[:, 0]).astype(int)


def compute_metric(name: str, predictions: Array, targets: Array) -> MetricResult:
    key = name.lower()
    preds = np.atleast_2d(np.asarray(predictions, dtype=np.float64))
    targs = np.atleast_2d(np.asarray(targets, dtype=np.float64))
    if preds.shape != targs.shape:
        raise ValueError(
            f"predictions {preds.shape} and targets {targs.shape} must have the same shape"
        )
    if preds.size == 0:
        return MetricResult(name=key, value=0.0)
    diff = targs - preds
    if key == "error":
        value = float(np.sum(0.5 * diff**2))
    elif key == "mae":
        value = float(np.mean(np.abs(diff)))
    elif key == "rmse":
        value = float(np.sqrt(np.mean(diff**2)))
    elif key == "max_abs_error":
        value = float(np.max(np.abs(diff)))
    elif key == "r2":
        mean = np.mean(targs, axis=0, keepdims=True)
        ss_res = float(np.sum(diff**2))
        ss_tot = float(np.sum((targs - mean) ** 2))
        value = 1.0 if ss_tot == 0 else float(1 - ss_res / (ss_tot + 1e-9))
    elif key == "accuracy":
        value = float(np.mean(_class_indices(preds) == _class_indices(targs)))
    else:
        raise KeyError(f"Unknown metric: {name}")
    return MetricResult(name=key, value=value)


def compute_metrics(
    names: Iterable[str], predictions: Array, targets: Array
) -> Mapping[str, float]:
    results: Dict[str, float] = {}
    for name in names:
        metric = compute_metric(name, predictions, targets)
        results[metric.name] = metric.value
    return results


def predict(network: NetworkAccess, inputs: Sequence[Vector]) -> Array:
    """Return the stacked network responses for ``inputs``, one row each."""

    rows = [network.get_response(vector) for vector in inputs]
    if not rows:
        return np.zeros((0, network.num_outputs), dtype=np.float64)
    return np.vstack(rows)


def evaluate(
    network: NetworkAccess,
    inputs: Sequence[Vector],
    targets: Sequence[Vector],
    *,
    metric_names: Iterable[str] | None = None,
    task_type: str = "regression",
) -> Mapping[str, float]:
    """Run the network over ``inputs`` and score the responses."""

    names = list(metric_names) if metric_names is not None else default_metrics(task_type)
    predictions = predict(network, inputs)
    expected = np.asarray(targets, dtype=np.float64).reshape(predictions.shape)
    return compute_metrics(names, predictions, expected)


__all__ = [
    "MetricResult",
    "compute_metric",
    "compute_metrics",
    "default_metrics",
    "evaluate",
    "predict",
]

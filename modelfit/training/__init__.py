"""Training loop, evaluation metrics and run pipelines."""

from .metrics import compute_metrics, evaluate, predict
from .pipelines import build_network, load_preset, presets, run_pipeline
from .trainer import Trainer, TrainingShapeError

__all__ = [
    "Trainer",
    "TrainingShapeError",
    "build_network",
    "compute_metrics",
    "evaluate",
    "load_preset",
    "predict",
    "presets",
    "run_pipeline",
]

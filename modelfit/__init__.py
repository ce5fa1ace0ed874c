"""ModelFit public API."""

from .core import activations  # noqa: F401
from .core import types  # noqa: F401
from .core.codec import NetworkFormatError
from .core.connection import WeightedConnection
from .core.network import Network
from .core.types import ActivationKind
from .core.units import Unit
from .training.metrics import evaluate
from .training.pipelines import build_network, load_preset, presets, run_pipeline
from .training.trainer import Trainer, TrainingShapeError

__all__ = [
    "ActivationKind",
    "Network",
    "NetworkFormatError",
    "Trainer",
    "TrainingShapeError",
    "Unit",
    "WeightedConnection",
    "activations",
    "build_network",
    "evaluate",
    "load_preset",
    "presets",
    "run_pipeline",
    "types",
]

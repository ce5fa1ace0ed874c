"""Core numerical primitives for ModelFit."""

from . import activations, codec, types
from .codec import NetworkFormatError
from .connection import WeightedConnection
from .network import Network
from .types import ActivationKind
from .units import Unit

__all__ = [
    "ActivationKind",
    "Network",
    "NetworkFormatError",
    "Unit",
    "WeightedConnection",
    "activations",
    "codec",
    "types",
]

"""Core typing contracts for ModelFit."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from typing import TYPE_CHECKING, Dict, Optional, Protocol, Sequence, Union

import numpy as np

if TYPE_CHECKING:  # pragma: no cover - typing only
    from .connection import WeightedConnection
    from .units import Unit

Array = np.ndarray
Vector = Union[Sequence[float], Array]


class ActivationKind(IntEnum):
    """Activation functions available to network units.

    The integer value of each member is the code written to serialized
    network files, so it must never change. ``UNKNOWN`` marks an invalid or
    unset activation.
    """

    UNKNOWN = -1
    THRESHOLD = 0
    UNIPOLAR = 1
    BIPOLAR = 2
    TANH = 3
    GAUSSIAN = 4
    ARCTAN = 5
    SINE = 6
    COSINE = 7
    SINC = 8
    ELLIOT = 9
    LINEAR = 10
    ISRU = 11
    SOFTSIGN = 12
    SOFTPLUS = 13

    @classmethod
    def from_code(cls, code: int) -> "ActivationKind":
        """Return the member for ``code`` or ``UNKNOWN`` for unmapped codes."""

        try:
            return cls(int(code))
        except ValueError:
            return cls.UNKNOWN

    @classmethod
    def parse(cls, value: Union[str, int, "ActivationKind"]) -> "ActivationKind":
        """Resolve a config/CLI value (name or integer code) to a member."""

        if isinstance(value, ActivationKind):
            return value
        if isinstance(value, (int, np.integer)):
            return cls.from_code(int(value))
        text = str(value).strip()
        if text.lstrip("-").isdigit():
            return cls.from_code(int(text))
        name = text.lower().replace("-", "").replace("_", "")
        name = _ALIASES.get(name, name)
        for member in cls:
            if member.name.lower() == name:
                return member
        raise ValueError(f"Unknown activation kind: {value!r}")


_ALIASES = {
    "gauss": "gaussian",
    "sin": "sine",
    "cos": "cosine",
    "atan": "arctan",
    "sigmoid": "unipolar",
    "logistic": "unipolar",
}


@dataclass(frozen=True)
class RunResult:
    """Summary returned by :func:`modelfit.training.pipelines.run_pipeline`."""

    epochs: int
    net_error: float
    converged: bool
    metrics_path: str
    manifest_path: str
    network_path: str
    summary_path: str = ""
    run_id: str = ""
    final_metrics: Dict[str, float] = field(default_factory=dict)


class NetworkAccess(Protocol):
    """Accessors a trainer needs from a network.

    Training reads the per-layer vectors cached by the most recent
    :meth:`get_response` call and replaces weighted connections by layer
    index; nothing else of the network's internals is touched.
    """

    @property
    def num_inputs(self) -> int:
        ...

    @property
    def num_outputs(self) -> int:
        ...

    @property
    def num_layers(self) -> int:
        ...

    @property
    def output_unit(self) -> "Unit":
        ...

    def layer_unit(self, n: int) -> "Unit":
        ...

    def get_response(self, inputs: Vector) -> Array:
        ...

    def get_activations(self, layer: int) -> Array:
        ...

    def get_unit_inputs(self, layer: int) -> Array:
        ...

    def get_weighted_connection(self, layer: int) -> Optional["WeightedConnection"]:
        ...

    def set_weighted_connection(self, layer: int, connection: "WeightedConnection") -> bool:
        ...


__all__ = [
    "ActivationKind",
    "Array",
    "NetworkAccess",
    "RunResult",
    "Vector",
]

"""Feed-forward neural network built from fully-connected layers.

A network has a fixed number of inputs and outputs and zero or more hidden
layers. Layers are linked by :class:`WeightedConnection` objects, so a
network with ``L`` hidden layers owns ``L + 1`` connections: connection 0
reads the network inputs and connection ``L`` feeds the output layer. Each
hidden layer has its own :class:`Unit` settings and the output layer has
another.

The following builds a network with 2 inputs, 3 outputs and two bipolar
hidden layers of 4 and 6 units whose weights start in ``[-1, 1)``::

    net = Network(num_inputs=2, num_outputs=3, output_kind=ActivationKind.UNIPOLAR)
    net.add_layer(4, ActivationKind.BIPOLAR, init_range=2.0)
    net.add_layer(6, ActivationKind.BIPOLAR, init_range=2.0)
    outputs = net.get_response([0.5, 0.2])

Every call to :meth:`get_response` caches the pre-activation ("unit
inputs") and post-activation vectors of each layer; trainers read them back
through :meth:`get_unit_inputs` and :meth:`get_activations`.
"""

from __future__ import annotations

import copy
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import numpy as np

from .connection import DEFAULT_INIT_RANGE, WeightedConnection
from .types import ActivationKind, Array, Vector
from .units import Unit

_InitSettings = Tuple[float, Optional[int]]


def _empty() -> Array:
    return np.zeros(0, dtype=np.float64)


class Network:
    """Chain of weighted connections with per-layer activation units."""

    def __init__(
        self,
        num_inputs: int = 0,
        num_outputs: int = 0,
        output_kind: ActivationKind | int = ActivationKind.THRESHOLD,
        output_slope: float = 1.0,
        output_amplify: float = 1.0,
        *,
        seed: int | None = None,
    ) -> None:
        self._reset()
        self._output_unit = Unit(output_kind, output_slope, output_amplify)
        self._output_init = (DEFAULT_INIT_RANGE, seed)
        self.num_inputs = num_inputs
        self.num_outputs = num_outputs

    def _reset(self) -> None:
        self._num_inputs = 0
        self._num_outputs = 0
        self._output_unit = Unit()
        self._hidden: List[WeightedConnection] = []
        self._hidden_units: List[Unit] = []
        self._hidden_init: List[_InitSettings] = []
        self._output: Optional[WeightedConnection] = None
        self._output_init: _InitSettings = (DEFAULT_INIT_RANGE, None)
        self._activations: List[Array] = []
        self._unit_inputs: List[Array] = []

    # ------------------------------------------------------------------
    # Topology

    @property
    def num_inputs(self) -> int:
        return self._num_inputs

    @num_inputs.setter
    def num_inputs(self, value: int) -> None:
        if value <= 0 or value == self._num_inputs:
            return
        self._num_inputs = int(value)
        if self._hidden:
            init_range, seed = self._hidden_init[0]
            first = self._hidden[0]
            first.configure(self._num_inputs, first.num_output_nodes, init_range, seed=seed)
        else:
            self._rebuild_output()
        self._clear_caches()

    @property
    def num_outputs(self) -> int:
        return self._num_outputs

    @num_outputs.setter
    def num_outputs(self, value: int) -> None:
        if value <= 0 or value == self._num_outputs:
            return
        self._num_outputs = int(value)
        self._rebuild_output()
        self._clear_caches()

    @property
    def num_layers(self) -> int:
        """Number of hidden layers."""

        return len(self._hidden)

    @property
    def connections(self) -> List[WeightedConnection]:
        """Copies of the connections, input side first."""

        chain = list(self._hidden)
        if self._output is not None:
            chain.append(self._output)
        return [connection.copy() for connection in chain]

    def _chain(self) -> List[WeightedConnection]:
        chain = list(self._hidden)
        if self._output is not None:
            chain.append(self._output)
        return chain

    def _rebuild_output(self) -> None:
        n_in = self._hidden[-1].num_output_nodes if self._hidden else self._num_inputs
        if n_in <= 0 or self._num_outputs <= 0:
            self._output = None
            return
        init_range, seed = self._output_init
        self._output = WeightedConnection(n_in, self._num_outputs, init_range, seed=seed)

    def add_layer(
        self,
        num_units: int,
        kind: ActivationKind | int,
        init_range: float = DEFAULT_INIT_RANGE,
        slope: float = 1.0,
        amplify: float = 1.0,
        *,
        seed: int | None = None,
    ) -> bool:
        """Append a hidden layer of ``num_units`` units.

        The new layer is wired to the previous hidden layer (or to the
        inputs for the first call) and the output connection is replaced so
        it reads from the new layer. Returns ``False`` without changing the
        network when a numeric argument is not positive or the number of
        inputs has not been set.
        """

        if num_units <= 0 or init_range <= 0 or slope <= 0 or amplify <= 0:
            return False
        if self._num_inputs <= 0:
            return False

        n_in = self._hidden[-1].num_output_nodes if self._hidden else self._num_inputs
        connection = WeightedConnection()
        if not connection.configure(n_in, int(num_units), init_range, seed=seed):
            return False  # pragma: no cover - arguments validated above

        self._hidden.append(connection)
        self._hidden_units.append(Unit(kind, slope, amplify))
        self._hidden_init.append((float(init_range), seed))
        self._output_init = (float(init_range), seed)
        self._rebuild_output()
        self._clear_caches()
        return True

    def clear(self) -> None:
        """Return to the state of a freshly constructed network."""

        self._reset()

    # ------------------------------------------------------------------
    # Unit settings

    @property
    def output_unit(self) -> Unit:
        return self._output_unit

    @property
    def output_kind(self) -> ActivationKind:
        return self._output_unit.kind

    @output_kind.setter
    def output_kind(self, value: ActivationKind | int) -> None:
        self._output_unit.kind = value

    @property
    def output_slope(self) -> float:
        return self._output_unit.slope

    @output_slope.setter
    def output_slope(self, value: float) -> None:
        self._output_unit.slope = value

    @property
    def output_amplify(self) -> float:
        return self._output_unit.amplify

    @output_amplify.setter
    def output_amplify(self, value: float) -> None:
        self._output_unit.amplify = value

    def layer_unit(self, n: int) -> Unit:
        if 0 <= n < len(self._hidden_units):
            return self._hidden_units[n].copy()
        return Unit(ActivationKind.UNKNOWN)

    def layer_kind(self, n: int) -> ActivationKind:
        return self.layer_unit(n).kind

    def layer_slope(self, n: int) -> float:
        return self.layer_unit(n).slope

    def layer_amplify(self, n: int) -> float:
        return self.layer_unit(n).amplify

    # ------------------------------------------------------------------
    # Inference

    def get_response(self, inputs: Vector) -> Array:
        """Propagate ``inputs`` through every layer and return the outputs.

        Only the first :attr:`num_inputs` values are used. An empty array is
        returned (and the caches are left alone) when fewer values are given
        or the network has no output connection yet.
        """

        values = np.asarray(inputs, dtype=np.float64).reshape(-1)
        chain = self._chain()
        if self._output is None or self._num_inputs <= 0 or values.size < self._num_inputs:
            return _empty()

        self._activations = []
        self._unit_inputs = []
        x = values[: self._num_inputs].copy()
        last = len(chain) - 1
        for idx, connection in enumerate(chain):
            connection.set_inputs(x)
            z = connection.forward()
            unit = self._hidden_units[idx] if idx < last else self._output_unit
            self._unit_inputs.append(z)
            x = np.asarray(unit.activate(z), dtype=np.float64)
            self._activations.append(x)
        return x.copy()

    def get_activations(self, layer: int) -> Array:
        if 0 <= layer < len(self._activations):
            return self._activations[layer].copy()
        return _empty()

    def get_unit_inputs(self, layer: int) -> Array:
        if 0 <= layer < len(self._unit_inputs):
            return self._unit_inputs[layer].copy()
        return _empty()

    def _clear_caches(self) -> None:
        self._activations = []
        self._unit_inputs = []

    # ------------------------------------------------------------------
    # Trainer access

    def get_weighted_connection(self, layer: int) -> Optional[WeightedConnection]:
        chain = self._chain()
        if 0 <= layer < len(chain):
            return chain[layer].copy()
        return None

    def set_weighted_connection(self, layer: int, connection: WeightedConnection) -> bool:
        """Replace connection ``layer`` with a copy of ``connection``.

        The replacement must have the same node counts as the connection it
        replaces so the layer chain stays consistent.
        """

        chain = self._chain()
        if not 0 <= layer < len(chain):
            return False
        current = chain[layer]
        if (connection.num_input_nodes, connection.num_output_nodes) != (
            current.num_input_nodes,
            current.num_output_nodes,
        ):
            return False
        if layer < len(self._hidden):
            self._hidden[layer] = connection.copy()
        else:
            self._output = connection.copy()
        return True

    # ------------------------------------------------------------------
    # Copying, description and persistence

    def copy(self) -> "Network":
        return copy.deepcopy(self)

    def parameter_count(self) -> int:
        return int(sum(c.num_input_nodes * c.num_output_nodes for c in self._chain()))

    def describe(self) -> Dict[str, object]:
        """Return a JSON-friendly description of the topology."""

        return {
            "inputs": self._num_inputs,
            "outputs": self._num_outputs,
            "output": {
                "kind": self.output_kind.name.lower(),
                "slope": self.output_slope,
                "amplify": self.output_amplify,
            },
            "hidden": [
                {
                    "units": connection.num_output_nodes,
                    "kind": unit.kind.name.lower(),
                    "slope": unit.slope,
                    "amplify": unit.amplify,
                }
                for connection, unit in zip(self._hidden, self._hidden_units)
            ],
            "parameters": self.parameter_count(),
        }

    @classmethod
    def from_parts(
        cls,
        num_inputs: int,
        num_outputs: int,
        output_unit: Unit,
        hidden_units: List[Unit],
        connections: List[WeightedConnection],
    ) -> "Network":
        """Assemble a network from already-built parts.

        ``connections`` must hold ``len(hidden_units) + 1`` connections whose
        node counts chain from ``num_inputs`` to ``num_outputs``; a
        ``ValueError`` is raised otherwise.
        """

        if len(connections) != len(hidden_units) + 1:
            raise ValueError(
                f"expected {len(hidden_units) + 1} connections, got {len(connections)}"
            )
        expected_in = num_inputs
        for idx, connection in enumerate(connections):
            if connection.num_input_nodes != expected_in:
                raise ValueError(
                    f"connection {idx} has {connection.num_input_nodes} input nodes, "
                    f"expected {expected_in}"
                )
            expected_in = connection.num_output_nodes
        if expected_in != num_outputs:
            raise ValueError(
                f"last connection has {expected_in} output nodes, expected {num_outputs}"
            )

        network = cls()
        network._num_inputs = int(num_inputs)
        network._num_outputs = int(num_outputs)
        network._output_unit = output_unit.copy()
        network._hidden = [c.copy() for c in connections[:-1]]
        network._hidden_units = [u.copy() for u in hidden_units]
        network._hidden_init = [(DEFAULT_INIT_RANGE, None) for _ in hidden_units]
        network._output = connections[-1].copy()
        return network

    def serialize(self) -> str:
        from .codec import encode

        return encode(self)

    @classmethod
    def deserialize(cls, text: str) -> "Network":
        from .codec import decode

        return decode(text)

    def write_to_file(self, path: str | Path) -> Path:
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(self.serialize(), encoding="utf-8")
        return path

    @classmethod
    def read_from_file(cls, path: str | Path) -> "Network":
        return cls.deserialize(Path(path).read_text(encoding="utf-8"))

    def __repr__(self) -> str:
        hidden = [c.num_output_nodes for c in self._hidden]
        return (
            f"Network(inputs={self._num_inputs}, hidden={hidden}, "
            f"outputs={self._num_outputs}, output={self.output_kind.name})"
        )


__all__ = ["Network"]

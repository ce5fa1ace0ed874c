"""Weighted connections linking consecutive network layers."""

from __future__ import annotations

import numpy as np

from .types import Array, Vector

DEFAULT_INIT_RANGE = 2.0


class WeightedConnection:
    """Dense linear map from one layer's outputs to the next layer's inputs.

    Row ``i`` of the weight matrix holds the weights from every input node to
    output node ``i``, so the matrix shape is ``(num_output_nodes,
    num_input_nodes)``. There is no bias term. Weights are drawn uniformly
    from ``[-init_range / 2, init_range / 2)`` with a generator seeded from
    ``int(init_range)`` unless an explicit ``seed`` is given, which keeps
    freshly built networks reproducible.

    Calls with invalid sizes or mismatched vector lengths are ignored and
    leave the connection unchanged.
    """

    def __init__(
        self,
        num_in: int = -1,
        num_out: int = -1,
        init_range: float = DEFAULT_INIT_RANGE,
        seed: int | None = None,
    ) -> None:
        self._num_in = -1
        self._num_out = -1
        self._weights: Array = np.zeros((0, 0), dtype=np.float64)
        self._inputs: Array = np.zeros(0, dtype=np.float64)
        self._outputs: Array = np.zeros(0, dtype=np.float64)
        if num_in > 0 and num_out > 0:
            self.configure(num_in, num_out, init_range, seed=seed)

    @property
    def num_input_nodes(self) -> int:
        return self._num_in

    @property
    def num_output_nodes(self) -> int:
        return self._num_out

    @property
    def shape(self) -> tuple[int, int]:
        return self._weights.shape  # type: ignore[return-value]

    @property
    def weights(self) -> Array:
        return self._weights.copy()

    @property
    def inputs(self) -> Array:
        return self._inputs.copy()

    @property
    def outputs(self) -> Array:
        return self._outputs.copy()

    def configure(
        self, num_in: int, num_out: int, init_range: float, seed: int | None = None
    ) -> bool:
        """Resize to ``num_in`` x ``num_out`` nodes and re-draw the weights."""

        if num_in <= 0 or num_out <= 0 or init_range <= 0:
            return False
        rng = np.random.default_rng(int(init_range) if seed is None else seed)
        draws = rng.random((int(num_out), int(num_in)))
        self._num_in = int(num_in)
        self._num_out = int(num_out)
        self._weights = init_range * draws - init_range / 2.0
        self._inputs = np.zeros(0, dtype=np.float64)
        self._outputs = np.zeros(0, dtype=np.float64)
        return True

    def set_inputs(self, inputs: Vector) -> bool:
        values = np.asarray(inputs, dtype=np.float64).reshape(-1)
        if values.size != self._num_in:
            return False
        self._inputs = values.copy()
        return True

    def forward(self) -> Array:
        """Return ``W @ inputs`` for the inputs set by :meth:`set_inputs`."""

        if self._inputs.size != self._num_in:
            self._outputs = np.zeros(max(self._num_out, 0), dtype=np.float64)
        else:
            self._outputs = self._weights @ self._inputs
        return self._outputs.copy()

    def get_weight_row(self, node: int) -> Array:
        if 0 <= node < self._num_out:
            return self._weights[node].copy()
        return np.zeros(0, dtype=np.float64)

    def set_weight_row(self, node: int, weights: Vector) -> bool:
        if not 0 <= node < self._num_out:
            return False
        row = np.asarray(weights, dtype=np.float64).reshape(-1)
        if row.size != self._num_in:
            return False
        self._weights[node] = row
        return True

    def set_weights(self, weights: Vector) -> bool:
        matrix = np.asarray(weights, dtype=np.float64)
        if matrix.shape != self._weights.shape or self._num_in <= 0:
            return False
        self._weights = matrix.copy()
        return True

    def copy(self) -> "WeightedConnection":
        clone = WeightedConnection()
        clone._num_in = self._num_in
        clone._num_out = self._num_out
        clone._weights = self._weights.copy()
        clone._inputs = self._inputs.copy()
        clone._outputs = self._outputs.copy()
        return clone

    @classmethod
    def from_weights(cls, weights: Vector) -> "WeightedConnection":
        """Build a connection holding exactly ``weights`` (rows are outputs)."""

        matrix = np.atleast_2d(np.asarray(weights, dtype=np.float64))
        if matrix.ndim != 2 or matrix.size == 0:
            raise ValueError("weights must be a non-empty 2-D matrix")
        connection = cls()
        connection._num_out, connection._num_in = (int(dim) for dim in matrix.shape)
        connection._weights = matrix.copy()
        return connection

    def __repr__(self) -> str:
        return f"WeightedConnection(num_in={self._num_in}, num_out={self._num_out})"


__all__ = ["DEFAULT_INIT_RANGE", "WeightedConnection"]

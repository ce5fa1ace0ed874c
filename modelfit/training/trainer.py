"""Back-propagation training with momentum for ModelFit networks.

A :class:`Trainer` owns a training set of paired input and target vectors.
Each call to :meth:`Trainer.train_neural_net` runs one epoch: the examples
are visited in a shuffled (but seeded, hence repeatable) order and for every
example the network response is compared with the target, the error signals
are propagated back from the output layer to the first hidden layer and
every weighted connection is adjusted by gradient descent::

    trainer = Trainer(learning_constant=0.05, momentum=0.25)
    trainer.add_new_training_set(input_vectors, target_vectors)
    trainer.train_neural_net(net)
    while trainer.get_net_error() > 0.01:
        trainer.reset_net_error()
        trainer.train_neural_net(net)

The network is only touched through the accessors described by
:class:`~modelfit.core.types.NetworkAccess`.
"""

from __future__ import annotations

from typing import Dict, Iterable, List, Sequence

import numpy as np

from ..core.connection import WeightedConnection
from ..core.types import Array, NetworkAccess, Vector

DEFAULT_LEARNING_CONSTANT = 0.5
DEFAULT_SHUFFLE_SEED = 2


class TrainingShapeError(IndexError):
    """A training pair does not match the network's input or output size."""


def _as_vector(values: Vector) -> Array:
    return np.asarray(values, dtype=np.float64).reshape(-1)


class Trainer:
    """Train a network one epoch at a time on a fixed training set."""

    def __init__(
        self,
        learning_constant: float = DEFAULT_LEARNING_CONSTANT,
        momentum: float = 0.0,
        *,
        seed: int = DEFAULT_SHUFFLE_SEED,
    ) -> None:
        self._learning_constant = DEFAULT_LEARNING_CONSTANT
        self._momentum = 0.0
        self.learning_constant = learning_constant
        self.momentum = momentum
        self.seed = int(seed)
        self._net_error = 0.0
        self._epochs = 0
        self._inputs: List[Array] = []
        self._targets: List[Array] = []
        # previous weight deltas, keyed by connection index
        self._previous: Dict[int, Array] = {}

    # ------------------------------------------------------------------
    # Hyper-parameters and state

    @property
    def learning_constant(self) -> float:
        return self._learning_constant

    @learning_constant.setter
    def learning_constant(self, value: float) -> None:
        if value > 0:
            self._learning_constant = float(value)

    @property
    def momentum(self) -> float:
        return self._momentum

    @momentum.setter
    def momentum(self, value: float) -> None:
        if value > 0:
            self._momentum = float(value)

    @property
    def net_error(self) -> float:
        return self._net_error

    @property
    def epochs_run(self) -> int:
        return self._epochs

    def get_net_error(self) -> float:
        return self._net_error

    def reset_net_error(self) -> None:
        self._net_error = 0.0

    def reset_momentum(self) -> None:
        """Forget the weight deltas carried over by the momentum term."""

        self._previous.clear()

    # ------------------------------------------------------------------
    # Training set

    @property
    def training_set_size(self) -> int:
        return len(self._inputs)

    def add_to_training_set(self, inputs: Vector, targets: Vector) -> None:
        self._inputs.append(_as_vector(inputs))
        self._targets.append(_as_vector(targets))

    def add_new_training_set(
        self, inputs: Iterable[Vector], targets: Iterable[Vector]
    ) -> None:
        """Replace the training set with the paired ``inputs`` and ``targets``."""

        new_inputs = [_as_vector(v) for v in inputs]
        new_targets = [_as_vector(v) for v in targets]
        if len(new_inputs) != len(new_targets):
            raise ValueError(
                f"training set needs one target per input: got {len(new_inputs)} inputs "
                f"and {len(new_targets)} targets"
            )
        self._inputs = new_inputs
        self._targets = new_targets

    def clear_training_set(self) -> None:
        self._inputs = []
        self._targets = []

    # ------------------------------------------------------------------
    # Training

    def train_neural_net(self, network: NetworkAccess) -> float:
        """Run one epoch over the training set and return its error.

        The error of every example, ``sum(0.5 * (target - output) ** 2)``, is
        also added to the accumulated network error reported by
        :meth:`get_net_error`. Raises :class:`TrainingShapeError` before any
        weight is changed if a training pair does not fit the network.
        """

        n_train = len(self._inputs)
        if n_train == 0:
            return 0.0
        self._check_shapes(network)

        order = np.random.default_rng(self.seed).permutation(n_train)
        epoch_error = 0.0
        for index in order:
            inputs = self._inputs[index][: network.num_inputs]
            targets = self._targets[index]

            response = network.get_response(inputs)
            example_error = float(np.sum(0.5 * (targets - response) ** 2))
            epoch_error += example_error
            self._net_error += example_error

            output_error = self._output_error(network, response, targets)
            hidden_errors = self._hidden_errors(network, output_error)
            self._adjust_output_weights(network, output_error, inputs)
            self._adjust_hidden_weights(network, hidden_errors, inputs)

        self._epochs += 1
        return epoch_error

    def _check_shapes(self, network: NetworkAccess) -> None:
        for idx, (inputs, targets) in enumerate(zip(self._inputs, self._targets)):
            if inputs.size < network.num_inputs:
                raise TrainingShapeError(
                    f"training input {idx} has {inputs.size} values, the network "
                    f"expects {network.num_inputs}"
                )
            if targets.size != network.num_outputs:
                raise TrainingShapeError(
                    f"training target {idx} has {targets.size} values, the network "
                    f"has {network.num_outputs} outputs"
                )

    def _output_error(
        self, network: NetworkAccess, response: Array, targets: Array
    ) -> Array:
        unit_inputs = network.get_unit_inputs(network.num_layers)
        return (targets - response) * network.output_unit.gradient(unit_inputs)

    def _hidden_errors(
        self, network: NetworkAccess, output_error: Array
    ) -> List[Array]:
        """Error signals of the hidden layers, last hidden layer first."""

        errors: List[Array] = []
        above = output_error
        for layer in range(network.num_layers, 0, -1):
            connection = network.get_weighted_connection(layer)
            weights = connection.weights  # (units above, units in this layer)
            unit = network.layer_unit(layer - 1)
            slopes = unit.gradient(network.get_unit_inputs(layer - 1))
            layer_error = slopes * (weights.T @ above)
            errors.append(layer_error)
            above = layer_error
        return errors

    def _adjust_output_weights(
        self, network: NetworkAccess, output_error: Array, inputs: Array
    ) -> None:
        layer = network.num_layers
        x = network.get_activations(layer - 1) if layer > 0 else inputs
        self._adjust(network, layer, output_error, x)

    def _adjust_hidden_weights(
        self, network: NetworkAccess, hidden_errors: Sequence[Array], inputs: Array
    ) -> None:
        last_hidden = network.num_layers - 1
        for layer in range(last_hidden, -1, -1):
            x = inputs if layer == 0 else network.get_activations(layer - 1)
            self._adjust(network, layer, hidden_errors[last_hidden - layer], x)

    def _adjust(
        self, network: NetworkAccess, layer: int, errors: Array, x: Array
    ) -> None:
        connection: WeightedConnection = network.get_weighted_connection(layer)
        deltas = self._learning_constant * np.outer(errors, x)
        if self._momentum > 0:
            previous = self._previous.get(layer)
            if previous is not None and previous.shape == deltas.shape:
                deltas = deltas + self._momentum * previous
            self._previous[layer] = deltas

        for node in range(connection.num_output_nodes):
            row = connection.get_weight_row(node)
            connection.set_weight_row(node, row + deltas[node])
        network.set_weighted_connection(layer, connection)


__all__ = [
    "DEFAULT_LEARNING_CONSTANT",
    "DEFAULT_SHUFFLE_SEED",
    "Trainer",
    "TrainingShapeError",
]

"""Text serialization of :class:`~modelfit.core.network.Network` objects.

A network is written as a single line of space-separated tokens::

    numInputs numOutputs numLayers outKind outSlope outAmplify
    L numIn numOut kind slope amplify w00 w01 ... (one record per connection)

Connection records are written input side first and each is introduced by
the ``L`` delimiter; the weights follow row by row (one row per output
node). The record of the output connection carries ``0 0.0 0.0`` as its unit
settings because the output unit is stored in the header. Every token,
including the last, is followed by a space and the line ends with a
newline.
"""

from __future__ import annotations

from typing import Iterator, List

import numpy as np

from .connection import WeightedConnection
from .network import Network
from .types import ActivationKind
from .units import Unit

RECORD_DELIMITER = "L"


class NetworkFormatError(ValueError):
    """Raised when serialized network text cannot be parsed."""


def _format_float(value: float) -> str:
    return repr(float(value))


def encode(network: Network) -> str:
    """Return the single-line text form of ``network``.

    Raises :class:`NetworkFormatError` when the network has no output
    connection yet, since such text could not be read back.
    """

    if len(network.connections) != network.num_layers + 1:
        raise NetworkFormatError(
            f"cannot serialize an incomplete network: inputs={network.num_inputs}, "
            f"outputs={network.num_outputs}, layers={network.num_layers}"
        )
    tokens: List[str] = [
        str(network.num_inputs),
        str(network.num_outputs),
        str(network.num_layers),
        str(int(network.output_kind)),
        _format_float(network.output_slope),
        _format_float(network.output_amplify),
    ]
    for idx, connection in enumerate(network.connections):
        if idx < network.num_layers:
            unit = network.layer_unit(idx)
            unit_fields = [str(int(unit.kind)), _format_float(unit.slope), _format_float(unit.amplify)]
        else:
            unit_fields = ["0", "0.0", "0.0"]
        tokens.append(RECORD_DELIMITER)
        tokens.append(str(connection.num_input_nodes))
        tokens.append(str(connection.num_output_nodes))
        tokens.extend(unit_fields)
        tokens.extend(_format_float(w) for w in connection.weights.reshape(-1))
    return " ".join(tokens) + " \n"


class _TokenReader:
    def __init__(self, text: str) -> None:
        self._tokens: Iterator[str] = iter(text.split())
        self.position = 0

    def next(self, what: str) -> str:
        try:
            token = next(self._tokens)
        except StopIteration:
            raise NetworkFormatError(
                f"unexpected end of data while reading {what} (token {self.position})"
            ) from None
        self.position += 1
        return token

    def integer(self, what: str) -> int:
        token = self.next(what)
        try:
            return int(token)
        except ValueError:
            raise NetworkFormatError(
                f"expected an integer for {what} at token {self.position}, got {token!r}"
            ) from None

    def real(self, what: str) -> float:
        token = self.next(what)
        try:
            return float(token)
        except ValueError:
            raise NetworkFormatError(
                f"expected a number for {what} at token {self.position}, got {token!r}"
            ) from None


def decode(text: str) -> Network:
    """Rebuild a network from the text produced by :func:`encode`.

    Raises :class:`NetworkFormatError` describing the first problem found;
    no partially built network is returned.
    """

    reader = _TokenReader(text)
    num_inputs = reader.integer("the number of inputs")
    num_outputs = reader.integer("the number of outputs")
    num_layers = reader.integer("the number of layers")
    if num_inputs <= 0 or num_outputs <= 0 or num_layers < 0:
        raise NetworkFormatError(
            f"invalid network header: inputs={num_inputs}, outputs={num_outputs}, "
            f"layers={num_layers}"
        )
    output_unit = Unit(
        ActivationKind.from_code(reader.integer("the output unit type")),
        reader.real("the output unit slope"),
        reader.real("the output unit amplify"),
    )

    hidden_units: List[Unit] = []
    connections: List[WeightedConnection] = []
    for layer in range(num_layers + 1):
        delimiter = reader.next(f"the record delimiter of layer {layer}")
        if delimiter != RECORD_DELIMITER:
            raise NetworkFormatError(
                f"expected record delimiter {RECORD_DELIMITER!r} for layer {layer}, "
                f"got {delimiter!r}"
            )
        n_in = reader.integer(f"the input node count of layer {layer}")
        n_out = reader.integer(f"the output node count of layer {layer}")
        if n_in <= 0 or n_out <= 0:
            raise NetworkFormatError(f"layer {layer} has invalid size {n_in}x{n_out}")
        unit = Unit(
            ActivationKind.from_code(reader.integer(f"the unit type of layer {layer}")),
            reader.real(f"the unit slope of layer {layer}"),
            reader.real(f"the unit amplify of layer {layer}"),
        )
        weights = np.array(
            [reader.real(f"a weight of layer {layer}") for _ in range(n_in * n_out)],
            dtype=np.float64,
        ).reshape(n_out, n_in)
        connections.append(WeightedConnection.from_weights(weights))
        if layer < num_layers:
            hidden_units.append(unit)

    try:
        return Network.from_parts(num_inputs, num_outputs, output_unit, hidden_units, connections)
    except ValueError as exc:
        raise NetworkFormatError(str(exc)) from exc


__all__ = ["NetworkFormatError", "RECORD_DELIMITER", "decode", "encode"]

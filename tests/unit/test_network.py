import numpy as np
import pytest

from modelfit.core import activations
from modelfit.core.connection import WeightedConnection
from modelfit.core.network import Network
from modelfit.core.types import ActivationKind


def _linear_net(weights):
    weights = np.asarray(weights, dtype=float)
    net = Network(weights.shape[1], weights.shape[0], ActivationKind.LINEAR)
    assert net.set_weighted_connection(0, WeightedConnection.from_weights(weights))
    return net


def test_zero_hidden_linear_network_is_a_matrix_product():
    weights = np.array([[0.5, -1.0, 2.0], [1.5, 0.25, 0.0]])
    net = _linear_net(weights)
    x = np.array([1.0, 2.0, -0.5])
    np.testing.assert_allclose(net.get_response(x), weights @ x)


def test_output_connection_exists_once_sizes_are_known():
    net = Network()
    assert net.get_weighted_connection(0) is None
    net.num_inputs = 3
    assert net.get_weighted_connection(0) is None
    net.num_outputs = 2
    conn = net.get_weighted_connection(0)
    assert (conn.num_input_nodes, conn.num_output_nodes) == (3, 2)


def test_add_layer_chains_connections():
    net = Network(2, 3, ActivationKind.UNIPOLAR)
    assert net.add_layer(4, ActivationKind.BIPOLAR, 2.0)
    assert net.add_layer(6, ActivationKind.BIPOLAR, 2.0)
    assert net.num_layers == 2
    shapes = [c.shape for c in net.connections]
    assert shapes == [(4, 2), (6, 4), (3, 6)]
    assert net.get_response([0.5, 0.2]).shape == (3,)


@pytest.mark.parametrize(
    "kwargs",
    [
        {"num_units": 0, "kind": ActivationKind.TANH},
        {"num_units": 3, "kind": ActivationKind.TANH, "init_range": 0.0},
        {"num_units": 3, "kind": ActivationKind.TANH, "slope": -1.0},
        {"num_units": 3, "kind": ActivationKind.TANH, "amplify": 0.0},
    ],
)
def test_add_layer_rejects_invalid_arguments(kwargs):
    net = Network(2, 1)
    net.add_layer(3, ActivationKind.TANH)
    before = [c.weights for c in net.connections]
    assert net.add_layer(**kwargs) is False
    assert net.num_layers == 1
    for old, new in zip(before, net.connections):
        np.testing.assert_array_equal(old, new.weights)


def test_add_layer_requires_inputs():
    net = Network(num_outputs=1)
    assert net.add_layer(3, ActivationKind.TANH) is False
    assert net.num_layers == 0


def test_invalid_sizes_are_ignored():
    net = Network(2, 1)
    net.num_inputs = 0
    net.num_outputs = -4
    assert (net.num_inputs, net.num_outputs) == (2, 1)


def test_changing_inputs_resizes_first_connection():
    net = Network(2, 1)
    net.add_layer(3, ActivationKind.TANH)
    net.num_inputs = 5
    assert net.get_weighted_connection(0).shape == (3, 5)
    assert net.get_response(np.ones(5)).shape == (1,)


def test_response_needs_enough_inputs_and_truncates_extras():
    net = _linear_net([[1.0, 1.0]])
    assert net.get_response([1.0]).size == 0
    np.testing.assert_allclose(net.get_response([1.0, 2.0, 100.0]), [3.0])


def test_response_is_empty_until_the_output_connection_exists():
    net = Network(num_inputs=2)
    assert net.add_layer(3, ActivationKind.TANH)
    assert net.get_response([0.1, 0.2]).size == 0
    assert net.get_activations(0).size == 0
    net.num_outputs = 1
    assert net.get_response([0.1, 0.2]).shape == (1,)


def test_seed_sets_the_direct_output_connection():
    a = Network(2, 1, seed=7).get_weighted_connection(0).weights
    b = Network(2, 1, seed=7).get_weighted_connection(0).weights
    default = Network(2, 1).get_weighted_connection(0).weights
    np.testing.assert_array_equal(a, b)
    assert a.tolist() != default.tolist()


def test_response_caches_layer_vectors():
    net = Network(2, 1, ActivationKind.LINEAR)
    net.add_layer(2, ActivationKind.TANH, slope=2.0, amplify=1.5)
    hidden = np.array([[0.1, 0.2], [0.3, -0.4]])
    output = np.array([[1.0, -1.0]])
    assert net.set_weighted_connection(0, WeightedConnection.from_weights(hidden))
    assert net.set_weighted_connection(1, WeightedConnection.from_weights(output))

    x = np.array([1.0, 2.0])
    response = net.get_response(x)

    z0 = hidden @ x
    a0 = activations.activation(ActivationKind.TANH, 2.0, 1.5, z0)
    np.testing.assert_allclose(net.get_unit_inputs(0), z0)
    np.testing.assert_allclose(net.get_activations(0), a0)
    np.testing.assert_allclose(net.get_unit_inputs(1), output @ a0)
    np.testing.assert_allclose(response, output @ a0)
    assert net.get_activations(5).size == 0


def test_layer_settings_and_out_of_range_layers():
    net = Network(2, 1)
    net.add_layer(3, ActivationKind.SOFTSIGN, slope=0.5, amplify=2.0)
    assert net.layer_kind(0) is ActivationKind.SOFTSIGN
    assert net.layer_slope(0) == 0.5
    assert net.layer_amplify(0) == 2.0
    assert net.layer_kind(3) is ActivationKind.UNKNOWN
    assert net.get_weighted_connection(7) is None


def test_output_settings_ignore_non_positive_values():
    net = Network(2, 1, ActivationKind.TANH, output_slope=2.0)
    net.output_slope = 0.0
    net.output_amplify = -2.0
    net.output_kind = ActivationKind.ELLIOT
    assert net.output_slope == 2.0
    assert net.output_amplify == 1.0
    assert net.output_kind is ActivationKind.ELLIOT


def test_set_weighted_connection_requires_matching_sizes():
    net = Network(2, 1)
    assert net.set_weighted_connection(0, WeightedConnection(3, 1)) is False
    assert net.set_weighted_connection(1, WeightedConnection(2, 1)) is False


def test_connections_are_returned_as_copies():
    net = _linear_net([[1.0, 2.0]])
    conn = net.get_weighted_connection(0)
    conn.set_weight_row(0, [9.0, 9.0])
    np.testing.assert_allclose(net.get_weighted_connection(0).weights, [[1.0, 2.0]])


def test_clear_returns_to_empty_network():
    net = Network(2, 1)
    net.add_layer(3, ActivationKind.TANH)
    net.clear()
    assert (net.num_inputs, net.num_outputs, net.num_layers) == (0, 0, 0)
    assert net.get_response([1.0, 2.0]).size == 0


def test_describe_and_parameter_count():
    net = Network(2, 1, ActivationKind.UNIPOLAR)
    net.add_layer(3, ActivationKind.BIPOLAR)
    info = net.describe()
    assert info["inputs"] == 2
    assert info["hidden"] == [{"units": 3, "kind": "bipolar", "slope": 1.0, "amplify": 1.0}]
    assert info["parameters"] == 2 * 3 + 3 * 1


def test_from_parts_validates_the_chain():
    unit = Network().output_unit
    with pytest.raises(ValueError):
        Network.from_parts(2, 1, unit, [], [WeightedConnection(3, 1)])
    with pytest.raises(ValueError):
        Network.from_parts(2, 1, unit, [], [])


def test_copy_is_deep():
    net = _linear_net([[1.0, 2.0]])
    clone = net.copy()
    clone.set_weighted_connection(0, WeightedConnection.from_weights([[0.0, 0.0]]))
    np.testing.assert_allclose(net.get_response([1.0, 1.0]), [3.0])

import numpy as np
import pytest

from modelfit.core.connection import WeightedConnection
from modelfit.core.network import Network
from modelfit.core.types import ActivationKind
from modelfit.training.trainer import Trainer, TrainingShapeError


def _linear_net(weights):
    weights = np.atleast_2d(np.asarray(weights, dtype=float))
    net = Network(weights.shape[1], weights.shape[0], ActivationKind.LINEAR)
    assert net.set_weighted_connection(0, WeightedConnection.from_weights(weights))
    return net


def _hidden_net():
    net = Network(2, 1, ActivationKind.LINEAR)
    net.add_layer(3, ActivationKind.TANH, slope=1.5, amplify=1.2)
    hidden = np.array([[0.3, -0.2], [0.1, 0.4], [-0.5, 0.25]])
    output = np.array([[0.7, -0.3, 0.2]])
    net.set_weighted_connection(0, WeightedConnection.from_weights(hidden))
    net.set_weighted_connection(1, WeightedConnection.from_weights(output))
    return net


def test_single_pair_epoch_updates_weights():
    net = _linear_net([[0.0, 0.0]])
    trainer = Trainer(learning_constant=0.5)
    trainer.add_to_training_set([1.0, 1.0], [1.0])

    error = trainer.train_neural_net(net)

    assert error == pytest.approx(0.5)
    np.testing.assert_allclose(net.get_weighted_connection(0).weights, [[0.5, 0.5]])


def test_accumulated_error_over_two_epochs():
    net = _linear_net([[0.0, 0.0]])
    trainer = Trainer(learning_constant=0.5)
    trainer.add_new_training_set([[1.0, 0.0], [0.0, 1.0]], [[1.0], [2.0]])

    first = trainer.train_neural_net(net)
    np.testing.assert_allclose(net.get_weighted_connection(0).weights, [[0.5, 1.0]])
    second = trainer.train_neural_net(net)

    assert first == pytest.approx(2.5, abs=1e-9)
    assert second == pytest.approx(0.625, abs=1e-9)
    assert trainer.get_net_error() == pytest.approx(3.125, abs=1e-9)
    assert trainer.epochs_run == 2
    np.testing.assert_allclose(net.get_weighted_connection(0).weights, [[0.75, 1.5]])

    trainer.reset_net_error()
    assert trainer.net_error == 0.0


def test_momentum_carries_previous_delta():
    net = _linear_net([[0.0]])
    trainer = Trainer(learning_constant=0.5, momentum=0.5)
    trainer.add_to_training_set([1.0], [1.0])

    history = []
    for _ in range(3):
        trainer.train_neural_net(net)
        history.append(float(net.get_weighted_connection(0).weights[0, 0]))

    np.testing.assert_allclose(history, [0.5, 1.0, 1.25])


def test_reset_momentum_forgets_history():
    net = _linear_net([[0.0]])
    trainer = Trainer(learning_constant=0.5, momentum=0.5)
    trainer.add_to_training_set([1.0], [1.0])
    trainer.train_neural_net(net)
    trainer.reset_momentum()
    trainer.train_neural_net(net)
    # second step is plain gradient descent: 0.5 + 0.5 * 0.5
    assert net.get_weighted_connection(0).weights[0, 0] == pytest.approx(0.75)


def _error(net, x, t):
    y = net.get_response(x)
    return float(np.sum(0.5 * (np.asarray(t) - y) ** 2))


def test_hidden_updates_follow_the_error_gradient():
    net = _hidden_net()
    x, t = np.array([0.8, -0.6]), np.array([0.5])
    lr, h = 0.1, 1e-6

    expected = []
    for layer in range(net.num_layers + 1):
        base = net.get_weighted_connection(layer).weights
        grad = np.zeros_like(base)
        for idx in np.ndindex(base.shape):
            for sign in (1.0, -1.0):
                shifted = net.copy()
                perturbed = base.copy()
                perturbed[idx] += sign * h
                shifted.set_weighted_connection(layer, WeightedConnection.from_weights(perturbed))
                grad[idx] += sign * _error(shifted, x, t) / (2 * h)
        expected.append(base - lr * grad)

    trainer = Trainer(learning_constant=lr)
    trainer.add_to_training_set(x, t)
    trainer.train_neural_net(net)

    for layer, weights in enumerate(expected):
        np.testing.assert_allclose(
            net.get_weighted_connection(layer).weights, weights, rtol=1e-6, atol=1e-8
        )


def test_training_is_reproducible():
    def run():
        net = Network(2, 1, ActivationKind.BIPOLAR)
        net.add_layer(3, ActivationKind.BIPOLAR, init_range=2.0)
        trainer = Trainer(learning_constant=0.5, momentum=0.25)
        trainer.add_new_training_set(
            [[-1, -1], [-1, 1], [1, -1], [1, 1]], [[-1], [1], [1], [-1]]
        )
        errors = [trainer.train_neural_net(net) for _ in range(5)]
        return errors, [c.weights for c in net.connections]

    errors_a, weights_a = run()
    errors_b, weights_b = run()
    assert errors_a == errors_b
    for a, b in zip(weights_a, weights_b):
        np.testing.assert_array_equal(a, b)


def test_zero_hidden_nonlinear_output_learns():
    net = Network(2, 1, ActivationKind.UNIPOLAR)
    trainer = Trainer(learning_constant=0.5)
    trainer.add_new_training_set([[0, 0], [0, 1], [1, 0], [1, 1]], [[0], [1], [1], [1]])
    first = trainer.train_neural_net(net)
    for _ in range(200):
        last = trainer.train_neural_net(net)
    assert last < first


def test_short_input_raises_before_any_update():
    net = _linear_net([[0.1, 0.2]])
    trainer = Trainer()
    trainer.add_to_training_set([1.0, 1.0], [1.0])
    trainer.add_to_training_set([1.0], [1.0])
    with pytest.raises(TrainingShapeError):
        trainer.train_neural_net(net)
    np.testing.assert_allclose(net.get_weighted_connection(0).weights, [[0.1, 0.2]])
    assert trainer.net_error == 0.0


def test_wrong_target_size_raises_index_error():
    net = _linear_net([[0.1, 0.2]])
    trainer = Trainer()
    trainer.add_to_training_set([1.0, 1.0], [1.0, 2.0])
    with pytest.raises(IndexError):
        trainer.train_neural_net(net)


def test_longer_inputs_are_truncated():
    net = _linear_net([[0.0, 0.0]])
    trainer = Trainer(learning_constant=0.5)
    trainer.add_to_training_set([1.0, 1.0, 50.0], [1.0])
    trainer.train_neural_net(net)
    np.testing.assert_allclose(net.get_weighted_connection(0).weights, [[0.5, 0.5]])


def test_empty_training_set_is_a_no_op():
    net = _linear_net([[0.3]])
    assert Trainer().train_neural_net(net) == 0.0
    np.testing.assert_allclose(net.get_weighted_connection(0).weights, [[0.3]])


def test_training_set_management():
    trainer = Trainer()
    trainer.add_new_training_set([[1.0], [2.0]], [[0.0], [1.0]])
    assert trainer.training_set_size == 2
    with pytest.raises(ValueError):
        trainer.add_new_training_set([[1.0]], [[0.0], [1.0]])
    assert trainer.training_set_size == 2
    trainer.clear_training_set()
    assert trainer.training_set_size == 0


def test_hyper_parameters_ignore_non_positive_values():
    trainer = Trainer(learning_constant=-1.0, momentum=-0.5)
    assert trainer.learning_constant == 0.5
    assert trainer.momentum == 0.0
    trainer.learning_constant = 0.1
    trainer.momentum = 0.9
    trainer.learning_constant = 0.0
    trainer.momentum = 0.0
    assert trainer.learning_constant == 0.1
    assert trainer.momentum == 0.9

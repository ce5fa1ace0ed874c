import math

import numpy as np
import pytest

from modelfit.core import activations
from modelfit.core.types import ActivationKind
from modelfit.core.units import Unit

CONTINUOUS = [kind for kind in ActivationKind if kind not in (ActivationKind.UNKNOWN, ActivationKind.THRESHOLD)]
XS = np.arange(-5.0, 6.0)


def _numerical(kind, slope, amplify, x, h=1e-5):
    upper = activations.activation(kind, slope, amplify, x + h)
    lower = activations.activation(kind, slope, amplify, x - h)
    return (upper - lower) / (2 * h)


@pytest.mark.parametrize("kind", CONTINUOUS, ids=lambda k: k.name.lower())
@pytest.mark.parametrize("slope", [0.5, 1.0, 5.0])
@pytest.mark.parametrize("amplify", [1.0, 2.5])
def test_gradient_matches_numerical_derivative(kind, slope, amplify):
    analytic = activations.gradient(kind, slope, amplify, XS)
    numeric = _numerical(kind, slope, amplify, XS)
    np.testing.assert_allclose(analytic, numeric, rtol=1e-4, atol=1e-4)


def test_threshold_steps_to_slope_times_amplify():
    values = activations.activation(ActivationKind.THRESHOLD, 2.0, 3.0, np.array([-1.0, -1e-9, 0.0, 4.0]))
    np.testing.assert_array_equal(values, [0.0, 0.0, 6.0, 6.0])


def test_threshold_gradient_is_zero_away_from_the_step():
    grads = activations.gradient(ActivationKind.THRESHOLD, 2.0, 3.0, np.array([-2.0, 0.5, 3.0]))
    np.testing.assert_array_equal(grads, [0.0, 0.0, 0.0])


def test_sinc_is_amplify_at_zero_with_flat_gradient():
    assert activations.activation(ActivationKind.SINC, 3.0, 2.0, 0.0) == pytest.approx(2.0)
    assert activations.gradient(ActivationKind.SINC, 3.0, 2.0, 0.0) == 0.0
    assert activations.activation(ActivationKind.SINC, 1.0, 1.0, 5e-6) == pytest.approx(1.0)


@pytest.mark.parametrize(
    "kind,x,expected",
    [
        (ActivationKind.UNIPOLAR, 0.0, 0.5),
        (ActivationKind.BIPOLAR, 0.0, 0.0),
        (ActivationKind.TANH, 1.0, math.tanh(1.0)),
        (ActivationKind.GAUSSIAN, 1.0, math.exp(-1.0)),
        (ActivationKind.ARCTAN, 1.0, math.atan(1.0)),
        (ActivationKind.SINE, 1.0, math.sin(1.0)),
        (ActivationKind.COSINE, 1.0, math.cos(1.0)),
        (ActivationKind.SINC, math.pi, 0.0),
        (ActivationKind.ELLIOT, 0.0, 0.5),
        (ActivationKind.LINEAR, -3.5, -3.5),
        (ActivationKind.ISRU, 1.0, 1.0 / math.sqrt(2.0)),
        (ActivationKind.SOFTSIGN, 1.0, 0.5),
        (ActivationKind.SOFTPLUS, 0.0, math.log(2.0)),
    ],
)
def test_reference_values(kind, x, expected):
    assert activations.activation(kind, 1.0, 1.0, x) == pytest.approx(expected, abs=1e-12)


def test_extreme_inputs_do_not_overflow():
    big = np.array([-1000.0, 1000.0])
    with np.errstate(over="raise"):
        np.testing.assert_allclose(activations.activation(ActivationKind.UNIPOLAR, 1.0, 1.0, big), [0.0, 1.0])
        np.testing.assert_allclose(activations.activation(ActivationKind.SOFTPLUS, 1.0, 1.0, big), [0.0, 1000.0])
        np.testing.assert_allclose(activations.gradient(ActivationKind.BIPOLAR, 1.0, 1.0, big), [0.0, 0.0])


def test_unknown_kind_evaluates_to_zero():
    assert activations.activation(ActivationKind.UNKNOWN, 1.0, 1.0, 2.0) == 0.0
    assert activations.gradient(99, 1.0, 1.0, 2.0) == 0.0
    assert activations.describe(ActivationKind.UNKNOWN) == "undefined"


def test_scalar_in_scalar_out_and_array_in_array_out():
    assert isinstance(activations.activation(ActivationKind.TANH, 1.0, 1.0, 0.3), float)
    out = activations.activation(ActivationKind.TANH, 1.0, 1.0, [0.1, 0.2])
    assert isinstance(out, np.ndarray) and out.shape == (2,)


def test_describe_lists_ranges():
    assert activations.describe(ActivationKind.UNIPOLAR) == "0 to 1"
    assert activations.describe(int(ActivationKind.LINEAR)) == "-inf to inf"


@pytest.mark.parametrize(
    "value,expected",
    [
        ("tanh", ActivationKind.TANH),
        ("Soft-Plus", ActivationKind.SOFTPLUS),
        ("sigmoid", ActivationKind.UNIPOLAR),
        ("7", ActivationKind.COSINE),
        ("-1", ActivationKind.UNKNOWN),
        (11, ActivationKind.ISRU),
        (ActivationKind.SINC, ActivationKind.SINC),
    ],
)
def test_activation_kind_parse(value, expected):
    assert ActivationKind.parse(value) is expected


def test_activation_kind_parse_rejects_unknown_names():
    with pytest.raises(ValueError):
        ActivationKind.parse("relu")


def test_from_code_maps_unknown_codes():
    assert ActivationKind.from_code(42) is ActivationKind.UNKNOWN
    assert ActivationKind.from_code(3) is ActivationKind.TANH


def test_unit_ignores_non_positive_settings():
    unit = Unit(ActivationKind.TANH, slope=2.0, amplify=3.0)
    unit.slope = 0.0
    unit.amplify = -1.0
    assert (unit.slope, unit.amplify) == (2.0, 3.0)
    bad = Unit(ActivationKind.TANH, slope=-1.0, amplify=0.0)
    assert (bad.slope, bad.amplify) == (1.0, 1.0)


def test_unit_evaluates_its_activation():
    unit = Unit(ActivationKind.BIPOLAR, slope=2.0, amplify=1.5)
    x = np.array([-0.5, 0.0, 0.5])
    np.testing.assert_allclose(unit.activate(x), activations.activation(ActivationKind.BIPOLAR, 2.0, 1.5, x))
    np.testing.assert_allclose(unit.gradient(x), activations.gradient(ActivationKind.BIPOLAR, 2.0, 1.5, x))
    assert unit.copy() == unit

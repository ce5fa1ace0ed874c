"""Activation functions and their closed-form gradients.

Every activation kind is described once by an :class:`ActivationPair` so the
forward function and its derivative are always looked up together. The
``slope`` parameter scales the unit input before the nonlinearity is applied
and ``amplify`` scales the result, for both the activation and the gradient.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, Union

import numpy as np

from .types import ActivationKind, Array

SINC_EPSILON = 1e-5

Scalar = Union[float, int]
_Fn = Callable[[Array, float], Array]


@dataclass(frozen=True)
class ActivationPair:
    """Forward function and derivative for one activation kind.

    Both callables receive the raw unit inputs ``x`` and the slope ``s`` and
    return un-amplified values.
    """

    kind: ActivationKind
    forward: _Fn
    derivative: _Fn
    value_range: str


def _logistic(z: Array) -> Array:
    # 1 / (1 + e^-z) without overflowing for large |z|
    return np.exp(-np.logaddexp(0.0, -z))


def _threshold(x: Array, s: float) -> Array:
    return np.where(x >= 0.0, s, 0.0)


def _threshold_grad(x: Array, s: float) -> Array:
    # undefined at the step, by convention the slope is returned there
    return np.where(x == 0.0, s, 0.0)


def _unipolar(x: Array, s: float) -> Array:
    return _logistic(s * x)


def _unipolar_grad(x: Array, s: float) -> Array:
    sig = _logistic(s * x)
    return s * sig * (1.0 - sig)


def _bipolar(x: Array, s: float) -> Array:
    return 2.0 * _logistic(s * x) - 1.0


def _bipolar_grad(x: Array, s: float) -> Array:
    sig = _logistic(s * x)
    return 2.0 * s * sig * (1.0 - sig)


def _tanh(x: Array, s: float) -> Array:
    return np.tanh(s * x)


def _tanh_grad(x: Array, s: float) -> Array:
    t = np.tanh(s * x)
    return s * (1.0 - t * t)


def _gaussian(x: Array, s: float) -> Array:
    return np.exp(-s * x * x)


def _gaussian_grad(x: Array, s: float) -> Array:
    return -2.0 * s * x * np.exp(-s * x * x)


def _arctan(x: Array, s: float) -> Array:
    return np.arctan(s * x)


def _arctan_grad(x: Array, s: float) -> Array:
    return s / (1.0 + s * s * x * x)


def _sine(x: Array, s: float) -> Array:
    return np.sin(s * x)


def _sine_grad(x: Array, s: float) -> Array:
    return s * np.cos(s * x)


def _cosine(x: Array, s: float) -> Array:
    return np.cos(s * x)


def _cosine_grad(x: Array, s: float) -> Array:
    return -s * np.sin(s * x)


def _sinc(x: Array, s: float) -> Array:
    small = np.abs(x) < SINC_EPSILON
    z = np.where(small, 1.0, s * x)
    return np.where(small, 1.0, np.sin(z) / z)


def _sinc_grad(x: Array, s: float) -> Array:
    small = np.abs(x) < SINC_EPSILON
    safe = np.where(small, 1.0, x)
    z = s * safe
    return np.where(small, 0.0, (z * np.cos(z) - np.sin(z)) / (s * safe * safe))


def _elliot(x: Array, s: float) -> Array:
    z = s * x
    return (z / 2.0) / (1.0 + np.abs(z)) + 0.5


def _elliot_grad(x: Array, s: float) -> Array:
    denom = 1.0 + np.abs(s * x)
    return (0.5 * s) / (denom * denom)


def _linear(x: Array, s: float) -> Array:
    return s * x


def _linear_grad(x: Array, s: float) -> Array:
    return np.full_like(x, s)


def _isru(x: Array, s: float) -> Array:
    return x / np.sqrt(1.0 + s * x * x)


def _isru_grad(x: Array, s: float) -> Array:
    root = 1.0 / np.sqrt(1.0 + s * x * x)
    return root * root * root


def _softsign(x: Array, s: float) -> Array:
    z = s * x
    return z / (1.0 + np.abs(z))


def _softsign_grad(x: Array, s: float) -> Array:
    denom = 1.0 + np.abs(s * x)
    return s / (denom * denom)


def _softplus(x: Array, s: float) -> Array:
    return np.logaddexp(0.0, s * x)


def _softplus_grad(x: Array, s: float) -> Array:
    return s * _logistic(s * x)


_PAIRS = (
    ActivationPair(ActivationKind.THRESHOLD, _threshold, _threshold_grad, "0 or slope"),
    ActivationPair(ActivationKind.UNIPOLAR, _unipolar, _unipolar_grad, "0 to 1"),
    ActivationPair(ActivationKind.BIPOLAR, _bipolar, _bipolar_grad, "-1 to 1"),
    ActivationPair(ActivationKind.TANH, _tanh, _tanh_grad, "-1 to 1"),
    ActivationPair(ActivationKind.GAUSSIAN, _gaussian, _gaussian_grad, "0 to 1"),
    ActivationPair(ActivationKind.ARCTAN, _arctan, _arctan_grad, "-pi/2 to pi/2"),
    ActivationPair(ActivationKind.SINE, _sine, _sine_grad, "-1 to 1"),
    ActivationPair(ActivationKind.COSINE, _cosine, _cosine_grad, "-1 to 1"),
    ActivationPair(ActivationKind.SINC, _sinc, _sinc_grad, "~-0.217234 to 1"),
    ActivationPair(ActivationKind.ELLIOT, _elliot, _elliot_grad, "0 to 1"),
    ActivationPair(ActivationKind.LINEAR, _linear, _linear_grad, "-inf to inf"),
    ActivationPair(ActivationKind.ISRU, _isru, _isru_grad, "-1/sqrt(slope) to 1/sqrt(slope)"),
    ActivationPair(ActivationKind.SOFTSIGN, _softsign, _softsign_grad, "-1 to 1"),
    ActivationPair(ActivationKind.SOFTPLUS, _softplus, _softplus_grad, "0 to inf"),
)

TABLE: Dict[ActivationKind, ActivationPair] = {pair.kind: pair for pair in _PAIRS}


def _evaluate(
    kind: ActivationKind | int,
    slope: float,
    amplify: float,
    x: Scalar | Array,
    *,
    derivative: bool,
) -> float | Array:
    values = np.asarray(x, dtype=np.float64)
    pair = TABLE.get(ActivationKind.from_code(kind))
    if pair is None:
        result = np.zeros_like(values)
    else:
        fn = pair.derivative if derivative else pair.forward
        result = amplify * fn(values, float(slope))
    if values.ndim == 0:
        return float(result)
    return np.asarray(result, dtype=np.float64)


def activation(
    kind: ActivationKind | int, slope: float, amplify: float, x: Scalar | Array
) -> float | Array:
    """Return ``amplify * f(slope * x)`` for the activation ``kind``.

    ``x`` may be a scalar (a ``float`` is returned) or an array, evaluated
    element-wise. Unknown kinds evaluate to zero.
    """

    return _evaluate(kind, slope, amplify, x, derivative=False)


def gradient(
    kind: ActivationKind | int, slope: float, amplify: float, x: Scalar | Array
) -> float | Array:
    """Return the amplified derivative of the activation ``kind`` at ``x``."""

    return _evaluate(kind, slope, amplify, x, derivative=True)


def describe(kind: ActivationKind | int) -> str:
    """Return the default output range of ``kind`` for display."""

    pair = TABLE.get(ActivationKind.from_code(kind))
    if pair is None:
        return "undefined"
    return pair.value_range


__all__ = ["ActivationPair", "SINC_EPSILON", "TABLE", "activation", "describe", "gradient"]

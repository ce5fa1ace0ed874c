"""Network units: an activation kind with its slope and amplify settings.

A unit is stateless; the network applies one unit to every element of a
layer's pre-activation vector. Slope and amplify must stay strictly
positive, so non-positive values are ignored rather than rejected.
"""

from __future__ import annotations

from .activations import activation, gradient
from .types import ActivationKind, Array


class Unit:
    """Activation settings shared by all the units of one layer."""

    def __init__(
        self,
        kind: ActivationKind | int = ActivationKind.THRESHOLD,
        slope: float = 1.0,
        amplify: float = 1.0,
    ) -> None:
        self._kind = ActivationKind.from_code(kind)
        self._slope = 1.0
        self._amplify = 1.0
        self.slope = slope
        self.amplify = amplify

    @property
    def kind(self) -> ActivationKind:
        return self._kind

    @kind.setter
    def kind(self, value: ActivationKind | int) -> None:
        self._kind = ActivationKind.from_code(value)

    @property
    def slope(self) -> float:
        return self._slope

    @slope.setter
    def slope(self, value: float) -> None:
        if value > 0:
            self._slope = float(value)

    @property
    def amplify(self) -> float:
        return self._amplify

    @amplify.setter
    def amplify(self, value: float) -> None:
        if value > 0:
            self._amplify = float(value)

    def activate(self, inputs: float | Array) -> float | Array:
        return activation(self._kind, self._slope, self._amplify, inputs)

    def gradient(self, inputs: float | Array) -> float | Array:
        return gradient(self._kind, self._slope, self._amplify, inputs)

    def copy(self) -> "Unit":
        return Unit(self._kind, self._slope, self._amplify)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Unit):
            return NotImplemented
        return (self._kind, self._slope, self._amplify) == (
            other._kind,
            other._slope,
            other._amplify,
        )

    def __repr__(self) -> str:
        return f"Unit(kind={self._kind.name}, slope={self._slope!r}, amplify={self._amplify!r})"


__all__ = ["Unit"]

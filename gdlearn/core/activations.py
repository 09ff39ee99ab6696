"""Activation functions for gdlearn networks.

Each activation is stored as a pair of element-wise functions: the activation
itself and its derivative written in terms of the activation's *output*, so
backpropagation can reuse the cached forward values
(``sigma'(z) = sigma(z) * (1 - sigma(z))``).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, Iterable

import numpy as np

from .types import Array

ElementwiseFn = Callable[[Array], Array]

LECUN_SCALE = 1.7159
LECUN_SLOPE = 2.0 / 3.0


def sigmoid(x: Array) -> Array:
    """Return the logistic function without overflowing for large ``|x|``."""

    x = np.asarray(x, dtype=np.float64)
    z = np.exp(-np.abs(x))
    return np.where(x >= 0, 1.0 / (1.0 + z), z / (1.0 + z))


def log_sigmoid(x: Array) -> Array:
    """Return ``log(sigmoid(x))`` computed as ``-log(1 + e^-x)``."""

    return -np.logaddexp(0.0, -np.asarray(x, dtype=np.float64))


def _sigmoid_prime(a: Array) -> Array:
    return a * (1.0 - a)


def _tanh_prime(a: Array) -> Array:
    return 1.0 - a * a


def lecun_tanh(x: Array) -> Array:
    """Scaled tanh ``1.7159 * tanh(2x / 3)``."""

    return LECUN_SCALE * np.tanh(LECUN_SLOPE * np.asarray(x, dtype=np.float64))


def _lecun_tanh_prime(a: Array) -> Array:
    return LECUN_SLOPE * (LECUN_SCALE - a * a / LECUN_SCALE)


@dataclass(frozen=True)
class Activation:
    """An activation function together with its output-space derivative."""

    name: str
    activate: ElementwiseFn
    derivative_from_output: ElementwiseFn

    def __call__(self, x: Array) -> Array:
        return self.activate(x)


_REGISTRY: Dict[str, Activation] = {}


def register(activation: Activation) -> Activation:
    _REGISTRY[activation.name] = activation
    return activation


LOGISTIC = register(Activation("logistic", sigmoid, _sigmoid_prime))
TANH = register(Activation("tanh", np.tanh, _tanh_prime))
LECUN_TANH = register(Activation("lecun_tanh", lecun_tanh, _lecun_tanh_prime))


def get_activation(name: str | Activation) -> Activation:
    """Resolve ``name`` to a registered :class:`Activation`."""

    if isinstance(name, Activation):
        return name
    if name not in _REGISTRY:
        available = ", ".join(sorted(_REGISTRY))
        raise KeyError(f"Unknown activation {name!r}. Available activations: {available}")
    return _REGISTRY[name]


def names() -> Iterable[str]:
    return sorted(_REGISTRY)


__all__ = [
    "Activation",
    "LECUN_TANH",
    "LOGISTIC",
    "TANH",
    "get_activation",
    "lecun_tanh",
    "log_sigmoid",
    "names",
    "register",
    "sigmoid",
]

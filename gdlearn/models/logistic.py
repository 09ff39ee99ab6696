"""Binary logistic regression."""

from __future__ import annotations

import numpy as np

from ..core.activations import log_sigmoid, sigmoid
from ..core.linalg import without_bias_column
from ..core.types import Array
from .regression import Regression


class LogisticRegression(Regression):
    """``h_theta(x) = 1 / (1 + exp(-theta . x))`` with cross-entropy cost.

    ``ys`` are 0/1 labels.
    """

    def parameter_shape(self) -> tuple[int, ...]:
        return (self.dimension,)

    def init_params(self, rng: np.random.Generator) -> Array:
        return rng.uniform(-10.0, 10.0, size=self.dimension)

    def hypothesis(self, parameters: Array, x: Array) -> Array:
        return sigmoid(np.asarray(x) @ parameters)

    def cost(self, parameters: Array, norm_weight: float | None = None) -> float:
        z = self.xs @ parameters
        # log(1 - sigmoid(z)) == log(sigmoid(-z))
        error = float(np.sum(self.ys * log_sigmoid(z) + (1.0 - self.ys) * log_sigmoid(-z)))
        penalty = float(np.sum(parameters[1:] ** 2))
        return (-error + 0.5 * self._lambda(norm_weight) * penalty) / self.n_examples

    def cost_gradient(self, parameters: Array, norm_weight: float | None = None) -> Array:
        residual = self.hypothesis(parameters, self.xs) - self.ys
        gradient = self.xs.T @ residual
        gradient += self._lambda(norm_weight) * without_bias_column(parameters)
        return gradient / self.n_examples


__all__ = ["LogisticRegression"]

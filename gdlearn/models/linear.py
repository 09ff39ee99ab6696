"""Least-squares linear regression."""

from __future__ import annotations

import numpy as np

from ..core.linalg import without_bias_column
from ..core.types import Array
from .regression import Regression


class LinearRegression(Regression):
    """``h_theta(x) = theta . x`` with squared-error cost."""

    def parameter_shape(self) -> tuple[int, ...]:
        return (self.dimension,)

    def init_params(self, rng: np.random.Generator) -> Array:
        return rng.uniform(-10.0, 10.0, size=self.dimension)

    def hypothesis(self, parameters: Array, x: Array) -> Array:
        return np.asarray(x) @ parameters

    def cost(self, parameters: Array, norm_weight: float | None = None) -> float:
        residual = self.hypothesis(parameters, self.xs) - self.ys
        penalty = float(np.sum(parameters[1:] ** 2))
        return float(residual @ residual + self._lambda(norm_weight) * penalty) / (
            2.0 * self.n_examples
        )

    def cost_gradient(self, parameters: Array, norm_weight: float | None = None) -> Array:
        residual = self.hypothesis(parameters, self.xs) - self.ys
        gradient = self.xs.T @ residual
        gradient += self._lambda(norm_weight) * without_bias_column(parameters)
        return gradient / self.n_examples


__all__ = ["LinearRegression"]

"""Multiclass softmax regression."""

from __future__ import annotations

from typing import Sequence

import numpy as np

from ..core.errors import DataValidationError
from ..core.linalg import add_bias, without_bias_column
from ..core.types import Array
from .regression import Regression


class SoftmaxRegression(Regression):
    """Softmax classifier over ``k`` classes labelled ``0 .. k-1``.

    ``parameters`` is a ``k x (n + 1)`` matrix, one row per class; column 0
    holds the per-class intercepts.
    """

    def _prepare_targets(self, ys: Sequence[object] | Array) -> Array:
        labels = np.asarray(ys)
        if labels.ndim != 1 or not np.issubdtype(labels.dtype, np.integer):
            raise DataValidationError("SoftmaxRegression expects integer class labels")
        if labels.min() < 0:
            raise DataValidationError("Class labels must be non-negative")
        labels = labels.astype(np.int64)
        labels.setflags(write=False)
        self.num_classes = int(labels.max()) + 1
        return labels

    def parameter_shape(self) -> tuple[int, ...]:
        return (self.num_classes, self.dimension)

    def init_params(self, rng: np.random.Generator) -> Array:
        return rng.uniform(-1.0, 1.0, size=(self.num_classes, self.dimension))

    def log_hypothesis(self, parameters: Array, x: Array) -> Array:
        """Log class probabilities, normalised by log-sum-exp.

        The largest logit is subtracted before exponentiating so large
        scores cannot overflow.
        """

        logits = np.asarray(x) @ parameters.T
        top = np.max(logits, axis=-1, keepdims=True)
        log_sum = top + np.log(np.sum(np.exp(logits - top), axis=-1, keepdims=True))
        return logits - log_sum

    def hypothesis(self, parameters: Array, x: Array) -> Array:
        return np.exp(self.log_hypothesis(parameters, x))

    def predict_class(self, features: Array) -> Array:
        """Most probable class for ``features`` (or each row of it)."""

        return np.argmax(self.hypothesis(self.parameters, add_bias(features)), axis=-1)

    def _one_hot(self) -> Array:
        out = np.zeros((self.n_examples, self.num_classes), dtype=np.float64)
        out[np.arange(self.n_examples), self.ys] = 1.0
        return out

    def cost(self, parameters: Array, norm_weight: float | None = None) -> float:
        log_probs = self.log_hypothesis(parameters, self.xs)
        error = float(np.sum(log_probs[np.arange(self.n_examples), self.ys]))
        penalty = float(np.sum(parameters[:, 1:] ** 2))
        return -error / self.n_examples + 0.5 * self._lambda(norm_weight) * penalty

    def cost_gradient(self, parameters: Array, norm_weight: float | None = None) -> Array:
        residual = self.hypothesis(parameters, self.xs) - self._one_hot()
        gradient = residual.T @ self.xs / self.n_examples
        return gradient + self._lambda(norm_weight) * without_bias_column(parameters)


__all__ = ["SoftmaxRegression"]

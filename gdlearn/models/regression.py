"""Shared machinery for the regression models."""

from __future__ import annotations

import abc
import functools
import logging
from typing import Sequence

import numpy as np

from ..core.descent import GradientDescent
from ..core.errors import ShapeMismatchError
from ..core.halting import HaltFn, MonitorFn
from ..core.linalg import add_bias
from ..core.types import Array, GradientFn
from ..core.validation import as_examples, check_same_length

logger = logging.getLogger(__name__)


class Regression(abc.ABC):
    """Base class for models ``h_theta(x)`` fitted by gradient descent.

    ``xs`` are stored with the bias feature ``x[0] = 1`` prepended, so
    ``parameters[..., 0]`` is the intercept and is excluded from
    regularization.

    Subclasses implement :meth:`hypothesis`, :meth:`cost`,
    :meth:`cost_gradient`, :meth:`parameter_shape` and :meth:`init_params`.
    """

    def __init__(
        self,
        xs: Sequence[object] | Array,
        ys: Sequence[object] | Array,
        norm_weight: float = 0.0,
        parameters: Array | None = None,
        seed: int | None = None,
    ) -> None:
        check_same_length(xs, ys)
        features = as_examples(xs, "xs")
        self.xs = add_bias(features)
        self.xs.setflags(write=False)
        self.ys = self._prepare_targets(ys)
        self.dimension = int(self.xs.shape[1])
        self.norm_weight = float(norm_weight)

        if parameters is None:
            parameters = self.init_params(np.random.default_rng(seed))
        self.parameters = np.array(parameters, dtype=np.float64)
        expected = self.parameter_shape()
        if self.parameters.shape != expected:
            raise ShapeMismatchError(
                f"Parameter dimension mismatch: parameters have shape "
                f"{self.parameters.shape}, expected {expected}"
            )

    def __repr__(self) -> str:
        return f"<{type(self).__name__} dimension={self.dimension} norm_weight={self.norm_weight}>"

    def _prepare_targets(self, ys: Sequence[object] | Array) -> Array:
        targets = np.asarray(ys, dtype=np.float64)
        if targets.ndim != 1:
            raise ShapeMismatchError(
                f"{type(self).__name__} expects scalar targets, got shape {targets.shape}"
            )
        targets.setflags(write=False)
        return targets

    @property
    def n_examples(self) -> int:
        return int(self.xs.shape[0])

    @abc.abstractmethod
    def parameter_shape(self) -> tuple[int, ...]:
        """Shape of the parameter array for this model's data."""

    @abc.abstractmethod
    def init_params(self, rng: np.random.Generator) -> Array:
        """Random starting parameters."""

    @abc.abstractmethod
    def hypothesis(self, parameters: Array, x: Array) -> Array:
        """Evaluate ``h_theta`` on ``x`` (with bias) or on rows of ``x``."""

    @abc.abstractmethod
    def cost(self, parameters: Array, norm_weight: float | None = None) -> float:
        """Regularized cost ``J(theta)`` over the training set."""

    @abc.abstractmethod
    def cost_gradient(self, parameters: Array, norm_weight: float | None = None) -> Array:
        """Gradient of :meth:`cost` with respect to ``parameters``."""

    def _lambda(self, norm_weight: float | None) -> float:
        return self.norm_weight if norm_weight is None else float(norm_weight)

    def predict(self, features: Array) -> Array:
        """Evaluate the fitted model on ``features`` (no bias feature)."""

        return self.hypothesis(self.parameters, add_bias(features))

    def gradient_fn(self) -> GradientFn:
        """The ``parameters -> gradient`` function, with lambda fixed at call time."""

        return functools.partial(self.cost_gradient, norm_weight=self.norm_weight)

    def gradient_descent(
        self,
        rate: float,
        monitor: MonitorFn | None = None,
        halt: HaltFn | None = None,
    ) -> "Regression":
        """Fit ``parameters`` by gradient descent.

        ``halt=None`` uses the engine's convergence-by-delta rule.
        """

        gd = GradientDescent(self.parameters, rate, self.gradient_fn())
        gd.each_iteration(monitor).halt_when(halt).run()
        self.parameters = np.asarray(gd.x, dtype=np.float64)
        logger.debug("Fitted %r in %d iterations", self, gd.iterations)
        return self


__all__ = ["Regression"]

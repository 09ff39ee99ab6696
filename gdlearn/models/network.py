"""Fully connected feed-forward neural network trained by backpropagation."""

from __future__ import annotations

import logging
from typing import List, Sequence

import numpy as np

from ..core.activations import Activation, get_activation
from ..core.descent import GradientDescent
from ..core.errors import ShapeMismatchError, TrainingStateError
from ..core.halting import HaltFn, MonitorFn, max_iterations
from ..core.linalg import add_bias, remove_bias, without_bias_column
from ..core.types import Array, GradientFn
from ..core.validation import as_examples, check_same_length

logger = logging.getLogger(__name__)

DEFAULT_TRAINING_ITERATIONS = 1000
_LOG_EPS = 1e-12


class NeuralNetwork:
    """Feed-forward network with one weight matrix per layer transition.

    ``weights[l]`` maps layer ``l`` to layer ``l + 1`` and has shape
    ``(layer_sizes[l + 1], layer_sizes[l] + 1)``; column 0 multiplies the bias
    unit and is never regularized.

    Parameters
    ----------
    hidden:
        Number of non-bias units in each hidden layer (may be empty).
    xs, ys:
        Training inputs and targets, without bias features.
    norm_weight:
        Regularization weight lambda.
    weights:
        Initial weights. Drawn uniformly from ``[-1, 1)`` when ``None``.
    activation:
        Name of a registered activation (``"logistic"``, ``"tanh"``,
        ``"lecun_tanh"``) or an :class:`Activation`.
    seed:
        Seed for the weight initialisation.
    """

    def __init__(
        self,
        hidden: Sequence[int],
        xs: Sequence[object] | Array,
        ys: Sequence[object] | Array,
        norm_weight: float = 0.0,
        weights: Sequence[Array] | None = None,
        activation: str | Activation = "logistic",
        seed: int | None = None,
    ) -> None:
        check_same_length(xs, ys)
        self.xs = as_examples(xs, "xs")
        self.ys = as_examples(ys, "ys")
        self.input_dim = int(self.xs.shape[1])
        self.output_dim = int(self.ys.shape[1])
        self.norm_weight = float(norm_weight)
        self.activation = get_activation(activation)
        self.layer_sizes: List[int] = [self.input_dim, *[int(h) for h in hidden], self.output_dim]

        if weights is None:
            rng = np.random.default_rng(seed)
            self.weights = [
                rng.uniform(-1.0, 1.0, size=(n_out, n_in + 1))
                for n_in, n_out in zip(self.layer_sizes[:-1], self.layer_sizes[1:])
            ]
        else:
            self.weights = [np.array(w, dtype=np.float64) for w in weights]
            self._check_weights(self.weights)

        self.activations: List[Array] = []
        self.deltas: List[Array] = []

    def __repr__(self) -> str:
        return f"<NeuralNetwork layers={self.layer_sizes} activation={self.activation.name}>"

    def _check_weights(self, weights: Sequence[Array]) -> None:
        expected = self.weight_shapes()
        if len(weights) != len(expected):
            raise ShapeMismatchError(
                f"Expected {len(expected)} weight matrices for layers {self.layer_sizes}, "
                f"got {len(weights)}"
            )
        for idx, (w, shape) in enumerate(zip(weights, expected)):
            if w.shape != shape:
                raise ShapeMismatchError(f"weights[{idx}] has shape {w.shape}, expected {shape}")

    def weight_shapes(self) -> List[tuple[int, int]]:
        return [
            (n_out, n_in + 1)
            for n_in, n_out in zip(self.layer_sizes[:-1], self.layer_sizes[1:])
        ]

    # ------------------------------------------------------------------
    # Forward propagation

    def forward(self, weights: Sequence[Array], inputs: Array) -> List[Array]:
        """Return the activations of every layer for ``inputs``.

        ``activations[0]`` is the input and ``activations[l]`` the output of
        ``weights[l - 1]``; each carries the leading bias unit.
        """

        activations = [add_bias(inputs)]
        for w in weights:
            preactivation = w @ activations[-1]
            activations.append(add_bias(self.activation(preactivation)))
        return activations

    def evaluate(self, weights: Sequence[Array], inputs: Array) -> Array:
        """Return the network output for ``inputs`` without the bias unit."""

        return remove_bias(self.forward(weights, inputs)[len(weights)])

    def feed(self, inputs: Array) -> List[Array]:
        """Same as :meth:`forward` with the network's weights; caches the result."""

        self.activations = self.forward(self.weights, inputs)
        return self.activations

    def predict(self, inputs: Array) -> Array:
        """Same as :meth:`evaluate` with the network's weights; caches activations."""

        return remove_bias(self.feed(inputs)[len(self.weights)])

    # ------------------------------------------------------------------
    # Backward propagation

    def backward(
        self, weights: Sequence[Array], activations: Sequence[Array], target: Array
    ) -> List[Array]:
        """Return the error signal of every non-input layer.

        Item ``i`` of the result is the error at layer ``i + 1``, i.e. at the
        output of ``weights[i]``. The input layer has no error.
        """

        last = len(weights)
        derivative = self.activation.derivative_from_output
        deltas: List[Array] = [np.empty(0)] * last
        deltas[last - 1] = remove_bias(activations[last]) - np.asarray(target, dtype=np.float64)
        for layer in range(last - 1, 0, -1):
            reverse_error = weights[layer].T @ deltas[layer]
            delta = reverse_error * derivative(activations[layer])
            # the bias unit has no inputs to pass its error back to
            deltas[layer - 1] = remove_bias(delta)
        return deltas

    def backpropagate(self, target: Array) -> List[Array]:
        """Same as :meth:`backward` on the activations cached by :meth:`feed`."""

        if not self.activations:
            raise TrainingStateError("feed() must be called before backpropagate()")
        self.deltas = self.backward(self.weights, self.activations, target)
        return self.deltas

    # ------------------------------------------------------------------
    # Cost

    def cost_gradient(self, weights: Sequence[Array]) -> List[Array]:
        """Gradient of :meth:`cost` with respect to every weight matrix."""

        return self._cost_gradient(weights, self.xs, self.ys, self.norm_weight)

    def gradient_fn(self) -> GradientFn:
        """Return the ``weights -> gradient`` function used for training.

        The training data and the current regularization weight are captured
        when this is called.
        """

        xs, ys, norm_weight = self.xs, self.ys, self.norm_weight
        return lambda weights: self._cost_gradient(weights, xs, ys, norm_weight)

    def _cost_gradient(
        self, weights: Sequence[Array], xs: Array, ys: Array, norm_weight: float
    ) -> List[Array]:
        weights = [np.asarray(w, dtype=np.float64) for w in weights]
        big_delta = [np.zeros_like(w) for w in weights]
        for x, y in zip(xs, ys):
            activations = self.forward(weights, x)
            deltas = self.backward(weights, activations, y)
            for layer, delta in enumerate(deltas):
                big_delta[layer] += np.outer(delta, activations[layer])
        n = xs.shape[0]
        return [
            acc / n + norm_weight * without_bias_column(w)
            for acc, w in zip(big_delta, weights)
        ]

    def cost(self, weights: Sequence[Array]) -> float:
        """Cross-entropy cost plus the L2 penalty on non-bias weights.

        Meaningful for outputs in ``(0, 1)``; used for gradient checking and
        progress reporting rather than by the optimizer.
        """

        error = 0.0
        for x, y in zip(self.xs, self.ys):
            out = np.clip(self.evaluate(weights, x), _LOG_EPS, 1.0 - _LOG_EPS)
            error += float(np.sum(y * np.log(out) + (1.0 - y) * np.log(1.0 - out)))
        penalty = sum(float(np.sum(np.asarray(w)[:, 1:] ** 2)) for w in weights)
        return -error / self.xs.shape[0] + 0.5 * self.norm_weight * penalty

    def numerical_gradient(self, weights: Sequence[Array], epsilon: float = 1e-5) -> List[Array]:
        """Central-difference approximation of the cost gradient.

        Slow (two cost evaluations per weight); meant for checking
        :meth:`cost_gradient`. ``weights`` is left unchanged.
        """

        probe = [np.array(w, dtype=np.float64, copy=True) for w in weights]
        gradient = [np.zeros_like(w) for w in probe]
        for layer, w in enumerate(probe):
            for idx in np.ndindex(w.shape):
                original = w[idx]
                w[idx] = original + epsilon
                upper = self.cost(probe)
                w[idx] = original - epsilon
                lower = self.cost(probe)
                w[idx] = original
                gradient[layer][idx] = (upper - lower) / (2.0 * epsilon)
        return gradient

    # ------------------------------------------------------------------
    # Training

    def train(
        self,
        rate: float,
        monitor: MonitorFn | None = None,
        halt: HaltFn | None = None,
    ) -> "NeuralNetwork":
        """Run gradient descent on the weights, ``1000`` steps unless ``halt`` says otherwise."""

        halt = halt or max_iterations(DEFAULT_TRAINING_ITERATIONS)
        gd = GradientDescent(self.weights, rate, self.gradient_fn())
        gd.each_iteration(monitor).halt_when(halt).run()
        self.weights = list(gd.x)
        logger.debug("Trained %r for %d iterations", self, gd.iterations)
        return self


__all__ = ["DEFAULT_TRAINING_ITERATIONS", "NeuralNetwork"]

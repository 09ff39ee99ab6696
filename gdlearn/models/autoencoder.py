"""Stacked autoencoder with greedy layer-wise pretraining."""

from __future__ import annotations

import logging
from typing import List, Sequence

import numpy as np

from ..core.activations import Activation
from ..core.errors import DataValidationError, TrainingStateError
from ..core.halting import HaltFn, MonitorFn
from ..core.linalg import remove_bias
from ..core.types import Array
from .network import NeuralNetwork

logger = logging.getLogger(__name__)


class Autoencoder(NeuralNetwork):
    """Network whose targets are its inputs and whose layers are mirrored.

    ``layers`` lists the encoder sizes from lowest to highest level; the last
    entry is the size of the encoding. The decoder reuses the same sizes in
    reverse, sharing the encoding layer, so ``layers=[4, 2]`` on 6-D inputs
    builds ``6 -> 4 -> 2 -> 4 -> 6``.

    ``trained`` counts how many encoder layers have been pretrained, which
    lets :meth:`pretrain` resume where it stopped.
    """

    def __init__(
        self,
        layers: Sequence[int],
        xs: Sequence[object] | Array,
        norm_weight: float = 0.0,
        weights: Sequence[Array] | None = None,
        trained: int = 0,
        activation: str | Activation = "logistic",
        seed: int | None = None,
    ) -> None:
        if len(layers) == 0:
            raise DataValidationError("An autoencoder needs at least one layer")
        self.layers = [int(size) for size in layers]
        if not 0 <= trained <= len(self.layers):
            raise ValueError(f"trained must be between 0 and {len(self.layers)}, got {trained}")
        self.trained = int(trained)
        full_hidden = self.layers + self.layers[::-1][1:]
        super().__init__(full_hidden, xs, xs, norm_weight, weights, activation, seed)

    def __repr__(self) -> str:
        return (
            f"<Autoencoder layers={self.layer_sizes} trained={self.trained}/{len(self.layers)}>"
        )

    @property
    def depth(self) -> int:
        """Index of the encoding layer in :attr:`layer_sizes`."""

        return len(self.layers)

    def mirror_of(self, layer: int) -> int:
        """Index of the decoder matrix paired with encoder matrix ``layer``."""

        return 2 * len(self.layers) - 1 - layer

    def pretrain_layer(
        self,
        layer: int,
        rate: float,
        monitor: MonitorFn | None = None,
        halt: HaltFn | None = None,
    ) -> "Autoencoder":
        """Train encoder matrix ``layer`` together with its decoder mirror.

        The pair is trained as a one-hidden-layer autoencoder on the training
        inputs encoded up to depth ``layer``; all other weights are left as
        they are.
        """

        if self.trained >= len(self.layers):
            raise TrainingStateError("No more layers to pretrain")
        if not 0 <= layer < len(self.layers):
            raise IndexError(f"Layer {layer} out of range for {len(self.layers)} encoder layers")

        deeper = layer
        shallower = self.mirror_of(deeper)
        features = self.encoded_xs(deeper)
        pair = NeuralNetwork(
            [self.layers[deeper]],
            features,
            features,
            self.norm_weight,
            [self.weights[deeper], self.weights[shallower]],
            self.activation,
        )
        logger.info("Pretraining layer %d (weights %d and %d)", deeper, deeper, shallower)
        pair.train(rate, monitor, halt)
        self.weights[deeper] = pair.weights[0]
        self.weights[shallower] = pair.weights[1]
        return self

    def pretrain(
        self,
        rate: float,
        monitor: MonitorFn | None = None,
        halt: HaltFn | None = None,
    ) -> "Autoencoder":
        """Pretrain every remaining layer, shallowest first."""

        for layer in range(self.trained, len(self.layers)):
            self.pretrain_layer(layer, rate, monitor, halt)
            self.trained += 1
        return self

    def encode(self, inputs: Array, depth: int | None = None) -> Array:
        """Return the activation of layer ``depth`` (default: the encoding)."""

        depth = self.depth if depth is None else int(depth)
        if not 0 <= depth <= len(self.weights):
            raise IndexError(
                f"Depth {depth} out of range for layers {self.layer_sizes}; "
                f"expected 0 to {len(self.weights)}"
            )
        if depth == 0:
            return np.asarray(inputs, dtype=np.float64)
        return remove_bias(self.forward(self.weights[:depth], inputs)[depth])

    def encoded_xs(self, depth: int | None = None) -> List[Array]:
        return [self.encode(x, depth) for x in self.xs]

    def decode(self, code: Array) -> Array:
        """Run an encoding back through the decoder half."""

        return self.evaluate(self.weights[self.depth :], code)


__all__ = ["Autoencoder"]

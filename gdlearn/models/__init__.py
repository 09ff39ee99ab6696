"""Models fitted with the gradient descent engine."""

from .autoencoder import Autoencoder
from .linear import LinearRegression
from .logistic import LogisticRegression
from .network import DEFAULT_TRAINING_ITERATIONS, NeuralNetwork
from .regression import Regression
from .softmax import SoftmaxRegression

__all__ = [
    "Autoencoder",
    "DEFAULT_TRAINING_ITERATIONS",
    "LinearRegression",
    "LogisticRegression",
    "NeuralNetwork",
    "Regression",
    "SoftmaxRegression",
]

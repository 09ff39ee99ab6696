"""gdlearn: gradient descent, neural networks and regression on numpy."""

from .core import GradientDescent
from .core.errors import DataValidationError, ShapeMismatchError, TrainingStateError
from .core.halting import any_of, chain, converged, every, max_iterations, time_limit
from .models import (
    Autoencoder,
    LinearRegression,
    LogisticRegression,
    NeuralNetwork,
    SoftmaxRegression,
)
from .preprocessing import Preprocessor

__all__ = [
    "Autoencoder",
    "DataValidationError",
    "GradientDescent",
    "LinearRegression",
    "LogisticRegression",
    "NeuralNetwork",
    "Preprocessor",
    "ShapeMismatchError",
    "SoftmaxRegression",
    "TrainingStateError",
    "any_of",
    "chain",
    "converged",
    "every",
    "max_iterations",
    "time_limit",
]

"""Exceptions raised by gdlearn models and optimizers."""

from __future__ import annotations


class DataValidationError(ValueError):
    """Raised when training data is empty or has inconsistent sizes."""


class ShapeMismatchError(ValueError):
    """Raised when parameters do not match the declared model dimensions."""


class TrainingStateError(RuntimeError):
    """Raised when a training phase is requested that cannot run anymore,
    e.g. pretraining an autoencoder whose layers are all trained.
    """


__all__ = ["DataValidationError", "ShapeMismatchError", "TrainingStateError"]

"""Core numerical primitives for gdlearn."""

from . import activations, descent, errors, halting, linalg, types, validation
from .descent import GradientDescent

__all__ = [
    "GradientDescent",
    "activations",
    "descent",
    "errors",
    "halting",
    "linalg",
    "types",
    "validation",
]

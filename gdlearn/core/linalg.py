"""Bias-unit helpers shared by the network and regression models."""

from __future__ import annotations

import numpy as np

from .types import Array


def add_bias(v: Array) -> Array:
    """Prepend the constant bias unit ``1`` to ``v``.

    Works on a single vector or on a 2-D array of row vectors.
    """

    v = np.asarray(v, dtype=np.float64)
    if v.ndim == 0:
        v = v.reshape(1)
    if v.ndim == 1:
        return np.concatenate(([1.0], v))
    return np.hstack([np.ones((v.shape[0], 1)), v])


def remove_bias(v: Array) -> Array:
    """Drop the leading bias component of ``v`` (or of each row)."""

    v = np.asarray(v)
    if v.ndim == 1:
        return v[1:]
    return v[:, 1:]


def without_bias_column(m: Array) -> Array:
    """Return a copy of ``m`` with column 0 (the bias column) zeroed."""

    masked = np.array(m, dtype=np.float64, copy=True)
    if masked.ndim == 1:
        masked[0] = 0.0
    else:
        masked[:, 0] = 0.0
    return masked


__all__ = ["add_bias", "remove_bias", "without_bias_column"]

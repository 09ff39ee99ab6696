"""Construction-time checks for training examples."""

from __future__ import annotations

from typing import Sequence

import numpy as np

from .errors import DataValidationError
from .types import Array


def as_examples(values: Sequence[object] | Array, name: str = "xs") -> Array:
    """Stack ``values`` into a read-only ``(n_examples, dim)`` float array.

    Scalars are promoted to 1-vectors. Raises :class:`DataValidationError` on
    an empty sequence or on rows of differing sizes; nothing is padded or
    truncated.
    """

    if len(values) == 0:
        raise DataValidationError(f"No examples given for {name}")
    rows = [np.atleast_1d(np.asarray(value, dtype=np.float64)) for value in values]
    dim = rows[0].size
    for idx, row in enumerate(rows):
        if row.ndim != 1 or row.size != dim:
            raise DataValidationError(
                f"Dimension mismatch for {name}: example {idx} has shape {row.shape}, "
                f"expected ({dim},)"
            )
    stacked = np.vstack(rows)
    stacked.setflags(write=False)
    return stacked


def check_same_length(xs: Sequence[object], ys: Sequence[object]) -> None:
    if len(xs) != len(ys):
        raise DataValidationError(f"Length mismatch for xs, ys: {len(xs)} != {len(ys)}")


__all__ = ["as_examples", "check_same_length"]

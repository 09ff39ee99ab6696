"""Reversible normalisation of training data.

A :class:`Preprocessor` transforms its ``xs`` and ``ys`` in place and records
every transform it applies. The record is what lets new inputs be prepared the
same way (:meth:`Preprocessor.pack`) and model outputs be mapped back to the
original units (:meth:`Preprocessor.unpack`).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Sequence, Tuple, Union

import numpy as np

from .core.errors import DataValidationError
from .core.types import Array
from .core.validation import as_examples, check_same_length

logger = logging.getLogger(__name__)

TARGETS = ("x", "y")


@dataclass(frozen=True, eq=False)
class NormalizeMean:
    """Subtract the training mean of ``target``."""

    target: str
    mean: Array

    def forward(self, value: Any) -> Any:
        return np.asarray(value, dtype=np.float64) - self.mean

    def inverse(self, value: Any) -> Any:
        return np.asarray(value, dtype=np.float64) + self.mean


@dataclass(frozen=True, eq=False)
class Scale:
    """Divide ``target`` by its root-mean-square; zero-deviation components map to 0."""

    target: str
    sd: Array

    def forward(self, value: Any) -> Any:
        value = np.asarray(value, dtype=np.float64)
        safe = np.where(self.sd == 0, 1.0, self.sd)
        return np.where(self.sd == 0, 0.0, value / safe)

    def inverse(self, value: Any) -> Any:
        return np.asarray(value, dtype=np.float64) * self.sd


def class_key(label: Any) -> Any:
    """Hashable stand-in for ``label``; vector labels compare by their components."""

    if isinstance(label, (list, tuple, np.ndarray)):
        return tuple(np.ravel(np.asarray(label)).tolist())
    if isinstance(label, np.generic):
        return label.item()
    return label


@dataclass(frozen=True, eq=False)
class NormalizeClasses:
    """Replace class labels by their index in order of first appearance.

    ``classes`` keeps the original label objects, so :meth:`inverse` returns
    a vector label as it was given.
    """

    classes: Tuple[Any, ...]
    target: str = "y"
    _index: Dict[Any, int] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        index: Dict[Any, int] = {}
        for i, c in enumerate(self.classes):
            index.setdefault(class_key(c), i)
        object.__setattr__(self, "_index", index)

    def forward(self, value: Any) -> int:
        try:
            return self._index[class_key(value)]
        except KeyError:
            raise KeyError(f"Unknown class {value!r}. Known: {list(self.classes)}") from None

    def inverse(self, value: Any) -> Any:
        return self.classes[int(value)]


Transform = Union[NormalizeMean, Scale, NormalizeClasses]


def _root_mean_square(values: Array) -> Array:
    return np.sqrt(np.mean(values**2, axis=0))


class Preprocessor:
    """Normalise ``xs`` (and optionally ``ys``) and remember how.

    Every transform method returns the preprocessor so calls can be chained::

        prep = Preprocessor(xs, ys).normalize_mean_x().scale_x().normalize_classes()
        model = SoftmaxRegression(prep.xs, prep.ys)
        model.predict_class(prep.pack(new_x))
    """

    def __init__(
        self, xs: Sequence[object] | Array, ys: Sequence[object] | Array | None = None
    ) -> None:
        self.xs = np.array(as_examples(xs, "xs"))
        if ys is not None:
            check_same_length(xs, ys)
            self.ys: Any = list(ys)
        else:
            self.ys = None
        self.history: List[Transform] = []

    def __repr__(self) -> str:
        steps = ", ".join(f"{type(t).__name__}({t.target})" for t in self.history)
        return f"<Preprocessor n={self.xs.shape[0]} history=[{steps}]>"

    def _numeric_ys(self) -> Array:
        if self.ys is None:
            raise DataValidationError("No ys were given to this preprocessor")
        try:
            return np.asarray(self.ys, dtype=np.float64)
        except (TypeError, ValueError) as exc:
            raise DataValidationError(f"ys are not numeric: {exc}") from exc

    def _record(self, transform: Transform) -> None:
        self.history.append(transform)
        logger.debug("Recorded %r", transform)

    # ------------------------------------------------------------------
    # Transforms

    def normalize_classes(self) -> "Preprocessor":
        if self.ys is None:
            raise DataValidationError("No ys were given to this preprocessor")
        labels = [y.item() if isinstance(y, np.generic) else y for y in self.ys]
        first_seen: Dict[Any, Any] = {}
        for label in labels:
            first_seen.setdefault(class_key(label), label)
        record = NormalizeClasses(tuple(first_seen.values()))
        self.ys = np.array([record.forward(y) for y in labels], dtype=np.int64)
        self._record(record)
        return self

    def normalize_mean_x(self) -> "Preprocessor":
        record = NormalizeMean("x", np.mean(self.xs, axis=0))
        self.xs = record.forward(self.xs)
        self._record(record)
        return self

    def normalize_mean_y(self) -> "Preprocessor":
        ys = self._numeric_ys()
        record = NormalizeMean("y", np.mean(ys, axis=0))
        self.ys = record.forward(ys)
        self._record(record)
        return self

    def scale_x(self) -> "Preprocessor":
        record = Scale("x", _root_mean_square(self.xs))
        self.xs = record.forward(self.xs)
        self._record(record)
        return self

    def scale_y(self) -> "Preprocessor":
        ys = self._numeric_ys()
        record = Scale("y", _root_mean_square(ys))
        self.ys = record.forward(ys)
        self._record(record)
        return self

    def standardize(self, regression: bool = True) -> "Preprocessor":
        """Centre and scale ``xs``; then centre and scale ``ys`` or index classes."""

        self.normalize_mean_x().scale_x()
        if self.ys is None:
            return self
        if regression:
            return self.normalize_mean_y().scale_y()
        return self.normalize_classes()

    # ------------------------------------------------------------------
    # Replay

    def transforms(self, target: str) -> List[Transform]:
        if target not in TARGETS:
            raise ValueError(f"target must be one of {TARGETS}, got {target!r}")
        return [t for t in self.history if t.target == target]

    def pack(self, value: Any, target: str = "x") -> Any:
        """Apply the recorded ``target`` transforms to a new value, in order."""

        for transform in self.transforms(target):
            value = transform.forward(value)
        return value

    def unpack(self, value: Any, target: str = "y") -> Any:
        """Undo the recorded ``target`` transforms on a value, newest first."""

        for transform in reversed(self.transforms(target)):
            value = transform.inverse(value)
        return value


__all__ = ["NormalizeClasses", "NormalizeMean", "Preprocessor", "Scale", "Transform", "class_key"]

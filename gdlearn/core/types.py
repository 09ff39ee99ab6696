"""Core typing contracts for gdlearn."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterator, List, Tuple, Union

import numpy as np

from .errors import ShapeMismatchError

Array = np.ndarray

# What the optimizer iterates over: a scalar, one array, or a list of arrays.
Params = Union[float, Array, List[Array]]
GradientFn = Callable[[Params], Params]
LeafFn = Callable[[Array, Array], Array]


class ParamBlob:
    """Shape-polymorphic parameter container.

    The optimizer never inspects the runtime type of an iterate. It wraps the
    value with :func:`as_blob` and works against this interface; each variant
    implements :meth:`combine` and :meth:`map` once.
    """

    def combine(self, other: "ParamBlob", fn: LeafFn) -> "ParamBlob":
        raise NotImplementedError

    def map(self, fn: Callable[[Array], Array]) -> "ParamBlob":
        raise NotImplementedError

    def leaves(self) -> Iterator[Array]:
        raise NotImplementedError

    def unwrap(self) -> Params:
        raise NotImplementedError

    def __add__(self, other: "ParamBlob") -> "ParamBlob":
        return self.combine(other, np.add)

    def __sub__(self, other: "ParamBlob") -> "ParamBlob":
        return self.combine(other, np.subtract)

    def __mul__(self, factor: float) -> "ParamBlob":
        return self.map(lambda leaf: leaf * factor)

    __rmul__ = __mul__

    def norm(self) -> float:
        """Euclidean norm over every leaf entry."""

        return float(np.sqrt(sum(float(np.sum(leaf * leaf)) for leaf in self.leaves())))

    def shapes(self) -> List[Tuple[int, ...]]:
        return [leaf.shape for leaf in self.leaves()]


def _check_leaf(a: Array, b: Array) -> None:
    if a.shape != b.shape:
        raise ShapeMismatchError(f"Parameter shape {a.shape} does not match {b.shape}")


@dataclass(frozen=True, eq=False)
class Dense(ParamBlob):
    """A single array parameter: scalar, vector or matrix."""

    value: Array

    def combine(self, other: ParamBlob, fn: LeafFn) -> "Dense":
        if not isinstance(other, Dense):
            raise ShapeMismatchError("Cannot combine a single array with a stack of arrays")
        _check_leaf(self.value, other.value)
        return Dense(fn(self.value, other.value))

    def map(self, fn: Callable[[Array], Array]) -> "Dense":
        return Dense(fn(self.value))

    def leaves(self) -> Iterator[Array]:
        yield self.value

    def unwrap(self) -> Params:
        if self.value.ndim == 0:
            return float(self.value)
        return self.value


@dataclass(frozen=True, eq=False)
class Stack(ParamBlob):
    """An ordered sequence of arrays, e.g. per-layer weight matrices."""

    items: Tuple[Array, ...]

    def combine(self, other: ParamBlob, fn: LeafFn) -> "Stack":
        if not isinstance(other, Stack):
            raise ShapeMismatchError("Cannot combine a stack of arrays with a single array")
        if len(self.items) != len(other.items):
            raise ShapeMismatchError(
                f"Stack of {len(self.items)} arrays does not match stack of {len(other.items)}"
            )
        for a, b in zip(self.items, other.items):
            _check_leaf(a, b)
        return Stack(tuple(fn(a, b) for a, b in zip(self.items, other.items)))

    def map(self, fn: Callable[[Array], Array]) -> "Stack":
        return Stack(tuple(fn(item) for item in self.items))

    def leaves(self) -> Iterator[Array]:
        return iter(self.items)

    def unwrap(self) -> Params:
        return list(self.items)


def as_blob(value: Params | ParamBlob) -> ParamBlob:
    """Wrap a raw iterate (number, array or list of arrays) in a blob."""

    if isinstance(value, ParamBlob):
        return value
    if isinstance(value, (list, tuple)):
        return Stack(tuple(np.asarray(item, dtype=np.float64) for item in value))
    return Dense(np.asarray(value, dtype=np.float64))


@dataclass
class RunResult:
    """Summary returned by :func:`gdlearn.training.pipelines.run_pipeline`."""

    iterations: int
    metrics_path: str
    manifest_path: str
    summary_path: str = ""
    final: Dict[str, float] = field(default_factory=dict)
    model: Any = field(default=None, repr=False)


__all__ = [
    "Array",
    "Dense",
    "GradientFn",
    "ParamBlob",
    "Params",
    "RunResult",
    "Stack",
    "as_blob",
]

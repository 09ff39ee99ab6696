"""Dataset registry and metadata contracts."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, MutableMapping

import numpy as np

from ..core.types import Array


TASK_TYPES = ("regression", "binary", "multiclass", "multilabel", "reconstruction")


@dataclass(frozen=True, eq=False)
class Dataset:
    """An in-memory training set.

    Attributes
    ----------
    name:
        Registry identifier.
    xs:
        ``(n_examples, d_in)`` inputs without bias features.
    ys:
        Targets: 1-D for scalar regression and class labels, 2-D for vector
        targets. Reconstruction datasets reuse ``xs``.
    task_type:
        One of :data:`TASK_TYPES`.
    num_classes:
        Number of classes for ``"multiclass"`` datasets.
    provenance:
        The generator parameters, so a run can be reproduced from its config.
    """

    name: str
    xs: Array
    ys: Array
    task_type: str
    num_classes: int | None = None
    provenance: Dict[str, Any] = field(default_factory=dict)

    @property
    def d_in(self) -> int:
        return int(self.xs.shape[1])

    @property
    def d_out(self) -> int:
        return 1 if self.ys.ndim == 1 else int(self.ys.shape[1])

    def __len__(self) -> int:
        return int(self.xs.shape[0])


DatasetFactory = Callable[..., Dataset]


_REGISTRY: MutableMapping[str, DatasetFactory] = {}


def register_dataset(
    name: str | None = None,
    factory: DatasetFactory | None = None,
) -> Callable[[DatasetFactory], DatasetFactory] | DatasetFactory:
    """Register a dataset factory.

    ``register_dataset`` can be used both as a decorator::

        @register_dataset("line")
        def make_line(**kwargs):
            ...

    or directly::

        register_dataset("line", make_line)
    """

    def _decorator(func: DatasetFactory) -> DatasetFactory:
        _REGISTRY[str(name or func.__name__)] = func
        return func

    if factory is not None:
        return _decorator(factory)
    if name is None:
        raise TypeError("register_dataset requires a name when used without a decorator")
    return _decorator


def get_dataset(dataset: str, /, **options: Any) -> Dataset:
    """Build the dataset registered as ``dataset`` with ``options``."""

    if dataset not in _REGISTRY:
        raise KeyError(f"Unknown dataset: {dataset}. Available: {available_datasets()}")
    built = _REGISTRY[dataset](**options)
    _validate(built)
    return built


def available_datasets() -> Iterable[str]:
    """Return the sorted list of available dataset identifiers."""

    return sorted(_REGISTRY)


def _validate(dataset: Dataset) -> None:
    if dataset.task_type not in TASK_TYPES:
        raise ValueError(f"Invalid task type: {dataset.task_type}")
    if dataset.task_type == "multiclass" and dataset.num_classes is None:
        raise ValueError("Multiclass datasets must define num_classes")
    if np.asarray(dataset.xs).ndim != 2:
        raise ValueError(f"Dataset {dataset.name!r} inputs must be 2-D")
    if len(dataset.xs) != len(dataset.ys):
        raise ValueError(
            f"Dataset {dataset.name!r} has {len(dataset.xs)} inputs but {len(dataset.ys)} targets"
        )


__all__ = [
    "Dataset",
    "DatasetFactory",
    "TASK_TYPES",
    "available_datasets",
    "get_dataset",
    "register_dataset",
]

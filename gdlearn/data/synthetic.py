"""Pure in-memory synthetic datasets for the bundled demos."""

from __future__ import annotations

import numpy as np

from .registry import Dataset, register_dataset


@register_dataset("line")
def make_line(n_points: int = 3, slope: float = 1.0, intercept: float = -1.0, **_: object) -> Dataset:
    """Points ``x = 1..n`` on the line ``y = slope * x + intercept``."""

    xs = np.arange(1, n_points + 1, dtype=np.float64).reshape(-1, 1)
    ys = slope * xs[:, 0] + intercept
    return Dataset(
        name="line",
        xs=xs,
        ys=ys,
        task_type="regression",
        provenance={"n_points": n_points, "slope": slope, "intercept": intercept},
    )


@register_dataset("threshold")
def make_threshold(
    points: tuple[float, ...] = (-10.0, -5.0, -1.0, 1.0, 5.0, 10.0),
    threshold: float = 0.0,
    **_: object,
) -> Dataset:
    """1-D points labelled ``1`` above ``threshold`` and ``0`` below."""

    xs = np.asarray(points, dtype=np.float64).reshape(-1, 1)
    ys = (xs[:, 0] > threshold).astype(np.float64)
    return Dataset(
        name="threshold",
        xs=xs,
        ys=ys,
        task_type="binary",
        provenance={"points": [float(p) for p in points], "threshold": threshold},
    )


@register_dataset("bands")
def make_bands(n_points: int = 100, cut: float = 25.0, **_: object) -> Dataset:
    """Integers centred on zero split into three classes at ``-cut`` and ``cut``."""

    xs = (np.arange(n_points, dtype=np.float64) - n_points // 2).reshape(-1, 1)
    ys = np.ones(n_points, dtype=np.int64)
    ys[xs[:, 0] < -cut] = 0
    ys[xs[:, 0] > cut] = 2
    return Dataset(
        name="bands",
        xs=xs,
        ys=ys,
        task_type="multiclass",
        num_classes=3,
        provenance={"n_points": n_points, "cut": cut},
    )


def sphere_features(points: np.ndarray) -> np.ndarray:
    """``[x, y, z, x^2, y^2, z^2]`` for each row of ``points``."""

    points = np.asarray(points, dtype=np.float64)
    return np.hstack([points, points**2])


@register_dataset("sphere")
def make_sphere(
    half_width: int = 5,
    offset: float = 0.5,
    radius: float = 4.0,
    **_: object,
) -> Dataset:
    """Grid points in 3-D labelled by distance from the origin.

    The grid holds ``i + offset`` for ``i`` in ``-half_width .. half_width-1``
    along each axis. Target 0 is whether the point lies further than
    ``radius`` from the origin, target 1 whether its projection on ``z = 0``
    does. Inputs carry the squared coordinates so a network without hidden
    layers can separate the classes.
    """

    axis = np.arange(-half_width, half_width, dtype=np.float64) + offset
    grid = np.stack(np.meshgrid(axis, axis, axis, indexing="ij"), axis=-1).reshape(-1, 3)
    dist3 = np.sqrt(np.sum(grid**2, axis=1))
    dist2 = np.sqrt(np.sum(grid[:, :2] ** 2, axis=1))
    ys = np.stack([dist3 > radius, dist2 > radius], axis=1).astype(np.float64)
    return Dataset(
        name="sphere",
        xs=sphere_features(grid),
        ys=ys,
        task_type="multilabel",
        provenance={"half_width": half_width, "offset": offset, "radius": radius},
    )


@register_dataset("diagonal")
def make_diagonal(n_points: int = 11, **_: object) -> Dataset:
    """2-D points on the anti-diagonal from ``(0.5, -0.5)`` to ``(-0.5, 0.5)``.

    The points have one degree of freedom, so a single-unit encoding can
    reconstruct them.
    """

    t = np.linspace(0.0, 1.0, n_points)
    xs = np.stack([0.5 - t, t - 0.5], axis=1)
    return Dataset(
        name="diagonal",
        xs=xs,
        ys=xs,
        task_type="reconstruction",
        provenance={"n_points": n_points},
    )


__all__ = [
    "make_bands",
    "make_diagonal",
    "make_line",
    "make_sphere",
    "make_threshold",
    "sphere_features",
]

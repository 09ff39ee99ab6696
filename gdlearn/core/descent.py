"""Generic batch gradient descent engine."""

from __future__ import annotations

import logging

from .halting import HaltFn, MonitorFn, converged
from .types import GradientFn, ParamBlob, Params, as_blob

logger = logging.getLogger(__name__)


def _noop(engine: "GradientDescent") -> None:
    return None


class GradientDescent:
    """Minimise a function given only its gradient.

    The iterate may be a scalar, a vector, or a list of vectors/matrices; the
    update ``x <- x - rate * gradient_fn(x)`` is applied leaf by leaf. The
    engine is reusable: call :meth:`run` again after changing the halting
    predicate to keep descending from the current iterate.

    Example::

        gd = GradientDescent(30.0, 0.002, lambda x: 2 * x - 4)
        gd.halt_when(max_iterations(5000)).run()
        gd.x  # ~2.0
    """

    def __init__(self, x0: Params, rate: float, gradient_fn: GradientFn) -> None:
        self._rate = float(rate)
        self.gradient_fn = gradient_fn
        self._x: ParamBlob = as_blob(x0)
        self._prev_x: ParamBlob = self._x
        self._iterations = 0
        self._on_iteration: MonitorFn = _noop
        self._halt: HaltFn = converged()

    # ------------------------------------------------------------------
    # State

    @property
    def x(self) -> Params:
        return self._x.unwrap()

    @property
    def prev_x(self) -> Params:
        return self._prev_x.unwrap()

    @property
    def rate(self) -> float:
        return self._rate

    @property
    def iterations(self) -> int:
        return self._iterations

    @property
    def step_norm(self) -> float:
        """Norm of the most recent move, ``||x - prev_x||``."""

        return (self._x - self._prev_x).norm()

    # ------------------------------------------------------------------
    # Configuration

    def each_iteration(self, callback: MonitorFn | None = None) -> "GradientDescent":
        """Set the observer called before every step (``None`` clears it)."""

        self._on_iteration = callback or _noop
        return self

    def halt_when(self, predicate: HaltFn | None = None) -> "GradientDescent":
        """Set the stop rule (``None`` restores convergence-by-delta)."""

        self._halt = predicate or converged()
        return self

    # ------------------------------------------------------------------
    # Iteration

    def step(self, value: Params) -> Params:
        """Return ``value - rate * gradient_fn(value)`` without touching state."""

        return self._step(as_blob(value)).unwrap()

    def _step(self, blob: ParamBlob) -> ParamBlob:
        gradient = as_blob(self.gradient_fn(blob.unwrap()))
        return blob - gradient * self._rate

    def run(self) -> "GradientDescent":
        logger.debug(
            "Starting gradient descent: rate=%g, shapes=%s, iterations=%d",
            self._rate,
            self._x.shapes(),
            self._iterations,
        )
        while not self._halt(self):
            self._on_iteration(self)
            self._prev_x = self._x
            self._x = self._step(self._x)
            self._iterations += 1
        logger.debug(
            "Gradient descent halted after %d iterations (last step %.3e)",
            self._iterations,
            self.step_norm,
        )
        return self


__all__ = ["GradientDescent"]

"""Halting predicates and monitor combinators for :class:`GradientDescent`."""

from __future__ import annotations

import time
from typing import TYPE_CHECKING, Callable

if TYPE_CHECKING:  # pragma: no cover - typing only
    from .descent import GradientDescent

HaltFn = Callable[["GradientDescent"], bool]
MonitorFn = Callable[["GradientDescent"], None]

DEFAULT_TOLERANCE = 1e-7


def converged(tolerance: float = DEFAULT_TOLERANCE) -> HaltFn:
    """Stop once the last step moved the iterate by less than ``tolerance``.

    At least two steps must have been taken so a run never halts on the
    zero-length move before the first update.
    """

    def _halt(engine: "GradientDescent") -> bool:
        return engine.iterations > 1 and engine.step_norm < tolerance

    return _halt


def max_iterations(limit: int) -> HaltFn:
    """Stop after ``limit`` completed steps."""

    def _halt(engine: "GradientDescent") -> bool:
        return engine.iterations >= limit

    return _halt


def time_limit(seconds: float, clock: Callable[[], float] = time.monotonic) -> HaltFn:
    """Stop once ``seconds`` have elapsed since the predicate was first asked."""

    started: list[float] = []

    def _halt(engine: "GradientDescent") -> bool:
        now = clock()
        if not started:
            started.append(now)
        return now - started[0] >= seconds

    return _halt


def any_of(*predicates: HaltFn) -> HaltFn:
    """Stop as soon as one of ``predicates`` says so."""

    def _halt(engine: "GradientDescent") -> bool:
        return any(predicate(engine) for predicate in predicates)

    return _halt


def every(n: int, monitor: MonitorFn) -> MonitorFn:
    """Call ``monitor`` only on iterations that are multiples of ``n``."""

    if n < 1:
        raise ValueError("every() requires n >= 1")

    def _monitor(engine: "GradientDescent") -> None:
        if engine.iterations % n == 0:
            monitor(engine)

    return _monitor


def chain(*monitors: MonitorFn | None) -> MonitorFn:
    """Call each of ``monitors`` in order; ``None`` entries are skipped."""

    active = [m for m in monitors if m is not None]

    def _monitor(engine: "GradientDescent") -> None:
        for monitor in active:
            monitor(engine)

    return _monitor


__all__ = [
    "DEFAULT_TOLERANCE",
    "HaltFn",
    "MonitorFn",
    "any_of",
    "chain",
    "converged",
    "every",
    "max_iterations",
    "time_limit",
]

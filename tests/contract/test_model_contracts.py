"""Every model trains through the same engine contract."""

import numpy as np
import pytest

from gdlearn.core.halting import max_iterations
from gdlearn.models import (
    Autoencoder,
    LinearRegression,
    LogisticRegression,
    NeuralNetwork,
    SoftmaxRegression,
)

XS = [[0.1, 0.2], [0.4, 0.1], [0.8, 0.9], [0.3, 0.7]]


def _models():
    return [
        (LinearRegression(XS, [0.3, 0.5, 1.7, 1.0], seed=0), "gradient_descent", "parameters"),
        (LogisticRegression(XS, [0, 0, 1, 1], seed=0), "gradient_descent", "parameters"),
        (SoftmaxRegression(XS, [0, 1, 2, 1], seed=0), "gradient_descent", "parameters"),
        (NeuralNetwork([3], XS, [[0.0], [0.0], [1.0], [1.0]], seed=0), "train", "weights"),
        (Autoencoder([1], XS, seed=0), "train", "weights"),
    ]


@pytest.mark.parametrize("index", range(5))
def test_monitor_and_halt_are_honoured(index):
    model, method, attribute = _models()[index]
    calls = []
    result = getattr(model, method)(
        0.1, lambda engine: calls.append(engine.iterations), max_iterations(6)
    )
    assert result is model
    assert calls == [0, 1, 2, 3, 4, 5]


@pytest.mark.parametrize("index", range(5))
def test_training_writes_back_the_final_iterate(index):
    model, method, attribute = _models()[index]
    seen = []
    getattr(model, method)(0.1, lambda engine: seen.append(engine.x), max_iterations(3))
    final = getattr(model, attribute)
    last_seen = seen[-1]
    # the final step happens after the last observer call
    if isinstance(final, list):
        assert all(a.shape == b.shape for a, b in zip(final, last_seen))
        assert any(not np.array_equal(a, b) for a, b in zip(final, last_seen))
    else:
        assert final.shape == np.shape(last_seen)
        assert not np.array_equal(final, last_seen)


@pytest.mark.parametrize("index", range(5))
def test_gradient_fn_matches_cost_gradient(index):
    model, _, attribute = _models()[index]
    params = getattr(model, attribute)
    direct = model.cost_gradient(params)
    via_fn = model.gradient_fn()(params)
    if isinstance(direct, list):
        assert all(np.allclose(a, b) for a, b in zip(direct, via_fn))
    else:
        assert np.allclose(direct, via_fn)

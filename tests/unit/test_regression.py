import numpy as np
import pytest

from gdlearn.core.errors import DataValidationError, ShapeMismatchError
from gdlearn.core.halting import max_iterations
from gdlearn.models import LinearRegression, LogisticRegression, SoftmaxRegression
from gdlearn.preprocessing import Preprocessor


def _numerical_gradient(cost, parameters, epsilon=1e-5):
    gradient = np.zeros_like(parameters)
    for idx in np.ndindex(parameters.shape):
        probe = parameters.copy()
        probe[idx] += epsilon
        upper = cost(probe)
        probe[idx] -= 2 * epsilon
        lower = cost(probe)
        gradient[idx] = (upper - lower) / (2 * epsilon)
    return gradient


def test_linear_regression_fits_line():
    model = LinearRegression([[1.0], [2.0], [3.0]], [0.0, 1.0, 2.0], 0.0, seed=0)
    model.gradient_descent(0.03)
    intercept, slope = model.parameters
    assert slope == pytest.approx(1.0, abs=1e-3)
    assert intercept == pytest.approx(-1.0, abs=1e-3)
    assert float(model.predict([4.0])) == pytest.approx(3.0, abs=1e-2)


def test_logistic_regression_separates_threshold():
    xs = [[-10.0], [-5.0], [-1.0], [1.0], [5.0], [10.0]]
    model = LogisticRegression(xs, [0, 0, 0, 1, 1, 1], 0.5, seed=0)
    model.gradient_descent(0.05)
    for x in (-10.0, -5.0, -1.0):
        assert float(model.predict([x])) < 0.5
    for x in (1.0, 5.0, 10.0):
        assert float(model.predict([x])) > 0.5


def test_logistic_predict_includes_bias():
    model = LogisticRegression([[0.0], [1.0]], [0, 1], parameters=np.array([2.0, 0.0]))
    assert float(model.predict([0.0])) == pytest.approx(1.0 / (1.0 + np.exp(-2.0)))


def test_softmax_regression_learns_bands():
    xs = np.arange(100, dtype=np.float64).reshape(-1, 1) - 50
    ys = np.where(xs[:, 0] < -25, 0, np.where(xs[:, 0] > 25, 2, 1))
    prep = Preprocessor(xs).normalize_mean_x().scale_x()
    model = SoftmaxRegression(prep.xs, ys, 0.0, seed=0)
    model.gradient_descent(1.0, halt=max_iterations(3000))

    assert model.num_classes == 3
    assert np.mean(model.predict_class(prep.xs) == ys) >= 0.9
    assert int(model.predict_class(prep.pack([-45.0]))) == 0
    assert int(model.predict_class(prep.pack([0.0]))) == 1
    assert int(model.predict_class(prep.pack([45.0]))) == 2
    assert np.sum(model.predict(prep.pack([10.0]))) == pytest.approx(1.0)


def test_softmax_log_hypothesis_handles_large_logits():
    model = SoftmaxRegression([[0.0], [1.0]], [0, 1], parameters=np.array([[0.0, 1000.0], [0.0, 0.0]]))
    with np.errstate(over="raise"):
        probs = model.hypothesis(model.parameters, np.array([1.0, 1.0]))
    assert probs[0] == pytest.approx(1.0)
    assert np.all(np.isfinite(probs))


@pytest.mark.parametrize(
    "factory",
    [
        lambda: LinearRegression([[1.0, 2.0], [2.0, 0.5], [3.0, -1.0]], [0.5, 1.0, 2.0], 0.7, seed=1),
        lambda: LogisticRegression([[1.0, 2.0], [2.0, 0.5], [-3.0, -1.0]], [1, 0, 1], 0.7, seed=1),
        lambda: SoftmaxRegression([[1.0, 2.0], [2.0, 0.5], [-3.0, -1.0]], [0, 2, 1], 0.7, seed=1),
    ],
)
def test_cost_gradient_matches_numerical_gradient(factory):
    model = factory()
    rng = np.random.default_rng(0)
    parameters = rng.uniform(-1.0, 1.0, size=model.parameters.shape)
    analytic = model.cost_gradient(parameters)
    numeric = _numerical_gradient(model.cost, parameters)
    assert np.allclose(analytic, numeric, atol=1e-6)


def test_bias_parameter_is_not_regularized():
    model = LinearRegression([[1.0], [2.0]], [1.0, 2.0], 0.0)
    theta = np.array([3.0, 0.5])
    penalty = model.cost_gradient(theta, norm_weight=4.0) - model.cost_gradient(theta, norm_weight=0.0)
    assert penalty[0] == 0.0
    assert penalty[1] == pytest.approx(4.0 * 0.5 / 2)


def test_parameter_shapes_are_validated():
    with pytest.raises(ShapeMismatchError):
        LinearRegression([[1.0], [2.0]], [1.0, 2.0], parameters=np.zeros(3))
    with pytest.raises(ShapeMismatchError):
        SoftmaxRegression([[1.0], [2.0]], [0, 2], parameters=np.zeros((2, 2)))
    model = SoftmaxRegression([[1.0], [2.0]], [0, 2], seed=0)
    assert model.parameters.shape == (3, 2)


def test_training_data_is_validated():
    with pytest.raises(DataValidationError):
        LinearRegression([], [])
    with pytest.raises(DataValidationError):
        LinearRegression([[1.0], [2.0]], [1.0])
    with pytest.raises(DataValidationError):
        LinearRegression([[1.0], [2.0, 3.0]], [1.0, 2.0])
    with pytest.raises(DataValidationError):
        SoftmaxRegression([[1.0], [2.0]], [0.5, 1.0])
    with pytest.raises(DataValidationError):
        SoftmaxRegression([[1.0], [2.0]], [-1, 1])


def test_seed_makes_initialisation_reproducible():
    a = LinearRegression([[1.0], [2.0]], [1.0, 2.0], seed=7)
    b = LinearRegression([[1.0], [2.0]], [1.0, 2.0], seed=7)
    assert np.array_equal(a.parameters, b.parameters)
    assert np.all((a.parameters >= -10.0) & (a.parameters < 10.0))

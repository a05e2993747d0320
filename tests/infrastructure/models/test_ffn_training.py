import math
import unittest

import numpy as np

from ffnkit.domain._errors import PreconditionError, ShapeError
from ffnkit.infrastructure.layers import Dropout, Linear, LogSoftMax, Sigmoid
from ffnkit.infrastructure.losses import MeanSquaredError, NegativeLogLikelihood
from ffnkit.infrastructure.models import FFN, FFNFunction
from ffnkit.infrastructure.optimizers import SGD, Adam


def _blobs(n_per_class: int = 50, seed: int = 0):
    rng = np.random.RandomState(seed)
    a = rng.randn(2, n_per_class) * 0.5 + np.array([[2.0], [2.0]])
    b = rng.randn(2, n_per_class) * 0.5 - np.array([[2.0], [2.0]])
    x = np.concatenate([a, b], axis=1)
    y = np.concatenate([np.zeros(n_per_class), np.ones(n_per_class)]).reshape(1, -1)
    return x, y


def _classifier() -> FFN:
    net = FFN(NegativeLogLikelihood())
    net.add(Linear(2, 8))
    net.add(Sigmoid())
    net.add(Linear(8, 2))
    net.add(LogSoftMax())
    return net


class FullBatchGradientDescent:
    """
    Minimal optimizer without a `max_iterations` attribute.
    """

    def __init__(self, step_size: float, steps: int) -> None:
        self.step_size = step_size
        self.steps = steps
        self.history = []

    def optimize(self, function, coordinates):
        gradient = np.zeros_like(coordinates)
        n = function.num_functions()
        for _ in range(self.steps):
            self.history.append(function.evaluate_with_gradient(coordinates, 0, gradient, n))
            coordinates -= self.step_size * gradient
        return function.evaluate(coordinates, 0, n)


class TestFFNTrain(unittest.TestCase):
    def test_train_returns_finite_objective_and_learns(self):
        np.random.seed(0)
        x, y = _blobs()
        net = _classifier()

        objective = net.train(x, y, SGD(step_size=0.05, batch_size=10, max_iterations=100 * 30))

        self.assertTrue(math.isfinite(objective))
        labels = net.predict(x).argmax(axis=0)
        self.assertGreater((labels == y.reshape(-1)).mean(), 0.95)

    def test_default_optimizer_is_used(self):
        np.random.seed(1)
        x, y = _blobs(n_per_class=20, seed=1)
        net = _classifier()
        objective = net.train(x, y)
        self.assertTrue(math.isfinite(objective))
        self.assertTrue(net.is_reset)

    def test_optimizer_without_max_iterations(self):
        np.random.seed(2)
        x, y = _blobs(n_per_class=10, seed=2)
        net = _classifier()
        opt = FullBatchGradientDescent(step_size=0.005, steps=50)

        objective = net.train(x, y, opt)

        self.assertTrue(math.isfinite(objective))
        self.assertLess(objective, opt.history[0])

    def test_shape_error_is_eager_and_prefixed(self):
        net = FFN()
        net.add(Linear(10, 2))
        net.add(LogSoftMax())

        class NeverCalled:
            def optimize(self, function, coordinates):
                raise AssertionError("optimizer must not run")

        with self.assertRaises(ShapeError) as ctx:
            net.train(np.zeros((7, 4)), np.zeros((1, 4)), NeverCalled())
        self.assertEqual(
            str(ctx.exception),
            "FFN.train(): the first layer of the network expects 10 elements, "
            "but the input has 7 dimensions!",
        )

    def test_column_mismatch_raises(self):
        net = _classifier()
        with self.assertRaises(ValueError):
            net.train(np.zeros((2, 5)), np.zeros((1, 4)), SGD())

    def test_empty_network_raises(self):
        with self.assertRaises(PreconditionError):
            FFN().train(np.zeros((2, 5)), np.zeros((1, 5)), SGD())

    def test_warns_when_max_iterations_below_sample_count(self):
        x, y = _blobs(n_per_class=10)
        net = _classifier()
        with self.assertLogs("ffnkit.infrastructure.models._training", level="WARNING") as logs:
            net.train(x, y, SGD(max_iterations=5))
        self.assertTrue(any("max_iterations" in line for line in logs.output))

    def test_non_finite_objective_is_returned(self):
        net = FFN(MeanSquaredError())
        net.add(Linear(1, 1))
        x = np.array([[1.0, 2.0]])
        y = np.array([[np.inf, 0.0]])
        with self.assertLogs("ffnkit.infrastructure.models._training", level="WARNING"):
            objective = net.train(x, y, SGD(max_iterations=2, shuffle=False))
        self.assertFalse(math.isfinite(objective))

    def test_train_restores_eval_mode(self):
        x, y = _blobs(n_per_class=5)
        net = FFN(NegativeLogLikelihood())
        net.add(Linear(2, 4))
        net.add(Dropout(0.2))
        net.add(Linear(4, 2))
        net.add(LogSoftMax())
        net.eval_mode()
        net.train(x, y, Adam(max_iterations=20))
        self.assertFalse(net.training)
        self.assertFalse(net[1].training)

    def test_objective_with_dropout_matches_final_parameters(self):
        np.random.seed(4)
        x, y = _blobs(n_per_class=20, seed=4)
        net = FFN(NegativeLogLikelihood())
        net.add(Linear(2, 8))
        net.add(Sigmoid())
        net.add(Dropout(0.3))
        net.add(Linear(8, 2))
        net.add(LogSoftMax())

        objective = net.train(x, y, SGD(step_size=0.01, batch_size=10, max_iterations=200))

        self.assertTrue(math.isfinite(objective))
        expected = FFNFunction(net, x, y).evaluate(net.parameters)
        self.assertTrue(np.isclose(objective, expected, rtol=1e-9, atol=1e-9))

    def test_caller_data_is_not_mutated(self):
        x, y = _blobs(n_per_class=5)
        x_before, y_before = x.copy(), y.copy()
        _classifier().train(x, y, SGD(max_iterations=30))
        np.testing.assert_array_equal(x, x_before)
        np.testing.assert_array_equal(y, y_before)


class TestFFNFunction(unittest.TestCase):
    def test_evaluate_with_gradient_matches_network(self):
        np.random.seed(3)
        x, y = _blobs(n_per_class=4)
        net = _classifier()
        fn = FFNFunction(net, x, y)
        self.assertEqual(fn.num_functions(), 8)

        grad = np.zeros_like(net.parameters)
        obj = fn.evaluate_with_gradient(net.parameters, 2, grad, 3)

        self.assertAlmostEqual(obj, net.evaluate(x[:, 2:5], y[:, 2:5]))
        np.testing.assert_allclose(grad, net.backward(x[:, 2:5], y[:, 2:5]))

    def test_foreign_parameters_are_copied_into_network(self):
        x, y = _blobs(n_per_class=2)
        net = _classifier()
        fn = FFNFunction(net, x, y)
        candidate = np.zeros_like(net.parameters)
        arena = net.parameters

        fn.evaluate(candidate)

        self.assertIs(net.parameters, arena)
        self.assertTrue((arena == 0.0).all())

    def test_shuffle_keeps_pairs(self):
        x = np.arange(10.0).reshape(1, 10)
        y = np.arange(10.0).reshape(1, 10) * 2
        fn = FFNFunction(FFN(), x, y)
        fn.shuffle()
        np.testing.assert_array_equal(fn.responses, fn.predictors * 2)
        np.testing.assert_array_equal(x, np.arange(10.0).reshape(1, 10))

    def test_evaluate_is_deterministic_with_dropout(self):
        np.random.seed(5)
        x, y = _blobs(n_per_class=10, seed=5)
        net = FFN(NegativeLogLikelihood())
        net.add(Linear(2, 4))
        net.add(Dropout(0.5))
        net.add(Linear(4, 2))
        net.add(LogSoftMax())
        net.reset_parameters()
        net.train_mode()
        fn = FFNFunction(net, x, y)

        first = fn.evaluate(net.parameters)
        second = fn.evaluate(net.parameters)

        self.assertEqual(first, second)
        self.assertTrue(net.training)
        self.assertTrue(net[1].training)

    def test_out_of_range_batch_raises(self):
        fn = FFNFunction(_classifier(), np.zeros((2, 3)), np.zeros((1, 3)))
        with self.assertRaises(IndexError):
            fn.evaluate(fn.network.parameters, 2, 5)


if __name__ == "__main__":
    unittest.main()

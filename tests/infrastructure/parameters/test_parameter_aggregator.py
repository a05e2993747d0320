import unittest

import numpy as np

from ffnkit.domain._errors import AllocationInvariantViolation, PreconditionError
from ffnkit.domain._parameter import ParameterSpan
from ffnkit.infrastructure.layers import Add, Linear, LinearNoBias, Sigmoid
from ffnkit.infrastructure.parameters import ParameterAggregator


class TestParameterAggregatorLayout(unittest.TestCase):
    def test_layout_is_contiguous_in_layer_order(self):
        layers = [Linear(2, 3), Sigmoid(), LinearNoBias(3, 4), Add(4)]
        spans = ParameterAggregator.layout(layers)
        self.assertEqual(
            spans,
            [
                ParameterSpan(0, 9),
                ParameterSpan(9, 0),
                ParameterSpan(9, 12),
                ParameterSpan(21, 4),
            ],
        )
        self.assertEqual(ParameterAggregator.total_size(layers), 25)

    def test_allocate_returns_zeroed_float64_vector(self):
        vec = ParameterAggregator.allocate([Linear(2, 3), Sigmoid()])
        self.assertEqual(vec.shape, (9,))
        self.assertEqual(vec.dtype, np.float64)
        self.assertTrue((vec == 0.0).all())

    def test_no_layers_allocates_empty_vector(self):
        vec = ParameterAggregator.allocate([])
        self.assertEqual(vec.shape, (0,))
        self.assertEqual(ParameterAggregator.bind_views([], vec), [])


class TestParameterAggregatorBinding(unittest.TestCase):
    def test_views_alias_the_vector(self):
        layers = [Linear(2, 3), Sigmoid(), Add(3)]
        vec = ParameterAggregator.allocate(layers)
        ParameterAggregator.bind_views(layers, vec)

        layers[0].parameters[:] = 1.0
        layers[2].parameters[:] = 2.0
        np.testing.assert_array_equal(vec[:9], np.ones(9))
        np.testing.assert_array_equal(vec[9:], np.full(3, 2.0))

        vec[:] = 5.0
        self.assertTrue((layers[0].weight == 5.0).all())
        self.assertTrue((layers[2].bias == 5.0).all())
        self.assertTrue(np.shares_memory(layers[0].parameters, vec))

    def test_parameter_free_layer_gets_empty_view(self):
        layers = [Linear(2, 2), Sigmoid()]
        vec = ParameterAggregator.allocate(layers)
        spans = ParameterAggregator.bind_views(layers, vec)
        self.assertEqual(spans[1], ParameterSpan(6, 0))
        self.assertEqual(layers[1].parameters.size, 0)

    def test_wrong_vector_length_violates_partition(self):
        layers = [Linear(2, 3)]
        with self.assertRaises(AllocationInvariantViolation) as ctx:
            ParameterAggregator.bind_views(layers, np.zeros(8))
        self.assertEqual(ctx.exception.bound, 9)
        self.assertEqual(ctx.exception.total, 8)

    def test_check_partition_detects_gap(self):
        with self.assertRaises(AllocationInvariantViolation):
            ParameterAggregator.check_partition(
                [ParameterSpan(0, 2), ParameterSpan(3, 2)], 5
            )

    def test_non_vector_rejected(self):
        with self.assertRaises(ValueError):
            ParameterAggregator.bind_views([Linear(1, 1)], np.zeros((2, 1)))

    def test_rebind_copies_into_new_vector(self):
        source_layers = [Linear(2, 2), Add(2)]
        source = ParameterAggregator.allocate(source_layers)
        source[:] = np.arange(source.shape[0], dtype=np.float64)

        clones = [layer.clone() for layer in source_layers]
        vec, spans = ParameterAggregator.rebind(clones, source)

        np.testing.assert_array_equal(vec, source)
        self.assertFalse(np.shares_memory(vec, source))
        self.assertEqual(spans, ParameterAggregator.layout(source_layers))
        clones[0].parameters[:] = -1.0
        self.assertEqual(source[0], 0.0)

    def test_bind_gradients_targets_separate_vector(self):
        layers = [Linear(2, 2)]
        vec = ParameterAggregator.allocate(layers)
        grad = np.zeros_like(vec)
        ParameterAggregator.bind_views(layers, vec)
        ParameterAggregator.bind_gradients(layers, grad)
        layers[0].parameter_gradient[:] = 3.0
        self.assertTrue((grad == 3.0).all())
        self.assertTrue((vec == 0.0).all())


class TestLayerBinding(unittest.TestCase):
    def test_unbound_layer_has_no_parameters(self):
        with self.assertRaises(PreconditionError):
            _ = Linear(2, 2).parameters

    def test_parameter_setter_copies_into_view(self):
        layers = [Linear(1, 2)]
        vec = ParameterAggregator.allocate(layers)
        ParameterAggregator.bind_views(layers, vec)
        layers[0].parameters = [1.0, 2.0, 3.0, 4.0]
        np.testing.assert_array_equal(vec, [1.0, 2.0, 3.0, 4.0])
        with self.assertRaises(ValueError):
            layers[0].parameters = [1.0, 2.0]

    def test_clone_drops_binding(self):
        layers = [Linear(2, 2)]
        vec = ParameterAggregator.allocate(layers)
        ParameterAggregator.bind_views(layers, vec)
        clone = layers[0].clone()
        self.assertFalse(clone.is_bound)
        self.assertTrue(layers[0].is_bound)
        self.assertEqual(clone.get_config(), layers[0].get_config())


if __name__ == "__main__":
    unittest.main()

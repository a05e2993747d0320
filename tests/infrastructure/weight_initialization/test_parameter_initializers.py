import math
import unittest

import numpy as np

from ffnkit.infrastructure.utils.weight_initializer import WeightInitializer


class TestWeightInitializerRegistry(unittest.TestCase):
    def test_available_contains_known_initializers(self):
        names = WeightInitializer.available()
        for name in ("zeros", "ones", "random", "gaussian", "xavier", "xavier_uniform", "kaiming"):
            self.assertIn(name, names)

    def test_get_returns_callable(self):
        self.assertTrue(callable(WeightInitializer.get("xavier")))

    def test_unknown_initializer_raises_value_error(self):
        with self.assertRaises(ValueError) as ctx:
            WeightInitializer("___does_not_exist___")
        msg = str(ctx.exception)
        self.assertIn("Unsupported initializer name", msg)
        self.assertIn("Available:", msg)

    def test_register_initializer_no_overwrite_by_default(self):
        name = "__unit_test_initializer__"

        @WeightInitializer.register_initializer(name, overwrite=True)
        def init_a(view):
            return view

        with self.assertRaises(ValueError):

            @WeightInitializer.register_initializer(name)
            def init_b(view):
                return view

    def test_register_initializer_overwrite_true(self):
        name = "__unit_test_initializer_overwrite__"

        @WeightInitializer.register_initializer(name, overwrite=True)
        def init_a(view):
            return view

        @WeightInitializer.register_initializer(name, overwrite=True)
        def init_b(view):
            return view

        self.assertIs(WeightInitializer.get(name), init_b)

    def test_dispatch_writes_in_place(self):
        name = "__unit_test_dispatch__"

        @WeightInitializer.register_initializer(name, overwrite=True)
        def init(view):
            view.fill(7.0)
            return view

        backing = np.zeros(10)
        view = backing[2:8].reshape(2, 3)
        WeightInitializer(name)(view)
        self.assertTrue((backing[2:8] == 7.0).all())
        self.assertTrue((backing[:2] == 0.0).all())

    def test_empty_view_is_skipped(self):
        out = WeightInitializer("ones")(np.zeros(0))
        self.assertEqual(out.size, 0)


class TestInitializerValues(unittest.TestCase):
    def test_constants(self):
        view = np.empty((3, 4))
        WeightInitializer("zeros")(view)
        self.assertTrue((view == 0.0).all())
        WeightInitializer("ones")(view)
        self.assertTrue((view == 1.0).all())

    def test_random_is_uniform_on_unit_interval(self):
        np.random.seed(0)
        view = np.zeros((50, 40))
        WeightInitializer("random")(view)
        self.assertGreaterEqual(view.min(), -1.0)
        self.assertLessEqual(view.max(), 1.0)
        self.assertLess(view.min(), -0.9)
        self.assertGreater(view.max(), 0.9)

    def test_xavier_uniform_bound(self):
        np.random.seed(1)
        view = np.zeros((30, 20))
        WeightInitializer("xavier_uniform")(view)
        bound = math.sqrt(6.0 / 50.0)
        self.assertLessEqual(np.abs(view).max(), bound)

    def test_kaiming_std_uses_fan_in(self):
        np.random.seed(2)
        view = np.zeros((400, 50))
        WeightInitializer("kaiming")(view)
        self.assertAlmostEqual(view.std(), math.sqrt(2.0 / 50.0), delta=0.01)

    def test_fan_based_initializers_reject_views_above_two_dimensions(self):
        for name in ("xavier", "xavier_uniform", "kaiming"):
            with self.assertRaises(ValueError):
                WeightInitializer(name)(np.zeros((2, 3, 4)))

    def test_xavier_std(self):
        np.random.seed(3)
        view = np.zeros((200, 200))
        WeightInitializer("xavier")(view)
        self.assertAlmostEqual(view.std(), math.sqrt(2.0 / 400.0), delta=0.005)


if __name__ == "__main__":
    unittest.main()

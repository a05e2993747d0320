import unittest

from ffnkit.domain._errors import (
    AllocationInvariantViolation,
    PreconditionError,
    ShapeError,
)
from ffnkit.domain._parameter import ParameterSpan


class TestShapeError(unittest.TestCase):
    def test_message_names_both_sizes(self):
        err = ShapeError(10, 7)
        msg = str(err)
        self.assertIn("10", msg)
        self.assertIn("7", msg)
        self.assertEqual(err.expected, 10)
        self.assertEqual(err.actual, 7)

    def test_prefix_names_the_call(self):
        err = ShapeError(4, 3, where="FFN.train()")
        self.assertTrue(str(err).startswith("FFN.train(): "))
        self.assertIn("expects 4 elements", str(err))
        self.assertIn("has 3 dimensions", str(err))

    def test_is_value_error(self):
        self.assertIsInstance(ShapeError(1, 2), ValueError)


class TestPreconditionError(unittest.TestCase):
    def test_operation_prefix(self):
        err = PreconditionError("a full forward() pass must precede backward()", operation="FFN.backward")
        self.assertEqual(err.operation, "FFN.backward")
        self.assertTrue(str(err).startswith("FFN.backward(): "))

    def test_without_operation(self):
        err = PreconditionError("boom")
        self.assertEqual(str(err), "boom")
        self.assertIsNone(err.operation)
        self.assertIsInstance(err, RuntimeError)


class TestAllocationInvariantViolation(unittest.TestCase):
    def test_carries_sizes(self):
        err = AllocationInvariantViolation(5, 6, "gap")
        self.assertEqual((err.bound, err.total), (5, 6))
        self.assertIn("5", str(err))
        self.assertIn("6", str(err))
        self.assertIn("gap", str(err))
        self.assertIsInstance(err, AssertionError)


class TestParameterSpan(unittest.TestCase):
    def test_stop_and_slice(self):
        span = ParameterSpan(3, 4)
        self.assertEqual(span.stop, 7)
        self.assertEqual(span.as_slice(), slice(3, 7))

    def test_empty_span_is_allowed(self):
        self.assertEqual(ParameterSpan(5, 0).stop, 5)

    def test_negative_values_rejected(self):
        with self.assertRaises(ValueError):
            ParameterSpan(-1, 2)
        with self.assertRaises(ValueError):
            ParameterSpan(0, -2)


if __name__ == "__main__":
    unittest.main()

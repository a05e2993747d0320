"""
Parameter-free activation layers.

Every layer here is elementwise (or column-wise, for `LogSoftMax`), accepts
inputs of any width (`input_size is None`) and owns no parameters, so it
receives an empty span from the network.

The forward output is cached on the layer for inspection. `backward` always
recomputes the activation from the `x` it is given, so direct calls to
`forward` in between do not affect the gradient.

Notes
-----
These layers are stateless except for the cached output, which is never
serialized and never carried over by `clone()`.
"""

import numpy as np

from ...domain.model._stateless_mixin import StatelessConfigMixin
from .._layer import Layer
from ..serialization._registry import register_layer


@register_layer()
class Identity(StatelessConfigMixin, Layer):
    """
    Pass-through layer, mostly useful as a placeholder in tests and pipelines.
    """

    def forward(self, x: np.ndarray) -> np.ndarray:
        self._output = x
        return x

    def backward(self, x: np.ndarray, gy: np.ndarray) -> np.ndarray:
        return gy


@register_layer()
class Sigmoid(StatelessConfigMixin, Layer):
    """
    Logistic activation, `1 / (1 + exp(-x))`, applied elementwise.
    """

    @staticmethod
    def _activate(x: np.ndarray) -> np.ndarray:
        # split by sign to avoid overflow in exp for large |x|
        out = np.empty_like(x, dtype=np.float64)
        pos = x >= 0
        out[pos] = 1.0 / (1.0 + np.exp(-x[pos]))
        ex = np.exp(x[~pos])
        out[~pos] = ex / (1.0 + ex)
        return out

    def forward(self, x: np.ndarray) -> np.ndarray:
        self._output = self._activate(x)
        return self._output

    def backward(self, x: np.ndarray, gy: np.ndarray) -> np.ndarray:
        y = self._activate(x)
        return gy * y * (1.0 - y)


@register_layer()
class ReLU(StatelessConfigMixin, Layer):
    """
    Rectified linear unit, `max(0, x)`.
    """

    def forward(self, x: np.ndarray) -> np.ndarray:
        self._output = np.maximum(x, 0.0)
        return self._output

    def backward(self, x: np.ndarray, gy: np.ndarray) -> np.ndarray:
        return gy * (x > 0.0)


@register_layer()
class Tanh(StatelessConfigMixin, Layer):
    """
    Hyperbolic tangent activation.
    """

    def forward(self, x: np.ndarray) -> np.ndarray:
        self._output = np.tanh(x)
        return self._output

    def backward(self, x: np.ndarray, gy: np.ndarray) -> np.ndarray:
        y = np.tanh(x)
        return gy * (1.0 - y * y)


@register_layer()
class LogSoftMax(StatelessConfigMixin, Layer):
    """
    Column-wise log-softmax: `x - log(sum(exp(x)))` for each sample.

    Pairs with `NegativeLogLikelihood` to form a softmax classifier.
    """

    @staticmethod
    def _activate(x: np.ndarray) -> np.ndarray:
        shifted = x - x.max(axis=0, keepdims=True)
        return shifted - np.log(np.exp(shifted).sum(axis=0, keepdims=True))

    def forward(self, x: np.ndarray) -> np.ndarray:
        self._output = self._activate(x)
        return self._output

    def backward(self, x: np.ndarray, gy: np.ndarray) -> np.ndarray:
        y = self._activate(x)
        return gy - np.exp(y) * gy.sum(axis=0, keepdims=True)

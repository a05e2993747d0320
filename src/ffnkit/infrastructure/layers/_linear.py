"""
Fully-connected layers.

This module implements the affine layers used by feedforward networks:

- `Linear`: y = W x + b
- `LinearNoBias`: y = W x
- `Add`: y = x + b (a learnable constant added to every column)

Parameter layout
----------------
Each layer's parameters are one contiguous block of the network vector. For
`Linear` the block is the weight matrix `W` (shape `(out_size, in_size)`,
row-major) followed by the bias `b` (length `out_size`). `weight` and `bias`
are reshaped views of that block, so writing through them writes into the
network vector.
"""

from __future__ import annotations

from typing import Any, Dict

import numpy as np

from .._layer import Layer
from ..serialization._registry import register_layer


def _check_size(name: str, value: int) -> int:
    value = int(value)
    if value <= 0:
        raise ValueError(f"{name} must be a positive integer, got {value}")
    return value


@register_layer()
class Linear(Layer):
    """
    Affine layer computing `W x + b` for each input column.

    Parameters
    ----------
    in_size : int
        Number of input rows.
    out_size : int
        Number of output rows.
    """

    def __init__(self, in_size: int, out_size: int) -> None:
        super().__init__()
        self.in_size = _check_size("in_size", in_size)
        self.out_size = _check_size("out_size", out_size)
        self._input_size = self.in_size

    def parameter_size(self) -> int:
        return self.out_size * self.in_size + self.out_size

    @property
    def weight(self) -> np.ndarray:
        n = self.out_size * self.in_size
        return self._block(0, n, (self.out_size, self.in_size))

    @property
    def bias(self) -> np.ndarray:
        n = self.out_size * self.in_size
        return self._block(n, n + self.out_size, (self.out_size, 1))

    def initialize(self, initializer) -> None:
        initializer(self.weight)
        self.bias.fill(0.0)

    def forward(self, x: np.ndarray) -> np.ndarray:
        self._output = self.weight @ x + self.bias
        return self._output

    def backward(self, x: np.ndarray, gy: np.ndarray) -> np.ndarray:
        return self.weight.T @ gy

    def gradient(self, x: np.ndarray, error: np.ndarray) -> None:
        n = self.out_size * self.in_size
        self._grad_block(0, n, (self.out_size, self.in_size))[...] = error @ x.T
        self._grad_block(n, n + self.out_size, (self.out_size,))[...] = error.sum(
            axis=1
        )

    def get_config(self) -> Dict[str, Any]:
        return {"in_size": self.in_size, "out_size": self.out_size}

    @classmethod
    def from_config(cls, cfg: Dict[str, Any]) -> "Linear":
        return cls(in_size=int(cfg["in_size"]), out_size=int(cfg["out_size"]))


@register_layer()
class LinearNoBias(Layer):
    """
    Linear map `W x` without a bias term.
    """

    def __init__(self, in_size: int, out_size: int) -> None:
        super().__init__()
        self.in_size = _check_size("in_size", in_size)
        self.out_size = _check_size("out_size", out_size)
        self._input_size = self.in_size

    def parameter_size(self) -> int:
        return self.out_size * self.in_size

    @property
    def weight(self) -> np.ndarray:
        return self._block(0, self.parameter_size(), (self.out_size, self.in_size))

    def initialize(self, initializer) -> None:
        initializer(self.weight)

    def forward(self, x: np.ndarray) -> np.ndarray:
        self._output = self.weight @ x
        return self._output

    def backward(self, x: np.ndarray, gy: np.ndarray) -> np.ndarray:
        return self.weight.T @ gy

    def gradient(self, x: np.ndarray, error: np.ndarray) -> None:
        shape = (self.out_size, self.in_size)
        self._grad_block(0, self.parameter_size(), shape)[...] = error @ x.T

    def get_config(self) -> Dict[str, Any]:
        return {"in_size": self.in_size, "out_size": self.out_size}

    @classmethod
    def from_config(cls, cfg: Dict[str, Any]) -> "LinearNoBias":
        return cls(in_size=int(cfg["in_size"]), out_size=int(cfg["out_size"]))


@register_layer()
class Add(Layer):
    """
    Adds a learnable vector `b` (length `out_size`) to every input column.

    The input must have exactly `out_size` rows.
    """

    def __init__(self, out_size: int) -> None:
        super().__init__()
        self.out_size = _check_size("out_size", out_size)
        self._input_size = self.out_size

    def parameter_size(self) -> int:
        return self.out_size

    @property
    def bias(self) -> np.ndarray:
        return self._block(0, self.out_size, (self.out_size, 1))

    def forward(self, x: np.ndarray) -> np.ndarray:
        self._output = x + self.bias
        return self._output

    def backward(self, x: np.ndarray, gy: np.ndarray) -> np.ndarray:
        return gy

    def gradient(self, x: np.ndarray, error: np.ndarray) -> None:
        self.parameter_gradient[...] = error.sum(axis=1)

    def get_config(self) -> Dict[str, Any]:
        return {"out_size": self.out_size}

    @classmethod
    def from_config(cls, cfg: Dict[str, Any]) -> "Add":
        return cls(out_size=int(cfg["out_size"]))

"""
Output-layer (loss policy) implementations for ffnkit.

This module implements the loss policies a network can be built with. Each
one turns the final layer's output and the training targets into a scalar
objective (`forward`) and the gradient that seeds backpropagation
(`backward`).

Currently implemented losses:
- NegativeLogLikelihood : for log-probability outputs (pair with LogSoftMax)
- MeanSquaredError      : regression loss
- CrossEntropyError     : binary cross entropy on probability outputs

Design notes
------------
- Losses are not layers: they own no parameters and are not part of the layer
  chain. They are injected into the network at construction.
- Objectives are summed over the columns of a batch (MSE is averaged over the
  batch columns), which keeps the objective separable across samples.
- All shapes are `(rows, samples)`; shape disagreements raise `ValueError`.
"""

from __future__ import annotations

from typing import Any, Dict

import numpy as np

from ...domain._output_layer import IOutputLayer
from ...domain.model._stateless_mixin import StatelessConfigMixin
from ..serialization._registry import register_layer


def _check_columns(prediction: np.ndarray, target: np.ndarray) -> None:
    if prediction.shape[1] != target.shape[1]:
        raise ValueError(
            f"Prediction has {prediction.shape[1]} columns but target has "
            f"{target.shape[1]}."
        )


class OutputLayer(IOutputLayer):
    """
    Base class for loss policies.
    """

    def forward(self, prediction: np.ndarray, target: np.ndarray) -> float:
        raise NotImplementedError

    def backward(self, prediction: np.ndarray, target: np.ndarray) -> np.ndarray:
        raise NotImplementedError

    def clone(self) -> "OutputLayer":
        return self.__class__.from_config(self.get_config())

    def __repr__(self) -> str:
        args = ", ".join(f"{k}={v!r}" for k, v in self.get_config().items())
        return f"{self.__class__.__name__}({args})"


@register_layer()
class NegativeLogLikelihood(StatelessConfigMixin, OutputLayer):
    """
    Negative log likelihood over log-probability columns.

    Targets are class indices, one per column, in a `(1, samples)` matrix.

        NLL(pred, target) = -sum_i pred[target_i, i]

    Notes
    -----
    Targets must be integral values in `[0, classes)`; they are stored as
    floats by convention but are truncated to int for indexing.
    """

    @staticmethod
    def _labels(prediction: np.ndarray, target: np.ndarray) -> np.ndarray:
        _check_columns(prediction, target)
        labels = np.asarray(target).reshape(-1).astype(np.int64)
        if labels.size and (labels.min() < 0 or labels.max() >= prediction.shape[0]):
            raise ValueError(
                f"NegativeLogLikelihood targets must be in [0, {prediction.shape[0]}), "
                f"got range [{labels.min()}, {labels.max()}]."
            )
        return labels

    def forward(self, prediction: np.ndarray, target: np.ndarray) -> float:
        labels = self._labels(prediction, target)
        cols = np.arange(prediction.shape[1])
        return float(-prediction[labels, cols].sum())

    def backward(self, prediction: np.ndarray, target: np.ndarray) -> np.ndarray:
        labels = self._labels(prediction, target)
        out = np.zeros_like(prediction, dtype=np.float64)
        out[labels, np.arange(prediction.shape[1])] = -1.0
        return out


@register_layer()
class MeanSquaredError(StatelessConfigMixin, OutputLayer):
    """
    Squared error summed over rows, averaged over columns.

        MSE(pred, target) = sum((pred - target)^2) / samples
    """

    def forward(self, prediction: np.ndarray, target: np.ndarray) -> float:
        _check_columns(prediction, target)
        diff = prediction - target
        return float((diff * diff).sum() / prediction.shape[1])

    def backward(self, prediction: np.ndarray, target: np.ndarray) -> np.ndarray:
        _check_columns(prediction, target)
        return 2.0 * (prediction - target) / prediction.shape[1]


@register_layer()
class CrossEntropyError(OutputLayer):
    """
    Binary cross entropy on probability outputs (e.g. after `Sigmoid`).

        CE(p, t) = -sum(t * log(p + eps) + (1 - t) * log(1 - p + eps))

    Parameters
    ----------
    eps : float, optional
        Stabilizer added inside the logarithms and denominators. Default 1e-10.
    """

    def __init__(self, eps: float = 1e-10) -> None:
        if eps <= 0.0:
            raise ValueError(f"eps must be > 0, got {eps}")
        self.eps = float(eps)

    def forward(self, prediction: np.ndarray, target: np.ndarray) -> float:
        _check_columns(prediction, target)
        p, t, eps = prediction, target, self.eps
        return float(-(t * np.log(p + eps) + (1.0 - t) * np.log(1.0 - p + eps)).sum())

    def backward(self, prediction: np.ndarray, target: np.ndarray) -> np.ndarray:
        _check_columns(prediction, target)
        p, t = prediction, target
        return (p - t) / ((1.0 - p) * p + self.eps)

    def get_config(self) -> Dict[str, Any]:
        return {"eps": self.eps}

    @classmethod
    def from_config(cls, cfg: Dict[str, Any]) -> "CrossEntropyError":
        return cls(eps=float(cfg.get("eps", 1e-10)))

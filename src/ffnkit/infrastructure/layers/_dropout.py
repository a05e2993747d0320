"""
Dropout regularization layer for ffnkit.

This module implements an inverted Dropout layer. During training, activations
are randomly masked with probability `ratio` and scaled by `1 / (1 - ratio)` to
preserve their expected value. During evaluation, the layer behaves as an
identity function.

Design notes
------------
- Inverted dropout means no scaling is needed at inference time.
- The backward pass propagates gradients through the mask drawn in the most
  recent forward pass, so forward and backward must be called on the same
  batch (the network guarantees this).
- The mask is drawn from NumPy's global random state, so `np.random.seed`
  makes training runs reproducible.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

import numpy as np

from .._layer import Layer
from ..serialization._registry import register_layer


@register_layer()
class Dropout(Layer):
    """
    Dropout regularization layer (inverted dropout).

    Behavior
    --------
    - Training mode:
        y = x * mask / (1 - ratio), where mask ~ Bernoulli(1 - ratio)
    - Evaluation mode:
        y = x (identity)

    Parameters
    ----------
    ratio : float, optional
        Probability of dropping (zeroing) an element. Must satisfy
        0.0 <= ratio < 1.0. Default is 0.5.
    """

    def __init__(self, ratio: float = 0.5) -> None:
        super().__init__()
        if not 0.0 <= ratio < 1.0:
            raise ValueError("Dropout ratio must be in [0, 1).")
        self.ratio = float(ratio)
        self._mask: Optional[np.ndarray] = None

    def forward(self, x: np.ndarray) -> np.ndarray:
        if not self.training or self.ratio == 0.0:
            self._mask = None
            self._output = x
            return x

        keep_prob = 1.0 - self.ratio
        self._mask = (np.random.random_sample(x.shape) < keep_prob) / keep_prob
        self._output = x * self._mask
        return self._output

    def backward(self, x: np.ndarray, gy: np.ndarray) -> np.ndarray:
        if self._mask is None:
            return gy
        return gy * self._mask

    def get_config(self) -> Dict[str, Any]:
        return {"ratio": self.ratio}

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> "Dropout":
        return cls(ratio=float(config["ratio"]))

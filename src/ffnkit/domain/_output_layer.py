"""
Output-layer (loss policy) interface definitions.

The output layer turns the network's final activations and the training
targets into a scalar objective and the gradient that seeds backpropagation.
It is injected into the network at construction and is not part of the layer
chain.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

import numpy as np


@runtime_checkable
class IOutputLayer(Protocol):
    """
    Domain-level loss policy interface.

    Notes
    -----
    - `forward` returns a Python float; it does not reduce across batches of
      calls, only across the columns it is given.
    - `backward` returns a matrix with the same shape as `prediction`.
    """

    def forward(self, prediction: np.ndarray, target: np.ndarray) -> float:
        """
        Compute the scalar objective for a batch.

        Parameters
        ----------
        prediction : np.ndarray
            Output of the final layer, `(outputs, samples)`.
        target : np.ndarray
            Training targets, `(label_rows, samples)`.

        Returns
        -------
        float
            Objective value.
        """
        ...

    def backward(self, prediction: np.ndarray, target: np.ndarray) -> np.ndarray:
        """
        Compute the gradient of the objective w.r.t. `prediction`.
        """
        ...

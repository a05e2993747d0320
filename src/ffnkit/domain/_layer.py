"""
Layer interface definitions.

This module defines the domain-level interface for network layers using
structural subtyping via `typing.Protocol`.

The network's forward and backward passes depend only on this contract, not on
any concrete layer math. Layers added to a network must additionally derive
from the infrastructure `Layer` base, which implements parameter binding and
ownership on top of it.

Matrix convention
-----------------
Every matrix flowing through a layer is shaped `(features, samples)`: one
column per data point.
"""

from __future__ import annotations

from typing import Any, Dict, Optional, Protocol, runtime_checkable

import numpy as np


@runtime_checkable
class ILayer(Protocol):
    """
    Domain-level layer interface.

    A layer is a single computational stage with an optional block of
    learnable parameters. The block itself is not owned by the layer: the
    network allocates one flat vector and hands each layer a view into it.

    Notes
    -----
    - `input_size` is None when the layer accepts any width (activations).
    - `parameter_size()` must be known before the network allocates; layers
      without learnable state return 0.
    """

    @property
    def input_size(self) -> Optional[int]:
        """
        Number of input rows this layer expects, or None if unconstrained.
        """
        ...

    def parameter_size(self) -> int:
        """
        Return the number of learnable parameters this layer needs.

        Returns
        -------
        int
            Length of the layer's block within the network parameter vector.
        """
        ...

    def forward(self, x: np.ndarray) -> np.ndarray:
        """
        Compute the layer output for input `x`.

        Parameters
        ----------
        x : np.ndarray
            Input matrix shaped `(input_rows, samples)`.

        Returns
        -------
        np.ndarray
            Output matrix shaped `(output_rows, samples)`.
        """
        ...

    def backward(self, x: np.ndarray, gy: np.ndarray) -> np.ndarray:
        """
        Propagate the output gradient `gy` back to the layer input.

        Parameters
        ----------
        x : np.ndarray
            The input this layer saw during the matching `forward`.
        gy : np.ndarray
            Gradient of the objective w.r.t. this layer's output.

        Returns
        -------
        np.ndarray
            Gradient of the objective w.r.t. `x`.
        """
        ...

    def gradient(self, x: np.ndarray, error: np.ndarray) -> None:
        """
        Write this layer's parameter gradient into its bound gradient view.

        Parameters
        ----------
        x : np.ndarray
            The input this layer saw during the matching `forward`.
        error : np.ndarray
            Gradient of the objective w.r.t. this layer's output.
        """
        ...

    def clone(self) -> "ILayer":
        """
        Return an independent copy with no parameter binding.
        """
        ...

    def get_config(self) -> Dict[str, Any]:
        """
        Return the constructor configuration of this layer.
        """
        ...

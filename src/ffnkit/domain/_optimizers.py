"""
Domain-level optimizer contracts for ffnkit.

This module defines two protocols:

- `ISeparableFunction`, the objective a network exposes to an optimizer. Its
  objective is a sum over `num_functions()` independent terms (one per sample),
  so optimizers may evaluate it on mini-batches.
- `IOptimizer`, the minimal interface an optimizer must provide to train a
  network.

Notes
-----
- Domain contracts are backend-agnostic; optimizers operate on a flat NumPy
  coordinate vector and update it in place.
- An optimizer may expose a `max_iterations` attribute. The network reads it
  only to emit diagnostics and must work when it is absent.
"""

from __future__ import annotations

from typing import Optional, Protocol, runtime_checkable

import numpy as np


@runtime_checkable
class ISeparableFunction(Protocol):
    """
    Objective-plus-gradient contract consumed by optimizers.
    """

    def num_functions(self) -> int:
        """
        Return the number of separable terms (training samples).
        """
        ...

    def shuffle(self) -> None:
        """
        Permute the order of the separable terms.
        """
        ...

    def evaluate(
        self,
        parameters: np.ndarray,
        begin: int = 0,
        batch_size: Optional[int] = None,
    ) -> float:
        """
        Evaluate the objective over terms `[begin, begin + batch_size)`.
        """
        ...

    def evaluate_with_gradient(
        self,
        parameters: np.ndarray,
        begin: int,
        gradient: np.ndarray,
        batch_size: Optional[int] = None,
    ) -> float:
        """
        Evaluate the objective and write its gradient into `gradient`.
        """
        ...


@runtime_checkable
class IOptimizer(Protocol):
    """
    Optimizer interface contract.

    An optimizer repeatedly queries an `ISeparableFunction` and mutates the
    coordinate vector in place until its own termination policy is met.

    Required methods
    ----------------
    - `optimize(function, coordinates)` runs the optimization and returns the
      final objective value.
    """

    def optimize(self, function: ISeparableFunction, coordinates: np.ndarray) -> float:
        """
        Optimize `function` starting from `coordinates`, updating them in place.

        Returns
        -------
        float
            Objective value at the returned coordinates.
        """
        ...

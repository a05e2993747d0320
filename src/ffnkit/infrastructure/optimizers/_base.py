"""
Shared mini-batch loop for first-order optimizers.

`MiniBatchOptimizer` drives an `ISeparableFunction` through passes over its
terms. Concrete optimizers only supply the per-step update rule:

    state = self._initialize_state(coordinates)
    self._update(coordinates, gradient, state)    # in place

Termination policy
------------------
- `max_iterations` counts *points visited*, not batches. Zero means no limit.
- At the end of every pass over the data, the pass objective is compared with
  the previous pass; if the change is below `tolerance` the loop stops. A
  negative tolerance disables this check.
- A non-finite objective stops the loop immediately and is returned as is.

The value returned by `optimize` is the objective over all terms at the final
coordinates.
"""

from __future__ import annotations

import logging
import math
from typing import Any

import numpy as np

from ...domain._optimizers import ISeparableFunction

logger = logging.getLogger(__name__)


class MiniBatchOptimizer:
    """
    Base class for optimizers that step on mini-batch gradients.

    Subclasses must set `step_size`, `batch_size`, `max_iterations`,
    `tolerance` and `shuffle` and implement `_initialize_state` and `_update`.
    """

    step_size: float
    batch_size: int
    max_iterations: int
    tolerance: float
    shuffle: bool

    def _validate_loop_settings(self) -> None:
        if self.step_size <= 0.0:
            raise ValueError(f"step_size must be > 0, got {self.step_size}")
        if self.batch_size < 1:
            raise ValueError(f"batch_size must be >= 1, got {self.batch_size}")
        if self.max_iterations < 0:
            raise ValueError(
                f"max_iterations must be >= 0, got {self.max_iterations}"
            )

    def _initialize_state(self, coordinates: np.ndarray) -> Any:
        raise NotImplementedError

    def _update(self, coordinates: np.ndarray, gradient: np.ndarray, state: Any) -> None:
        raise NotImplementedError

    def optimize(self, function: ISeparableFunction, coordinates: np.ndarray) -> float:
        """
        Minimize `function`, updating `coordinates` in place.

        Parameters
        ----------
        function : ISeparableFunction
            Objective with per-sample terms.
        coordinates : np.ndarray
            Starting point; overwritten with the result.

        Returns
        -------
        float
            Objective over all terms at the final coordinates.
        """
        n = int(function.num_functions())
        if n == 0:
            return 0.0

        batch_size = min(self.batch_size, n)
        limit = self.max_iterations if self.max_iterations > 0 else math.inf
        state = self._initialize_state(coordinates)
        gradient = np.zeros_like(coordinates)

        if self.shuffle:
            function.shuffle()

        overall = 0.0
        last = math.inf
        current = 0
        epoch = 0
        visited = 0

        while visited < limit:
            effective = int(min(batch_size, n - current, limit - visited))
            overall += function.evaluate_with_gradient(
                coordinates, current, gradient, effective
            )
            self._update(coordinates, gradient, state)

            if not math.isfinite(overall):
                logger.warning(
                    "%s: objective became non-finite (%s) during epoch %d",
                    self.__class__.__name__,
                    overall,
                    epoch + 1,
                )
                return overall

            visited += effective
            current += effective

            if current >= n:
                epoch += 1
                logger.debug(
                    "%s: epoch %d, objective %.6f",
                    self.__class__.__name__,
                    epoch,
                    overall,
                )
                if self.tolerance >= 0.0 and abs(last - overall) < self.tolerance:
                    logger.debug("%s: converged after %d epochs", self.__class__.__name__, epoch)
                    break
                last = overall
                overall = 0.0
                current = 0
                if self.shuffle:
                    function.shuffle()

        objective = 0.0
        for begin in range(0, n, batch_size):
            objective += function.evaluate(coordinates, begin, min(batch_size, n - begin))
        return float(objective)

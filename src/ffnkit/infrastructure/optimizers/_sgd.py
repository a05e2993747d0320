"""
Stochastic Gradient Descent (SGD) optimizer implementation.

This module provides a minimal mini-batch SGD optimizer. It updates the
network's flat parameter vector in place using the gradient of the current
batch and a fixed step size, optionally applying classical L2 regularization
(coupled weight decay).

Momentum, Nesterov and other SGD variants are intentionally omitted to keep
the optimizer minimal and easy to reason about.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from ._base import MiniBatchOptimizer


@dataclass
class SGD(MiniBatchOptimizer):
    """
    Mini-batch stochastic gradient descent.

    Update rule
    -----------
    For coordinates ``p`` with batch gradient ``g``:

    - If ``weight_decay > 0`` (classical L2 regularization):
        ``g <- g + weight_decay * p``
    - Update:
        ``p <- p - step_size * g``

    Parameters
    ----------
    step_size : float, optional
        Learning rate. Must be positive. Defaults to 0.01.
    batch_size : int, optional
        Number of samples per step. Defaults to 32.
    max_iterations : int, optional
        Maximum number of samples to visit; 0 means no limit. Defaults to
        100000.
    tolerance : float, optional
        Stop when the per-epoch objective changes by less than this. Negative
        disables the check. Defaults to 1e-5.
    shuffle : bool, optional
        Shuffle samples before every epoch. Defaults to True.
    weight_decay : float, optional
        Classical L2 weight decay coefficient. Must be non-negative.
        Defaults to 0.0.
    """

    step_size: float = 0.01
    batch_size: int = 32
    max_iterations: int = 100000
    tolerance: float = 1e-5
    shuffle: bool = True
    weight_decay: float = 0.0

    def __init__(
        self,
        step_size: float = 0.01,
        batch_size: int = 32,
        max_iterations: int = 100000,
        tolerance: float = 1e-5,
        shuffle: bool = True,
        *,
        weight_decay: float = 0.0,
    ) -> None:
        self.step_size = float(step_size)
        self.batch_size = int(batch_size)
        self.max_iterations = int(max_iterations)
        self.tolerance = float(tolerance)
        self.shuffle = bool(shuffle)
        self.weight_decay = float(weight_decay)

        self._validate_loop_settings()
        if self.weight_decay < 0.0:
            raise ValueError(f"weight_decay must be >= 0, got {self.weight_decay}")

    def _initialize_state(self, coordinates: np.ndarray) -> None:
        return None

    def _update(self, coordinates: np.ndarray, gradient: np.ndarray, state: None) -> None:
        g = gradient
        if self.weight_decay != 0.0:
            g = g + self.weight_decay * coordinates

        # in place: the coordinates are the network parameter vector
        coordinates -= self.step_size * g

"""
RMSProp optimizer implementation.

RMSProp divides the step for each coordinate by a running root mean square of
that coordinate's recent gradients. It is the network's default optimizer.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from ._base import MiniBatchOptimizer


@dataclass
class RMSProp(MiniBatchOptimizer):
    """
    RMSProp optimizer.

    Update rule
    -----------
        s <- alpha * s + (1 - alpha) * g^2
        p <- p - step_size * g / (sqrt(s) + epsilon)

    Parameters
    ----------
    step_size : float, optional
        Defaults to 0.01.
    batch_size : int, optional
        Defaults to 32.
    alpha : float, optional
        Smoothing constant in (0, 1). Defaults to 0.99.
    epsilon : float, optional
        Denominator stabilizer. Must be positive. Defaults to 1e-8.
    max_iterations : int, optional
        Samples to visit; 0 means no limit. Defaults to 100000.
    tolerance : float, optional
        Defaults to 1e-5; negative disables the convergence check.
    shuffle : bool, optional
        Defaults to True.
    """

    step_size: float = 0.01
    batch_size: int = 32
    alpha: float = 0.99
    epsilon: float = 1e-8
    max_iterations: int = 100000
    tolerance: float = 1e-5
    shuffle: bool = True

    def __init__(
        self,
        step_size: float = 0.01,
        batch_size: int = 32,
        alpha: float = 0.99,
        epsilon: float = 1e-8,
        max_iterations: int = 100000,
        tolerance: float = 1e-5,
        shuffle: bool = True,
    ) -> None:
        self.step_size = float(step_size)
        self.batch_size = int(batch_size)
        self.alpha = float(alpha)
        self.epsilon = float(epsilon)
        self.max_iterations = int(max_iterations)
        self.tolerance = float(tolerance)
        self.shuffle = bool(shuffle)

        self._validate_loop_settings()
        if not 0.0 < self.alpha < 1.0:
            raise ValueError(f"alpha must be in (0,1), got {self.alpha}")
        if self.epsilon <= 0.0:
            raise ValueError(f"epsilon must be > 0, got {self.epsilon}")

    def _initialize_state(self, coordinates: np.ndarray) -> np.ndarray:
        return np.zeros_like(coordinates)

    def _update(
        self, coordinates: np.ndarray, gradient: np.ndarray, state: np.ndarray
    ) -> None:
        state *= self.alpha
        state += (1.0 - self.alpha) * (gradient * gradient)
        coordinates -= self.step_size * gradient / (np.sqrt(state) + self.epsilon)

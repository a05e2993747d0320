"""
Adam optimizer implementation.

This module provides the Adam optimizer for ffnkit's flat parameter vector.
Adam maintains exponential moving averages of the gradient (first moment) and
squared gradient (second moment) and applies bias correction to both.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Tuple

import numpy as np

from ._base import MiniBatchOptimizer


@dataclass
class Adam(MiniBatchOptimizer):
    """
    Adam optimizer.

    Update rule
    -----------
    Let ``g_t`` be the batch gradient at step ``t``:

        m_t = beta1 * m_{t-1} + (1 - beta1) * g_t
        v_t = beta2 * v_{t-1} + (1 - beta2) * (g_t ** 2)

        m_hat = m_t / (1 - beta1^t)
        v_hat = v_t / (1 - beta2^t)

        p <- p - step_size * m_hat / (sqrt(v_hat) + eps)

    Parameters
    ----------
    step_size : float, optional
        Defaults to 1e-3.
    batch_size : int, optional
        Defaults to 32.
    betas : tuple[float, float], optional
        Decay rates for the two moments, each in (0, 1). Defaults to
        (0.9, 0.999).
    eps : float, optional
        Must be positive. Defaults to 1e-8.
    max_iterations : int, optional
        Defaults to 100000; 0 means no limit.
    tolerance : float, optional
        Defaults to 1e-5.
    shuffle : bool, optional
        Defaults to True.

    Notes
    -----
    Optimizer state (m, v, t) is created fresh at the start of every
    `optimize` call.
    """

    step_size: float = 1e-3
    batch_size: int = 32
    betas: Tuple[float, float] = (0.9, 0.999)
    eps: float = 1e-8
    max_iterations: int = 100000
    tolerance: float = 1e-5
    shuffle: bool = True

    def __init__(
        self,
        step_size: float = 1e-3,
        batch_size: int = 32,
        betas: Tuple[float, float] = (0.9, 0.999),
        eps: float = 1e-8,
        max_iterations: int = 100000,
        tolerance: float = 1e-5,
        shuffle: bool = True,
    ) -> None:
        self.step_size = float(step_size)
        self.batch_size = int(batch_size)
        self.betas = (float(betas[0]), float(betas[1]))
        self.eps = float(eps)
        self.max_iterations = int(max_iterations)
        self.tolerance = float(tolerance)
        self.shuffle = bool(shuffle)

        self._validate_loop_settings()
        b1, b2 = self.betas
        if not (0.0 < b1 < 1.0) or not (0.0 < b2 < 1.0):
            raise ValueError(f"betas must be in (0,1), got {self.betas}")
        if self.eps <= 0.0:
            raise ValueError(f"eps must be > 0, got {self.eps}")

    def _initialize_state(self, coordinates: np.ndarray) -> Dict[str, object]:
        return {
            "t": 0,
            "m": np.zeros_like(coordinates),
            "v": np.zeros_like(coordinates),
        }

    def _update(
        self, coordinates: np.ndarray, gradient: np.ndarray, state: Dict[str, object]
    ) -> None:
        b1, b2 = self.betas

        state["t"] = int(state["t"]) + 1
        t = int(state["t"])
        m: np.ndarray = state["m"]  # type: ignore[assignment]
        v: np.ndarray = state["v"]  # type: ignore[assignment]

        m *= b1
        m += (1.0 - b1) * gradient
        v *= b2
        v += (1.0 - b2) * (gradient * gradient)

        m_hat = m / (1.0 - (b1**t))
        v_hat = v / (1.0 - (b2**t))

        coordinates -= self.step_size * (m_hat / (np.sqrt(v_hat) + self.eps))

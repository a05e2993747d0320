"""
Constant and random-uniform parameter initializers.

Provided initializers
---------------------
- ``zeros`` / ``ones``: fill every element with a constant. Mostly useful for
  tests and for deterministic setups.
- ``random``: uniform samples on [-1, 1]. This is the network default.
- ``gaussian``: zero-mean normal samples with standard deviation 1.
"""

import numpy as np

from ._base import WeightInitializer


@WeightInitializer.register_initializer("zeros")
def zeros(view: np.ndarray) -> np.ndarray:
    view.fill(0.0)
    return view


@WeightInitializer.register_initializer("ones")
def ones(view: np.ndarray) -> np.ndarray:
    view.fill(1.0)
    return view


@WeightInitializer.register_initializer("random")
def random_uniform(view: np.ndarray) -> np.ndarray:
    """
    Fill `view` with samples from U(-1, 1).

    Uses the global NumPy random state so `np.random.seed` makes network
    initialization reproducible.
    """
    view[...] = np.random.uniform(-1.0, 1.0, size=view.shape)
    return view


@WeightInitializer.register_initializer("gaussian")
def gaussian(view: np.ndarray) -> np.ndarray:
    view[...] = np.random.randn(*view.shape)
    return view

"""
Abstract interfaces and utilities for parameter initialization.

This module defines the abstract base class for parameter initializers along
with shared helpers for computing fan-in and fan-out from array shapes.

Initializers in ffnkit write into *views* of the network parameter vector, so
every initializer must mutate its argument in place; rebinding the name to a
new array would silently break the aliasing between a layer and the network.

The concrete registry lives in the infrastructure layer.
"""

from abc import ABC
from typing import Callable, Dict

import numpy as np


class _WeightInitializer(ABC):
    """
    Abstract base class for parameter initializer dispatchers.

    Design notes
    ------------
    - Initializers are identified by string names.
    - Each initializer is a callable `f(view) -> view` that fills `view`
      in place.
    """

    INITIALIZERS: Dict[str, Callable] = {}

    def __init__(self, initializer_name: str) -> None:
        """
        Construct an initializer dispatcher.

        Parameters
        ----------
        initializer_name:
            The string key identifying a registered initializer.
        """
        ...

    @classmethod
    def available(cls) -> tuple[str, ...]:
        """
        Return the names of all registered initializers.
        """
        ...

    def __call__(self, view: np.ndarray) -> np.ndarray:
        """
        Fill `view` in place and return it.
        """
        ...


def _calculate_fan_in_and_fan_out(shape: tuple[int, ...]) -> tuple[int, int]:
    """
    Compute fan-in and fan-out for a parameter array shape.

    Parameters
    ----------
    shape:
        Shape of the parameter array. Weight matrices are laid out as
        `(out_size, in_size)`.

    Returns
    -------
    tuple[int, int]
        `(fan_in, fan_out)`, each at least 1.

    Raises
    ------
    ValueError
        If `shape` has more than 2 dimensions.
    """
    if len(shape) == 0:
        return 1, 1
    if len(shape) == 1:
        # bias-like vector
        n = max(1, int(shape[0]))
        return n, n
    if len(shape) == 2:
        fan_out, fan_in = shape
        return max(1, int(fan_in)), max(1, int(fan_out))

    raise ValueError(
        f"Parameter views have at most 2 dimensions, got shape {tuple(shape)}."
    )

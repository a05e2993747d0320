"""
Parameter initializer registry and dispatch utilities.

This module defines the concrete `WeightInitializer` used by the network to
fill each layer's parameter view after allocation.

Design
------
- Initializers are registered by string name via a decorator-based registry.
- Each initializer is a callable that fills a NumPy view *in place* and
  returns it.
- The dispatcher resolves an initializer by name at construction time, so an
  unknown name fails when the network is built rather than at first use.

Usage example
-------------
Registering an initializer:

    @WeightInitializer.register_initializer("halves")
    def halves(view: np.ndarray) -> np.ndarray:
        view.fill(0.5)
        return view

Applying an initializer:

    init = WeightInitializer("xavier")
    init(layer.weight)
"""

from __future__ import annotations

from typing import Callable, ClassVar, Dict, TypeVar

import numpy as np

from ....domain.utils._weight_initialization import _WeightInitializer

T = TypeVar("T", bound=Callable[[np.ndarray], np.ndarray])


class WeightInitializer(_WeightInitializer):
    """
    Registry-backed parameter initializer dispatcher.

    Notes
    -----
    - Initializers are stored by string name in a class-level registry.
    - The initializer callable must mutate its argument in place; the argument
      is a view into the network parameter vector.
    """

    INITIALIZERS: ClassVar[Dict[str, Callable[[np.ndarray], np.ndarray]]] = {}

    def __init__(self, initializer_name: str) -> None:
        try:
            self._initializer = self.INITIALIZERS[initializer_name]
        except KeyError as e:
            available = ", ".join(sorted(self.INITIALIZERS)) or "<none>"
            raise ValueError(
                f"Unsupported initializer name: {initializer_name!r}. "
                f"Available: {available}"
            ) from e
        self.name = initializer_name

    @classmethod
    def register_initializer(
        cls, name: str, *, overwrite: bool = False
    ) -> Callable[[T], T]:
        """
        Decorator to register an initializer under `name`.

        Parameters
        ----------
        name:
            Registry key used to retrieve the initializer later.
        overwrite:
            If False (default), raises if `name` is already registered.
        """
        if not isinstance(name, str) or not name:
            raise ValueError("Initializer name must be a non-empty string")

        def decorator(func: T) -> T:
            if not overwrite and name in cls.INITIALIZERS:
                raise ValueError(f"Initializer already registered: {name!r}")
            cls.INITIALIZERS[name] = func
            return func

        return decorator

    @classmethod
    def available(cls) -> tuple[str, ...]:
        """Return registered initializer names (sorted)."""
        return tuple(sorted(cls.INITIALIZERS))

    @classmethod
    def get(cls, name: str) -> Callable[[np.ndarray], np.ndarray]:
        """Get a registered initializer callable by name."""
        return cls.INITIALIZERS[name]

    def __call__(self, view: np.ndarray) -> np.ndarray:
        if view.size == 0:
            return view
        return self._initializer(view)

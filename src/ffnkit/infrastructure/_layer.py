"""
Infrastructure layer base class.

This module provides a concrete `Layer` implementation that satisfies the
domain-level `ILayer` protocol. It implements the conveniences shared by every
layer kind:

- binding to a span of the network parameter vector (and of the gradient
  vector during backpropagation)
- `parameters` access that is always a view, never a copy
- ownership bookkeeping so a layer belongs to at most one network
- cloning without the parameter binding, for network deep copies
- `train()` / `eval()` mode switching and `__call__` forwarding

Concrete layers subclass `Layer` and implement `forward`, `backward` and, when
they carry learnable state, `parameter_size` and `gradient`.
"""

from __future__ import annotations

import copy
import weakref
from typing import Any, Dict, Optional

import numpy as np

from ..domain._errors import PreconditionError
from ..domain._layer import ILayer
from ..domain._parameter import ParameterSpan

# Attributes that tie a layer to one particular network instance. They are
# never carried over by `clone()`.
_BINDING_FIELDS = frozenset(
    {
        "_arena",
        "_span",
        "_grad_arena",
        "_grad_span",
        "_owner",
        "_output",
    }
)


class Layer(ILayer):
    """
    Infrastructure base class for layers.

    Attributes
    ----------
    training : bool
        Whether the layer is in training mode. Only stochastic layers
        (e.g. `Dropout`) behave differently in evaluation mode.

    Notes
    -----
    - `parameters` is a slice of the network-owned vector. Writing into it (or
      assigning to it) writes into the network vector.
    - A layer that has not been bound by a network has no parameters to read;
      accessing them raises `PreconditionError`.
    """

    def __init__(self) -> None:
        self.training = True
        self._input_size: Optional[int] = None
        self._arena: Optional[np.ndarray] = None
        self._span: Optional[ParameterSpan] = None
        self._grad_arena: Optional[np.ndarray] = None
        self._grad_span: Optional[ParameterSpan] = None
        self._owner: Optional[weakref.ReferenceType] = None
        self._output: Optional[np.ndarray] = None

    # ------------------------------------------------------------------
    # Shape contract
    # ------------------------------------------------------------------
    @property
    def input_size(self) -> Optional[int]:
        """
        Number of input rows this layer expects, or None if unconstrained.
        """
        return self._input_size

    def parameter_size(self) -> int:
        """
        Return the number of learnable parameters. Stateless layers need none.
        """
        return 0

    # ------------------------------------------------------------------
    # Parameter binding
    # ------------------------------------------------------------------
    def bind(self, arena: np.ndarray, span: ParameterSpan) -> None:
        """
        Attach this layer to `arena[span]`.

        Raises
        ------
        ValueError
            If the span length disagrees with `parameter_size()` or falls
            outside `arena`.
        """
        if span.length != self.parameter_size():
            raise ValueError(
                f"{self.__class__.__name__} needs {self.parameter_size()} "
                f"parameters, got a span of {span.length}."
            )
        if span.stop > arena.shape[0]:
            raise ValueError(
                f"Span [{span.offset}, {span.stop}) exceeds parameter vector "
                f"of length {arena.shape[0]}."
            )
        self._arena = arena
        self._span = span

    def bind_gradient(self, gradient: np.ndarray, span: ParameterSpan) -> None:
        """
        Attach this layer's parameter gradient to `gradient[span]`.
        """
        if span.length != self.parameter_size() or span.stop > gradient.shape[0]:
            raise ValueError(
                f"Invalid gradient span [{span.offset}, {span.stop}) for "
                f"{self.__class__.__name__}."
            )
        self._grad_arena = gradient
        self._grad_span = span

    def unbind(self) -> None:
        self._arena = None
        self._span = None
        self._grad_arena = None
        self._grad_span = None

    @property
    def is_bound(self) -> bool:
        return self._arena is not None and self._span is not None

    @property
    def parameter_span(self) -> Optional[ParameterSpan]:
        return self._span

    @property
    def parameters(self) -> np.ndarray:
        """
        Return this layer's parameter block as a view into the network vector.

        Raises
        ------
        PreconditionError
            If the layer has not been bound (the owning network has not run
            `reset_parameters()` since the layer was added).
        """
        if self._arena is None or self._span is None:
            raise PreconditionError(
                f"{self.__class__.__name__} has no parameter binding; "
                "add it to a network and call reset_parameters() first.",
                operation="parameters",
            )
        return self._arena[self._span.as_slice()]

    @parameters.setter
    def parameters(self, values: Any) -> None:
        view = self.parameters
        arr = np.asarray(values, dtype=view.dtype).reshape(-1)
        if arr.shape[0] != view.shape[0]:
            raise ValueError(
                f"{self.__class__.__name__} has {view.shape[0]} parameters, "
                f"got {arr.shape[0]} values."
            )
        np.copyto(view, arr)

    @property
    def parameter_gradient(self) -> np.ndarray:
        """
        Return this layer's block of the gradient vector currently being filled.
        """
        if self._grad_arena is None or self._grad_span is None:
            raise PreconditionError(
                f"{self.__class__.__name__} has no gradient binding.",
                operation="gradient",
            )
        return self._grad_arena[self._grad_span.as_slice()]

    def _block(self, start: int, stop: int, shape: tuple[int, ...]) -> np.ndarray:
        """
        Return `parameters[start:stop]` reshaped to `shape`, still a view.
        """
        return self.parameters[start:stop].reshape(shape)

    def _grad_block(self, start: int, stop: int, shape: tuple[int, ...]) -> np.ndarray:
        return self.parameter_gradient[start:stop].reshape(shape)

    def initialize(self, initializer) -> None:
        """
        Fill this layer's parameter view using `initializer`.

        Subclasses override this when different blocks of their parameters
        need different treatment (e.g. weights vs. bias).
        """
        if self.parameter_size() > 0:
            initializer(self.parameters)

    # ------------------------------------------------------------------
    # Ownership
    # ------------------------------------------------------------------
    def _claim(self, owner: object) -> None:
        current = self._owner() if self._owner is not None else None
        if current is not None and current is not owner:
            raise ValueError(
                f"{self.__class__.__name__} instance already belongs to another "
                "network; add a clone() instead."
            )
        self._owner = weakref.ref(owner)

    def _transfer(self, owner: object) -> None:
        # move semantics: bindings stay, only the owner changes
        self._owner = weakref.ref(owner)

    def _release(self) -> None:
        self._owner = None
        self.unbind()

    # ------------------------------------------------------------------
    # Computation
    # ------------------------------------------------------------------
    @property
    def output(self) -> Optional[np.ndarray]:
        """Output cached by the most recent `forward` call."""
        return self._output

    def forward(self, x: np.ndarray) -> np.ndarray:
        """
        Compute the layer output. Subclasses must implement this.
        """
        raise NotImplementedError

    def backward(self, x: np.ndarray, gy: np.ndarray) -> np.ndarray:
        """
        Propagate `gy` to the layer input. Subclasses must implement this.
        """
        raise NotImplementedError

    def gradient(self, x: np.ndarray, error: np.ndarray) -> None:
        """
        Write the parameter gradient. A no-op for parameter-free layers.
        """
        return None

    def __call__(self, x: np.ndarray) -> np.ndarray:
        return self.forward(x)

    def train(self) -> "Layer":
        self.training = True
        return self

    def eval(self) -> "Layer":
        self.training = False
        return self

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def clone(self) -> "Layer":
        """
        Return a deep copy of this layer without its network binding.

        The clone has the same configuration and mode but no parameter view,
        no cached activations and no owner. The network that adopts it binds
        it to a fresh vector.
        """
        cls = self.__class__
        new = cls.__new__(cls)
        state = {k: v for k, v in self.__dict__.items() if k not in _BINDING_FIELDS}
        new.__dict__.update(copy.deepcopy(state))
        for field in _BINDING_FIELDS:
            new.__dict__[field] = None
        return new

    def get_config(self) -> Dict[str, Any]:
        """
        Return a JSON-serializable configuration for this layer.

        Raises
        ------
        NotImplementedError
            If the layer does not support serialization.
        """
        raise NotImplementedError(
            f"{self.__class__.__name__} does not implement get_config(). "
            "This layer cannot be serialized."
        )

    @classmethod
    def from_config(cls, cfg: Dict[str, Any]) -> "Layer":
        raise NotImplementedError(
            f"{cls.__name__} does not implement from_config(). "
            "This layer cannot be deserialized."
        )

    def __repr__(self) -> str:
        try:
            cfg = self.get_config()
        except NotImplementedError:
            cfg = {}
        args = ", ".join(f"{k}={v!r}" for k, v in cfg.items())
        return f"{self.__class__.__name__}({args})"

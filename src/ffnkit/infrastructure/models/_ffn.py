"""
Feedforward network container.

This module defines `FFN`, an ordered chain of layers followed by an output
layer (the loss policy). The network owns a single flat parameter vector; each
layer reads and writes its parameters through a view into that vector:

    FFN
    ├── layers:       [Linear(2, 3), Sigmoid(), Linear(3, 2), LogSoftMax()]
    ├── output layer: NegativeLogLikelihood()
    └── parameters:   [ W0 b0 |  | W2 b2 | ]   (one contiguous float64 array)

Data layout
-----------
Every matrix is `(features, samples)`: one column per sample. A 1-D input is
read as a single sample.

Call order
----------
- `add` / `remove` invalidate the parameter mapping; the next `forward`,
  `predict`, `train` or `parameters` access rebuilds and re-initializes it.
- `backward` must follow a full `forward` over the same number of columns.
- `predict` never enables `backward`.

Lifecycle
---------
Copies (`copy()`, `copy.copy`, `copy.deepcopy`, `assign`) clone every layer
and give the clone its own parameter vector. Moves (`moved_from`,
`move_assign`) hand the layers and the vector over without cloning and leave
the source empty. `to_archive` / `load_archive` and the JSON helpers persist
the layer records and the parameter vector; pickling goes through the same
archive.
"""

from __future__ import annotations

import copy
import json
import logging
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Tuple

import numpy as np

from ...domain._errors import PreconditionError, ShapeError
from ...domain._optimizers import IOptimizer
from ...domain._output_layer import IOutputLayer
from ...domain._parameter import ParameterSpan
from .._layer import Layer
from ..losses._losses import NegativeLogLikelihood
from ..optimizers import RMSProp
from ..parameters._aggregator import ParameterAggregator
from ..serialization._payload import payload_to_vector, vector_to_payload
from ..serialization._registry import layer_from_config, layer_to_config
from ..utils.weight_initializer import WeightInitializer
from ._training import as_targets, train_network

logger = logging.getLogger(__name__)

ARCHIVE_FORMAT = "ffnkit.archive.v1"


def _clone_output_layer(output_layer: IOutputLayer) -> IOutputLayer:
    clone = getattr(output_layer, "clone", None)
    if callable(clone):
        return clone()
    return copy.deepcopy(output_layer)


class FFN:
    """
    Feedforward network: a layer chain, a loss policy and one parameter vector.

    Parameters
    ----------
    output_layer : IOutputLayer, optional
        Loss policy applied to the last layer's output. Defaults to
        `NegativeLogLikelihood()`.
    initializer : str, optional
        Name of a registered parameter initializer used by
        `reset_parameters()`. Defaults to ``"random"`` (uniform on [-1, 1]).

    Raises
    ------
    ValueError
        If `initializer` is not a registered name.

    Examples
    --------
    >>> net = FFN(MeanSquaredError())
    >>> net.add(Linear(2, 3))
    >>> net.add(Sigmoid())
    >>> net.reset_parameters()
    >>> net.parameters.shape
    (9,)
    """

    def __init__(
        self,
        output_layer: Optional[IOutputLayer] = None,
        initializer: str = "random",
    ) -> None:
        self._output_layer: IOutputLayer = (
            output_layer if output_layer is not None else NegativeLogLikelihood()
        )
        self._initializer = WeightInitializer(initializer)
        self._training = True
        self._empty()

    def _empty(self) -> None:
        self._layers: List[Layer] = []
        self._parameters = np.zeros(0, dtype=np.float64)
        self._spans: List[ParameterSpan] = []
        self._reset = False
        self._forward_columns: Optional[int] = None
        self._activations: List[np.ndarray] = []

    def _invalidate(self) -> None:
        self._reset = False
        self._forward_columns = None
        self._activations = []

    # ------------------------------------------------------------------
    # Layer chain
    # ------------------------------------------------------------------
    def add(self, layer: Layer) -> Layer:
        """
        Append `layer` to the chain and take ownership of it.

        No shape validation happens here; widths are checked when data flows
        through the network.

        Returns
        -------
        Layer
            The appended layer, for chaining attribute access.

        Raises
        ------
        TypeError
            If `layer` is not a `Layer`.
        ValueError
            If the layer already belongs to this or another network.
        """
        if not isinstance(layer, Layer):
            raise TypeError(
                f"FFN.add() expects a Layer instance, got {type(layer).__name__}"
            )
        if any(existing is layer for existing in self._layers):
            raise ValueError(
                f"This {layer.__class__.__name__} instance is already part of the "
                "network; add a clone() instead."
            )
        layer._claim(self)
        if not self._training:
            layer.eval()
        self._layers.append(layer)
        self._invalidate()
        logger.debug("Added %r as layer %d", layer, len(self._layers) - 1)
        return layer

    def remove(self, index: int) -> Layer:
        """
        Remove and return the layer at `index`, releasing its parameter view.
        """
        layer = self._layers.pop(index)
        layer._release()
        self._invalidate()
        return layer

    def __len__(self) -> int:
        return len(self._layers)

    def __getitem__(self, index: int) -> Layer:
        return self._layers[index]

    def __iter__(self) -> Iterator[Layer]:
        return iter(self._layers)

    @property
    def model(self) -> Tuple[Layer, ...]:
        """
        The layers in execution order.

        Each layer's `parameters` is a view into this network's parameter
        vector, so writing through it changes the network.
        """
        return tuple(self._layers)

    @property
    def output_layer(self) -> IOutputLayer:
        return self._output_layer

    @property
    def initializer(self) -> str:
        return self._initializer.name

    # ------------------------------------------------------------------
    # Parameters
    # ------------------------------------------------------------------
    @property
    def is_reset(self) -> bool:
        """Whether every layer is bound to the current parameter vector."""
        return self._reset

    def reset_parameters(self) -> None:
        """
        Allocate the parameter vector, bind every layer and initialize it.

        Every call draws fresh values, including for layers that were already
        initialized before a later `add` or `remove`.
        """
        self._parameters = ParameterAggregator.allocate(self._layers)
        self._spans = ParameterAggregator.bind_views(self._layers, self._parameters)
        for layer in self._layers:
            layer.initialize(self._initializer)
        self._reset = True
        self._forward_columns = None
        self._activations = []
        logger.debug(
            "Initialized %d parameters across %d layers with %r",
            self._parameters.shape[0],
            len(self._layers),
            self._initializer.name,
        )

    def _ensure_reset(self) -> None:
        if not self._reset:
            self.reset_parameters()

    @property
    def parameters(self) -> np.ndarray:
        """
        The network's parameter vector (allocated on first access).

        The returned array is the storage itself; in-place changes are seen
        by every layer.
        """
        self._ensure_reset()
        return self._parameters

    @parameters.setter
    def parameters(self, values: Any) -> None:
        self._ensure_reset()
        arr = np.asarray(values, dtype=np.float64).reshape(-1)
        if arr.shape[0] != self._parameters.shape[0]:
            raise ValueError(
                f"The network has {self._parameters.shape[0]} parameters, got "
                f"{arr.shape[0]} values."
            )
        np.copyto(self._parameters, arr)

    # ------------------------------------------------------------------
    # Modes
    # ------------------------------------------------------------------
    @property
    def training(self) -> bool:
        return self._training

    def train_mode(self) -> "FFN":
        self._training = True
        for layer in self._layers:
            layer.train()
        return self

    def eval_mode(self) -> "FFN":
        self._training = False
        for layer in self._layers:
            layer.eval()
        return self

    # ------------------------------------------------------------------
    # Computation
    # ------------------------------------------------------------------
    @staticmethod
    def as_matrix(inputs: Any) -> np.ndarray:
        """
        Coerce `inputs` to a `(features, samples)` float64 matrix.

        A 1-D array is treated as a single sample (one column).
        """
        x = np.asarray(inputs, dtype=np.float64)
        if x.ndim == 1:
            return x.reshape(-1, 1)
        if x.ndim != 2:
            raise ValueError(f"Inputs must be 1-D or 2-D, got shape {x.shape}")
        return x

    def check_input_shape(self, inputs: np.ndarray, where: str = "FFN") -> None:
        """
        Raise `ShapeError` if the first layer declares a width `inputs` lacks.
        """
        if not self._layers:
            return
        expected = getattr(self._layers[0], "input_size", None)
        if expected is not None and inputs.shape[0] != expected:
            raise ShapeError(int(expected), int(inputs.shape[0]), where=where)

    def _require_layers(self, operation: str) -> None:
        if not self._layers:
            raise PreconditionError("the network has no layers", operation=operation)

    def _run(self, x: np.ndarray, begin: int, end: int) -> List[np.ndarray]:
        activations = [x]
        for layer in self._layers[begin : end + 1]:
            x = layer.forward(x)
            activations.append(x)
        return activations

    def _forward_full(self, x: np.ndarray, where: str) -> np.ndarray:
        self._require_layers(where.rstrip("()"))
        self._ensure_reset()
        self.check_input_shape(x, where=where)
        self._activations = self._run(x, 0, len(self._layers) - 1)
        self._forward_columns = x.shape[1]
        return self._activations[-1]

    def forward(
        self,
        inputs: Any,
        begin: Optional[int] = None,
        end: Optional[int] = None,
    ) -> np.ndarray:
        """
        Run the layer chain, or the closed layer range `[begin, end]`, on `inputs`.

        Parameters
        ----------
        inputs : array-like
            `(features, samples)` matrix; for a ranged pass, the input expected
            by layer `begin`.
        begin, end : int, optional
            Zero-based, inclusive layer indices. When both are omitted the
            whole chain runs and the input width is checked against the first
            layer. A ranged pass performs no width check.

        Returns
        -------
        np.ndarray
            Output of the last layer that ran.

        Raises
        ------
        ShapeError
            Full pass only: the input width disagrees with the first layer.
        PreconditionError
            If the network is empty or the range is invalid.
        """
        x = self.as_matrix(inputs)
        if begin is None and end is None:
            return self._forward_full(x, where="FFN.forward()")

        self._require_layers("FFN.forward")
        last = len(self._layers) - 1
        begin = 0 if begin is None else int(begin)
        end = last if end is None else int(end)
        if begin < 0 or end > last or begin > end:
            raise PreconditionError(
                f"invalid layer range [{begin}, {end}] for a network of "
                f"{len(self._layers)} layers",
                operation="FFN.forward",
            )

        self._ensure_reset()
        activations = self._run(x, begin, end)
        if begin == 0 and end == last:
            self._activations = activations
            self._forward_columns = x.shape[1]
        else:
            self._activations = []
            self._forward_columns = None
        return activations[-1]

    def backward(
        self,
        inputs: Any,
        targets: Any,
        gradient: Optional[np.ndarray] = None,
    ) -> np.ndarray:
        """
        Backpropagate the loss of the last full forward pass.

        Parameters
        ----------
        inputs : array-like
            The inputs of the preceding `forward` call.
        targets : array-like
            Targets for the output layer, one column per sample.
        gradient : np.ndarray, optional
            Vector with the parameter vector's length to write into. Allocated
            when omitted. Its previous contents are discarded.

        Returns
        -------
        np.ndarray
            The parameter gradient, laid out like `parameters`.

        Raises
        ------
        PreconditionError
            If no full forward pass over the same number of columns precedes
            this call.
        ValueError
            If `gradient` has the wrong length or dtype.
        """
        x = self.as_matrix(inputs)
        y = as_targets(targets)
        if self._forward_columns is None or not self._activations:
            raise PreconditionError(
                "a full forward() pass must precede backward()",
                operation="FFN.backward",
            )
        if x.shape[1] != self._forward_columns:
            raise PreconditionError(
                f"the last forward() pass saw {self._forward_columns} columns, "
                f"but backward() got {x.shape[1]}",
                operation="FFN.backward",
            )

        if gradient is None:
            gradient = np.zeros_like(self._parameters)
        else:
            if (
                gradient.ndim != 1
                or gradient.shape[0] != self._parameters.shape[0]
                or gradient.dtype != np.float64
            ):
                raise ValueError(
                    f"Gradient must be a float64 vector of length "
                    f"{self._parameters.shape[0]}, got {gradient.dtype} "
                    f"array of shape {gradient.shape}."
                )
            gradient.fill(0.0)

        ParameterAggregator.bind_gradients(self._layers, gradient)

        activations = self._activations
        error = self._output_layer.backward(activations[-1], y)
        for i in range(len(self._layers) - 1, -1, -1):
            layer = self._layers[i]
            layer.gradient(activations[i], error)
            if i > 0:
                error = layer.backward(activations[i], error)
        return gradient

    def evaluate(self, predictors: Any, responses: Any) -> float:
        """
        Run a full forward pass and return the output layer's objective.
        """
        out = self._forward_full(self.as_matrix(predictors), where="FFN.evaluate()")
        return float(self._output_layer.forward(out, as_targets(responses)))

    def predict(self, inputs: Any, batch_size: Optional[int] = None) -> np.ndarray:
        """
        Compute outputs in evaluation mode.

        Stochastic layers such as `Dropout` are disabled for the call and the
        previous mode is restored afterwards.

        Parameters
        ----------
        inputs : array-like
            `(features, samples)` matrix.
        batch_size : int, optional
            Number of columns per chunk. All columns at once when omitted.

        Returns
        -------
        np.ndarray
            Output of the last layer, one column per input column.
        """
        x = self.as_matrix(inputs)
        if batch_size is not None and int(batch_size) < 1:
            raise ValueError(f"batch_size must be >= 1, got {batch_size}")

        self._require_layers("FFN.predict")
        self._ensure_reset()
        self.check_input_shape(x, where="FFN.predict()")

        last = len(self._layers) - 1
        n = x.shape[1]
        was_training = self._training
        self.eval_mode()
        try:
            if batch_size is None or int(batch_size) >= n:
                out = self._run(x, 0, last)[-1]
            else:
                step = int(batch_size)
                chunks = [
                    self._run(x[:, i : i + step], 0, last)[-1]
                    for i in range(0, n, step)
                ]
                out = np.concatenate(chunks, axis=1)
        finally:
            if was_training:
                self.train_mode()

        self._forward_columns = None
        self._activations = []
        return out

    def train(
        self,
        predictors: Any,
        responses: Any,
        optimizer: Optional[IOptimizer] = None,
    ) -> float:
        """
        Fit the network to `(predictors, responses)`.

        Parameters
        ----------
        predictors : array-like
            `(features, samples)` training inputs.
        responses : array-like
            Targets, one column per sample.
        optimizer : IOptimizer, optional
            Defaults to `RMSProp()`.

        Returns
        -------
        float
            Final objective value.
        """
        if optimizer is None:
            optimizer = RMSProp()
        return train_network(self, predictors, responses, optimizer)

    def summary(self) -> str:
        """
        Return a table of the layers with their input widths and parameter counts.
        """
        lines = [f"{self.__class__.__name__}("]
        for i, layer in enumerate(self._layers):
            width = layer.input_size if layer.input_size is not None else "-"
            lines.append(
                f"  ({i}): {layer!r}  in={width}  params={layer.parameter_size()}"
            )
        lines.append(f"  output: {self._output_layer!r}")
        total = ParameterAggregator.total_size(self._layers)
        lines.append(f")  total params={total}")
        return "\n".join(lines)

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}(layers={len(self._layers)}, "
            f"output_layer={self._output_layer!r})"
        )

    # ------------------------------------------------------------------
    # Copy and move
    # ------------------------------------------------------------------
    def copy(self) -> "FFN":
        """
        Return an independent deep copy.

        Layers and the output layer are cloned; the copy gets its own
        parameter vector with the same values and layout. Nothing in the copy
        aliases this network.
        """
        new = self.__class__(
            output_layer=_clone_output_layer(self._output_layer),
            initializer=self._initializer.name,
        )
        new._training = self._training
        for layer in self._layers:
            clone = layer.clone()
            clone._claim(new)
            new._layers.append(clone)
        if self._reset:
            new._parameters, new._spans = ParameterAggregator.rebind(
                new._layers, self._parameters
            )
            new._reset = True
        return new

    def __copy__(self) -> "FFN":
        return self.copy()

    def __deepcopy__(self, memo: Dict[int, Any]) -> "FFN":
        new = self.copy()
        memo[id(self)] = new
        return new

    def _clear(self) -> None:
        for layer in self._layers:
            layer._release()
        self._empty()

    def assign(self, other: "FFN") -> "FFN":
        """
        Replace this network's contents with a deep copy of `other`.
        """
        if other is self:
            return self
        replacement = other.copy()
        self._clear()
        self._take_contents(replacement)
        return self

    def _take_contents(self, other: "FFN") -> None:
        self._output_layer = other._output_layer
        self._initializer = other._initializer
        self._training = other._training
        self._layers = other._layers
        self._parameters = other._parameters
        self._spans = other._spans
        self._reset = other._reset
        self._forward_columns = other._forward_columns
        self._activations = other._activations
        for layer in self._layers:
            layer._transfer(self)

        other._output_layer = _clone_output_layer(other._output_layer)
        other._empty()

    @classmethod
    def moved_from(cls, other: "FFN") -> "FFN":
        """
        Construct a network that takes over `other`'s layers and parameters.

        No layer is cloned and every parameter view stays valid. `other` is
        left empty and must be repopulated before it can run again.
        """
        network = cls(initializer=other._initializer.name)
        network._take_contents(other)
        return network

    def move_assign(self, other: "FFN") -> "FFN":
        """
        Release this network's layers and take over `other`'s contents.
        """
        if other is self:
            return self
        self._clear()
        self._take_contents(other)
        return self

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------
    def to_archive(self) -> Dict[str, Any]:
        """
        Return a JSON-serializable snapshot of the network.

        Format
        ------
        {
          "format": "ffnkit.archive.v1",
          "output_layer": {"type": "NegativeLogLikelihood", "config": {}},
          "initializer": "random",
          "training": true,
          "layers": [{"type": "Linear", "config": {...}}, ...],
          "parameters": {"b64": "...", "dtype": "<f8", "shape": [n]} | null
        }

        `parameters` is null when the network has not been reset.
        """
        return {
            "format": ARCHIVE_FORMAT,
            "output_layer": layer_to_config(self._output_layer),
            "initializer": self._initializer.name,
            "training": self._training,
            "layers": [layer_to_config(layer) for layer in self._layers],
            "parameters": vector_to_payload(self._parameters) if self._reset else None,
        }

    def load_archive(self, archive: Dict[str, Any]) -> "FFN":
        """
        Replace this network's contents with those stored in `archive`.

        The archive is fully decoded before anything is replaced, so a
        malformed archive leaves the network untouched.

        Raises
        ------
        ValueError
            If the format tag is unsupported, a layer type is unknown or the
            parameter vector does not fit the layers.
        """
        fmt = archive.get("format")
        if fmt != ARCHIVE_FORMAT:
            raise ValueError(f"Unsupported archive format: {fmt!r}")

        output_layer = layer_from_config(archive["output_layer"])
        initializer = WeightInitializer(str(archive.get("initializer", "random")))
        layers = [layer_from_config(node) for node in archive.get("layers", [])]

        payload = archive.get("parameters")
        vector = None
        if payload is not None:
            vector = np.ascontiguousarray(
                payload_to_vector(payload), dtype=np.float64
            ).reshape(-1)
            expected = ParameterAggregator.total_size(layers)
            if vector.shape[0] != expected:
                raise ValueError(
                    f"Archive holds {vector.shape[0]} parameters but its layers "
                    f"need {expected}."
                )

        self._clear()
        self._output_layer = output_layer
        self._initializer = initializer
        for layer in layers:
            layer._claim(self)
            self._layers.append(layer)
        if vector is not None:
            self._parameters = vector
            self._spans = ParameterAggregator.bind_views(self._layers, vector)
            self._reset = True

        if archive.get("training", True):
            self.train_mode()
        else:
            self.eval_mode()

        logger.debug(
            "Loaded %d layers and %d parameters from archive",
            len(self._layers),
            self._parameters.shape[0],
        )
        return self

    @classmethod
    def from_archive(cls, archive: Dict[str, Any]) -> "FFN":
        return cls().load_archive(archive)

    def save_json(self, path: str | Path) -> None:
        """
        Save the network architecture and parameters into a single JSON file.

        Parameters
        ----------
        path : str | Path
            Output JSON file path, e.g. "checkpoint.json".
        """
        p = Path(path)
        p.parent.mkdir(parents=True, exist_ok=True)
        p.write_text(json.dumps(self.to_archive(), indent=2, sort_keys=True), encoding="utf-8")

    def load_json_into(self, path: str | Path) -> "FFN":
        """
        Replace this network's contents with a checkpoint written by `save_json()`.
        """
        p = Path(path)
        return self.load_archive(json.loads(p.read_text(encoding="utf-8")))

    @classmethod
    def load_json(cls, path: str | Path) -> "FFN":
        """
        Load a network from a checkpoint written by `save_json()`.
        """
        return cls().load_json_into(path)

    def __getstate__(self) -> Dict[str, Any]:
        return self.to_archive()

    def __setstate__(self, state: Dict[str, Any]) -> None:
        FFN.__init__(self)
        self.load_archive(state)

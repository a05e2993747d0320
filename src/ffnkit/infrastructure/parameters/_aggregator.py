"""
Parameter aggregation for layer pipelines.

A network stores every learnable parameter of every layer in one flat vector
(the arena). `ParameterAggregator` computes the layout of that vector and
binds each layer to its block:

    arena = [ layer0 block | layer1 block (maybe empty) | layer2 block | ... ]

Binding hands out slices, not copies, so an optimizer that mutates the arena
in place updates every layer, and writing through a layer's `parameters`
updates the arena.

Invariant
---------
After binding, the spans sorted by layer order are contiguous, start at 0 and
their lengths sum to the arena length. A violation raises
`AllocationInvariantViolation`; it can only happen through a bug in this
module or a layer whose `parameter_size()` changes between calls.
"""

from __future__ import annotations

import logging
from typing import List, Sequence

import numpy as np

from ...domain._errors import AllocationInvariantViolation
from ...domain._parameter import ParameterSpan
from .._layer import Layer

logger = logging.getLogger(__name__)


class ParameterAggregator:
    """
    Stateless helpers that lay out and bind the network parameter vector.
    """

    @staticmethod
    def layout(layers: Sequence[Layer]) -> List[ParameterSpan]:
        """
        Compute the span of each layer, in order, without allocating.
        """
        spans: List[ParameterSpan] = []
        offset = 0
        for layer in layers:
            n = int(layer.parameter_size())
            if n < 0:
                raise ValueError(
                    f"{layer.__class__.__name__}.parameter_size() returned {n}."
                )
            spans.append(ParameterSpan(offset, n))
            offset += n
        return spans

    @staticmethod
    def total_size(layers: Sequence[Layer]) -> int:
        return sum(int(layer.parameter_size()) for layer in layers)

    @classmethod
    def allocate(cls, layers: Sequence[Layer]) -> np.ndarray:
        """
        Allocate a zeroed vector large enough for every layer's block.
        """
        return np.zeros(cls.total_size(layers), dtype=np.float64)

    @staticmethod
    def check_partition(spans: Sequence[ParameterSpan], total: int) -> None:
        """
        Verify that `spans` tile `[0, total)` exactly, in order.

        Raises
        ------
        AllocationInvariantViolation
            On any gap, overlap or length mismatch.
        """
        expected = 0
        for i, span in enumerate(spans):
            if span.offset != expected:
                raise AllocationInvariantViolation(
                    sum(s.length for s in spans),
                    total,
                    f"Layer {i} starts at {span.offset}, expected {expected}.",
                )
            expected = span.stop
        if expected != total:
            raise AllocationInvariantViolation(expected, total)

    @classmethod
    def bind_views(
        cls, layers: Sequence[Layer], vector: np.ndarray
    ) -> List[ParameterSpan]:
        """
        Bind each layer to its block of `vector`.

        Layers without parameters receive an empty span and must not read or
        write it.

        Returns
        -------
        List[ParameterSpan]
            The span bound to each layer, in layer order.
        """
        if vector.ndim != 1:
            raise ValueError(f"Parameter vector must be 1-D, got shape {vector.shape}")

        spans = cls.layout(layers)
        cls.check_partition(spans, vector.shape[0])
        for layer, span in zip(layers, spans):
            layer.bind(vector, span)

        logger.debug(
            "Bound %d layers to a parameter vector of %d elements",
            len(spans),
            vector.shape[0],
        )
        return spans

    @classmethod
    def bind_gradients(cls, layers: Sequence[Layer], gradient: np.ndarray) -> None:
        """
        Bind each layer's parameter gradient to its block of `gradient`.

        `gradient` must have the same layout as the parameter vector.
        """
        spans = cls.layout(layers)
        cls.check_partition(spans, gradient.shape[0])
        for layer, span in zip(layers, spans):
            layer.bind_gradient(gradient, span)

    @classmethod
    def rebind(
        cls, layers: Sequence[Layer], source: np.ndarray
    ) -> tuple[np.ndarray, List[ParameterSpan]]:
        """
        Copy `source` into a new vector and bind `layers` to the copy.

        Used when cloning a network: the relative offsets are preserved but
        every view points into the new vector, never into `source`.
        """
        vector = np.array(source, dtype=np.float64, copy=True)
        spans = cls.bind_views(layers, vector)
        return vector, spans

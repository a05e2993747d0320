"""
Parameter span value type.

A `ParameterSpan` records where a layer's parameter block lives inside the
network's single parameter vector. Layers never own their parameters; they
hold a span and read/write through a slice of the shared vector, so mutating
the vector mutates every layer and vice versa.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ParameterSpan:
    """
    Half-open range `[offset, offset + length)` into a parameter vector.

    Attributes
    ----------
    offset : int
        Index of the first element of the block.
    length : int
        Number of elements in the block. Zero for stateless layers.
    """

    offset: int
    length: int

    def __post_init__(self) -> None:
        if self.offset < 0 or self.length < 0:
            raise ValueError(
                f"ParameterSpan requires non-negative offset/length, got "
                f"offset={self.offset}, length={self.length}"
            )

    @property
    def stop(self) -> int:
        """Index one past the last element of the block."""
        return self.offset + self.length

    def as_slice(self) -> slice:
        return slice(self.offset, self.stop)

"""
Network-level exceptions for ffnkit.

This module defines the runtime errors raised by the feedforward network
container when it is driven with data it cannot accept, or when a call is made
out of order. They allow the framework to fail fast and clearly instead of
letting a NumPy broadcasting error surface deep inside a layer.

Taxonomy
--------
- `ShapeError`: the input's leading dimension disagrees with the width the
  first layer declares.
- `PreconditionError`: a call was made out of order (e.g. `backward` without a
  matching `forward`) or with an invalid layer index range.
- `AllocationInvariantViolation`: the parameter aggregator produced views that
  do not partition the parameter vector. This signals a bug in ffnkit itself,
  not a user error.
"""

from __future__ import annotations

from typing import Optional


class ShapeError(ValueError):
    """
    Raised when input data does not match the width expected by the network.

    Attributes
    ----------
    expected : int
        Number of input elements the first layer expects.
    actual : int
        Number of rows (features) found in the supplied input.
    """

    def __init__(self, expected: int, actual: int, where: str = "FFN") -> None:
        """
        Initialize the ShapeError.

        Parameters
        ----------
        expected : int
            Width declared by the first layer.
        actual : int
            Leading dimension of the supplied input.
        where : str, optional
            Name of the public call that detected the mismatch, used as the
            message prefix.
        """
        super().__init__(
            f"{where}: the first layer of the network expects {expected} "
            f"elements, but the input has {actual} dimensions!"
        )
        self.expected = expected
        self.actual = actual


class PreconditionError(RuntimeError):
    """
    Raised when a network operation is invoked in an invalid state.

    Typical causes are calling `backward` without a preceding full `forward`,
    requesting a ranged forward pass with indices outside the network, or using
    a network whose contents were moved elsewhere.
    """

    def __init__(self, message: str, *, operation: Optional[str] = None) -> None:
        """
        Initialize the PreconditionError.

        Parameters
        ----------
        message : str
            Human-readable description of the violated precondition.
        operation : Optional[str], optional
            Name of the operation that was rejected.
        """
        prefix = f"{operation}(): " if operation else ""
        super().__init__(prefix + message)
        self.operation = operation


class AllocationInvariantViolation(AssertionError):
    """
    Raised when parameter views do not exactly cover the parameter vector.

    Attributes
    ----------
    bound : int
        Sum of the lengths of all bound views.
    total : int
        Length of the parameter vector.
    """

    def __init__(self, bound: int, total: int, detail: str = "") -> None:
        msg = (
            f"Parameter views cover {bound} elements but the parameter "
            f"vector has {total}."
        )
        if detail:
            msg += f" {detail}"
        super().__init__(msg)
        self.bound = bound
        self.total = total

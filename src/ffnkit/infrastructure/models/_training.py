"""
Training driver for feedforward networks.

`FFNFunction` exposes a network as a separable objective: one term per sample
column, so an optimizer can work on mini-batches. `train_network` validates
the data, wires the function to an optimizer and reports the outcome.

The optimizer receives the network's own parameter vector and mutates it in
place, so every layer sees each update through its parameter view without any
copying.
"""

from __future__ import annotations

import logging
import math
from typing import TYPE_CHECKING, Optional

import numpy as np

from ...domain._errors import PreconditionError
from ...domain._optimizers import IOptimizer

if TYPE_CHECKING:
    from ._ffn import FFN

logger = logging.getLogger(__name__)


def as_targets(responses) -> np.ndarray:
    """
    Coerce responses to a `(rows, samples)` float64 matrix.

    A 1-D array is read as one response (e.g. a class label) per sample.
    """
    y = np.asarray(responses, dtype=np.float64)
    if y.ndim == 1:
        return y.reshape(1, -1)
    if y.ndim != 2:
        raise ValueError(f"Responses must be 1-D or 2-D, got shape {y.shape}")
    return y


class FFNFunction:
    """
    Separable objective over a network and a fixed training set.

    Parameters
    ----------
    network : FFN
        Network whose parameter vector is being optimized.
    predictors : np.ndarray
        `(features, samples)` matrix. Copied, so `shuffle` never reorders the
        caller's data.
    responses : np.ndarray
        `(rows, samples)` matrix with the same number of columns.
    """

    def __init__(self, network: "FFN", predictors: np.ndarray, responses: np.ndarray):
        if predictors.shape[1] != responses.shape[1]:
            raise ValueError(
                f"Predictors have {predictors.shape[1]} columns but responses "
                f"have {responses.shape[1]}."
            )
        self.network = network
        self.predictors = np.array(predictors, dtype=np.float64, copy=True)
        self.responses = np.array(responses, dtype=np.float64, copy=True)

    def num_functions(self) -> int:
        return int(self.predictors.shape[1])

    def shuffle(self) -> None:
        """
        Permute the sample columns, keeping predictors and responses paired.
        """
        order = np.random.permutation(self.num_functions())
        self.predictors = self.predictors[:, order]
        self.responses = self.responses[:, order]

    def _batch(self, begin: int, batch_size: Optional[int]) -> tuple[np.ndarray, np.ndarray]:
        n = self.num_functions()
        if batch_size is None:
            batch_size = n - begin
        if begin < 0 or batch_size < 0 or begin + batch_size > n:
            raise IndexError(
                f"Batch [{begin}, {begin + batch_size}) is outside [0, {n})."
            )
        stop = begin + batch_size
        return self.predictors[:, begin:stop], self.responses[:, begin:stop]

    def _sync(self, parameters: np.ndarray) -> None:
        # optimizers that probe candidate vectors pass their own arrays
        if parameters is not self.network.parameters:
            self.network.parameters = parameters

    def evaluate(
        self,
        parameters: np.ndarray,
        begin: int = 0,
        batch_size: Optional[int] = None,
    ) -> float:
        """
        Return the objective over samples `[begin, begin + batch_size)`.

        The network runs in evaluation mode for the call, so the value depends
        only on `parameters`. The previous mode is restored afterwards.
        """
        self._sync(parameters)
        x, y = self._batch(begin, batch_size)
        network = self.network
        was_training = network.training
        network.eval_mode()
        try:
            return network.evaluate(x, y)
        finally:
            if was_training:
                network.train_mode()

    def gradient(
        self,
        parameters: np.ndarray,
        begin: int,
        gradient: np.ndarray,
        batch_size: Optional[int] = None,
    ) -> None:
        self.evaluate_with_gradient(parameters, begin, gradient, batch_size)

    def evaluate_with_gradient(
        self,
        parameters: np.ndarray,
        begin: int,
        gradient: np.ndarray,
        batch_size: Optional[int] = None,
    ) -> float:
        """
        Return the batch objective and overwrite `gradient` with its gradient.
        """
        self._sync(parameters)
        x, y = self._batch(begin, batch_size)
        objective = self.network.evaluate(x, y)
        self.network.backward(x, y, gradient)
        return objective


def train_network(
    network: "FFN",
    predictors,
    responses,
    optimizer: IOptimizer,
) -> float:
    """
    Fit `network` to the data with `optimizer`.

    Parameters
    ----------
    network : FFN
        Network to train. Its parameters are allocated first if needed.
    predictors : array-like
        `(features, samples)` training inputs.
    responses : array-like
        Training targets, one column per sample.
    optimizer : IOptimizer
        Any object with `optimize(function, coordinates) -> float`. A
        `max_iterations` attribute is optional and only used for diagnostics.

    Returns
    -------
    float
        Final objective reported by the optimizer. A non-finite value is
        returned unchanged.

    Raises
    ------
    ShapeError
        If the predictors do not match the first layer's input width.
    PreconditionError
        If the network has no layers.
    ValueError
        If predictors and responses disagree on the number of samples.
    """
    if len(network) == 0:
        raise PreconditionError("the network has no layers", operation="FFN.train")

    x = network.as_matrix(predictors)
    y = as_targets(responses)
    if x.shape[1] != y.shape[1]:
        raise ValueError(
            f"FFN.train(): {x.shape[1]} predictor columns but {y.shape[1]} "
            "response columns."
        )

    if not network.is_reset:
        network.reset_parameters()
    network.check_input_shape(x, where="FFN.train()")

    function = FFNFunction(network, x, y)
    n = function.num_functions()

    max_iterations = getattr(optimizer, "max_iterations", None)
    if max_iterations is not None and 0 < max_iterations < n:
        logger.warning(
            "FFN.train(): the optimizer's max_iterations (%d) is less than the "
            "number of data points (%d); not every point will be used for "
            "training.",
            max_iterations,
            n,
        )

    logger.info(
        "Training %d-layer network (%d parameters) on %d samples with %s",
        len(network),
        network.parameters.shape[0],
        n,
        optimizer.__class__.__name__,
    )

    was_training = network.training
    network.train_mode()
    try:
        objective = float(optimizer.optimize(function, network.parameters))
    finally:
        if not was_training:
            network.eval_mode()

    if not math.isfinite(objective):
        logger.warning("FFN.train(): optimization ended with a non-finite objective (%s)", objective)
    else:
        logger.info("FFN.train(): final objective %.6f", objective)
    return objective

"""
ffnkit: feedforward neural networks over a single flat parameter vector.

Exports
-------
- FFN: the network container (layers, loss policy, parameters, lifecycle)
- Layer and the built-in layers
- loss policies (output layers)
- optimizers
- WeightInitializer
- the error types raised by the network
"""

from .domain._errors import (
    AllocationInvariantViolation,
    PreconditionError,
    ShapeError,
)
from .infrastructure._layer import Layer
from .infrastructure.layers import (
    Add,
    Dropout,
    Identity,
    Linear,
    LinearNoBias,
    LogSoftMax,
    ReLU,
    Sigmoid,
    Tanh,
)
from .infrastructure.losses import (
    CrossEntropyError,
    MeanSquaredError,
    NegativeLogLikelihood,
    OutputLayer,
)
from .infrastructure.models import FFN, FFNFunction, train_network
from .infrastructure.optimizers import SGD, Adam, RMSProp
from .infrastructure.serialization import register_layer
from .infrastructure.utils.weight_initializer import WeightInitializer

__version__ = "0.1.0"

__all__ = [
    "FFN",
    "FFNFunction",
    "train_network",
    "Layer",
    "Linear",
    "LinearNoBias",
    "Add",
    "Identity",
    "Sigmoid",
    "ReLU",
    "Tanh",
    "LogSoftMax",
    "Dropout",
    "OutputLayer",
    "NegativeLogLikelihood",
    "MeanSquaredError",
    "CrossEntropyError",
    "SGD",
    "RMSProp",
    "Adam",
    "WeightInitializer",
    "register_layer",
    "ShapeError",
    "PreconditionError",
    "AllocationInvariantViolation",
]

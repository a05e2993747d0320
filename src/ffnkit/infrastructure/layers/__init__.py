from ._linear import Linear, LinearNoBias, Add
from ._activations import Identity, Sigmoid, ReLU, Tanh, LogSoftMax
from ._dropout import Dropout

__all__ = [
    "Linear",
    "LinearNoBias",
    "Add",
    "Identity",
    "Sigmoid",
    "ReLU",
    "Tanh",
    "LogSoftMax",
    "Dropout",
]

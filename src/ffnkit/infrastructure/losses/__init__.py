from ._losses import (
    OutputLayer,
    NegativeLogLikelihood,
    MeanSquaredError,
    CrossEntropyError,
)

__all__ = [
    "OutputLayer",
    "NegativeLogLikelihood",
    "MeanSquaredError",
    "CrossEntropyError",
]

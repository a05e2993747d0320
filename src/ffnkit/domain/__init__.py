from ._errors import ShapeError, PreconditionError, AllocationInvariantViolation
from ._layer import ILayer
from ._output_layer import IOutputLayer
from ._optimizers import IOptimizer, ISeparableFunction
from ._parameter import ParameterSpan

__all__ = [
    "ShapeError",
    "PreconditionError",
    "AllocationInvariantViolation",
    "ILayer",
    "IOutputLayer",
    "IOptimizer",
    "ISeparableFunction",
    "ParameterSpan",
]

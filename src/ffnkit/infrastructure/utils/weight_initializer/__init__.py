"""
Parameter initialization public API.

Importing this package registers every built-in initializer (constants,
uniform random, Xavier, Kaiming) into the `WeightInitializer` registry via
import side effects.

Exports
-------
- WeightInitializer:
    The registry-backed dispatcher the network uses to fill parameter views.
"""

from ._constants import *
from ._xavier import *
from ._base import WeightInitializer

__all__ = [
    WeightInitializer.__name__,
]

"""
Xavier/Glorot and Kaiming/He parameter initializers.

Implemented variants
--------------------
- ``xavier``:
    Normal with ``std = sqrt(2 / (fan_in + fan_out))``.
- ``xavier_uniform``:
    ``U(-sqrt(6/(fan_in+fan_out)), +sqrt(6/(fan_in+fan_out)))``.
- ``kaiming``:
    Normal with ``std = sqrt(2 / fan_in)``, for ReLU-family activations.

Notes
-----
- Fan-in and fan-out are computed from the view shape via
  ``_calculate_fan_in_and_fan_out``; layers pass their weight matrix view
  shaped `(out_size, in_size)`.
- All initializers write into the view in place and return it.
"""

import math

import numpy as np

from ._base import WeightInitializer
from ....domain.utils._weight_initialization import _calculate_fan_in_and_fan_out


@WeightInitializer.register_initializer("xavier")
def xavier(view: np.ndarray) -> np.ndarray:
    fan_in, fan_out = _calculate_fan_in_and_fan_out(tuple(view.shape))
    std = math.sqrt(2.0 / float(fan_in + fan_out))
    view[...] = np.random.randn(*view.shape) * std
    return view


@WeightInitializer.register_initializer("xavier_uniform")
def xavier_uniform(view: np.ndarray) -> np.ndarray:
    fan_in, fan_out = _calculate_fan_in_and_fan_out(tuple(view.shape))
    bound = math.sqrt(6.0 / float(fan_in + fan_out))
    view[...] = np.random.uniform(-bound, bound, size=view.shape)
    return view


@WeightInitializer.register_initializer("kaiming")
def kaiming(view: np.ndarray) -> np.ndarray:
    """
    Apply Kaiming (He) normal initialization, ``std = sqrt(2 / fan_in)``.
    """
    fan_in, _ = _calculate_fan_in_and_fan_out(tuple(view.shape))
    std = math.sqrt(2.0 / float(fan_in))
    view[...] = np.random.randn(*view.shape) * std
    return view

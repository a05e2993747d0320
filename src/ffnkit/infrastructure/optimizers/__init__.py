from ._base import MiniBatchOptimizer
from ._sgd import SGD
from ._rmsprop import RMSProp
from ._adam import Adam

__all__ = ["MiniBatchOptimizer", "SGD", "RMSProp", "Adam"]

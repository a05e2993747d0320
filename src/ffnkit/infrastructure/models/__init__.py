from ._ffn import FFN, ARCHIVE_FORMAT
from ._training import FFNFunction, train_network

__all__ = ["FFN", "ARCHIVE_FORMAT", "FFNFunction", "train_network"]

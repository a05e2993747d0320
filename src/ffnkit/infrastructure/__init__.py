from ._layer import Layer

__all__ = ["Layer"]

from ._aggregator import ParameterAggregator

__all__ = ["ParameterAggregator"]

from ._registry import (
    register_layer,
    registered_layers,
    layer_to_config,
    layer_from_config,
)
from ._payload import vector_to_payload, payload_to_vector

__all__ = [
    "register_layer",
    "registered_layers",
    "layer_to_config",
    "layer_from_config",
    "vector_to_payload",
    "payload_to_vector",
]

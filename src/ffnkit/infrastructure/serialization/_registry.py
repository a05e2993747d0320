from __future__ import annotations

from typing import Any, Callable, Optional, Type

_LAYER_REGISTRY: dict[str, Type[Any]] = {}


def register_layer(name: Optional[str] = None) -> Callable[[Type[Any]], Type[Any]]:
    """
    Decorator to register a layer or output-layer class for deserialization.

    The registry key doubles as the record tag written into archives, so it
    must stay stable across releases once checkpoints exist.
    """

    def deco(cls: Type[Any]) -> Type[Any]:
        key = name or cls.__name__
        if key in _LAYER_REGISTRY and _LAYER_REGISTRY[key] is not cls:
            raise ValueError(f"Layer type '{key}' is already registered.")
        _LAYER_REGISTRY[key] = cls
        cls._registry_key = key
        return cls

    return deco


def registered_layers() -> tuple[str, ...]:
    return tuple(sorted(_LAYER_REGISTRY))


def layer_to_config(layer: Any) -> dict[str, Any]:
    """
    Convert a layer into a tagged, JSON-serializable record.

    Record format
    -------------
    {
      "type": "Linear",
      "config": {"in_size": 4, "out_size": 8}
    }

    Parameters are not part of the record; the network stores them once, as a
    single flat vector, next to the ordered list of records.
    """
    # subclasses of a registered layer do not inherit its tag
    type_name = layer.__class__.__dict__.get("_registry_key", layer.__class__.__name__)
    if _LAYER_REGISTRY.get(type_name) is not layer.__class__:
        raise ValueError(
            f"Layer type '{type_name}' is not registered. "
            "Register it via @register_layer."
        )

    get_cfg = getattr(layer, "get_config", None)
    cfg = get_cfg() if callable(get_cfg) else {}
    return {"type": type_name, "config": cfg}


def layer_from_config(node: dict[str, Any]) -> Any:
    """
    Rebuild a layer from a tagged record produced by `layer_to_config`.
    """
    type_name = str(node["type"])
    if type_name not in _LAYER_REGISTRY:
        raise ValueError(
            f"Unknown layer type '{type_name}'. Register it via @register_layer."
        )

    cls = _LAYER_REGISTRY[type_name]
    cfg = node.get("config", {}) or {}

    from_cfg = getattr(cls, "from_config", None)
    if callable(from_cfg):
        return from_cfg(cfg)
    return cls(**cfg)

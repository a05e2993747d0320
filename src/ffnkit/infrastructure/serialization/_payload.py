from __future__ import annotations

import base64
from typing import Any, Dict

import numpy as np


def bytes_to_b64_str(b: bytes) -> str:
    """
    Encode raw bytes into a base64 ASCII string (JSON-safe).
    """
    return base64.b64encode(b).decode("ascii")


def b64_str_to_bytes(s: str) -> bytes:
    """
    Decode a base64 ASCII string back into raw bytes.
    """
    return base64.b64decode(s.encode("ascii"))


def vector_to_payload(vec: np.ndarray) -> Dict[str, Any]:
    """
    Serialize a NumPy array into a JSON-safe payload.

    The raw bytes are stored, not decimal text, so a round trip is exact
    bit-for-bit.

    Returns
    -------
    dict
        {
          "b64": "<base64>",
          "dtype": "<numpy dtype str>",
          "shape": [...]
        }
    """
    a = np.ascontiguousarray(vec)
    return {
        "b64": bytes_to_b64_str(a.tobytes(order="C")),
        "dtype": a.dtype.str,  # e.g. "<f8"
        "shape": list(a.shape),
    }


def payload_to_vector(payload: Dict[str, Any]) -> np.ndarray:
    """
    Deserialize a payload produced by `vector_to_payload`.

    Raises
    ------
    ValueError
        If the byte count does not match the recorded shape and dtype.
    """
    b = b64_str_to_bytes(str(payload["b64"]))
    dtype = np.dtype(str(payload["dtype"]))
    shape = tuple(int(x) for x in payload["shape"])

    expected = int(np.prod(shape, dtype=np.int64)) * dtype.itemsize
    if len(b) != expected:
        raise ValueError(
            f"Corrupt payload: {len(b)} bytes for shape {shape} and dtype {dtype}."
        )

    arr = np.frombuffer(b, dtype=dtype).reshape(shape)
    # frombuffer returns a read-only view over `b`; hand back an owning array
    return np.array(arr, copy=True, order="C")

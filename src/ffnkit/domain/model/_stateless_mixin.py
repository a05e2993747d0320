"""
Stateless configuration mixin.

This module defines `StatelessConfigMixin` for layers whose behavior is fully
determined by their class (activations, identity). Such layers have nothing to
record in an archive beyond their type tag, so their configuration hooks are
trivial.
"""

from typing import Any, Dict
from typing_extensions import Self


class StatelessConfigMixin:
    """
    Mixin providing configuration hooks for layers without hyperparameters.
    """

    def get_config(self) -> Dict[str, Any]:
        return {}

    @classmethod
    def from_config(cls, cfg: Dict[str, Any]) -> Self:
        """
        Build a default instance; `cfg` is expected to be empty and is ignored.
        """
        return cls()

"""Application scopes: groupings of components with shared behaviour."""

from __future__ import annotations

import abc
from dataclasses import dataclass
from typing import Any, Mapping

HEALTH_SCOPE = "core.oam.dev/v1alpha1.HealthScope"
NETWORK_SCOPE = "core.oam.dev/v1alpha1.NetworkScope"


class ScopeError(Exception):
    """Raised when a scope operation fails or is unsupported."""


@dataclass(frozen=True)
class ComponentRef:
    """Identifies a component instance that is added to or removed from a scope."""

    component_name: str
    instance_name: str


def convert_owner_ref(owner: Mapping[str, Any]) -> dict[str, Any]:
    """Normalise an owner reference, filling unset flags with False.

    Raises KeyError when a required field is missing.
    """
    return {
        "controller": bool(owner.get("controller")),
        "blockOwnerDeletion": bool(owner.get("blockOwnerDeletion")),
        "name": owner["name"],
        "apiVersion": owner["apiVersion"],
        "kind": owner["kind"],
        "uid": owner["uid"],
    }


class Scope(abc.ABC):
    """An application scope grouping components into a logical application."""

    @abc.abstractmethod
    def allow_overlap(self) -> bool:
        """Whether a component may belong to other scopes of this type too."""

    @abc.abstractmethod
    def scope_type(self) -> str:
        """The OAM type name of this scope."""

    @abc.abstractmethod
    def create(self, owner: Mapping[str, Any]) -> None:
        """Create the scope instance, owned by ``owner``."""

    @abc.abstractmethod
    def modify(self) -> None:
        """Modify the scope instance."""

    @abc.abstractmethod
    def delete(self) -> None:
        """Delete the scope instance."""

    @abc.abstractmethod
    def add(self, spec: ComponentRef) -> None:
        """Add a component to this scope."""

    @abc.abstractmethod
    def remove(self, spec: ComponentRef) -> None:
        """Remove a component from this scope."""
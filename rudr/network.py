"""The network scope; only its configuration is supported so far."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, ClassVar, Mapping, Optional, Sequence

from rudr.parameter import ParameterValue, extract_string_params
from rudr.scopes import NETWORK_SCOPE, ComponentRef, Scope, ScopeError
from rudr.traits import KubeClient


@dataclass
class Network(Scope):
    """A network scope grouping components on a shared network."""

    supported_operations: ClassVar[frozenset[str]] = frozenset()

    name: str
    namespace: str
    client: KubeClient = field(repr=False, compare=False)
    network_id: str
    subnet_id: str
    internet_gateway_type: Optional[str] = None
    allow_component_overlap: bool = False

    @classmethod
    def from_params(
        cls,
        name: str,
        namespace: str,
        client: KubeClient,
        params: Sequence[ParameterValue],
    ) -> "Network":
        params = list(params)
        network_id = extract_string_params("network-id", params)
        if network_id is None:
            raise ScopeError("network-id is not exist")
        subnet_id = extract_string_params("subnet-id", params)
        if subnet_id is None:
            raise ScopeError("subnet-id is not exist")
        return cls(
            name=name,
            namespace=namespace,
            client=client,
            network_id=network_id,
            subnet_id=subnet_id,
            internet_gateway_type=extract_string_params("internet-gateway-type", params),
        )

    def _require(self, operation: str, label: Optional[str] = None) -> None:
        if operation not in self.supported_operations:
            raise ScopeError(f"network scope {label or operation} not implemented")

    def allow_overlap(self) -> bool:
        return self.allow_component_overlap

    def scope_type(self) -> str:
        return NETWORK_SCOPE

    def create(self, owner: Mapping[str, Any]) -> None:
        self._require("create")

    def modify(self) -> None:
        self._require("modify")

    def delete(self) -> None:
        self._require("delete")

    def add(self, spec: ComponentRef) -> None:
        self._require("add", "add component")

    def remove(self, spec: ComponentRef) -> None:
        self._require("remove", "remove component")
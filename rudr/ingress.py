"""An ingress point to a component instance's service."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional

from rudr.traits import (
    ApiError,
    KubeClient,
    OwnerRefs,
    TraitImplementation,
    trait_labels,
)
from rudr.workload_type import KubeName

_KIND = "Ingress"


def _as_i32(value: Any) -> Optional[int]:
    if not isinstance(value, int) or isinstance(value, bool):
        return None
    return (value + 2**31) % 2**32 - 2**31


def _as_text(value: Any) -> str:
    return value if isinstance(value, str) else ""


@dataclass
class Ingress(TraitImplementation, KubeName):
    """Creates a Kubernetes Ingress attached to a component instance's Service."""

    name: str
    instance_name: str
    component_name: str
    svc_port: int = 80
    hostname: Optional[str] = None
    path: Optional[str] = None
    owner_refs: OwnerRefs = None

    @classmethod
    def from_params(
        cls,
        name: str,
        instance_name: str,
        component_name: str,
        params: Mapping[str, Any],
        owner_refs: OwnerRefs,
    ) -> "Ingress":
        port = _as_i32(params.get("service_port"))
        return cls(
            name=name,
            instance_name=instance_name,
            component_name=component_name,
            svc_port=80 if port is None else port,
            hostname=_as_text(params["hostname"]) if "hostname" in params else None,
            path=_as_text(params["path"]) if "path" in params else None,
            owner_refs=owner_refs,
        )

    def kube_name(self) -> str:
        return f"{self.instance_name}-trait-ingress"

    def to_ext_ingress(self) -> dict[str, Any]:
        """Build the Ingress object for this trait."""
        metadata: dict[str, Any] = {
            "name": self.kube_name(),
            "labels": trait_labels(self.name, self.instance_name),
        }
        if self.owner_refs is not None:
            metadata["ownerReferences"] = list(self.owner_refs)
        rule = {
            "host": self.hostname if self.hostname is not None else "example.com",
            "http": {
                "paths": [
                    {
                        "backend": {
                            "serviceName": self.instance_name,
                            "servicePort": self.svc_port,
                        },
                        "path": self.path if self.path is not None else "/",
                    }
                ]
            },
        }
        return {
            "apiVersion": "extensions/v1beta1",
            "kind": _KIND,
            "metadata": metadata,
            "spec": {"rules": [rule]},
        }

    def add(self, namespace: str, client: KubeClient) -> None:
        client.create(_KIND, namespace, self.to_ext_ingress())

    def modify(self, namespace: str, client: KubeClient) -> None:
        client.patch(_KIND, namespace, self.kube_name(), self.to_ext_ingress())

    def delete(self, namespace: str, client: KubeClient) -> None:
        client.delete(_KIND, namespace, self.name)

    def status(self, namespace: str, client: KubeClient) -> Optional[dict[str, str]]:
        key = f"ingress/{self.kube_name()}"
        try:
            response = client.read_status(_KIND, namespace, self.kube_name())
        except ApiError as exc:
            return {key: str(exc)}
        status = response.get("status") if isinstance(response, dict) else None
        if isinstance(status, dict) and status.get("loadBalancer") is not None:
            return {key: "created"}
        return None
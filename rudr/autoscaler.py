"""Autoscaling through a HorizontalPodAutoscaler."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Mapping, Optional

from rudr.traits import (
    ApiError,
    KubeClient,
    OwnerRefs,
    TraitImplementation,
    trait_labels,
)
from rudr.workload_type import SERVER_NAME, TASK_NAME, WORKER_NAME, KubeName

logger = logging.getLogger(__name__)

_KIND = "HorizontalPodAutoscaler"


def _as_i32(value: Any) -> Optional[int]:
    if not isinstance(value, int) or isinstance(value, bool):
        return None
    return (value + 2**31) % 2**32 - 2**31


@dataclass
class Autoscaler(TraitImplementation, KubeName):
    """Provides autoscaling via a Kubernetes HorizontalPodAutoscaler."""

    name: str
    instance_name: str
    component_name: str
    minimum: Optional[int] = None
    maximum: Optional[int] = None
    cpu: Optional[int] = None
    memory: Optional[int] = None
    owner_refs: OwnerRefs = None

    @classmethod
    def from_params(
        cls,
        name: str,
        instance_name: str,
        component_name: str,
        params: Mapping[str, Any],
        owner_refs: OwnerRefs,
    ) -> "Autoscaler":
        return cls(
            name=name,
            instance_name=instance_name,
            component_name=component_name,
            minimum=_as_i32(params.get("minimum")),
            maximum=_as_i32(params.get("maximum")),
            cpu=_as_i32(params.get("cpu")),
            memory=_as_i32(params.get("memory")),
            owner_refs=owner_refs,
        )

    def kube_name(self) -> str:
        return f"{self.instance_name}-trait-autoscaler"

    def to_horizontal_pod_autoscaler(self) -> dict[str, Any]:
        """Build the HorizontalPodAutoscaler object for this trait."""
        metrics = [
            {
                "type": "Resource",
                "resource": {"name": resource, "targetAverageUtilization": target},
            }
            for resource, target in (("cpu", self.cpu), ("memory", self.memory))
            if target is not None
        ]
        metadata: dict[str, Any] = {
            "name": self.kube_name(),
            "labels": trait_labels(self.name, self.instance_name),
        }
        if self.owner_refs is not None:
            metadata["ownerReferences"] = list(self.owner_refs)
        maximum = self.maximum
        if maximum is None:
            maximum = 10 + (self.minimum or 0)
        spec: dict[str, Any] = {
            "maxReplicas": maximum,
            "metrics": metrics,
            "scaleTargetRef": {
                "apiVersion": "apps/v1",
                "kind": "Deployment",
                "name": self.instance_name,
            },
        }
        if self.minimum is not None:
            spec["minReplicas"] = self.minimum
        return {
            "apiVersion": "autoscaling/v2beta1",
            "kind": _KIND,
            "metadata": metadata,
            "spec": spec,
        }

    def add(self, namespace: str, client: KubeClient) -> None:
        result = client.create(_KIND, namespace, self.to_horizontal_pod_autoscaler())
        logger.info("Autoscaler: %s", json.dumps(result, indent=2, default=str))

    def modify(self, namespace: str, client: KubeClient) -> None:
        result = client.patch(
            _KIND, namespace, self.kube_name(), self.to_horizontal_pod_autoscaler()
        )
        logger.info("Autoscaler modified: %s", json.dumps(result, indent=2, default=str))

    def delete(self, namespace: str, client: KubeClient) -> None:
        client.delete(_KIND, namespace, self.kube_name())

    @classmethod
    def supports_workload_type(cls, name: str) -> bool:
        return name in (SERVER_NAME, TASK_NAME, WORKER_NAME)

    def status(self, namespace: str, client: KubeClient) -> Optional[dict[str, str]]:
        key = f"horizontalpodautoscaler/{self.kube_name()}"
        try:
            response = client.read_status(_KIND, namespace, self.kube_name())
        except ApiError as exc:
            return {key: str(exc)}
        status = response.get("status") if isinstance(response, dict) else None
        if status is None:
            return None
        return {key: str(status.get("currentReplicas", 0))}
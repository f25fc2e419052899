"""Manual scaling of replicable workloads."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional

from rudr.traits import (
    ApiError,
    KubeClient,
    OwnerRefs,
    TraitError,
    TraitImplementation,
)
from rudr.workload_type import SERVER_NAME, TASK_NAME, WORKER_NAME

logger = logging.getLogger(__name__)


def _as_i32(value: Any) -> Optional[int]:
    if not isinstance(value, int) or isinstance(value, bool):
        return None
    return (value + 2**31) % 2**32 - 2**31


def _rebuild(
    original: Mapping[str, Any], api_version: str, kind: str, spec_key: str, count: int
) -> dict[str, Any]:
    spec = original.get("spec")
    if spec is None:
        raise TraitError(f"{kind} has no spec")
    result: dict[str, Any] = {"apiVersion": api_version, "kind": kind}
    if original.get("metadata") is not None:
        result["metadata"] = dict(original["metadata"])
    result["spec"] = {**spec, spec_key: count}
    return result


@dataclass
class ManualScaler(TraitImplementation):
    """Sets the replica count of a deployment or the parallelism of a job."""

    name: str
    instance_name: str
    component_name: str
    owner_refs: OwnerRefs = None
    replica_count: int = 1
    workload_type: str = ""
    settle_seconds: float = field(default=5.0, repr=False)

    @classmethod
    def from_params(
        cls,
        name: str,
        instance_name: str,
        component_name: str,
        params: Mapping[str, Any],
        owner_refs: OwnerRefs,
        workload_type: str,
    ) -> "ManualScaler":
        logger.debug("params: %r", params)
        count = _as_i32(params.get("replicaCount"))
        return cls(
            name=name,
            instance_name=instance_name,
            component_name=component_name,
            owner_refs=owner_refs,
            replica_count=1 if count is None else count,
            workload_type=workload_type,
        )

    def scale_deployment(self, deployment: Mapping[str, Any]) -> dict[str, Any]:
        """Return a new deployment with the replica count set."""
        return _rebuild(deployment, "apps/v1", "Deployment", "replicas", self.replica_count)

    def scale_job(self, job: Mapping[str, Any]) -> dict[str, Any]:
        """Return a new job with its parallelism set to the replica count."""
        return _rebuild(job, "batch/v1", "Job", "parallelism", self.replica_count)

    def _scale(self, namespace: str, client: KubeClient) -> None:
        if self.settle_seconds > 0:
            time.sleep(self.settle_seconds)
        logger.info("Scaling %s to %s", self.name, self.replica_count)
        if self.workload_type in (SERVER_NAME, WORKER_NAME):
            kind, rebuild = "Deployment", self.scale_deployment
        elif self.workload_type == TASK_NAME:
            kind, rebuild = "Job", self.scale_job
        else:
            logger.info("Unsupported workload type: %s", self.workload_type)
            return
        try:
            original = client.read(kind, namespace, self.instance_name)
        except ApiError as exc:
            logger.debug("could not read %s %s: %s", kind, self.instance_name, exc)
            return
        client.replace(kind, namespace, self.instance_name, rebuild(original))

    def add(self, namespace: str, client: KubeClient) -> None:
        self._scale(namespace, client)

    def modify(self, namespace: str, client: KubeClient) -> None:
        self._scale(namespace, client)

    def delete(self, namespace: str, client: KubeClient) -> None:
        """Owner references take care of cleanup."""

    @classmethod
    def supports_workload_type(cls, name: str) -> bool:
        return name in (SERVER_NAME, TASK_NAME, WORKER_NAME)
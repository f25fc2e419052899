"""The health scope, which aggregates the health of its components."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, ClassVar, Mapping, Optional, Sequence

from rudr.parameter import (
    ParameterValue,
    extract_number_params,
    extract_string_params,
    extract_value_params,
)
from rudr.scopes import HEALTH_SCOPE, ComponentRef, Scope, ScopeError, convert_owner_ref
from rudr.traits import ApiError, KubeClient

logger = logging.getLogger(__name__)

HEALTH_SCOPE_CRD = "healthscopes"
HEALTH_SCOPE_GROUP = "core.oam.dev"
HEALTH_SCOPE_VERSION = "v1alpha1"
HEALTH_SCOPE_KIND = "HealthScope"


@dataclass
class HealthScopeSpec:
    """The spec of a HealthScope custom resource."""

    probe_method: str
    probe_endpoint: str
    probe_timeout: Optional[int] = None
    probe_interval: Optional[int] = None
    failure_rate_threshold: Optional[float] = None
    healthy_rate_threshold: Optional[float] = None
    health_threshold_percentage: Optional[float] = None
    required_healthy_components: Optional[list[str]] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "probeMethod": self.probe_method,
            "probeEndpoint": self.probe_endpoint,
            "probeTimeout": self.probe_timeout,
            "probeInterval": self.probe_interval,
            "failureRateThreshold": self.failure_rate_threshold,
            "healthyRateThreshold": self.healthy_rate_threshold,
            "healthThresholdPercentage": self.health_threshold_percentage,
            "requiredHealthyComponents": (
                None
                if self.required_healthy_components is None
                else list(self.required_healthy_components)
            ),
        }


@dataclass
class ComponentInfo:
    """A component instance recorded in a health scope's status."""

    name: str
    instance_name: str
    status: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "instanceName": self.instance_name,
            "status": self.status,
        }


@dataclass
class HealthStatus:
    """The status of a HealthScope custom resource."""

    components: Optional[list[ComponentInfo]] = None
    last_aggregate_timestamp: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "components": (
                None
                if self.components is None
                else [c.to_dict() for c in self.components]
            ),
            "lastAggregateTimestamp": self.last_aggregate_timestamp,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "HealthStatus":
        raw = data.get("components")
        components = None
        if raw is not None:
            components = [
                ComponentInfo(
                    name=item["name"],
                    instance_name=item["instanceName"],
                    status=item.get("status"),
                )
                for item in raw
            ]
        return cls(
            components=components,
            last_aggregate_timestamp=data.get("lastAggregateTimestamp"),
        )


def _as_int(value: Any) -> Optional[int]:
    return value if isinstance(value, int) else None


def _as_float(value: Any) -> Optional[float]:
    return None if value is None else float(value)


def _string_list(value: Any) -> Optional[list[str]]:
    if not isinstance(value, list):
        return None
    if not all(isinstance(item, str) for item in value):
        return None
    return list(value)


@dataclass
class Health(Scope):
    """A health scope backed by a HealthScope custom resource."""

    supported_operations: ClassVar[frozenset[str]] = frozenset(
        {"create", "delete", "add", "remove"}
    )

    name: str
    namespace: str
    client: KubeClient = field(repr=False, compare=False)
    probe_method: str
    probe_endpoint: str
    probe_timeout: Optional[int] = None
    probe_interval: Optional[int] = None
    failure_rate_threshold: Optional[float] = None
    healthy_rate_threshold: Optional[float] = None
    health_threshold_percentage: Optional[float] = None
    required_healthy_components: Optional[list[str]] = None
    allow_component_overlap: bool = True

    @classmethod
    def from_params(
        cls,
        name: str,
        namespace: str,
        client: KubeClient,
        params: Sequence[ParameterValue],
    ) -> "Health":
        params = list(params)
        probe_method = extract_string_params("probe-method", params)
        if probe_method is None:
            raise ScopeError(f"probe-method does not exist in params {params!r}")
        probe_endpoint = extract_string_params("probe-endpoint", params)
        if probe_endpoint is None:
            raise ScopeError(f"probe-endpoint does not exist in params {params!r}")
        return cls(
            name=name,
            namespace=namespace,
            client=client,
            probe_method=probe_method,
            probe_endpoint=probe_endpoint,
            probe_timeout=_as_int(extract_number_params("probe-timeout", params)),
            probe_interval=_as_int(extract_number_params("probe-interval", params)),
            failure_rate_threshold=_as_float(
                extract_number_params("failure-rate-threshold", params)
            ),
            healthy_rate_threshold=_as_float(
                extract_number_params("healthy-rate-threshold", params)
            ),
            health_threshold_percentage=_as_float(
                extract_number_params("health-threshold-percentage", params)
            ),
            required_healthy_components=_string_list(
                extract_value_params("required-healthy-components", params)
            ),
        )

    def _require(self, operation: str) -> None:
        if operation not in self.supported_operations:
            raise ScopeError(f"health scope {operation} not implemented")

    def allow_overlap(self) -> bool:
        return self.allow_component_overlap

    def scope_type(self) -> str:
        return HEALTH_SCOPE

    def _spec(self) -> HealthScopeSpec:
        return HealthScopeSpec(
            probe_method=self.probe_method,
            probe_endpoint=self.probe_endpoint,
            probe_timeout=self.probe_timeout,
            probe_interval=self.probe_interval,
            failure_rate_threshold=self.failure_rate_threshold,
            healthy_rate_threshold=self.healthy_rate_threshold,
            health_threshold_percentage=self.health_threshold_percentage,
            required_healthy_components=self.required_healthy_components,
        )

    def to_object(self, owner: Mapping[str, Any]) -> dict[str, Any]:
        """Build the HealthScope custom resource owned by ``owner``."""
        return {
            "apiVersion": f"{HEALTH_SCOPE_GROUP}/{HEALTH_SCOPE_VERSION}",
            "kind": HEALTH_SCOPE_KIND,
            "metadata": {
                "name": self.name,
                "ownerReferences": [convert_owner_ref(owner)],
            },
            "spec": self._spec().to_dict(),
            "status": None,
        }

    def create(self, owner: Mapping[str, Any]) -> None:
        """Create the resource; one that already exists is left as it is."""
        try:
            self.client.create(HEALTH_SCOPE_KIND, self.namespace, self.to_object(owner))
        except ApiError as exc:
            if exc.reason != "AlreadyExists":
                raise
        logger.info("health scope %s created", self.name)

    def modify(self) -> None:
        self._require("modify")

    def delete(self) -> None:
        """Owner references remove the resource, so no request is made."""
        self._require("delete")
        logger.debug(
            "health scope %s is removed through its owner references", self.name
        )

    def add(self, spec: ComponentRef) -> None:
        obj = dict(self.get_obj())
        components = self._remove_one(spec, obj.get("status"))
        components.append(
            ComponentInfo(name=spec.component_name, instance_name=spec.instance_name)
        )
        obj["status"] = HealthStatus(components=components).to_dict()
        logger.info(
            "add component %s to health scope %s", spec.component_name, self.name
        )
        self._patch_obj(obj)

    def remove(self, spec: ComponentRef) -> None:
        obj = dict(self.get_obj())
        components = self._remove_one(spec, obj.get("status"))
        obj["status"] = HealthStatus(components=components).to_dict()
        self._patch_obj(obj)

    def get_obj(self) -> dict[str, Any]:
        """Fetch the HealthScope resource from the cluster."""
        return self.client.read(HEALTH_SCOPE_KIND, self.namespace, self.name)

    @staticmethod
    def _remove_one(
        spec: ComponentRef, status: Optional[Mapping[str, Any]]
    ) -> list[ComponentInfo]:
        if status is None:
            return []
        return [
            comp
            for comp in HealthStatus.from_dict(status).components or []
            if not (
                comp.name == spec.component_name
                and comp.instance_name == spec.instance_name
            )
        ]

    def _patch_obj(self, obj: Mapping[str, Any]) -> None:
        self.client.patch(HEALTH_SCOPE_KIND, self.namespace, self.name, obj)
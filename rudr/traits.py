"""Trait bindings, the trait interface, and a small Kubernetes API client."""

from __future__ import annotations

import abc
import enum
import json
import logging
import urllib.error
import urllib.request
from dataclasses import dataclass
from typing import Any, Callable, Mapping, Optional
from urllib.parse import quote

from rudr.parameter import ParameterValue

logger = logging.getLogger(__name__)

INGRESS = "ingress"
AUTOSCALER = "autoscaler"
MANUAL_SCALER = "manual-scaler"
VOLUME_MOUNTER = "volume-mounter"
EMPTY = "empty"

Labels = dict[str, str]
OwnerRefs = Optional[list[dict[str, Any]]]
Transport = Callable[[str, str, Optional[Any], str], Any]

_JSON = "application/json"
_STRATEGIC_MERGE = "application/strategic-merge-patch+json"
_MERGE = "application/merge-patch+json"

# kind -> (API prefix, plural resource name, supports strategic merge patch)
_KINDS: dict[str, tuple[str, str, bool]] = {
    "Deployment": ("/apis/apps/v1", "deployments", True),
    "Job": ("/apis/batch/v1", "jobs", True),
    "PersistentVolumeClaim": ("/api/v1", "persistentvolumeclaims", True),
    "Ingress": ("/apis/extensions/v1beta1", "ingresses", True),
    "HorizontalPodAutoscaler": (
        "/apis/autoscaling/v2beta1",
        "horizontalpodautoscalers",
        True,
    ),
    "HealthScope": ("/apis/core.oam.dev/v1alpha1", "healthscopes", False),
}


class Phase(enum.Enum):
    """Lifecycle phases a trait takes part in."""

    ADD = "add"
    MODIFY = "modify"
    DELETE = "delete"
    PRE_ADD = "pre_add"
    PRE_MODIFY = "pre_modify"
    PRE_DELETE = "pre_delete"


class TraitError(Exception):
    """Raised when a trait cannot carry out a phase."""


class ApiError(Exception):
    """An error reported by the Kubernetes API server or the transport."""

    def __init__(self, message: str, code: Optional[int] = None, reason: str = ""):
        super().__init__(message)
        self.message = message
        self.code = code
        self.reason = reason


def _api_error(code: int, raw: bytes) -> ApiError:
    data: Any = None
    try:
        data = json.loads(raw) if raw else None
    except ValueError:
        data = None
    if not isinstance(data, dict):
        return ApiError(f"HTTP {code}", code=code)
    message = data.get("message") or f"HTTP {code}"
    return ApiError(message, code=code, reason=data.get("reason", ""))


class KubeClient:
    """A minimal JSON client for the Kubernetes resources used by traits and scopes.

    ``transport`` is called as ``transport(method, path, body, content_type)`` and
    returns the decoded response; by default requests go over HTTP to ``base_url``.
    """

    def __init__(
        self,
        base_url: str = "http://localhost:8001",
        transport: Optional[Transport] = None,
        timeout: float = 30.0,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport: Transport = transport or self._send

    @staticmethod
    def _kind(kind: str) -> tuple[str, str, bool]:
        try:
            return _KINDS[kind]
        except KeyError:
            raise ValueError(f"unknown resource kind {kind}") from None

    def _path(
        self,
        kind: str,
        namespace: str,
        name: Optional[str] = None,
        subresource: Optional[str] = None,
    ) -> str:
        prefix, plural, _ = self._kind(kind)
        parts = [prefix, "namespaces", quote(namespace, safe=""), plural]
        if name is not None:
            parts.append(quote(name, safe=""))
        if subresource:
            parts.append(subresource)
        return "/".join(parts)

    def create(self, kind: str, namespace: str, body: Mapping[str, Any]) -> Any:
        return self._transport("POST", self._path(kind, namespace), body, _JSON)

    def read(self, kind: str, namespace: str, name: str) -> Any:
        return self._transport("GET", self._path(kind, namespace, name), None, _JSON)

    def read_status(self, kind: str, namespace: str, name: str) -> Any:
        path = self._path(kind, namespace, name, "status")
        return self._transport("GET", path, None, _JSON)

    def replace(
        self, kind: str, namespace: str, name: str, body: Mapping[str, Any]
    ) -> Any:
        return self._transport("PUT", self._path(kind, namespace, name), body, _JSON)

    def patch(
        self, kind: str, namespace: str, name: str, body: Mapping[str, Any]
    ) -> Any:
        strategic = self._kind(kind)[2]
        content_type = _STRATEGIC_MERGE if strategic else _MERGE
        path = self._path(kind, namespace, name)
        return self._transport("PATCH", path, body, content_type)

    def delete(self, kind: str, namespace: str, name: str) -> Any:
        path = self._path(kind, namespace, name)
        return self._transport("DELETE", path, None, _JSON)

    def _send(
        self, method: str, path: str, body: Optional[Any], content_type: str
    ) -> Any:
        data = None if body is None else json.dumps(body).encode("utf-8")
        request = urllib.request.Request(
            self.base_url + path,
            data=data,
            method=method,
            headers={"Accept": _JSON},
        )
        if data is not None:
            request.add_header("Content-Type", content_type)
        try:
            with urllib.request.urlopen(request, timeout=self.timeout) as response:
                payload = response.read()
        except urllib.error.HTTPError as exc:
            raise _api_error(exc.code, exc.read()) from exc
        except OSError as exc:
            reason = getattr(exc, "reason", exc)
            raise ApiError(f"request to {request.full_url} failed: {reason}") from exc
        return json.loads(payload) if payload else None


def trait_labels(name: str, instance_name: str) -> Labels:
    """Return the common labels for a trait's Kubernetes objects."""
    labels = {
        "oam.dev/role": "trait",
        "app.kubernetes.io/name": name,
        "oam.dev/instance-name": instance_name,
    }
    return dict(sorted(labels.items()))


@dataclass
class TraitBinding:
    """Attaches a named trait, with its parameter values, to a component."""

    name: str
    parameter_values: Optional[list[ParameterValue]] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "TraitBinding":
        if "name" not in data:
            raise ValueError("trait binding requires a name")
        raw = data.get("parameterValues")
        values = None
        if raw is not None:
            values = [
                ParameterValue(
                    name=item["name"],
                    value=item.get("value"),
                    from_param=item.get("fromParam"),
                )
                for item in raw
            ]
        return cls(name=data["name"], parameter_values=values)


class TraitImplementation(abc.ABC):
    """An implementation of an OAM trait."""

    def exec(self, namespace: str, client: KubeClient, phase: Phase) -> None:
        """Run the handler for ``phase``."""
        handlers = {
            Phase.ADD: self.add,
            Phase.MODIFY: self.modify,
            Phase.DELETE: self.delete,
            Phase.PRE_ADD: self.pre_add,
            Phase.PRE_MODIFY: self.pre_modify,
            Phase.PRE_DELETE: self.pre_delete,
        }
        handlers[phase](namespace, client)

    def _skip_step(self, phase: Phase, namespace: str) -> None:
        logger.debug(
            "%s has no %s step in namespace %s",
            type(self).__name__,
            phase.value,
            namespace,
        )

    @abc.abstractmethod
    def add(self, namespace: str, client: KubeClient) -> None:
        """Create the trait's resources."""

    def modify(self, namespace: str, client: KubeClient) -> None:
        raise TraitError("Trait updates not implemented for this type")

    def delete(self, namespace: str, client: KubeClient) -> None:
        raise TraitError("Trait delete not implemented for this type")

    @classmethod
    def supports_workload_type(cls, name: str) -> bool:
        logger.info("Support %s by default", name)
        return True

    def pre_add(self, namespace: str, client: KubeClient) -> None:
        """Run before the workload is added; nothing by default."""
        self._skip_step(Phase.PRE_ADD, namespace)

    def pre_modify(self, namespace: str, client: KubeClient) -> None:
        """Run before the workload is modified; nothing by default."""
        self._skip_step(Phase.PRE_MODIFY, namespace)

    def pre_delete(self, namespace: str, client: KubeClient) -> None:
        """Run before the workload is deleted; nothing by default."""
        self._skip_step(Phase.PRE_DELETE, namespace)

    def status(self, namespace: str, client: KubeClient) -> Optional[dict[str, str]]:
        """Return resource statuses keyed by ``kind/name``, or None."""
        return None


class Empty(TraitImplementation):
    """A trait that does nothing; used to check the trait machinery itself."""

    @classmethod
    def supports_workload_type(cls, name: str) -> bool:
        return True

    def add(self, namespace: str, client: KubeClient) -> None:
        """Nothing to create."""
        self._skip_step(Phase.ADD, namespace)

    def modify(self, namespace: str, client: KubeClient) -> None:
        """Nothing to update."""
        self._skip_step(Phase.MODIFY, namespace)

    def delete(self, namespace: str, client: KubeClient) -> None:
        """Nothing to remove."""
        self._skip_step(Phase.DELETE, namespace)
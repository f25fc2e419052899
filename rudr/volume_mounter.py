"""Provisioning of persistent volume claims for component volumes."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping, Optional

from rudr.traits import ApiError, KubeClient, OwnerRefs, Phase, TraitImplementation

DEFAULT_VOLUME_SIZE = "200M"

_KIND = "PersistentVolumeClaim"


def _as_text(value: Any) -> str:
    return value if isinstance(value, str) else ""


@dataclass
class VolumeMounter(TraitImplementation):
    """Provisions a volume that a component can mount.

    ``component`` is the component schematic spec in its JSON form.
    """

    name: str
    instance_name: str
    component_name: str
    owner_refs: OwnerRefs = None
    component: Mapping[str, Any] = field(default_factory=dict)
    volume_name: str = ""
    storage_class: str = ""

    @classmethod
    def from_params(
        cls,
        name: str,
        instance_name: str,
        component_name: str,
        params: Mapping[str, Any],
        owner_refs: OwnerRefs,
        component: Mapping[str, Any],
    ) -> "VolumeMounter":
        return cls(
            name=name,
            instance_name=instance_name,
            component_name=component_name,
            owner_refs=owner_refs,
            component=component,
            volume_name=_as_text(params.get("volumeName")),
            storage_class=_as_text(params.get("storageClass")),
        )

    def labels(self) -> dict[str, str]:
        labels = {
            "app": self.name,
            "component-name": self.component_name,
            "instance-name": self.instance_name,
            "trait": "volume-mounter",
        }
        return dict(sorted(labels.items()))

    def find_volume(self) -> Optional[Mapping[str, Any]]:
        """Return the component volume this mounter attaches to, if any."""
        wanted = self.volume_name.encode("ascii", "ignore").lower()
        for container in self.component.get("containers") or []:
            volumes = (container.get("resources") or {}).get("volumes") or []
            for volume in volumes:
                name = volume.get("name", "")
                if name == self.volume_name or (
                    name.isascii()
                    and self.volume_name.isascii()
                    and name.encode("ascii").lower() == wanted
                ):
                    return volume
        return None

    def mount_policy(self, volume: Optional[Mapping[str, Any]]) -> str:
        if volume is None:
            return "ReadWriteOnce"
        if volume.get("accessMode", "RW") == "RO":
            return "ReadOnlyMany"
        if volume.get("sharingPolicy", "Exclusive") == "Shared":
            return "ReadWriteMany"
        return "ReadWriteOnce"

    def to_pvc(self) -> dict[str, Any]:
        """Build the PersistentVolumeClaim for this trait."""
        volume = self.find_volume()
        disk = volume.get("disk") if volume is not None else None
        size = disk.get("required") if disk else None
        metadata: dict[str, Any] = {"name": self.volume_name, "labels": self.labels()}
        if self.owner_refs is not None:
            metadata["ownerReferences"] = list(self.owner_refs)
        return {
            "apiVersion": "v1",
            "kind": _KIND,
            "metadata": metadata,
            "spec": {
                "accessModes": [self.mount_policy(volume)],
                "storageClassName": self.storage_class,
                "resources": {
                    "requests": {"storage": size if size is not None else DEFAULT_VOLUME_SIZE}
                },
            },
        }

    def pre_add(self, namespace: str, client: KubeClient) -> None:
        """Create the claim before the pod so provisioning can start early."""
        client.create(_KIND, namespace, self.to_pvc())

    def add(self, namespace: str, client: KubeClient) -> None:
        """The claim is created in the pre-add phase."""
        self._skip_step(Phase.ADD, namespace)

    def modify(self, namespace: str, client: KubeClient) -> None:
        client.patch(_KIND, namespace, self.volume_name, self.to_pvc())

    def delete(self, namespace: str, client: KubeClient) -> None:
        client.delete(_KIND, namespace, self.volume_name)

    def status(self, namespace: str, client: KubeClient) -> Optional[dict[str, str]]:
        key = f"persistentvolumeclaim/{self.volume_name}"
        try:
            response = client.read_status(_KIND, namespace, self.volume_name)
        except ApiError as exc:
            return {key: str(exc)}
        status = response.get("status") if isinstance(response, dict) else None
        phase = status.get("phase") if isinstance(status, dict) else None
        return {key: phase if phase is not None else "unknown phase"}
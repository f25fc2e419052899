"""Loading a component's traits and running their lifecycle phases."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional

from rudr.autoscaler import Autoscaler
from rudr.ingress import Ingress
from rudr.manual_scaler import ManualScaler
from rudr.parameter import ParameterValue, resolve_values
from rudr.traits import (
    AUTOSCALER,
    EMPTY,
    INGRESS,
    MANUAL_SCALER,
    VOLUME_MOUNTER,
    Empty,
    KubeClient,
    OwnerRefs,
    Phase,
    TraitBinding,
    TraitError,
    TraitImplementation,
)
from rudr.volume_mounter import VolumeMounter

logger = logging.getLogger(__name__)


@dataclass
class TraitManager:
    """Maps one component configuration to its traits and drives their lifecycle."""

    config_name: str
    instance_name: str
    component_name: str
    workload_type: str = ""
    bindings: Optional[list[TraitBinding]] = None
    parent_params: list[ParameterValue] = field(default_factory=list)
    owner_refs: OwnerRefs = None
    component_schematic: Mapping[str, Any] = field(default_factory=dict)
    traits: list[TraitImplementation] = field(default_factory=list)

    def load_traits(self) -> None:
        """Build every bound trait; raise on the first that cannot be built."""
        self.traits = [self._load_trait(b) for b in self.bindings or []]

    def _load_trait(self, binding: TraitBinding) -> TraitImplementation:
        values = resolve_values(binding.parameter_values or [], self.parent_params)
        logger.debug("Trait binding params: %r", binding.parameter_values)
        common = (self.config_name, self.instance_name, self.component_name, values)
        if binding.name == INGRESS:
            return Ingress.from_params(*common, self.owner_refs)
        if binding.name == VOLUME_MOUNTER:
            return VolumeMounter.from_params(
                *common, self.owner_refs, self.component_schematic
            )
        if binding.name == AUTOSCALER:
            return Autoscaler.from_params(*common, self.owner_refs)
        if binding.name == MANUAL_SCALER:
            return ManualScaler.from_params(*common, self.owner_refs, self.workload_type)
        if binding.name == EMPTY:
            return Empty()
        raise TraitError(f"unknown trait {binding.name}")

    def exec(self, namespace: str, client: KubeClient, phase: Phase) -> None:
        """Run ``phase`` on every trait; failures are logged, not raised."""
        for trait in self.traits:
            try:
                trait.exec(namespace, client, phase)
            except Exception as exc:  # a failing trait must not stop the others
                logger.error(
                    "Trait phase %s failed for %s: %s", phase, self.config_name, exc
                )

    def status(self, namespace: str, client: KubeClient) -> Optional[dict[str, str]]:
        """Merge the statuses of all traits, or None when there are none."""
        merged: dict[str, str] = {}
        for trait in self.traits:
            merged.update(trait.status(namespace, client) or {})
        return dict(sorted(merged.items())) or None
"""Workload type names and the interface workload types implement."""

from __future__ import annotations

import abc
import logging
from typing import Any, ClassVar, Iterable

logger = logging.getLogger(__name__)

OAM_API_VERSION = "core.oam.dev/v1alpha1"

SERVER_NAME = "core.oam.dev/v1alpha1.Server"
SINGLETON_SERVER_NAME = "core.oam.dev/v1alpha1.SingletonServer"
SINGLETON_TASK_NAME = "core.oam.dev/v1alpha1.SingletonTask"
TASK_NAME = "core.oam.dev/v1alpha1.Task"
SINGLETON_WORKER = "core.oam.dev/v1alpha1.SingletonWorker"
WORKER_NAME = "core.oam.dev/v1alpha1.Worker"

ParamMap = dict[str, Any]


class WorkloadError(Exception):
    """Raised when a workload operation fails or is unsupported."""


class KubeName(abc.ABC):
    """Something that repeatably produces its own Kubernetes name."""

    @abc.abstractmethod
    def kube_name(self) -> str:
        """Return the Kubernetes name; the same for a given release."""


class WorkloadType(abc.ABC):
    """A workload type that can add, modify and delete itself.

    Operations named in ``unsupported_operations`` raise ``WorkloadError``
    unless a subclass overrides them.
    """

    unsupported_operations: ClassVar[frozenset[str]] = frozenset({"modify", "status"})

    def _ensure_supported(self, operation: str) -> None:
        if operation in self.unsupported_operations:
            raise WorkloadError("Not implemented")

    def _problems(self) -> Iterable[str]:
        """Yield configuration problems; subclasses add their own checks."""
        return ()

    @abc.abstractmethod
    def add(self) -> None:
        """Install the workload into the cluster."""

    def modify(self) -> None:
        """Upgrade an existing workload."""
        self._ensure_supported("modify")

    def delete(self) -> None:
        """Delete the workload; owner references usually handle this."""
        self._ensure_supported("delete")
        logger.info("Workload deleted")

    def status(self) -> dict[str, str]:
        """Return the recorded status of the workload."""
        self._ensure_supported("status")
        return {}

    def validate(self) -> None:
        """Check the configuration before adding or modifying."""
        problems = list(self._problems())
        if problems:
            raise WorkloadError("; ".join(problems))
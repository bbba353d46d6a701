from __future__ import annotations

import logging
from typing import List, Tuple

from ..config import SetupConfig
from ..lib import systemd
from ..lib.host import Host
from ..lib.manifests import Manifest
from ..operation import BatchOperation, TargetState

logger = logging.getLogger(__name__)


class DisableUnitsOperation(BatchOperation):
    """Disable and stop a list of units, best effort.

    Units the service manager does not know are not applicable. Units it
    knows but refuses to disable are reported as warnings.
    """

    units: List[str] = []

    def targets(self, config: SetupConfig) -> List[str]:
        return list(self.units)

    def target_state(self, host: Host, target: str) -> TargetState:
        if not systemd.unit_exists(host, target):
            return TargetState.ABSENT
        if systemd.is_enabled(host, target):
            return TargetState.PENDING
        return TargetState.SATISFIED

    def reconcile_target(self, host: Host, target: str) -> Tuple[bool, str]:
        return systemd.disable_now(host, target)


class ServiceOptimizationOperation(DisableUnitsOperation):
    name = "service-optimization"
    description = "Disable services the device does not need"

    def __init__(self, manifest: Manifest) -> None:
        self.units = manifest.disabled_services

    def guard(self, config: SetupConfig) -> bool:
        return config.optimize_services and bool(self.units)

from __future__ import annotations

from ..config import SetupConfig
from ..lib.manifests import Manifest
from .op_30_service_optimization import DisableUnitsOperation


class CloudCleanupOperation(DisableUnitsOperation):
    name = "cloud-cleanup"
    description = "Disable cloud-init units left over from the image"

    def __init__(self, manifest: Manifest) -> None:
        self.units = manifest.cloud_units

    def guard(self, config: SetupConfig) -> bool:
        return config.cloud_cleanup and bool(self.units)

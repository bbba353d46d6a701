from __future__ import annotations

import logging
from typing import List, Optional

from ..config import SetupConfig
from ..lib.host import Host
from ..lib.manifests import Manifest
from ..lib.pkg import apt_install, apt_update, missing_packages
from ..operation import Operation

logger = logging.getLogger(__name__)


class FirmwareToolsOperation(Operation):
    name = "firmware-tools"
    description = "Install firmware and build tooling"

    def __init__(self, manifest: Manifest) -> None:
        self.packages: List[str] = manifest.firmware_packages

    def guard(self, config: SetupConfig) -> bool:
        return config.install_firmware_tools and bool(self.packages)

    def probe(self, config: SetupConfig, host: Host) -> bool:
        return not missing_packages(host, self.packages)

    def apply(self, config: SetupConfig, host: Host) -> Optional[str]:
        missing = missing_packages(host, self.packages)
        apt_update(host)
        apt_install(host, missing)
        logger.info("Installed packages: %s", ", ".join(missing))
        return f"installed {', '.join(missing)}"

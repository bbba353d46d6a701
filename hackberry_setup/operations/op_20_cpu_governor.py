from __future__ import annotations

import logging
from typing import Optional

from ..config import SetupConfig
from ..lib import systemd
from ..lib.files import read_text, write_if_changed
from ..lib.host import Host
from ..lib.manifests import Manifest
from ..lib.systemd import ConfiguredWith, UnitSetting
from ..operation import Operation

logger = logging.getLogger(__name__)

GOVERNOR_VARIABLE = "GOVERNOR"

UNIT_TEMPLATE = """\
[Unit]
Description=Set CPU frequency scaling governor
After=multi-user.target

[Service]
Type=oneshot
Environment=GOVERNOR={governor}
ExecStart=/bin/sh -c 'for f in /sys/devices/system/cpu/cpu[0-9]*/cpufreq/scaling_governor; do echo "$GOVERNOR" > "$f"; done'
RemainAfterExit=yes

[Install]
WantedBy=multi-user.target
"""


def render_unit(governor: str) -> str:
    return UNIT_TEMPLATE.format(governor=governor)


class CpuGovernorOperation(Operation):
    """Keep a oneshot unit that applies the requested governor at boot."""

    name = "cpu-governor"
    description = "Persist CPU frequency governor"

    def __init__(self, manifest: Manifest) -> None:
        section = manifest.governor
        self.unit = str(section.get("unit") or "cpu-governor.service")
        self.unit_path = str(section.get("unit_path") or f"/etc/systemd/system/{self.unit}")

    def guard(self, config: SetupConfig) -> bool:
        return config.set_governor

    def current(self, host: Host) -> UnitSetting:
        return systemd.environment_value(read_text(host.path(self.unit_path)), GOVERNOR_VARIABLE)

    def probe(self, config: SetupConfig, host: Host) -> bool:
        setting = self.current(host)
        if setting != ConfiguredWith(config.cpu_governor):
            logger.debug("Governor unit state: %s", setting)
            return False
        return systemd.is_enabled(host, self.unit)

    def apply(self, config: SetupConfig, host: Host) -> Optional[str]:
        previous = self.current(host)
        changed = write_if_changed(host.path(self.unit_path), render_unit(config.cpu_governor))
        systemd.daemon_reload(host)
        systemd.enable(host, self.unit)
        systemd.restart(host, self.unit)

        if isinstance(previous, ConfiguredWith) and changed:
            return f"governor {previous.value} -> {config.cpu_governor}"
        if changed:
            return f"governor set to {config.cpu_governor}"
        return f"enabled {self.unit}"

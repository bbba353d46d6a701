from __future__ import annotations

from typing import Optional

from ..config import SetupConfig
from ..errors import Unactionable
from ..lib.command import CommandNotFound
from ..lib.host import Host
from ..operation import Operation


class WifiRadioOperation(Operation):
    name = "wifi-radio"
    description = "Turn the WiFi radio on"

    def guard(self, config: SetupConfig) -> bool:
        return config.enable_wifi

    def probe(self, config: SetupConfig, host: Host) -> bool:
        host.require_live("Radio control")
        try:
            r = host.run(["nmcli", "radio", "wifi"])
        except CommandNotFound as e:
            raise Unactionable("nmcli not installed") from e
        return r.stdout.strip() == "enabled"

    def apply(self, config: SetupConfig, host: Host) -> Optional[str]:
        host.run(["nmcli", "radio", "wifi", "on"])
        return "wifi radio on"

from __future__ import annotations

from typing import List, Optional

from ..config import SetupConfig
from ..errors import Unactionable
from ..lib.command import CommandNotFound
from ..lib.host import Host
from ..operation import Operation


def bluetooth_soft_states(host: Host) -> List[str]:
    """Soft-block state ("blocked"/"unblocked") of every bluetooth rfkill device."""

    host.require_live("rfkill")
    try:
        r = host.run(["rfkill", "-n", "-o", "TYPE,SOFT"])
    except CommandNotFound as e:
        raise Unactionable("rfkill not installed") from e
    states = []
    for line in r.stdout.splitlines():
        fields = line.split()
        if len(fields) >= 2 and fields[0] == "bluetooth":
            states.append(fields[1])
    return states


class BluetoothRfkillOperation(Operation):
    """Block or unblock bluetooth to match the configuration."""

    name = "bluetooth-rfkill"
    description = "Apply bluetooth rfkill state"

    def probe(self, config: SetupConfig, host: Host) -> bool:
        states = bluetooth_soft_states(host)
        if not states:
            raise Unactionable("no bluetooth device")
        want = "unblocked" if config.enable_bluetooth else "blocked"
        return all(s == want for s in states)

    def apply(self, config: SetupConfig, host: Host) -> Optional[str]:
        action = "unblock" if config.enable_bluetooth else "block"
        host.run(["rfkill", action, "bluetooth"])
        return f"bluetooth {action}ed"

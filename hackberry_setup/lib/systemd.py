from __future__ import annotations

import logging
import shlex
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple, Union

from .command import CommandError
from .host import Host

logger = logging.getLogger(__name__)

ENABLED_STATES = {"enabled", "enabled-runtime"}


def unit_exists(host: Host, unit: str) -> bool:
    """Return True if the service manager knows ``unit``.

    Raises CommandError when the manager itself fails to answer.
    """

    r = host.run(["systemctl", "list-unit-files", "--no-legend", unit], check=False)
    if r.returncode not in (0, 1):
        raise CommandError(r.argv, r.returncode, r.stderr)
    return any(line.split()[:1] == [unit] for line in r.stdout.splitlines() if line.strip())


def unit_state(host: Host, unit: str) -> str:
    r = host.run(["systemctl", "is-enabled", unit], check=False)
    return (r.stdout or "").strip() or "unknown"


def is_enabled(host: Host, unit: str) -> bool:
    return unit_state(host, unit) in ENABLED_STATES


def daemon_reload(host: Host) -> None:
    host.run(["systemctl", "daemon-reload"])


def enable(host: Host, unit: str) -> None:
    host.run(["systemctl", "enable", unit])


def restart(host: Host, unit: str) -> None:
    host.run(["systemctl", "restart", unit])


def disable_now(host: Host, unit: str) -> Tuple[bool, str]:
    """Disable and stop ``unit``; returns (ok, stderr)."""

    r = host.run(["systemctl", "disable", "--now", unit], check=False)
    return r.ok, (r.stderr or "").strip()


# Unit file parsing


@dataclass(frozen=True)
class NotConfigured:
    pass


@dataclass(frozen=True)
class ConfiguredWith:
    value: str


UnitSetting = Union[NotConfigured, ConfiguredWith]


def parse_unit(text: str) -> Dict[str, List[Tuple[str, str]]]:
    """Parse a unit file into ``{section: [(key, value), ...]}``.

    Keys may repeat, so values are kept as an ordered list. Comment lines and
    backslash continuations are handled; quoting inside values is left alone.
    """

    sections: Dict[str, List[Tuple[str, str]]] = {}
    current: Optional[str] = None
    pending = ""
    for raw in text.splitlines():
        line = pending + raw.strip()
        pending = ""
        if line.endswith("\\"):
            pending = line[:-1].rstrip() + " "
            continue
        if not line or line[0] in "#;":
            continue
        if line.startswith("[") and line.endswith("]"):
            current = line[1:-1].strip()
            sections.setdefault(current, [])
            continue
        if current is None or "=" not in line:
            continue
        key, _, value = line.partition("=")
        sections[current].append((key.strip(), value.strip()))
    return sections


def environment_value(text: Optional[str], variable: str, *, section: str = "Service") -> UnitSetting:
    """Extract ``variable`` from ``Environment=`` lines of a unit.

    The last assignment wins, matching systemd. Missing text, section or
    variable all mean NotConfigured, and so does a line with broken quoting.
    """

    if not text:
        return NotConfigured()
    found: Optional[str] = None
    for key, value in parse_unit(text).get(section, []):
        if key != "Environment":
            continue
        try:
            assignments = shlex.split(value)
        except ValueError as e:
            logger.warning("Ignoring unparsable Environment=%s: %s", value, e)
            continue
        for assignment in assignments:
            name, sep, val = assignment.partition("=")
            if sep and name == variable:
                found = val
    if found is None or not found:
        return NotConfigured()
    return ConfiguredWith(found)

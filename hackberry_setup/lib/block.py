from __future__ import annotations

import logging
from typing import Optional

from .command import CmdResult, CommandNotFound
from .host import Host

logger = logging.getLogger(__name__)


def root_uuid(host: Host) -> Optional[str]:
    """Return the filesystem UUID of the host's root mount, or None.

    Asks findmnt first, then blkid on the mount source.
    """

    try:
        r = host.run(["findmnt", "-n", "-o", "UUID", host.root], check=False)
        uuid = (r.stdout or "").strip()
        if r.ok and uuid:
            return uuid

        r = host.run(["findmnt", "-n", "-o", "SOURCE", host.root], check=False)
        source = (r.stdout or "").strip()
        if not r.ok or not source:
            logger.warning("Unable to determine root mount source for %s", host.root)
            return None

        r = host.run(["blkid", "-s", "UUID", "-o", "value", source], check=False)
    except CommandNotFound as e:
        logger.warning("Unable to resolve root UUID: %s", e)
        return None

    uuid = (r.stdout or "").strip()
    return uuid if r.ok and uuid else None


def remount(host: Host, options: str, *, check: bool = True) -> CmdResult:
    return host.run(["mount", "-o", f"remount,{options}", host.root], check=check)

from __future__ import annotations

import logging
from typing import Optional

from ..config import SetupConfig
from ..errors import Unactionable
from ..lib.block import remount, root_uuid
from ..lib.command import CommandError
from ..lib.files import backed_up, read_text, write_text
from ..lib.fstab import FstabEntry, add_option_for_uuid, entry_for_uuid
from ..lib.host import Host
from ..lib.manifests import Manifest
from ..operation import Operation

logger = logging.getLogger(__name__)


class FstabNoatimeOperation(Operation):
    """Add a mount option to the root filesystem's fstab row.

    The row is found by the root filesystem UUID, never by text search. The
    new options are tried with a live remount before they are kept; if the
    remount fails the previous fstab is restored and the original options are
    remounted.
    """

    name = "fstab-noatime"
    description = "Mount the root filesystem with noatime"

    def __init__(self, manifest: Manifest) -> None:
        section = manifest.fstab
        self.fstab_path = str(section.get("path") or "/etc/fstab")
        self.option = str(section.get("option") or "noatime")

    def guard(self, config: SetupConfig) -> bool:
        return config.fstab_noatime

    def _root_entry(self, host: Host) -> tuple[str, FstabEntry]:
        host.require_live("Remounting the root filesystem")
        uuid = root_uuid(host)
        if not uuid:
            raise Unactionable("unable to resolve root filesystem UUID")

        path = host.path(self.fstab_path)
        if not path.exists():
            raise Unactionable(f"{self.fstab_path} does not exist")

        entry = entry_for_uuid(read_text(path) or "", uuid)
        if entry is None:
            raise Unactionable(f"no {self.fstab_path} entry for UUID={uuid}")
        return uuid, entry

    def probe(self, config: SetupConfig, host: Host) -> bool:
        _, entry = self._root_entry(host)
        return entry.has_option(self.option)

    def apply(self, config: SetupConfig, host: Host) -> Optional[str]:
        uuid, entry = self._root_entry(host)
        path = host.path(self.fstab_path)
        updated = entry.with_option(self.option)

        try:
            with backed_up(path):
                write_text(path, add_option_for_uuid(read_text(path) or "", uuid, self.option))
                remount(host, updated.options)
        except CommandError:
            # backed_up() has already put the original fstab back
            logger.error("Remount with %s failed; restored %s", updated.options, self.fstab_path)
            r = remount(host, entry.options, check=False)
            if not r.ok:
                logger.error("Compensating remount with %s failed: %s", entry.options, r.stderr.strip())
            raise

        return f"UUID={uuid} options {entry.options} -> {updated.options}"

from __future__ import annotations

import logging
import tempfile
from pathlib import Path
from typing import List, Optional

from ..config import SetupConfig
from ..errors import VerificationError
from ..lib.files import copy_file
from ..lib.host import Host
from ..lib.manifests import Manifest
from ..operation import Operation

logger = logging.getLogger(__name__)


class DeviceTreeOverlayOperation(Operation):
    """Build the panel/keyboard device-tree overlay from source and install it.

    Sub-steps run in order in a scratch directory; the first failure aborts
    the rest. Nothing on the host changes until the final copy. The build
    itself runs on the running system even when the root is an image.
    """

    name = "device-tree-overlay"
    description = "Build and install the device-tree overlay"

    def __init__(self, manifest: Manifest) -> None:
        section = manifest.device_tree
        self.repo = str(section.get("repo") or "")
        self.revision = str(section.get("revision") or "main")
        self.make_args: List[str] = [str(a) for a in (section.get("make_args") or [])]
        self.build_output = str(section.get("build_output") or "")
        self.artifact = str(section.get("artifact") or "")

    def guard(self, config: SetupConfig) -> bool:
        return config.build_device_tree and bool(self.repo and self.artifact and self.build_output)

    def probe(self, config: SetupConfig, host: Host) -> bool:
        return host.path(self.artifact).exists()

    def apply(self, config: SetupConfig, host: Host) -> Optional[str]:
        with tempfile.TemporaryDirectory(prefix="hackberry-dt-") as scratch:
            src = Path(scratch) / "src"
            host.run(["git", "clone", self.repo, str(src)], in_root=False)
            host.run(["git", "-C", str(src), "checkout", self.revision], in_root=False)
            host.run(["make", "-C", str(src), *self.make_args], in_root=False)
            built = src / self.build_output
            if not built.is_file():
                raise VerificationError(f"build did not produce {self.build_output}")
            copy_file(built, host.path(self.artifact))
        return f"installed {self.artifact} ({self.revision})"

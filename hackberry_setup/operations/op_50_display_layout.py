from __future__ import annotations

from typing import Optional

from ..config import SetupConfig
from ..lib.files import read_text, write_if_changed
from ..lib.host import Host
from ..lib.manifests import Manifest
from ..operation import Operation

XORG_TEMPLATE = """\
# Managed by hackberry-setup
Section "Monitor"
    Identifier "{output}"
    Option "Rotate" "{rotate}"
EndSection

Section "InputClass"
    Identifier "hackberry touchscreen rotation"
    MatchIsTouchscreen "on"
    Option "TransformationMatrix" "{matrix}"
EndSection
"""

# libinput calibration matrices for each xrandr rotation
_MATRICES = {
    "normal": "1 0 0 0 1 0 0 0 1",
    "left": "0 -1 1 1 0 0 0 0 1",
    "right": "0 1 0 -1 0 1 0 0 1",
    "inverted": "-1 0 1 0 -1 1 0 0 1",
}


class DisplayLayoutOperation(Operation):
    name = "display-layout"
    description = "Rotate the built-in panel and its touch input"

    def __init__(self, manifest: Manifest) -> None:
        section = manifest.display_layout
        self.path = str(section.get("path") or "/etc/X11/xorg.conf.d/90-hackberry-display.conf")
        self.output = str(section.get("output") or "DSI-1")
        self.rotate = str(section.get("rotate") or "normal")
        if self.rotate not in _MATRICES:
            raise ValueError(f"display_layout.rotate must be one of {', '.join(_MATRICES)}")

    def guard(self, config: SetupConfig) -> bool:
        return config.display_layout

    def render(self) -> str:
        return XORG_TEMPLATE.format(output=self.output, rotate=self.rotate, matrix=_MATRICES[self.rotate])

    def probe(self, config: SetupConfig, host: Host) -> bool:
        return read_text(host.path(self.path)) == self.render()

    def apply(self, config: SetupConfig, host: Host) -> Optional[str]:
        write_if_changed(host.path(self.path), self.render())
        return f"{self.output} rotated {self.rotate}"

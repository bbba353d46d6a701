from __future__ import annotations

import configparser
import logging
from typing import Optional

from ..config import SetupConfig
from ..lib import systemd
from ..lib.files import read_text, write_if_changed
from ..lib.host import Host
from ..lib.manifests import Manifest
from ..lib.pkg import apt_install, apt_update, is_installed
from ..operation import Operation

logger = logging.getLogger(__name__)

AUTOLOGIN_SECTION = "Seat:*"

AUTOLOGIN_TEMPLATE = """\
# Managed by hackberry-setup
[Seat:*]
autologin-user={user}
autologin-user-timeout=0
"""


class DisplayManagerOperation(Operation):
    name = "display-manager"
    description = "Install and enable the display manager"

    def __init__(self, manifest: Manifest) -> None:
        section = manifest.display_manager
        self.package = str(section.get("package") or "lightdm")
        self.service = str(section.get("service") or f"{self.package}.service")

    def guard(self, config: SetupConfig) -> bool:
        return config.install_display_manager

    def probe(self, config: SetupConfig, host: Host) -> bool:
        return is_installed(host, self.package) and systemd.is_enabled(host, self.service)

    def apply(self, config: SetupConfig, host: Host) -> Optional[str]:
        if not is_installed(host, self.package):
            apt_update(host)
            apt_install(host, [self.package], with_recommends=True)
        systemd.enable(host, self.service)
        return f"{self.package} enabled"


def configured_autologin_user(text: Optional[str]) -> Optional[str]:
    if not text:
        return None
    parser = configparser.ConfigParser(interpolation=None)
    try:
        parser.read_string(text)
    except configparser.Error as e:
        logger.warning("Unreadable greeter config: %s", e)
        return None
    value = parser.get(AUTOLOGIN_SECTION, "autologin-user", fallback="").strip()
    return value or None


class AutoLoginOperation(Operation):
    name = "auto-login"
    description = "Log the configured user in automatically"

    def __init__(self, manifest: Manifest) -> None:
        section = manifest.display_manager
        self.path = str(
            section.get("autologin_path") or "/etc/lightdm/lightdm.conf.d/50-hackberry-autologin.conf"
        )

    def guard(self, config: SetupConfig) -> bool:
        return bool(config.auto_login_user)

    def probe(self, config: SetupConfig, host: Host) -> bool:
        return configured_autologin_user(read_text(host.path(self.path))) == config.auto_login_user

    def apply(self, config: SetupConfig, host: Host) -> Optional[str]:
        user = config.auto_login_user
        if not host.run(["id", "-u", str(user)], check=False).ok:
            raise RuntimeError(f"User '{user}' does not exist")
        write_if_changed(host.path(self.path), AUTOLOGIN_TEMPLATE.format(user=user))
        return f"auto-login for {user}"

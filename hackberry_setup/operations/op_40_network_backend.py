from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import yaml

from ..config import SetupConfig
from ..lib import systemd
from ..lib.files import write_if_changed
from ..lib.host import Host
from ..lib.manifests import Manifest, dump_yaml, load_yaml
from ..operation import Operation

logger = logging.getLogger(__name__)


class NetworkBackendOperation(Operation):
    """Hand network configuration to NetworkManager through netplan."""

    name = "network-backend"
    description = "Use NetworkManager as the netplan renderer"

    def __init__(self, manifest: Manifest) -> None:
        section = manifest.network
        self.path = str(section.get("path") or "/etc/netplan/01-network-manager-all.yaml")
        self.renderer = str(section.get("renderer") or "NetworkManager")
        self.service = str(section.get("service") or "NetworkManager.service")

    def guard(self, config: SetupConfig) -> bool:
        return config.network_manager

    def desired(self) -> Dict[str, Any]:
        return {"network": {"version": 2, "renderer": self.renderer}}

    def current_renderer(self, host: Host) -> Optional[str]:
        p = host.path(self.path)
        if not p.exists():
            return None
        try:
            data = load_yaml(p)
        except (yaml.YAMLError, ValueError) as e:
            logger.warning("Unreadable netplan file %s: %s", str(p), e)
            return None
        network = data.get("network") or {}
        renderer = network.get("renderer") if isinstance(network, dict) else None
        return str(renderer) if renderer else None

    def probe(self, config: SetupConfig, host: Host) -> bool:
        if self.current_renderer(host) != self.renderer:
            return False
        return systemd.is_enabled(host, self.service)

    def apply(self, config: SetupConfig, host: Host) -> Optional[str]:
        write_if_changed(host.path(self.path), dump_yaml(self.desired()), mode=0o600)
        host.run(["netplan", "generate"])
        systemd.enable(host, self.service)
        return f"renderer {self.renderer}"

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

DEFAULT_MANIFEST = Path(__file__).resolve().parents[1] / "manifests" / "default.yaml"


def load_yaml(path: Path) -> Dict[str, Any]:
    """Load a YAML mapping; an empty document yields an empty dict."""

    data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    if not isinstance(data, dict):
        raise ValueError(f"YAML document must be a mapping/dict: {path}")
    return data


def dump_yaml(data: Dict[str, Any]) -> str:
    return yaml.safe_dump(data, sort_keys=False, default_flow_style=False)


@dataclass(frozen=True)
class Manifest:
    """Static operation payloads: package names, unit lists, paths, templates."""

    raw: Dict[str, Any]

    def _section(self, name: str) -> Dict[str, Any]:
        return dict(self.raw.get(name) or {})

    @property
    def firmware_packages(self) -> List[str]:
        return [str(p) for p in (self._section("firmware_tools").get("packages") or [])]

    @property
    def governor(self) -> Dict[str, Any]:
        return self._section("cpu_governor")

    @property
    def fstab(self) -> Dict[str, Any]:
        return self._section("fstab")

    @property
    def disabled_services(self) -> List[str]:
        return [str(u) for u in (self._section("service_optimization").get("units") or [])]

    @property
    def cloud_units(self) -> List[str]:
        return [str(u) for u in (self._section("cloud_cleanup").get("units") or [])]

    @property
    def network(self) -> Dict[str, Any]:
        return self._section("network_backend")

    @property
    def display_layout(self) -> Dict[str, Any]:
        return self._section("display_layout")

    @property
    def device_tree(self) -> Dict[str, Any]:
        return self._section("device_tree")

    @property
    def display_manager(self) -> Dict[str, Any]:
        return self._section("display_manager")


def load_manifest(path: Optional[str] = None) -> Manifest:
    p = Path(path) if path else DEFAULT_MANIFEST
    if not p.exists():
        raise FileNotFoundError(str(p))
    if p.suffix.lower() not in {".yaml", ".yml"}:
        raise ValueError("manifest must be YAML")
    return Manifest(raw=load_yaml(p))

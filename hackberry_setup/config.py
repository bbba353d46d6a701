from __future__ import annotations

import os
import re
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml

from .errors import ResolutionError
from .lib.manifests import load_yaml

GOVERNORS = ("powersave", "performance", "ondemand", "conservative", "schedutil")

_USERNAME_RE = re.compile(r"^[a-zA-Z0-9_-]+$")


@dataclass(frozen=True)
class SetupConfig:
    """Resolved invocation options, built once and never mutated."""

    auto_login_user: Optional[str] = None
    cpu_governor: str = "powersave"
    set_governor: bool = True
    install_firmware_tools: bool = True
    fstab_noatime: bool = True
    optimize_services: bool = True
    cloud_cleanup: bool = True
    network_manager: bool = True
    display_layout: bool = True
    build_device_tree: bool = True
    install_display_manager: bool = False
    enable_wifi: bool = False
    enable_bluetooth: bool = True
    verbose: bool = False
    dry_run: bool = False

    def as_dict(self) -> Dict[str, Any]:
        return asdict(self)


OPTION_NAMES = tuple(f.name for f in fields(SetupConfig))
BOOL_OPTIONS = tuple(n for n in OPTION_NAMES if n not in {"auto_login_user", "cpu_governor"})


def _normalize_key(key: Any) -> str:
    return str(key).strip().replace("-", "_")


def _validate(values: Dict[str, Any]) -> Dict[str, Any]:
    for name in BOOL_OPTIONS:
        if name in values and not isinstance(values[name], bool):
            raise ResolutionError(f"Option {name} must be true or false, got {values[name]!r}")

    if "cpu_governor" in values:
        governor = str(values["cpu_governor"]).strip()
        if governor not in GOVERNORS:
            raise ResolutionError(
                f"Invalid CPU governor: {governor!r} (valid options: {', '.join(GOVERNORS)})"
            )
        values["cpu_governor"] = governor

    if "auto_login_user" in values:
        user = values["auto_login_user"]
        user = str(user).strip() if user is not None else ""
        if user and not _USERNAME_RE.match(user):
            raise ResolutionError(f"Invalid username format: {user!r}")
        values["auto_login_user"] = user or None

    return values


def resolve_config(
    overrides: Optional[Mapping[str, Any]] = None,
    file_values: Optional[Mapping[str, Any]] = None,
) -> SetupConfig:
    """Merge defaults < config file < command line into a SetupConfig.

    ``None`` in ``overrides`` means "not given on the command line".
    """

    merged: Dict[str, Any] = {}
    for source in (file_values or {}, overrides or {}):
        for raw_key, value in source.items():
            key = _normalize_key(raw_key)
            if key not in OPTION_NAMES:
                raise ResolutionError(f"Unknown option: {raw_key}")
            if value is None and source is overrides:
                continue
            merged[key] = value

    return SetupConfig(**_validate(merged))


def load_config_file(path: str) -> Dict[str, Any]:
    p = Path(path)
    if not p.exists():
        raise ResolutionError(f"Config file not found: {path}")
    if p.suffix.lower() not in {".yaml", ".yml"}:
        raise ResolutionError("Config file must be YAML")
    try:
        return load_yaml(p)
    except (yaml.YAMLError, ValueError) as e:
        raise ResolutionError(f"Unable to read config file {path}: {e}") from e


def check_privileges(config: SetupConfig) -> None:
    """Any real run needs root, including one that chroots into an image."""

    if config.dry_run:
        return
    if os.geteuid() != 0:
        raise ResolutionError("This program must be run as root (or use --dry-run)")

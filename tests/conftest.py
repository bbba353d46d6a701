from __future__ import annotations

from pathlib import Path
from typing import Dict, List, Optional, Sequence, Set, Tuple

import pytest

from hackberry_setup.config import SetupConfig
from hackberry_setup.lib.command import CmdResult, CommandError, CommandNotFound
from hackberry_setup.lib.host import Host
from hackberry_setup.lib.manifests import Manifest, load_manifest

ROOT_UUID = "1111-2222"


class FakeSystem:
    """Scripted stand-in for the commands operations run.

    State lives in plain attributes so tests can arrange and inspect it.
    Files are real, under ``root``.
    """

    def __init__(self, root: Path) -> None:
        self.root = root
        self.root.mkdir(parents=True, exist_ok=True)
        self.calls: List[List[str]] = []
        self.installed: Set[str] = set()
        self.units: Dict[str, str] = {}
        self.refuse_disable: Set[str] = set()
        self.sticky_units: Set[str] = set()
        self.manager_down = False
        self.root_uuid: Optional[str] = ROOT_UUID
        self.root_source: Optional[str] = "/dev/mmcblk0p2"
        self.blkid_uuid: Optional[str] = None
        self.remount_fails = False
        self.mounts: List[str] = []
        self.missing_commands: Set[str] = set()
        self.failing: List[Tuple[str, ...]] = []
        self.users: Set[str] = {"kali"}
        self.wifi = "disabled"
        self.bluetooth: List[str] = ["unblocked"]
        self.build_output = "overlays/hackberrypi-q20.dtbo"

    # helpers for tests

    def path(self, rel: str) -> Path:
        return self.root / rel.lstrip("/")

    def write(self, rel: str, text: str) -> Path:
        p = self.path(rel)
        p.parent.mkdir(parents=True, exist_ok=True)
        p.write_text(text, encoding="utf-8")
        return p

    def files(self) -> Dict[str, bytes]:
        return {
            str(p.relative_to(self.root)): p.read_bytes()
            for p in sorted(self.root.rglob("*"))
            if p.is_file()
        }

    def snapshot(self):
        return (
            self.files(),
            dict(self.units),
            sorted(self.installed),
            self.wifi,
            list(self.bluetooth),
            list(self.mounts),
        )

    def ran(self, *prefix: str) -> bool:
        return any(c[: len(prefix)] == list(prefix) for c in self.calls)

    # runner protocol

    def __call__(self, argv: Sequence[str], *, check: bool = True, cwd: Optional[str] = None, **_kw) -> CmdResult:
        self.calls.append(list(argv))
        argv = list(argv[2:]) if argv[0] == "chroot" else list(argv)
        if argv[0] in self.missing_commands:
            raise CommandNotFound(argv)

        if any(argv[: len(p)] == list(p) for p in self.failing):
            rc, out, err = 1, "", "scripted failure"
        else:
            handler = getattr(self, "_cmd_" + argv[0].replace("-", "_"), None)
            rc, out, err = handler(argv[1:]) if handler else (0, "", "")

        if check and rc != 0:
            raise CommandError(argv, rc, err)
        return CmdResult(argv=argv, returncode=rc, stdout=out, stderr=err)

    def _cmd_dpkg_query(self, args):
        pkg = args[-1]
        if pkg in self.installed:
            return 0, "install ok installed", ""
        return 1, "", f"dpkg-query: no packages found matching {pkg}"

    def _cmd_apt_get(self, args):
        if args[0] == "install":
            self.installed.update(a for a in args[1:] if not a.startswith("-"))
        return 0, "", ""

    def _cmd_systemctl(self, args):
        if self.manager_down:
            return (1 if args[0] == "is-enabled" else 70), "", "Failed to connect to bus"
        verb, unit = args[0], args[-1]
        if verb == "list-unit-files":
            if unit in self.units:
                return 0, f"{unit} {self.units[unit]} enabled\n", ""
            return 1, "", ""
        if verb == "is-enabled":
            state = self.units.get(unit)
            if state is None:
                return 1, "", f"Failed to get unit file state for {unit}"
            return (0 if state == "enabled" else 1), state + "\n", ""
        if verb == "enable":
            if unit not in self.sticky_units:
                self.units[unit] = "enabled"
            return 0, "", ""
        if verb == "disable":
            if unit in self.refuse_disable:
                return 1, "", "Access denied"
            self.units[unit] = "disabled"
            return 0, "", ""
        return 0, "", ""

    def _cmd_findmnt(self, args):
        column = args[args.index("-o") + 1]
        value = self.root_uuid if column == "UUID" else self.root_source
        return (0, value + "\n", "") if value else (1, "", "")

    def _cmd_blkid(self, args):
        return (0, self.blkid_uuid + "\n", "") if self.blkid_uuid else (2, "", "")

    def _cmd_mount(self, args):
        options = args[args.index("-o") + 1]
        self.mounts.append(options)
        if self.remount_fails and "noatime" in options:
            return 32, "", "mount: / : mount point is busy"
        return 0, "", ""

    def _cmd_git(self, args):
        if args[0] == "clone":
            Path(args[-1]).mkdir(parents=True, exist_ok=True)
        return 0, "", ""

    def _cmd_make(self, args):
        out = Path(args[args.index("-C") + 1]) / self.build_output
        out.parent.mkdir(parents=True, exist_ok=True)
        out.write_bytes(b"\xd0\x0d\xfe\xed")
        return 0, "", ""

    def _cmd_nmcli(self, args):
        if args == ["radio", "wifi"]:
            return 0, self.wifi + "\n", ""
        if args == ["radio", "wifi", "on"]:
            self.wifi = "enabled"
        return 0, "", ""

    def _cmd_rfkill(self, args):
        if args[0] == "-n":
            return 0, "".join(f"bluetooth {s}\n" for s in self.bluetooth) + "wlan unblocked\n", ""
        self.bluetooth = ["blocked" if args[0] == "block" else "unblocked" for _ in self.bluetooth]
        return 0, "", ""

    def _cmd_id(self, args):
        return (0, "1000\n", "") if args[-1] in self.users else (1, "", "no such user")


@pytest.fixture
def system(tmp_path: Path) -> FakeSystem:
    return FakeSystem(tmp_path / "root")


@pytest.fixture
def host(system: FakeSystem) -> Host:
    return Host(root=str(system.root), runner=system, chroot=False)


@pytest.fixture
def image_host(system: FakeSystem) -> Host:
    """The same tree treated as a mounted image: commands go through chroot."""

    return Host(root=str(system.root), runner=system)


@pytest.fixture
def manifest() -> Manifest:
    return load_manifest()


@pytest.fixture
def config() -> SetupConfig:
    return SetupConfig()

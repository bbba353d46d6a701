from __future__ import annotations

import argparse
import logging
import sys
from typing import Any, Callable, Dict, Optional, Sequence

import yaml

from .config import GOVERNORS, SetupConfig, check_privileges, load_config_file, resolve_config
from .errors import ResolutionError
from .lib.host import Host
from .lib.manifests import load_manifest
from .logging_utils import DEFAULT_LOG_PATH, configure_logging
from .operation import Operation
from .operations import build_operations
from .outcome import OperationResult, RunRecorder
from .pipeline import run_operations
from .state_store import DEFAULT_REPORT_PATH, build_report, save_report
from .summary import EXIT_RESOLUTION, exit_code, print_status, print_summary, render_config

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="hackberry-setup",
        description="Configure a HackberryPi Q20 host. Every step is idempotent and runs independently.",
    )
    p.add_argument("-u", "--auto-login-user", default=None, help="Log this user in automatically (e.g. 'kali')")
    p.add_argument(
        "-g",
        "--cpu-governor",
        default=None,
        help=f"CPU governor (default: powersave). Options: {', '.join(GOVERNORS)}",
    )
    p.add_argument("-w", "--enable-wifi", dest="enable_wifi", action="store_const", const=True, default=None)
    p.add_argument(
        "-b", "--disable-bluetooth", dest="enable_bluetooth", action="store_const", const=False, default=None
    )
    p.add_argument("--display-manager", dest="install_display_manager", action="store_const", const=True, default=None)

    for flag, dest, text in [
        ("--no-governor", "set_governor", "Leave the CPU governor unit alone"),
        ("--no-firmware-tools", "install_firmware_tools", "Skip firmware tool packages"),
        ("--no-noatime", "fstab_noatime", "Do not add noatime to the root fstab entry"),
        ("--no-service-optimization", "optimize_services", "Keep optional services enabled"),
        ("--no-cloud-cleanup", "cloud_cleanup", "Keep cloud-init units enabled"),
        ("--no-network-manager", "network_manager", "Do not switch netplan to NetworkManager"),
        ("--no-display-layout", "display_layout", "Do not write the display rotation config"),
        ("--no-device-tree", "build_device_tree", "Do not build the device-tree overlay"),
    ]:
        p.add_argument(flag, dest=dest, action="store_const", const=False, default=None, help=text)

    p.add_argument("-v", "--verbose", action="store_const", const=True, default=None, help="Show debug logging")
    p.add_argument("--dry-run", action="store_const", const=True, default=None, help="Probe only; change nothing")
    p.add_argument("--config", default=None, help="YAML file with option values (command line wins)")
    p.add_argument("--manifest", default=None, help="YAML operation payloads (defaults to the bundled manifest)")
    p.add_argument(
        "--root",
        default="/",
        help="Filesystem root to configure; commands run inside it through chroot unless it is /",
    )
    p.add_argument("--log", default=DEFAULT_LOG_PATH, help="Path to log file")
    p.add_argument("--report", default=DEFAULT_REPORT_PATH, help="Where to write the run report (json|yaml)")
    return p


def _overrides(args: argparse.Namespace) -> Dict[str, Any]:
    names = [
        "auto_login_user",
        "cpu_governor",
        "enable_wifi",
        "enable_bluetooth",
        "install_display_manager",
        "set_governor",
        "install_firmware_tools",
        "fstab_noatime",
        "optimize_services",
        "cloud_cleanup",
        "network_manager",
        "display_layout",
        "build_device_tree",
        "verbose",
        "dry_run",
    ]
    return {n: getattr(args, n) for n in names}


def run(
    config: SetupConfig,
    operations: Sequence[Operation],
    *,
    host: Optional[Host] = None,
    on_result: Optional[Callable[[OperationResult], None]] = print_status,
) -> RunRecorder:
    """Run the operation sequence and return the tally."""

    host = host or Host(dry_run=config.dry_run)
    logger.info("Starting setup (root=%s, dry_run=%s)", host.root, host.dry_run)
    logger.info("Configuration: %s", config.as_dict())
    return run_operations(operations, config, host=host, on_result=on_result)


def main(argv: Optional[list[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        file_values = load_config_file(args.config) if args.config else None
        config = resolve_config(_overrides(args), file_values)
        host = Host(root=args.root, dry_run=config.dry_run)
        check_privileges(config)
        try:
            operations = build_operations(load_manifest(args.manifest))
        except (OSError, ValueError, yaml.YAMLError) as e:
            raise ResolutionError(f"Unable to load manifest: {e}") from e
    except ResolutionError as e:
        print(f"[ERROR] {e}", file=sys.stderr)
        return EXIT_RESOLUTION

    configure_logging(
        log_path=args.log,
        console_level=logging.DEBUG if config.verbose else logging.WARNING,
    )

    print(render_config(config))
    print()

    recorder = run(config, operations, host=host)
    code = exit_code(recorder)
    print_summary(recorder)

    if args.report and not config.dry_run:
        try:
            save_report(args.report, build_report(config, recorder, exit_code=code))
        except OSError as e:
            logger.error("Unable to write run report %s: %s", args.report, e)

    return code

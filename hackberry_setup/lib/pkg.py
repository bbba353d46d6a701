from __future__ import annotations

import logging
from typing import List, Sequence

from .host import Host

logger = logging.getLogger(__name__)


def apt_update(host: Host) -> None:
    host.run(["apt-get", "update"])


def apt_install(
    host: Host,
    packages: Sequence[str],
    *,
    with_recommends: bool = False,
) -> None:
    if not packages:
        return
    argv = ["apt-get", "install", "-y"]
    if not with_recommends:
        argv.append("--no-install-recommends")
    host.run([*argv, *packages])


def is_installed(host: Host, package: str) -> bool:
    """Return True if dpkg reports ``package`` as fully installed."""

    r = host.run(["dpkg-query", "-W", "-f=${Status}", package], check=False)
    return r.ok and r.stdout.strip().endswith("install ok installed")


def missing_packages(host: Host, packages: Sequence[str]) -> List[str]:
    missing = [p for p in packages if not is_installed(host, p)]
    if missing:
        logger.debug("Packages not installed: %s", ", ".join(missing))
    return missing

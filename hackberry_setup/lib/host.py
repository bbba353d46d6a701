from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional, Sequence

from ..errors import Unactionable
from .command import CmdResult, run_cmd

Runner = Callable[..., CmdResult]


@dataclass(frozen=True)
class Host:
    """Handle on the system that operations observe and change.

    ``root`` prefixes every managed path, so a host can also be a mounted
    image. Commands for an image run inside it through ``chroot``; pass
    ``chroot=False`` to keep them on the running system (tests relocate files
    this way). ``runner`` executes commands and defaults to :func:`run_cmd`.
    """

    root: str = "/"
    dry_run: bool = False
    runner: Runner = run_cmd
    chroot: Optional[bool] = None

    @property
    def is_live_root(self) -> bool:
        return Path(self.root).resolve() == Path("/")

    @property
    def in_chroot(self) -> bool:
        if self.chroot is not None:
            return self.chroot
        return not self.is_live_root

    def path(self, rel: str) -> Path:
        return Path(self.root) / rel.lstrip("/")

    def require_live(self, action: str) -> None:
        """Raise Unactionable when ``action`` only makes sense on the running system."""

        if self.in_chroot:
            raise Unactionable(f"{action} needs the running system, not image {self.root}")

    def run(
        self,
        argv: Sequence[str],
        *,
        check: bool = True,
        cwd: Optional[str] = None,
        in_root: bool = True,
    ) -> CmdResult:
        """Run ``argv``; inside the image when the host is one and ``in_root`` is set."""

        argv = list(argv)
        if in_root and self.in_chroot:
            argv = ["chroot", self.root, *argv]
        return self.runner(argv, check=check, cwd=cwd)

from __future__ import annotations

import logging
import os
import shutil
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

logger = logging.getLogger(__name__)

BACKUP_SUFFIX = ".hackberry-setup.bak"


def read_text(path: Path) -> Optional[str]:
    """File contents with line endings kept as they are on disk, or None."""

    if not path.exists():
        return None
    return path.read_bytes().decode("utf-8")


def write_text(path: Path, contents: str, *, mode: Optional[int] = None) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8", newline="") as f:
        f.write(contents)
    if mode is not None:
        os.chmod(path, mode)


def write_if_changed(path: Path, contents: str, *, mode: Optional[int] = None) -> bool:
    """Write ``contents`` unless the file already holds exactly that text."""

    if read_text(path) == contents:
        logger.debug("Unchanged %s", str(path))
        return False
    write_text(path, contents, mode=mode)
    logger.info("Wrote %s", str(path))
    return True


def copy_file(src: Path, dst: Path) -> None:
    if not src.exists():
        raise FileNotFoundError(str(src))
    dst.parent.mkdir(parents=True, exist_ok=True)
    shutil.copy2(src, dst)
    logger.info("Installed %s -> %s", str(src), str(dst))


@contextmanager
def backed_up(path: Path) -> Iterator[Path]:
    """Back up ``path`` for the duration of a change.

    The backup copy stays next to the file when the block completes. If the
    block raises, the original bytes are written back, the backup copy is
    removed and the error propagates.
    """

    original = path.read_bytes()
    backup = path.with_name(path.name + BACKUP_SUFFIX)
    shutil.copy2(path, backup)
    logger.info("Backed up %s -> %s", str(path), str(backup))
    try:
        yield backup
    except BaseException:
        path.write_bytes(original)
        backup.unlink(missing_ok=True)
        logger.warning("Restored %s from backup", str(path))
        raise

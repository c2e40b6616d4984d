"""
Path Utilities
==============

OS-aware file writing helpers.
"""

from __future__ import annotations

import os
import platform
import stat
import tempfile
from pathlib import Path
from typing import Final

# Mode for files that did not exist before
NEW_FILE_MODE: Final[int] = 0o600


def atomic_write_bytes(path: Path | str, data: bytes) -> None:
    """
    Replace ``path`` with ``data`` so readers see old or new content only.

    The data goes to a temporary file in the same directory, is fsynced
    and then renamed over the target. An existing file keeps its
    permission bits; a new one is created owner-only.

    Raises:
        OSError: If any step fails; the target is left untouched
    """
    path = Path(path)
    directory = path.parent if str(path.parent) else Path(".")

    try:
        mode = stat.S_IMODE(path.stat().st_mode)
    except FileNotFoundError:
        mode = NEW_FILE_MODE

    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=directory)
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
            f.flush()
            os.fsync(f.fileno())
        os.chmod(tmp_name, mode)
        os.replace(tmp_name, path)
    except BaseException:
        try:
            os.unlink(tmp_name)
        except FileNotFoundError:
            pass
        raise

    _fsync_directory(directory)


def _fsync_directory(directory: Path) -> None:
    """Flush a directory entry so the rename survives a crash."""
    if platform.system().lower() == "windows":
        return
    dir_fd = os.open(directory, os.O_RDONLY)
    try:
        os.fsync(dir_fd)
    finally:
        os.close(dir_fd)


def file_modtime(path: Path | str) -> float | None:
    """Modification time of ``path``, or None when it does not exist."""
    try:
        return Path(path).stat().st_mtime
    except FileNotFoundError:
        return None

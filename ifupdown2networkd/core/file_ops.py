# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
# ifupdown2networkd/core/file_ops.py
"""
Atomic file operation utilities.

Unit files and the JSON report are written through a temporary file in the
target directory and renamed into place, so networkd never sees a half
written unit.
"""

from __future__ import annotations

import os
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import Generator, Optional


@contextmanager
def atomic_write(
    target_path: Path,
    *,
    suffix: str = ".part",
    dir: Optional[Path] = None,
    delete_on_error: bool = True,
) -> Generator[Path, None, None]:
    """
    Context manager for atomic file writes using temporary file + rename.

    Yields the temporary path; on clean exit it is renamed over target_path.
    On failure the temporary file is removed and the exception re-raised.

    Example:
        with atomic_write(Path("/etc/systemd/network/10-eth0.network")) as tmp:
            tmp.write_text(content, encoding="utf-8")
    """
    target_path = Path(target_path)
    temp_dir = Path(dir) if dir else target_path.parent
    temp_dir.mkdir(parents=True, exist_ok=True)

    fd, temp_name = tempfile.mkstemp(
        suffix=suffix,
        prefix=f".{target_path.name}.",
        dir=str(temp_dir),
    )
    temp_path = Path(temp_name)

    try:
        os.close(fd)
        yield temp_path
        os.replace(temp_path, target_path)
    except Exception:
        if delete_on_error:
            temp_path.unlink(missing_ok=True)
        raise


def atomic_write_text(path: Path, content: str, *, mode: int = 0o644) -> None:
    """Write text atomically and set its permission bits before the rename."""
    with atomic_write(path) as tmp:
        with open(tmp, "w", encoding="utf-8", newline="\n") as f:
            f.write(content)
            f.flush()
            os.fsync(f.fileno())
        os.chmod(tmp, mode)


def safe_unlink(path: Path, missing_ok: bool = True) -> bool:
    """
    Delete a file. Returns True if something was removed.
    """
    p = Path(path)
    try:
        p.unlink()
        return True
    except FileNotFoundError:
        if not missing_ok:
            raise
        return False

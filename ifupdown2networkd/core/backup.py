# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
# ifupdown2networkd/core/backup.py
"""
Run-scoped file backups.

Each original path is copied at most once per run: the first copy is the
known-good one, a second backup would capture an already-mutated file.
"""

from __future__ import annotations

import logging
import os
import shutil
from pathlib import Path
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

from .utils import U


@dataclass(frozen=True)
class BackupRecord:
    original: Path
    backup: Path
    link_target: Optional[str] = None  # set when the original was a symlink


def _canonical(path: Path) -> str:
    # Not resolve(): resolv.conf is usually a symlink and must be keyed by its own name.
    return os.path.normpath(os.path.abspath(str(path)))


class BackupManager:
    def __init__(self, logger: logging.Logger, *, clock: Callable[[], str] = U.now_ts):
        self.logger = logger
        self._clock = clock
        self._by_original: Dict[str, BackupRecord] = {}
        self._records: List[BackupRecord] = []

    @property
    def records(self) -> List[BackupRecord]:
        return list(self._records)

    def get(self, original: Path) -> Optional[BackupRecord]:
        return self._by_original.get(_canonical(original))

    def _backup_path_for(self, original: Path) -> Path:
        base = f"{original}.backup.{self._clock()}"
        candidate = Path(base + ".bak")
        n = 1
        while os.path.lexists(candidate):
            candidate = Path(f"{base}.{n}.bak")
            n += 1
        return candidate

    def backup(self, original: Path) -> Optional[BackupRecord]:
        """
        Copy `original` next to itself as `<name>.backup.<ts>.bak`, preserving
        mode, times and (when root) ownership.

        A symlink is backed up as a symlink, dangling or not: the backup is a
        link with the same target and the record keeps that target, so
        restore() puts a link back rather than a copy of what it pointed at.

        Returns the existing record if this path was already backed up this
        run, or None if nothing exists at the path.
        """
        original = Path(original)
        key = _canonical(original)

        existing = self._by_original.get(key)
        if existing is not None:
            self.logger.debug("Already backed up this run: %s -> %s", original, existing.backup)
            return existing

        link_target: Optional[str] = None
        if original.is_symlink():
            link_target = os.readlink(original)
        elif not original.is_file():
            self.logger.debug("Nothing to back up (not a file): %s", original)
            return None

        dst = self._backup_path_for(original)
        shutil.copy2(original, dst, follow_symlinks=False)
        if U.is_root():
            st = original.lstat()
            os.chown(dst, st.st_uid, st.st_gid, follow_symlinks=False)

        rec = BackupRecord(original=Path(key), backup=dst, link_target=link_target)
        self._by_original[key] = rec
        self._records.append(rec)
        if link_target is not None:
            self.logger.info("🗂️  Backed up symlink %s -> %s (%s)", original, link_target, dst)
        else:
            self.logger.info("🗂️  Backed up %s -> %s", original, dst)
        return rec

    def restore(self, original: Path) -> bool:
        """
        Put the backed-up copy back in place of `original` (replacing a
        symlink or file). A symlink original comes back as the same symlink.
        Returns False if no backup was taken this run.
        """
        rec = self.get(original)
        if rec is None:
            return False
        target = Path(original)
        if rec.link_target is not None:
            if target.is_symlink() or target.exists():
                target.unlink()
            target.symlink_to(rec.link_target)
            self.logger.info("Restored symlink %s -> %s", target, rec.link_target)
            return True
        if not rec.backup.exists():
            return False
        if target.is_symlink() or target.exists():
            target.unlink()
        shutil.copy2(rec.backup, target)
        self.logger.info("Restored %s from %s", target, rec.backup)
        return True

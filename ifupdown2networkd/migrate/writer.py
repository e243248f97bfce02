# SPDX-License-Identifier: LGPL-3.0-or-later
# ifupdown2networkd/migrate/writer.py
"""
Tracked unit writes.

`created` is the run's transaction log: every unit this run put on disk is
appended in write order and never removed, so rollback can delete exactly
what was created and the final report can list it.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import List, Optional

from ..core.backup import BackupManager
from ..core.exceptions import GenerationError
from ..core.file_ops import atomic_write_text, safe_unlink
from ..core.utils import U
from .model import GeneratedUnit

UNIT_MODE = 0o644


class UnitWriter:
    def __init__(
        self,
        logger: logging.Logger,
        networkd_dir: Path,
        *,
        backups: Optional[BackupManager] = None,
        mode: int = UNIT_MODE,
    ):
        self.logger = logger
        self.networkd_dir = Path(networkd_dir)
        self.backups = backups
        self.mode = mode
        self._created: List[GeneratedUnit] = []

    @property
    def created(self) -> List[GeneratedUnit]:
        return list(self._created)

    def write(self, unit: GeneratedUnit) -> Path:
        """
        Write one unit atomically. A unit file that already exists is backed
        up first so rollback can put it back.
        """
        path = Path(unit.path)
        try:
            U.ensure_dir(path.parent)
            if path.exists() and self.backups is not None:
                self.backups.backup(path)
            atomic_write_text(path, unit.content, mode=self.mode)
            if U.is_root():
                os.chown(path, 0, 0)
        except OSError as e:
            raise GenerationError(
                msg=f"Failed to write {path}: {e}",
                cause=e,
                context={"path": str(path), "interface": unit.interface},
            )
        self._created.append(unit)
        self.logger.info("📝 Wrote %s", path)
        return path

    def write_all(self, units: List[GeneratedUnit]) -> List[Path]:
        return [self.write(u) for u in units]

    def remove_created(self) -> List[Path]:
        """
        Delete every unit written this run, in creation order, putting back
        any file that was overwritten. Returns the paths actually removed.
        """
        removed: List[Path] = []
        for unit in self._created:
            path = Path(unit.path)
            if self.backups is not None and self.backups.get(path) is not None:
                self.backups.restore(path)
                self.logger.info("↩️  Restored pre-existing %s", path)
                continue
            try:
                if safe_unlink(path):
                    removed.append(path)
                    self.logger.info("🗑️  Removed %s", path)
            except OSError as e:
                self.logger.error("Could not remove %s: %s", path, e)
        return removed

# SPDX-License-Identifier: LGPL-3.0-or-later
# ifupdown2networkd/migrate/resolver.py
"""
/etc/resolv.conf -> systemd-resolved stub symlink.

Optional step of the cutover. The original is always backed up first (a symlink stays a symlink)
and put back if the symlink cannot be created or the migration rolls back.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from ..core.backup import BackupManager

RESOLV_CONF = Path("/etc/resolv.conf")
RESOLVED_STUB = Path("/run/systemd/resolve/stub-resolv.conf")


class ResolvConfManager:
    def __init__(
        self,
        logger: logging.Logger,
        backups: BackupManager,
        *,
        resolv_conf: Path = RESOLV_CONF,
        stub: Path = RESOLVED_STUB,
    ):
        self.logger = logger
        self.backups = backups
        self.resolv_conf = Path(resolv_conf)
        self.stub = Path(stub)
        self.symlinked = False

    def already_linked(self) -> bool:
        if not self.resolv_conf.is_symlink():
            return False
        try:
            return os.path.realpath(self.resolv_conf) == os.path.realpath(self.stub)
        except OSError:
            return False

    def link(self) -> bool:
        """
        Point resolv.conf at the stub. Returns True only if this call
        created the symlink.
        """
        if self.already_linked():
            self.logger.info("%s already points at %s", self.resolv_conf, self.stub)
            return False
        if not self.stub.exists():
            self.logger.warning("%s does not exist; leaving %s alone", self.stub, self.resolv_conf)
            return False

        self.backups.backup(self.resolv_conf)
        try:
            if self.resolv_conf.is_symlink() or self.resolv_conf.exists():
                self.resolv_conf.unlink()
            self.resolv_conf.symlink_to(self.stub)
        except OSError as e:
            self.logger.error("Could not symlink %s -> %s: %s", self.resolv_conf, self.stub, e)
            if not self.backups.restore(self.resolv_conf):
                self.logger.error("No backup of %s to restore", self.resolv_conf)
            return False

        self.symlinked = True
        self.logger.info("🔗 %s -> %s", self.resolv_conf, self.stub)
        return True

    def restore(self) -> bool:
        """Undo link(). No-op unless this run created the symlink."""
        if not self.symlinked:
            return False
        if self.backups.restore(self.resolv_conf):
            self.symlinked = False
            return True
        # resolv.conf did not exist before; remove what we created
        if self.resolv_conf.is_symlink():
            self.resolv_conf.unlink()
        self.symlinked = False
        return True

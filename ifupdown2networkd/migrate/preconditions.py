# SPDX-License-Identifier: LGPL-3.0-or-later
# ifupdown2networkd/migrate/preconditions.py
"""
Is this host a migration candidate at all?

A failed check is not an error for the host: the run is skipped with an
informational message and exit code 0.
"""

from __future__ import annotations

import logging
import re
import sys
from pathlib import Path
from typing import Callable, Optional

from ..core.exceptions import PreconditionError
from ..core.utils import Runner, U, make_runner
from .services import NETWORKD_SERVICE, SYSTEMCTL
from .source import IFQUERY

_ACTIVATION_LINE_RE = re.compile(r"^\s*(auto|allow-hotplug|iface)\s+(.*)$")

Confirm = Callable[[str], bool]


def has_non_loopback_declaration(text: str) -> bool:
    """True if some auto/allow-hotplug/iface line names anything but lo."""
    for line in text.splitlines():
        m = _ACTIVATION_LINE_RE.match(line)
        if not m:
            continue
        words = m.group(2).split()
        if m.group(1) == "iface":
            words = words[:1]
        if any(w != "lo" for w in words):
            return True
    return False


def detect_container(runner: Runner) -> Optional[str]:
    """Container technology name from systemd-detect-virt, or None on bare metal / VMs."""
    cp = runner(["systemd-detect-virt", "--container"])
    name = (cp.stdout or "").strip()
    if cp.returncode == 0 and name and name != "none":
        return name
    return None


class PreconditionChecker:
    def __init__(
        self,
        logger: logging.Logger,
        *,
        interfaces_file: Path,
        networkd_dir: Path,
        runner: Optional[Runner] = None,
        which: Callable[[str], Optional[str]] = U.which,
        platform: str = sys.platform,
        is_root: Callable[[], bool] = U.is_root,
        allow_container: bool = False,
        confirm: Optional[Confirm] = None,
        dry_run: bool = False,
    ):
        self.logger = logger
        self.interfaces_file = Path(interfaces_file)
        self.networkd_dir = Path(networkd_dir)
        self.runner = runner or make_runner(logger)
        self.which = which
        self.platform = platform
        self.is_root = is_root
        self.allow_container = allow_container
        self.confirm = confirm
        self.dry_run = dry_run

    def _skip(self, msg: str, **ctx) -> PreconditionError:
        return PreconditionError(msg=msg, context=ctx or None)

    def check(self) -> None:
        """
        Raise PreconditionError on the first check that fails. A host that
        qualifies but is not being migrated by root is a Fatal error instead.
        """
        self.logger.info("Checking migration preconditions...")

        if not self.platform.startswith("linux"):
            raise self._skip("This migration is only supported on Linux systems", platform=self.platform)

        if not self.interfaces_file.is_file():
            raise self._skip(f"No {self.interfaces_file} found; the system does not use ifupdown")

        try:
            text = self.interfaces_file.read_text(encoding="utf-8", errors="replace")
        except OSError as e:
            raise PreconditionError(msg=f"Cannot read {self.interfaces_file}: {e}", cause=e)
        if not has_non_loopback_declaration(text):
            raise self._skip(f"No non-loopback interfaces found in {self.interfaces_file}")

        if not self.which(IFQUERY):
            raise self._skip(
                "ifquery command not found (install ifupdown: apt install ifupdown)",
                tool=IFQUERY,
            )

        cp = self.runner([SYSTEMCTL, "list-unit-files", NETWORKD_SERVICE])
        if cp.returncode != 0:
            raise self._skip(f"{NETWORKD_SERVICE} not found; systemd-networkd is not available")

        # Skips above hold for unprivileged runs too; everything below may write.
        if not self.dry_run and not self.is_root():
            U.die(self.logger, "This operation requires root. Re-run with sudo.", 1)

        if not self.networkd_dir.is_dir():
            if self.dry_run:
                self.logger.info("%s does not exist (dry run: not creating it)", self.networkd_dir)
            else:
                self.logger.info("Creating %s", self.networkd_dir)
                U.ensure_dir(self.networkd_dir)

        container = detect_container(self.runner)
        if container:
            self.logger.warning("Running inside a container (%s).", container)
            self.logger.warning("Container networking is often managed by the host system.")
            if self.allow_container:
                self.logger.info("Continuing: containers explicitly allowed")
            elif self.confirm is None or not self.confirm("Continue with migration anyway?"):
                raise self._skip("Migration cancelled inside container", container=container)

        self.logger.info("Preconditions satisfied")

# SPDX-License-Identifier: LGPL-3.0-or-later
# ifupdown2networkd/migrate/services.py
"""Thin systemctl wrapper for the legacy and target network services."""

from __future__ import annotations

import logging
import subprocess
from typing import List, Optional, Sequence

from ..core.exceptions import ServiceError
from ..core.utils import Runner, make_runner

SYSTEMCTL = "systemctl"

LEGACY_SERVICE = "networking.service"
NETWORKD_SERVICE = "systemd-networkd.service"
RESOLVED_SERVICE = "systemd-resolved.service"
NETWORK_MANAGER_SERVICE = "NetworkManager.service"


class ServiceController:
    def __init__(self, logger: logging.Logger, runner: Optional[Runner] = None):
        self.logger = logger
        self.runner = runner or make_runner(logger)

    def _systemctl(self, *args: str) -> subprocess.CompletedProcess:
        return self.runner([SYSTEMCTL, *args])

    def _verb(self, verb: str, unit: str, *, strict: bool) -> bool:
        cp = self._systemctl(verb, unit)
        if cp.returncode == 0:
            self.logger.debug("systemctl %s %s: ok", verb, unit)
            return True
        detail = (cp.stderr or cp.stdout or "").strip()
        if strict:
            raise ServiceError(
                msg=f"systemctl {verb} {unit} failed (rc={cp.returncode})",
                context={"unit": unit, "verb": verb, "detail": detail},
            )
        self.logger.warning("systemctl %s %s failed (rc=%s): %s", verb, unit, cp.returncode, detail or "-")
        return False

    def enable(self, unit: str, *, strict: bool = True) -> bool:
        return self._verb("enable", unit, strict=strict)

    def disable(self, unit: str, *, strict: bool = False) -> bool:
        return self._verb("disable", unit, strict=strict)

    def start(self, unit: str, *, strict: bool = False) -> bool:
        return self._verb("start", unit, strict=strict)

    def stop(self, unit: str, *, strict: bool = False) -> bool:
        return self._verb("stop", unit, strict=strict)

    def is_active(self, unit: str) -> bool:
        return self._systemctl("is-active", "--quiet", unit).returncode == 0

    def is_enabled(self, unit: str) -> bool:
        return self._systemctl("is-enabled", "--quiet", unit).returncode == 0

    def enable_and_start(self, units: Sequence[str]) -> List[str]:
        """
        Enable then start each unit in order. Enable failures raise
        ServiceError; start failures are logged and returned.
        """
        failed_start: List[str] = []
        for unit in units:
            self.enable(unit, strict=True)
            if not self.start(unit, strict=False):
                failed_start.append(unit)
        return failed_start

    def stop_and_disable(self, units: Sequence[str]) -> None:
        for unit in units:
            self.stop(unit)
            self.disable(unit)

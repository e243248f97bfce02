# SPDX-License-Identifier: LGPL-3.0-or-later
# ifupdown2networkd/migrate/verifier.py
from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Callable, List, Optional

from ..core.utils import Runner, make_runner
from .services import NETWORKD_SERVICE, ServiceController

NETWORKCTL = "networkctl"

DEFAULT_ATTEMPTS = 5
DEFAULT_DELAY_S = 2.0

_GOOD_STATES = ("routable", "configured")
_MANAGED_SETUP = "configured"


def count_configured_links(listing: str) -> int:
    """
    Count rows of `networkctl --no-legend list` that systemd-networkd has
    brought up: SETUP (5th column) configured and OPERATIONAL (4th column)
    routable or configured. Links the legacy stack still holds show SETUP
    unmanaged and never count, however routable they are.

        IDX LINK TYPE     OPERATIONAL SETUP
          2 eth0 ether    routable    configured
    """
    n = 0
    for line in (listing or "").splitlines():
        cols = line.split()
        if len(cols) < 5:
            continue
        oper = cols[3].lower()
        setup = cols[4].lower()
        if setup == _MANAGED_SETUP and oper in _GOOD_STATES:
            n += 1
    return n


@dataclass
class VerificationResult:
    ok: bool
    attempts: int
    configured_links: int = 0
    service_active: bool = False
    last_listing: str = ""
    notes: List[str] = field(default_factory=list)


class ConnectivityVerifier:
    """
    Poll systemd-networkd until at least one link is routable/configured.

    A fixed number of polls (`attempts`), sleeping `delay_s` before each one so
    networkd gets time to bring links up after the start.
    """

    def __init__(
        self,
        logger: logging.Logger,
        services: ServiceController,
        *,
        runner: Optional[Runner] = None,
        attempts: int = DEFAULT_ATTEMPTS,
        delay_s: float = DEFAULT_DELAY_S,
        sleep: Callable[[float], None] = time.sleep,
    ):
        if attempts < 1:
            raise ValueError("attempts must be >= 1")
        self.logger = logger
        self.services = services
        self.runner = runner or make_runner(logger)
        self.attempts = attempts
        self.delay_s = delay_s
        self._sleep = sleep

    def verify(self) -> VerificationResult:
        result = VerificationResult(ok=False, attempts=0)
        for attempt in range(1, self.attempts + 1):
            self._sleep(self.delay_s)
            result.attempts = attempt

            if not self.services.is_active(NETWORKD_SERVICE):
                result.service_active = False
                result.notes.append(f"attempt {attempt}: {NETWORKD_SERVICE} not active")
                self.logger.info("⏳ [%d/%d] %s not active yet", attempt, self.attempts, NETWORKD_SERVICE)
                continue
            result.service_active = True

            cp = self.runner([NETWORKCTL, "--no-pager", "--no-legend", "list"])
            result.last_listing = cp.stdout or ""
            if cp.returncode != 0:
                result.notes.append(f"attempt {attempt}: networkctl rc={cp.returncode}")
                self.logger.info("⏳ [%d/%d] networkctl failed (rc=%s)", attempt, self.attempts, cp.returncode)
                continue

            result.configured_links = count_configured_links(result.last_listing)
            if result.configured_links > 0:
                result.ok = True
                self.logger.info(
                    "✅ [%d/%d] %d link(s) routable/configured", attempt, self.attempts, result.configured_links
                )
                return result
            self.logger.info("⏳ [%d/%d] no routable/configured links yet", attempt, self.attempts)

        self.logger.warning("Verification failed after %d attempt(s)", result.attempts)
        return result

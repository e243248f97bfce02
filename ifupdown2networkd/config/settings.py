# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
# ifupdown2networkd/config/settings.py
from __future__ import annotations

import argparse
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from ..migrate.generator import PRIORITY_BRIDGE, PRIORITY_STANDARD
from ..migrate.resolver import RESOLV_CONF, RESOLVED_STUB
from ..migrate.verifier import DEFAULT_ATTEMPTS, DEFAULT_DELAY_S

INTERFACES_FILE = Path("/etc/network/interfaces")
NETWORKD_DIR = Path("/etc/systemd/network")
LOCK_FILE = Path("/run/ifupdown2networkd.lock")


@dataclass(frozen=True)
class MigrationSettings:
    """Everything one run needs to know, resolved from YAML + CLI."""

    interfaces_file: Path = INTERFACES_FILE
    networkd_dir: Path = NETWORKD_DIR
    resolv_conf: Path = RESOLV_CONF
    resolved_stub: Path = RESOLVED_STUB
    lock_file: Path = LOCK_FILE

    priority_standard: int = PRIORITY_STANDARD
    priority_bridge: int = PRIORITY_BRIDGE

    verify_attempts: int = DEFAULT_ATTEMPTS
    verify_delay: float = DEFAULT_DELAY_S

    symlink_resolv_conf: bool = True
    disable_network_manager: bool = True
    assume_yes: bool = False
    allow_container: bool = False
    dry_run: bool = False

    report: Optional[Path] = None

    def __post_init__(self) -> None:
        if self.priority_standard >= self.priority_bridge:
            raise ValueError(
                f"priority_standard ({self.priority_standard}) must be lower than "
                f"priority_bridge ({self.priority_bridge})"
            )
        if self.verify_attempts < 1:
            raise ValueError("verify_attempts must be >= 1")
        if self.verify_delay < 0:
            raise ValueError("verify_delay must be >= 0")

    @classmethod
    def from_args(cls, args: argparse.Namespace) -> "MigrationSettings":
        def _get(name: str, default):
            v = getattr(args, name, None)
            return default if v is None else v

        report = getattr(args, "report", None)
        return cls(
            interfaces_file=Path(_get("interfaces_file", INTERFACES_FILE)),
            networkd_dir=Path(_get("networkd_dir", NETWORKD_DIR)),
            resolv_conf=Path(_get("resolv_conf", RESOLV_CONF)),
            resolved_stub=Path(_get("resolved_stub", RESOLVED_STUB)),
            lock_file=Path(_get("lock_file", LOCK_FILE)),
            priority_standard=int(_get("priority_standard", PRIORITY_STANDARD)),
            priority_bridge=int(_get("priority_bridge", PRIORITY_BRIDGE)),
            verify_attempts=int(_get("verify_attempts", DEFAULT_ATTEMPTS)),
            verify_delay=float(_get("verify_delay", DEFAULT_DELAY_S)),
            symlink_resolv_conf=bool(_get("symlink_resolv_conf", True)),
            disable_network_manager=bool(_get("disable_network_manager", True)),
            assume_yes=bool(_get("assume_yes", False)),
            allow_container=bool(_get("allow_container", False)),
            dry_run=bool(_get("dry_run", False)),
            report=Path(report) if report else None,
        )

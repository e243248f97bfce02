# SPDX-License-Identifier: LGPL-3.0-or-later
# ifupdown2networkd/migrate/model.py
"""
Data model for one ifupdown -> systemd-networkd migration run.

Everything here lives only for the duration of a single invocation; nothing
is persisted except the unit files and backups the run writes.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Dict, FrozenSet, List, Optional, Tuple

from ..core.backup import BackupRecord


class InterfaceRole(Enum):
    STANDARD = "standard"
    BRIDGE_DEVICE = "bridge-device"
    BRIDGE_PORT = "bridge-port"


class UnitKind(Enum):
    NETWORK = "network-attachment"  # .network
    NETDEV = "virtual-device"  # .netdev

    @property
    def suffix(self) -> str:
        return ".netdev" if self is UnitKind.NETDEV else ".network"


class MigrationState(Enum):
    INIT = "Init"
    BACKED_UP = "BackedUp"
    GENERATED = "Generated"
    WARNED = "Warned"
    NEW_ENABLED = "NewEnabled"
    VERIFIED = "Verified"
    COMMITTED = "Committed"
    ROLLED_BACK = "RolledBack"
    ABORTED = "Aborted"

    @property
    def terminal(self) -> bool:
        return self in TERMINAL_STATES


TERMINAL_STATES: FrozenSet[MigrationState] = frozenset(
    {MigrationState.COMMITTED, MigrationState.ROLLED_BACK, MigrationState.ABORTED}
)

# Forward edges plus the single failure edge NewEnabled -> RolledBack.
# Any non-terminal state may end in Aborted.
TRANSITIONS: Dict[MigrationState, FrozenSet[MigrationState]] = {
    MigrationState.INIT: frozenset({MigrationState.BACKED_UP, MigrationState.ABORTED}),
    MigrationState.BACKED_UP: frozenset({MigrationState.GENERATED, MigrationState.ABORTED}),
    MigrationState.GENERATED: frozenset({MigrationState.WARNED, MigrationState.ABORTED}),
    MigrationState.WARNED: frozenset({MigrationState.NEW_ENABLED, MigrationState.ABORTED}),
    MigrationState.NEW_ENABLED: frozenset(
        {MigrationState.VERIFIED, MigrationState.ROLLED_BACK, MigrationState.ABORTED}
    ),
    MigrationState.VERIFIED: frozenset({MigrationState.COMMITTED, MigrationState.ABORTED}),
    MigrationState.COMMITTED: frozenset(),
    MigrationState.ROLLED_BACK: frozenset(),
    MigrationState.ABORTED: frozenset(),
}


@dataclass(frozen=True)
class FamilyConfig:
    """
    Normalized key/value options for one address family of one interface.

    `options` keeps every key the source emitted, in order, including keys
    the generator never translates, so the detector can still see them.
    Keys are lower-cased; values are kept as written.
    """

    family: str  # "inet" | "inet6"
    method: str = "none"
    options: Tuple[Tuple[str, str], ...] = ()

    def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        k = key.lower()
        for ok, ov in self.options:
            if ok == k:
                return ov
        return default

    def get_all(self, key: str) -> List[str]:
        k = key.lower()
        return [ov for ok, ov in self.options if ok == k]

    def keys(self) -> List[str]:
        return [k for k, _ in self.options]


@dataclass(frozen=True)
class InterfaceConfig:
    """Parser output for one interface, before classification."""

    name: str
    inet: FamilyConfig
    inet6: Optional[FamilyConfig] = None


@dataclass(frozen=True)
class InterfaceRecord:
    name: str
    role: InterfaceRole
    inet: FamilyConfig
    inet6: Optional[FamilyConfig] = None
    bridge_ports: Tuple[str, ...] = ()
    bridge: Optional[str] = None  # owning bridge when role is BRIDGE_PORT

    @property
    def ipv4_method(self) -> str:
        return self.inet.method

    @property
    def ipv6_method(self) -> str:
        return self.inet6.method if self.inet6 is not None else "none"

    def families(self) -> List[FamilyConfig]:
        return [self.inet] + ([self.inet6] if self.inet6 is not None else [])

    def dns_servers(self) -> List[str]:
        out: List[str] = []
        for fam in self.families():
            for value in fam.get_all("dns-nameservers"):
                for server in value.split():
                    if server not in out:
                        out.append(server)
        return out

    def dns_search(self) -> List[str]:
        out: List[str] = []
        for fam in self.families():
            for value in fam.get_all("dns-search"):
                for domain in value.split():
                    if domain not in out:
                        out.append(domain)
        return out


@dataclass(frozen=True)
class RawStanza:
    """Verbatim lines declaring one interface, for the audit trailer."""

    name: str
    lines: Tuple[str, ...] = ()
    sources: Tuple[Path, ...] = ()

    @property
    def text(self) -> str:
        return "\n".join(self.lines)

    @property
    def is_empty(self) -> bool:
        return not self.lines


@dataclass(frozen=True)
class GeneratedUnit:
    path: Path
    content: str
    kind: UnitKind
    interface: str


@dataclass(frozen=True)
class UnsupportedFinding:
    interface: str
    keyword: str

    def __str__(self) -> str:
        return f"{self.interface}: {self.keyword}"


@dataclass
class MigrationResult:
    state: MigrationState
    exit_code: int
    created_units: List[GeneratedUnit] = field(default_factory=list)
    planned_units: List[GeneratedUnit] = field(default_factory=list)  # dry run only
    backups: List[BackupRecord] = field(default_factory=list)
    findings: List[UnsupportedFinding] = field(default_factory=list)
    resolv_conf_symlinked: bool = False
    skipped_reason: Optional[str] = None
    error: Optional[str] = None
    history: List[MigrationState] = field(default_factory=list)

    @property
    def skipped(self) -> bool:
        """Nothing was changed on the host (precondition failure or dry run)."""
        return self.state is MigrationState.INIT

    @property
    def created_files(self) -> List[Path]:
        return [u.path for u in self.created_units]

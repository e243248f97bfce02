# SPDX-License-Identifier: LGPL-3.0-or-later
# ifupdown2networkd/migrate/generator.py
"""
systemd-networkd unit rendering.

One InterfaceRecord plus its RawStanza in, a list of GeneratedUnit out.
Rendering is pure: the only varying input is the clock used for the Date
header, and that is injectable.

Every .network unit ends with the original stanza as `# ` comment lines,
whether or not all of it could be translated.
"""

from __future__ import annotations

import datetime as _dt
from pathlib import Path
from typing import Callable, Dict, List, Optional

from .. import __version__
from ..core.exceptions import InvalidNetmaskError
from .model import GeneratedUnit, InterfaceRecord, InterfaceRole, RawStanza, UnitKind

PRIORITY_STANDARD = 10
PRIORITY_BRIDGE = 20

_OCTET_BITS: Dict[int, int] = {
    255: 8,
    254: 7,
    252: 6,
    248: 5,
    240: 4,
    224: 3,
    192: 2,
    128: 1,
    0: 0,
}

_RULE = "# " + "=" * 76


def netmask_to_cidr(netmask: str) -> int:
    """
    Dotted netmask -> prefix length using the per-octet bit-count table.

    Anything that is not four octets from the table is an input error; the
    caller gets InvalidNetmaskError rather than a best-effort number.
    """
    parts = (netmask or "").strip().split(".")
    if len(parts) != 4:
        raise InvalidNetmaskError(msg=f"Netmask {netmask!r} is not a dotted quad", context={"netmask": netmask})
    total = 0
    for part in parts:
        if not part.isdigit() or int(part) not in _OCTET_BITS:
            raise InvalidNetmaskError(
                msg=f"Netmask {netmask!r} has an invalid octet {part!r}",
                context={"netmask": netmask, "octet": part},
            )
        total += _OCTET_BITS[int(part)]
    return total


def _prefix_from_netmask(netmask: str, *, max_bits: int) -> int:
    nm = netmask.strip()
    if nm.isdigit():
        bits = int(nm)
        if 0 <= bits <= max_bits:
            return bits
        raise InvalidNetmaskError(msg=f"Prefix length {nm} out of range", context={"netmask": nm})
    if max_bits != 32:
        raise InvalidNetmaskError(msg=f"IPv6 netmask must be a prefix length, got {nm!r}", context={"netmask": nm})
    return netmask_to_cidr(nm)


def cidr_address(address: str, netmask: Optional[str], *, max_bits: int = 32) -> str:
    addr = address.strip()
    if "/" in addr or not netmask:
        return addr
    return f"{addr}/{_prefix_from_netmask(netmask, max_bits=max_bits)}"


def dhcp_mode(ipv4_method: str, ipv6_method: str) -> Optional[str]:
    """Value for DHCP=, or None when neither family asks for it."""
    if ipv4_method == "dhcp" and ipv6_method == "dhcp":
        return "yes"
    if ipv4_method == "dhcp":
        return "ipv4"
    if ipv6_method in ("dhcp", "auto"):
        return "ipv6"
    return None


def _default_clock() -> str:
    return _dt.datetime.now().astimezone().strftime("%a %b %d %H:%M:%S %Z %Y")


class UnitGenerator:
    def __init__(
        self,
        networkd_dir: Path,
        *,
        priority_standard: int = PRIORITY_STANDARD,
        priority_bridge: int = PRIORITY_BRIDGE,
        source_label: str = "/etc/network/interfaces",
        clock: Optional[Callable[[], str]] = None,
    ):
        if priority_standard >= priority_bridge:
            raise ValueError("bridge units must sort after standard ones (priority_standard < priority_bridge)")
        self.networkd_dir = Path(networkd_dir)
        self.priority_standard = priority_standard
        self.priority_bridge = priority_bridge
        self.source_label = source_label
        self._clock = clock or _default_clock

    # ------------------------------------------------------------------
    # Naming
    # ------------------------------------------------------------------

    def priority_for(self, record: InterfaceRecord) -> int:
        if record.role is InterfaceRole.BRIDGE_DEVICE:
            return self.priority_bridge
        return self.priority_standard

    def unit_path(self, record: InterfaceRecord, kind: UnitKind) -> Path:
        return self.networkd_dir / f"{self.priority_for(record)}-{record.name}{kind.suffix}"

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def _header(self, title: str) -> List[str]:
        return [
            f"# systemd-networkd {title}",
            f"# Generated by ifupdown2networkd {__version__}",
            f"# Date: {self._clock()}",
            "",
        ]

    def _trailer(self, stanza: RawStanza) -> List[str]:
        out = [
            _RULE,
            f"# Original {self.source_label} stanza:",
            _RULE,
        ]
        if stanza.is_empty:
            out.append("# (no stanza found)")
        else:
            out.extend(f"# {line}" for line in stanza.lines)
        return out

    def render_network(self, record: InterfaceRecord, stanza: RawStanza) -> str:
        lines = self._header(f"configuration for {record.name}")
        lines += ["[Match]", f"Name={record.name}", "", "[Network]"]

        dhcp = dhcp_mode(record.ipv4_method, record.ipv6_method)
        if dhcp:
            lines.append(f"DHCP={dhcp}")

        if record.ipv4_method == "static":
            address = record.inet.get("address")
            if address:
                lines.append(f"Address={cidr_address(address, record.inet.get('netmask'), max_bits=32)}")
            gateway = record.inet.get("gateway")
            if gateway:
                lines.append(f"Gateway={gateway}")

        if record.inet6 is not None and record.ipv6_method == "static":
            address6 = record.inet6.get("address")
            if address6:
                lines.append(f"Address={cidr_address(address6, record.inet6.get('netmask'), max_bits=128)}")
            gateway6 = record.inet6.get("gateway")
            if gateway6:
                lines.append(f"Gateway={gateway6}")

        for server in record.dns_servers():
            lines.append(f"DNS={server}")

        search = record.dns_search()
        if search:
            lines.append(f"Domains={' '.join(search)}")

        if record.role is InterfaceRole.BRIDGE_DEVICE:
            lines += ["", "# Bridge configuration - member ports configured separately"]

        lines.append("")
        lines += self._trailer(stanza)
        return "\n".join(lines) + "\n"

    def render_netdev(self, record: InterfaceRecord) -> str:
        lines = self._header(f"bridge device for {record.name}")
        lines += ["[NetDev]", f"Name={record.name}", "Kind=bridge"]
        return "\n".join(lines) + "\n"

    def render_bridge_port(self, record: InterfaceRecord, stanza: RawStanza) -> str:
        if not record.bridge:
            raise ValueError(f"{record.name} has no owning bridge")
        lines = self._header(f"configuration for {record.name} (bridge port)")
        lines += ["[Match]", f"Name={record.name}", "", "[Network]", f"Bridge={record.bridge}"]
        if not stanza.is_empty:
            lines.append("")
            lines += self._trailer(stanza)
        return "\n".join(lines) + "\n"

    def generate(self, record: InterfaceRecord, stanza: RawStanza) -> List[GeneratedUnit]:
        """
        Units for one interface, .netdev first so the device exists before
        anything matches on it.
        """
        if record.role is InterfaceRole.BRIDGE_PORT:
            return [
                GeneratedUnit(
                    path=self.unit_path(record, UnitKind.NETWORK),
                    content=self.render_bridge_port(record, stanza),
                    kind=UnitKind.NETWORK,
                    interface=record.name,
                )
            ]

        units: List[GeneratedUnit] = []
        if record.role is InterfaceRole.BRIDGE_DEVICE:
            units.append(
                GeneratedUnit(
                    path=self.unit_path(record, UnitKind.NETDEV),
                    content=self.render_netdev(record),
                    kind=UnitKind.NETDEV,
                    interface=record.name,
                )
            )
        units.append(
            GeneratedUnit(
                path=self.unit_path(record, UnitKind.NETWORK),
                content=self.render_network(record, stanza),
                kind=UnitKind.NETWORK,
                interface=record.name,
            )
        )
        return units

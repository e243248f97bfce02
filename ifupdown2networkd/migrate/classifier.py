# SPDX-License-Identifier: LGPL-3.0-or-later
# ifupdown2networkd/migrate/classifier.py
"""
Interface role classification (standard / bridge device / bridge port).
"""

from __future__ import annotations

from typing import Dict, List, Optional, Sequence, Tuple

from ..core.exceptions import AmbiguousBridgeMembershipError
from .model import FamilyConfig, InterfaceConfig, InterfaceRecord, InterfaceRole

BRIDGE_PORTS_KEYS = ("bridge_ports", "bridge-ports")


def bridge_ports_of(inet: FamilyConfig) -> Optional[Tuple[str, ...]]:
    """
    Ports declared by a `bridge_ports` option, or None if the interface is
    not a bridge. `bridge_ports none` declares a bridge without ports.
    """
    for key in BRIDGE_PORTS_KEYS:
        value = inet.get(key)
        if value is None:
            continue
        words = value.split()
        if words == ["none"]:
            return ()
        return tuple(dict.fromkeys(words))
    return None


def build_port_map(configs: Sequence[InterfaceConfig]) -> Dict[str, str]:
    """
    port -> owning bridge. A port claimed by two bridges, a bridge naming
    itself, or a bridge enslaved to another bridge is rejected.
    """
    port_map: Dict[str, str] = {}
    bridges: Dict[str, Tuple[str, ...]] = {}
    for cfg in configs:
        ports = bridge_ports_of(cfg.inet)
        if ports is not None:
            bridges[cfg.name] = ports

    for bridge, ports in bridges.items():
        for port in ports:
            if port == bridge:
                raise AmbiguousBridgeMembershipError(
                    msg=f"Bridge {bridge} lists itself in bridge_ports",
                    context={"bridge": bridge},
                )
            if port in bridges:
                raise AmbiguousBridgeMembershipError(
                    msg=f"Bridge {port} is declared as a port of bridge {bridge}",
                    context={"bridge": bridge, "port": port},
                )
            owner = port_map.get(port)
            if owner is not None and owner != bridge:
                raise AmbiguousBridgeMembershipError(
                    msg=f"Interface {port} is a port of both {owner} and {bridge}",
                    context={"port": port, "bridges": [owner, bridge]},
                )
            port_map[port] = bridge
    return port_map


def classify_interfaces(configs: Sequence[InterfaceConfig]) -> List[InterfaceRecord]:
    """
    Turn parsed configs into immutable InterfaceRecords.

    Ports that have no configuration of their own still get a record, placed
    right after their bridge; everything else keeps input order.
    """
    port_map = build_port_map(configs)
    known = {cfg.name for cfg in configs}
    records: List[InterfaceRecord] = []

    for cfg in configs:
        ports = bridge_ports_of(cfg.inet)
        owner = port_map.get(cfg.name)
        if ports is not None:
            records.append(
                InterfaceRecord(
                    name=cfg.name,
                    role=InterfaceRole.BRIDGE_DEVICE,
                    inet=cfg.inet,
                    inet6=cfg.inet6,
                    bridge_ports=ports,
                )
            )
            for port in ports:
                if port not in known:
                    records.append(
                        InterfaceRecord(
                            name=port,
                            role=InterfaceRole.BRIDGE_PORT,
                            inet=FamilyConfig(family="inet", method="manual"),
                            bridge=cfg.name,
                        )
                    )
        elif owner is not None:
            records.append(
                InterfaceRecord(
                    name=cfg.name,
                    role=InterfaceRole.BRIDGE_PORT,
                    inet=cfg.inet,
                    inet6=cfg.inet6,
                    bridge=owner,
                )
            )
        else:
            records.append(
                InterfaceRecord(name=cfg.name, role=InterfaceRole.STANDARD, inet=cfg.inet, inet6=cfg.inet6)
            )
    return records

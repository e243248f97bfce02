# SPDX-License-Identifier: LGPL-3.0-or-later
# ifupdown2networkd/migrate/detector.py
"""
Unsupported-feature detection.

Anything the generator cannot express (bonding, VLANs, PPP, wireless,
hook scripts, ...) is reported so the operator decides whether to proceed.
Nothing here translates or drops configuration.
"""

from __future__ import annotations

from typing import Iterable, List, Sequence, Set, Tuple

from .model import FamilyConfig, InterfaceRecord, RawStanza, UnsupportedFinding
from .stanza import is_indented

# Prefix match, case-insensitive, over option keys.
UNSUPPORTED_KEY_PREFIXES: Tuple[str, ...] = (
    "vlan-raw-device",
    "bond-",
    "bond_",
    "wpa-",
    "wireless-",
    "ppp",
    "provider",
    "metric",
    "mtu",
    "hwaddress",
)

UNSUPPORTED_METHODS: Tuple[str, ...] = ("ppp", "wvdial", "ipv4ll", "tunnel", "6to4", "v4tunnel")

HOOK_KEYWORDS: Tuple[str, ...] = ("pre-up", "post-up", "up", "pre-down", "post-down", "down")


def _option_findings(name: str, fam: FamilyConfig) -> Iterable[UnsupportedFinding]:
    if fam.method.lower() in UNSUPPORTED_METHODS:
        yield UnsupportedFinding(name, f"{fam.family} method {fam.method.lower()}")
    for key in fam.keys():
        k = key.lower()
        if k in HOOK_KEYWORDS:
            continue
        if k.startswith(UNSUPPORTED_KEY_PREFIXES):
            yield UnsupportedFinding(name, k)


def _hook_findings(stanza: RawStanza) -> Iterable[UnsupportedFinding]:
    for line in stanza.lines:
        if not is_indented(line):
            continue
        words = line.split()
        if words and words[0].lower() in HOOK_KEYWORDS:
            yield UnsupportedFinding(stanza.name, f"{words[0].lower()} script")


def detect_record(record: InterfaceRecord, stanza: RawStanza) -> List[UnsupportedFinding]:
    """Findings for one interface, in discovery order, exact duplicates removed."""
    out: List[UnsupportedFinding] = []
    seen: Set[UnsupportedFinding] = set()
    candidates: List[UnsupportedFinding] = []
    for fam in record.families():
        candidates.extend(_option_findings(record.name, fam))
    candidates.extend(_hook_findings(stanza))
    for f in candidates:
        if f not in seen:
            seen.add(f)
            out.append(f)
    return out


def detect_unsupported(
    records: Sequence[InterfaceRecord],
    stanzas: Sequence[RawStanza],
) -> List[UnsupportedFinding]:
    """
    Scan every record together with its raw stanza. `stanzas` is matched to
    `records` by interface name; a record without one is scanned by options only.
    """
    by_name = {s.name: s for s in stanzas}
    out: List[UnsupportedFinding] = []
    seen: Set[UnsupportedFinding] = set()
    for rec in records:
        for f in detect_record(rec, by_name.get(rec.name, RawStanza(name=rec.name))):
            if f not in seen:
                seen.add(f)
                out.append(f)
    return out

# SPDX-License-Identifier: LGPL-3.0-or-later
# ifupdown2networkd/migrate/parser.py
"""
Normalize one interface's legacy configuration into FamilyConfig pairs.

IPv4 comes from the declarative query tool. ifquery has no way to report
address-family-6 data, so IPv6 is read straight out of the raw files by
walking to the `iface <name> inet6 <method>` line and collecting the
indented `key value` lines under it.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Tuple

from .model import FamilyConfig, InterfaceConfig
from .source import LegacyConfigSource
from .stanza import StanzaIndex, is_indented


def parse_inet6_stanza(name: str, index: StanzaIndex) -> Optional[FamilyConfig]:
    """
    Walk every indexed file for `iface <name> inet6 <method>`.

    Returns None if the interface has no inet6 declaration. Indented lines
    are read as `key value`; the block ends at the first non-indented,
    non-blank line.
    """
    method: Optional[str] = None
    options: List[Tuple[str, str]] = []

    for _path, lines in index.file_lines():
        in_inet6 = False
        for line in lines:
            words = line.split()
            if not is_indented(line) and words[:3] == ["iface", name, "inet6"]:
                in_inet6 = True
                if method is None:
                    method = words[3].lower() if len(words) >= 4 else "none"
                continue
            if not in_inet6:
                continue
            if is_indented(line) and words:
                if words[0].startswith("#"):
                    continue
                options.append((words[0].lower(), " ".join(words[1:])))
            elif words:
                in_inet6 = False

    if method is None:
        return None
    return FamilyConfig(family="inet6", method=method, options=tuple(options))


class InterfaceConfigParser:
    """
    Produce InterfaceConfig objects from a LegacyConfigSource and a
    pre-built StanzaIndex. The index is populated once by the caller and
    only read here.
    """

    def __init__(self, logger: logging.Logger, source: LegacyConfigSource, index: StanzaIndex):
        self.logger = logger
        self.source = source
        self.index = index

    def parse_inet(self, name: str) -> FamilyConfig:
        raw = self.source.query_interface(name)
        method: Optional[str] = None
        options: List[Tuple[str, str]] = []
        for key, value in raw:
            if key == "method":
                if method is None:
                    method = value.strip().lower()
                continue
            options.append((key, value))

        # Classic ifquery prints options only; the method lives on the iface line.
        if not method:
            method = self.index.iface_method(name, "inet") or "none"

        return FamilyConfig(family="inet", method=method, options=tuple(options))

    def parse(self, name: str) -> InterfaceConfig:
        inet = self.parse_inet(name)
        inet6 = parse_inet6_stanza(name, self.index)
        self.logger.debug(
            "Parsed %s: inet=%s (%d opts) inet6=%s",
            name,
            inet.method,
            len(inet.options),
            inet6.method if inet6 else "-",
        )
        return InterfaceConfig(name=name, inet=inet, inet6=inet6)

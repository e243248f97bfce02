# SPDX-License-Identifier: LGPL-3.0-or-later
# ifupdown2networkd/migrate/source.py
"""
The declarative query seam.

ifupdown's `ifquery` is the authority on what an interface's IPv4 options
are once mappings, includes and defaults have been applied. The migrator
only ever talks to it through LegacyConfigSource, so tests can hand in
fixtures instead of shelling out.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, List, Optional, Protocol, Sequence, Tuple

from ..core.utils import Runner, make_runner

Options = List[Tuple[str, str]]

IFQUERY = "ifquery"


class LegacyConfigSource(Protocol):
    def list_interfaces(self) -> List[str]:
        """Configured (auto) and hotplug interface names, loopback excluded."""
        ...

    def query_interface(self, name: str) -> Options:
        """Normalized (key, value) pairs for the interface's IPv4 config."""
        ...


def parse_ifquery_output(text: str) -> Options:
    """
    Parse `key: value` lines. Keys are lower-cased, repeated keys are kept
    in order, lines without a colon are ignored.
    """
    out: Options = []
    for raw in (text or "").splitlines():
        line = raw.strip()
        if not line or ":" not in line:
            continue
        key, _, value = line.partition(":")
        key = key.strip().lower()
        if key:
            out.append((key, value.strip()))
    return out


def _unique_non_loopback(names: Sequence[str]) -> List[str]:
    return sorted({n.strip() for n in names if n.strip() and n.strip() != "lo"})


class IfqueryConfigSource:
    """Production LegacyConfigSource backed by the ifquery CLI."""

    def __init__(
        self,
        logger: logging.Logger,
        interfaces_file: Path,
        *,
        runner: Optional[Runner] = None,
    ):
        self.logger = logger
        self.interfaces_file = Path(interfaces_file)
        self.runner = runner or make_runner(logger)
        self._cache: Dict[str, Options] = {}

    def _base(self) -> List[str]:
        return [IFQUERY, f"--interfaces={self.interfaces_file}"]

    def list_interfaces(self) -> List[str]:
        names: List[str] = []
        for extra in ([], ["--allow=hotplug"]):
            cp = self.runner(self._base() + ["-l"] + extra)
            if cp.returncode != 0:
                self.logger.debug("ifquery -l %s exited %s: %s", " ".join(extra), cp.returncode, (cp.stderr or "").strip())
                continue
            names.extend((cp.stdout or "").split())
        return _unique_non_loopback(names)

    def query_interface(self, name: str) -> Options:
        if name in self._cache:
            return list(self._cache[name])
        cp = self.runner(self._base() + [name])
        if cp.returncode != 0:
            # ifquery exits non-zero for interfaces it knows only as ports or
            # activation targets; an empty option set is the right answer there.
            self.logger.debug("ifquery %s exited %s", name, cp.returncode)
            opts: Options = []
        else:
            opts = parse_ifquery_output(cp.stdout)
        self._cache[name] = opts
        return list(opts)


# SPDX-License-Identifier: LGPL-3.0-or-later
# ifupdown2networkd/migrate/stanza.py
"""
Raw stanza extraction for interfaces(5) files.

The whole file set (main file plus everything pulled in by `source` and
`source-directory`) is scanned once, in a single linear pass per file, and
every interface's verbatim lines are indexed. Lookups never touch the disk.
"""

from __future__ import annotations

import glob
import logging
import os
import re
from collections import deque
from dataclasses import dataclass, field
from pathlib import Path
from typing import Deque, Dict, List, Optional, Set, Tuple

from .model import RawStanza

# run-parts style names, which is what ifupdown accepts from source-directory
_SOURCE_DIR_NAME_RE = re.compile(r"^[a-zA-Z0-9_-]+$")
_ACTIVATION_RE = re.compile(r"^(auto|allow-[A-Za-z0-9_-]+)$")


def is_indented(line: str) -> bool:
    return bool(line) and line[0] in (" ", "\t")


@dataclass
class _Entry:
    lines: List[str] = field(default_factory=list)
    sources: List[Path] = field(default_factory=list)

    def add(self, line: str, src: Path) -> None:
        self.lines.append(line)
        if src not in self.sources:
            self.sources.append(src)


class StanzaIndex:
    """
    Map of interface name -> RawStanza, built once per run.

    A stanza is: every activation line (`auto`, `allow-hotplug`, ...) naming
    the interface, each `iface <name> ...` definition line, and the indented
    lines directly under a definition. Blank lines inside a block do not end
    it; the first non-indented, non-blank line does.
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger(__name__)
        self._entries: Dict[str, _Entry] = {}
        self._files: List[Path] = []
        self._file_lines: Dict[Path, List[str]] = {}

    # ------------------------------------------------------------------
    # Building
    # ------------------------------------------------------------------

    @classmethod
    def build(cls, interfaces_file: Path, logger: Optional[logging.Logger] = None) -> "StanzaIndex":
        idx = cls(logger)
        idx._scan_tree(Path(interfaces_file))
        return idx

    def _scan_tree(self, root: Path) -> None:
        seen: Set[str] = set()
        queue: Deque[Path] = deque([root])
        while queue:
            path = queue.popleft()
            key = os.path.realpath(str(path))
            if key in seen:
                self.logger.debug("Skipping already scanned file: %s", path)
                continue
            seen.add(key)
            try:
                text = path.read_text(encoding="utf-8", errors="replace")
            except OSError as e:
                self.logger.warning("Cannot read %s: %s", path, e)
                continue
            lines = text.splitlines()
            self._files.append(path)
            self._file_lines[path] = lines
            queue.extend(self._scan_file(path, lines))

    def _scan_file(self, path: Path, lines: List[str]) -> List[Path]:
        includes: List[Path] = []
        current: Optional[str] = None

        for line in lines:
            if current is not None:
                if is_indented(line) and line.strip():
                    self._entries[current].add(line, path)
                    continue
                if not line.strip():
                    continue
                current = None

            words = line.split()
            if not words or is_indented(line) or words[0].startswith("#"):
                continue

            keyword = words[0]
            if keyword == "iface" and len(words) >= 2:
                current = words[1]
                self._entry(current).add(line, path)
            elif _ACTIVATION_RE.match(keyword):
                for name in dict.fromkeys(words[1:]):
                    self._entry(name).add(line, path)
            elif keyword == "source" and len(words) >= 2:
                includes.extend(self._expand_source(path, words[1]))
            elif keyword == "source-directory" and len(words) >= 2:
                includes.extend(self._expand_source_directory(path, words[1]))

        return includes

    def _entry(self, name: str) -> _Entry:
        e = self._entries.get(name)
        if e is None:
            e = self._entries[name] = _Entry()
        return e

    @staticmethod
    def _resolve(including: Path, pattern: str) -> str:
        if os.path.isabs(pattern):
            return pattern
        return str(including.parent / pattern)

    def _expand_source(self, including: Path, pattern: str) -> List[Path]:
        out = [Path(p) for p in sorted(glob.glob(self._resolve(including, pattern))) if os.path.isfile(p)]
        if not out:
            self.logger.debug("source %s matched no files", pattern)
        return out

    def _expand_source_directory(self, including: Path, pattern: str) -> List[Path]:
        out: List[Path] = []
        for d in sorted(glob.glob(self._resolve(including, pattern))):
            if not os.path.isdir(d):
                continue
            for name in sorted(os.listdir(d)):
                p = Path(d) / name
                if _SOURCE_DIR_NAME_RE.match(name) and p.is_file():
                    out.append(p)
        return out

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def file_lines(self) -> List[Tuple[Path, List[str]]]:
        return [(p, self._file_lines[p]) for p in self._files]

    def get(self, name: str) -> RawStanza:
        e = self._entries.get(name)
        if e is None:
            return RawStanza(name=name)
        return RawStanza(name=name, lines=tuple(e.lines), sources=tuple(e.sources))

    def iface_method(self, name: str, family: str = "inet") -> Optional[str]:
        """Method from the `iface <name> <family> <method>` line, if declared."""
        for line in self.get(name).lines:
            words = line.split()
            if len(words) >= 4 and words[0] == "iface" and words[1] == name and words[2] == family:
                return words[3].lower()
        return None

# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
# ifupdown2networkd/core/run_lock.py
from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Optional

from .exceptions import RunLockError
from .utils import U

try:
    import fcntl  # POSIX only
except Exception:  # pragma: no cover
    fcntl = None  # type: ignore


class RunLock:
    """
    Host-wide exclusive lock held for the whole migration run.

    Two migrations racing on the same interfaces file would interleave
    backups and unit writes, so a second run fails fast instead of waiting.
    The lock file is left behind on release; its JSON body names the last
    holder, which helps when debugging a stale run.
    """

    def __init__(self, logger: logging.Logger, path: Path):
        self.logger = logger
        self.path = Path(path)
        self._fp: Optional[Any] = None

    @property
    def held(self) -> bool:
        return self._fp is not None

    def acquire(self) -> None:
        if fcntl is None:
            self.logger.debug("fcntl unavailable; running without a run lock")
            return
        U.ensure_dir(self.path.parent)
        fp = self.path.open("a+", encoding="utf-8")
        try:
            fcntl.flock(fp.fileno(), fcntl.LOCK_EX | fcntl.LOCK_NB)
        except OSError as e:
            fp.seek(0)
            holder = fp.read().strip()
            fp.close()
            raise RunLockError(
                msg=f"Another migration is already running (lock: {self.path})",
                cause=e,
                context={"holder": holder} if holder else None,
            )

        fp.seek(0)
        fp.truncate(0)
        fp.write(json.dumps({"pid": os.getpid(), "ts": U.now_ts()}))
        fp.flush()
        self._fp = fp
        self.logger.debug("Acquired run lock: %s", self.path)

    def release(self) -> None:
        if self._fp is None:
            return
        try:
            if fcntl is not None:
                fcntl.flock(self._fp.fileno(), fcntl.LOCK_UN)
        finally:
            self._fp.close()
            self._fp = None
            self.logger.debug("Released run lock: %s", self.path)

    def __enter__(self) -> "RunLock":
        self.acquire()
        return self

    def __exit__(self, *exc: Any) -> None:
        self.release()

# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
# ifupdown2networkd/core/utils.py
from __future__ import annotations

import datetime as _dt
import json
import logging
import os
import shlex
import subprocess
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Sequence, Union

from .exceptions import Fatal

# A runner takes an argv list and returns a CompletedProcess with text output.
# It never raises on a non-zero exit; callers inspect returncode.
Runner = Callable[[Sequence[str]], subprocess.CompletedProcess]


class U:
    @staticmethod
    def die(logger: logging.Logger, msg: str, code: int = 1) -> None:
        logger.error(msg)
        raise Fatal(code, msg)

    @staticmethod
    def ensure_dir(p: Path) -> None:
        p.mkdir(parents=True, exist_ok=True)

    @staticmethod
    def which(prog: str) -> Optional[str]:
        from shutil import which as _which
        return _which(prog)

    @staticmethod
    def now_ts() -> str:
        return _dt.datetime.now().strftime("%Y%m%d_%H%M%S")

    @staticmethod
    def json_dump(obj: Any) -> str:
        try:
            return json.dumps(obj, indent=2, sort_keys=True, default=str)
        except Exception:
            return repr(obj)

    @staticmethod
    def pretty_cmd(cmd: Sequence[str]) -> str:
        return " ".join(shlex.quote(str(x)) for x in cmd)

    @staticmethod
    def run_cmd(
        logger: logging.Logger,
        cmd: Sequence[str],
        *,
        check: bool = True,
        capture: bool = False,
        env: Optional[Dict[str, str]] = None,
        timeout: Optional[int] = None,
        cwd: Optional[Union[str, Path]] = None,
        fatal: bool = False,
    ) -> subprocess.CompletedProcess:
        """
        Run a command.

        - capture=True uses subprocess.run(capture_output=True, text=True)
        - fatal=True wraps failures into Fatal (otherwise re-raises subprocess exceptions)
        """
        pretty = U.pretty_cmd(cmd)
        logger.debug("Running: %s", pretty)

        try:
            return subprocess.run(
                list(cmd),
                check=check,
                capture_output=capture,
                text=True,
                env=env,
                timeout=timeout,
                cwd=str(cwd) if cwd is not None else None,
            )

        except subprocess.CalledProcessError as e:
            stdout = (e.stdout or e.output or "").strip()
            stderr = (e.stderr or "").strip()
            logger.error(
                "Command failed: %s%s%s",
                pretty,
                f"\nstdout:\n{stdout}" if stdout else "",
                f"\nstderr:\n{stderr}" if stderr else "",
            )
            if fatal:
                raise Fatal(e.returncode or 1, f"Command failed: {pretty}") from e
            raise

        except subprocess.TimeoutExpired as e:
            logger.error("Command timed out: %s (timeout=%ss)", pretty, timeout)
            if fatal:
                raise Fatal(124, f"Command timed out: {pretty}") from e
            raise

    @staticmethod
    def is_root() -> bool:
        return os.geteuid() == 0


def make_runner(logger: logging.Logger, *, timeout: Optional[int] = 60) -> Runner:
    """
    Default Runner: captures text output and reports a missing binary as
    returncode 127, the way a shell would.
    """

    def _run(cmd: Sequence[str]) -> subprocess.CompletedProcess:
        try:
            return U.run_cmd(logger, cmd, check=False, capture=True, timeout=timeout)
        except FileNotFoundError as e:
            logger.debug("Command not found: %s (%s)", cmd[0] if cmd else "?", e)
            return subprocess.CompletedProcess(list(cmd), 127, stdout="", stderr=str(e))

    return _run


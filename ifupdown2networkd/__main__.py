# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
# ifupdown2networkd/__main__.py
from __future__ import annotations

import sys
import traceback
from typing import Optional

from rich.prompt import Confirm

from .cli.argument_parser import parse_args_with_config
from .config.settings import MigrationSettings
from .core.exceptions import ExitCode, Fatal, MigratorError, format_exception_for_cli
from .migrate.orchestrator import MigrationOrchestrator


def _print_stderr(msg: str) -> None:
    print(msg, file=sys.stderr)


def _safe_log(logger, level: str, msg: str) -> None:
    """
    Best-effort logging without assuming logger exists or has a given method.
    """
    if logger is None:
        _print_stderr(msg)
        return

    fn = getattr(logger, level, None)
    if callable(fn):
        fn(msg)
    else:
        _print_stderr(msg)


def interactive_confirm(question: str) -> bool:
    """rich prompt on a terminal; anything non-interactive declines."""
    try:
        if not sys.stdin.isatty():
            return False
    except Exception:
        return False
    return Confirm.ask(question, default=False)


def main() -> None:
    logger: Optional[object] = None

    # Phase 1: parse (Fatal can happen here)
    try:
        args, _conf, logger = parse_args_with_config()
    except Fatal as e:
        if logger is None:
            _print_stderr(f"💥 ERROR    {e}")
        raise SystemExit(getattr(e, "code", 1))
    except KeyboardInterrupt:
        _safe_log(logger, "warning", "Interrupted by user (Ctrl+C).")
        raise SystemExit(ExitCode.INTERRUPTED)

    # Phase 2: run the migration
    try:
        settings = MigrationSettings.from_args(args)
        result = MigrationOrchestrator(logger, settings, confirm=interactive_confirm).run()
        rc = result.exit_code
    except Fatal as e:
        # U.die() already logged it.
        rc = getattr(e, "code", 1)
    except MigratorError as e:
        _safe_log(logger, "error", format_exception_for_cli(e, verbose=args.verbose))
        rc = e.code
    except KeyboardInterrupt:
        _safe_log(logger, "warning", "Interrupted by user (Ctrl+C).")
        rc = ExitCode.INTERRUPTED
    except Exception as e:
        _safe_log(logger, "error", f"💥 UNHANDLED {type(e).__name__}: {e}")
        _safe_log(logger, "debug", traceback.format_exc())
        rc = ExitCode.UNEXPECTED

    raise SystemExit(rc)


if __name__ == "__main__":
    main()

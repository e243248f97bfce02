# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
# ifupdown2networkd/migrate/report.py
"""
End-of-run output: created files, manual rollback commands, JSON report.

Printed for every terminal state so the operator can always undo the run
by hand, even after a crash in a later step.
"""

from __future__ import annotations

import datetime as _dt
import os
import shlex
import sys
from dataclasses import asdict, is_dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, TextIO

from rich.console import Console
from rich.panel import Panel

from .. import __version__
from ..core.backup import BackupRecord
from ..core.file_ops import atomic_write_text
from ..core.utils import U
from .model import MigrationResult, MigrationState
from .services import LEGACY_SERVICE, NETWORKD_SERVICE, RESOLVED_SERVICE


def _json_safe(obj: Any) -> Any:
    """Paths, enums and dataclasses into JSON-native values."""
    if obj is None or isinstance(obj, (str, int, float, bool)):
        return obj
    if isinstance(obj, Path):
        return str(obj)
    if isinstance(obj, (_dt.datetime, _dt.date)):
        return obj.isoformat()
    if is_dataclass(obj) and not isinstance(obj, type):
        return _json_safe(asdict(obj))
    v = getattr(obj, "value", None)
    if v is not None and not isinstance(obj, (dict, list, tuple, set)):
        return _json_safe(v)
    if isinstance(obj, dict):
        return {str(k): _json_safe(v2) for k, v2 in obj.items()}
    if isinstance(obj, (list, tuple, set)):
        return [_json_safe(x) for x in obj]
    return str(obj)


def _q(p: Any) -> str:
    return shlex.quote(str(p))


def backup_for(result: MigrationResult, original: Path) -> Optional[BackupRecord]:
    want = os.path.normpath(os.path.abspath(str(original)))
    for rec in result.backups:
        if str(rec.original) == want:
            return rec
    return None


def _restore_command(rec: BackupRecord, original: Path) -> str:
    if rec.link_target is not None:
        return f"ln -sfn {_q(rec.link_target)} {_q(original)}"
    return f"cp -p {_q(rec.backup)} {_q(original)}"


def rollback_commands(
    result: MigrationResult,
    *,
    interfaces_file: Path,
    resolv_conf: Path,
) -> List[str]:
    """
    Numbered, copy-pasteable steps that undo the migration by hand.
    """
    lines: List[str] = ["If you need to revert to ifupdown, follow these steps:", ""]

    backup = backup_for(result, interfaces_file)
    lines.append("1. Restore the original interfaces file:")
    if backup is not None:
        lines.append(f"   {_restore_command(backup, interfaces_file)}")
    else:
        lines.append("   (Restore from your backup)")
    lines.append("")

    lines.append("2. Remove created systemd-networkd files:")
    if result.created_files:
        lines.extend(f"   rm -f {_q(p)}" for p in result.created_files)
    else:
        lines.append("   (none were created)")
    lines.append("")

    lines.append("3. Disable systemd-networkd services:")
    lines.append(f"   systemctl disable --now {NETWORKD_SERVICE}")
    lines.append(f"   systemctl disable --now {RESOLVED_SERVICE}")
    lines.append("")

    lines.append("4. Re-enable ifupdown networking:")
    lines.append(f"   systemctl enable {LEGACY_SERVICE}")
    lines.append(f"   systemctl start {LEGACY_SERVICE}")

    if result.resolv_conf_symlinked:
        lines.append("")
        lines.append("5. Restore resolv.conf:")
        lines.append(f"   rm -f {_q(resolv_conf)}")
        resolv_backup = backup_for(result, resolv_conf)
        if resolv_backup is not None:
            lines.append(f"   {_restore_command(resolv_backup, resolv_conf)}")
        else:
            lines.append("   (Restore from backup or recreate manually)")
    return lines


_TITLES = {
    MigrationState.COMMITTED: "✓ Migration complete",
    MigrationState.ROLLED_BACK: "✗ Verification failed: rolled back to ifupdown",
    MigrationState.ABORTED: "Migration aborted",
}


def _console(stream: TextIO) -> Optional[Console]:
    try:
        if not stream.isatty():
            return None
    except Exception:
        return None
    return Console(file=stream)


def print_panel(title: str, body: str = "", *, stream: Optional[TextIO] = None) -> None:
    """Rich panel on a terminal, plain box-drawing otherwise."""
    out = stream or sys.stdout
    con = _console(out)
    if con is not None:
        con.print(Panel(body or "", title=title, expand=True))
        return

    rows = body.splitlines()
    inner_w = max([57, len(title) + 2] + [len(x) + 2 for x in rows])
    line = "─" * inner_w
    print(f"╭{line}╮", file=out)
    print(f"│ {title:<{inner_w - 2}} │", file=out)
    if rows:
        print(f"├{line}┤", file=out)
        for r in rows:
            print(f"│ {r:<{inner_w - 2}} │", file=out)
    print(f"╰{line}╯", file=out)


def print_summary(
    result: MigrationResult,
    *,
    interfaces_file: Path,
    resolv_conf: Path,
    stream: Optional[TextIO] = None,
) -> None:
    title = _TITLES.get(result.state, result.state.value)
    if result.skipped:
        title = "Dry run" if result.planned_units else "Migration skipped"

    body: List[str] = []
    if result.skipped_reason:
        body.append(result.skipped_reason)
    if result.error:
        body.append(f"Error: {result.error}")
    if result.findings:
        body.append("Not migrated automatically:")
        body.extend(f"  ⚠ {f}" for f in result.findings)
    if result.state is MigrationState.ABORTED and result.created_files:
        body.append("Generated files were left in place for review.")
    if result.planned_units:
        body.append("Would create:")
        body.extend(f"  • {u.path}" for u in result.planned_units)
    if result.state is MigrationState.ROLLED_BACK:
        body.append("Created files (removed during rollback):")
    else:
        body.append("Created files:")
    if result.created_files:
        body.extend(f"  ✓ {p}" for p in result.created_files)
    else:
        body.append("  (none)")
    print_panel(title, "\n".join(body), stream=stream)

    if result.skipped:
        return
    print_panel(
        "Rollback Instructions",
        "\n".join(rollback_commands(result, interfaces_file=interfaces_file, resolv_conf=resolv_conf)),
        stream=stream,
    )


def build_report(result: MigrationResult, **extra: Any) -> Dict[str, Any]:
    rep: Dict[str, Any] = {
        "tool": "ifupdown2networkd",
        "version": __version__,
        "generated_at": _dt.datetime.now().astimezone().isoformat(),
        "state": result.state,
        "exit_code": result.exit_code,
        "skipped_reason": result.skipped_reason,
        "error": result.error,
        "created_files": result.created_files,
        "units": [{"path": u.path, "kind": u.kind, "interface": u.interface} for u in result.created_units],
        "backups": result.backups,
        "findings": [{"interface": f.interface, "keyword": f.keyword} for f in result.findings],
        "resolv_conf_symlinked": result.resolv_conf_symlinked,
    }
    rep.update(extra)
    return _json_safe(rep)


def write_json_report(path: Path, result: MigrationResult, **extra: Any) -> Path:
    p = Path(path)
    atomic_write_text(p, U.json_dump(build_report(result, **extra)) + "\n")
    return p

# SPDX-License-Identifier: LGPL-3.0-or-later
from __future__ import annotations

import io
import json
from pathlib import Path

import pytest

from ifupdown2networkd.core.backup import BackupRecord
from ifupdown2networkd.migrate.model import (
    GeneratedUnit,
    MigrationResult,
    MigrationState,
    UnitKind,
    UnsupportedFinding,
)
from ifupdown2networkd.migrate.report import (
    build_report,
    print_summary,
    rollback_commands,
    write_json_report,
)

IFACES = Path("/etc/network/interfaces")
RESOLV = Path("/etc/resolv.conf")


def _result(state=MigrationState.COMMITTED, code=0, **kw):
    units = [
        GeneratedUnit(Path("/etc/systemd/network/10-eth0.network"), "x", UnitKind.NETWORK, "eth0"),
        GeneratedUnit(Path("/etc/systemd/network/20-br0.netdev"), "x", UnitKind.NETDEV, "br0"),
    ]
    backups = [BackupRecord(IFACES, Path("/etc/network/interfaces.backup.20260101_000000.bak"))]
    return MigrationResult(state=state, exit_code=code, created_units=units, backups=backups, **kw)


@pytest.mark.unit
class TestRollbackCommands:
    def test_core_steps(self):
        lines = rollback_commands(_result(), interfaces_file=IFACES, resolv_conf=RESOLV)
        text = "\n".join(lines)

        assert "cp -p /etc/network/interfaces.backup.20260101_000000.bak /etc/network/interfaces" in text
        assert "rm -f /etc/systemd/network/10-eth0.network" in text
        assert "rm -f /etc/systemd/network/20-br0.netdev" in text
        assert "systemctl disable --now systemd-networkd.service" in text
        assert "systemctl enable networking.service" in text
        assert "5. Restore resolv.conf:" not in text

    def test_resolv_conf_step_when_symlinked(self):
        res = _result(resolv_conf_symlinked=True)
        res.backups.append(BackupRecord(RESOLV, Path("/etc/resolv.conf.backup.20260101_000000.bak")))
        text = "\n".join(rollback_commands(res, interfaces_file=IFACES, resolv_conf=RESOLV))

        assert "5. Restore resolv.conf:" in text
        assert "rm -f /etc/resolv.conf" in text
        assert "cp -p /etc/resolv.conf.backup.20260101_000000.bak /etc/resolv.conf" in text

    def test_symlinked_original_restored_with_ln(self):
        res = _result(resolv_conf_symlinked=True)
        res.backups.append(
            BackupRecord(RESOLV, Path("/etc/resolv.conf.backup.20260101_000000.bak"), "../run/resolvconf/resolv.conf")
        )
        text = "\n".join(rollback_commands(res, interfaces_file=IFACES, resolv_conf=RESOLV))

        assert "ln -sfn ../run/resolvconf/resolv.conf /etc/resolv.conf" in text
        assert "cp -p /etc/resolv.conf.backup" not in text

    def test_no_backup_no_units(self):
        res = MigrationResult(state=MigrationState.ABORTED, exit_code=2)
        text = "\n".join(rollback_commands(res, interfaces_file=IFACES, resolv_conf=RESOLV))
        assert "(Restore from your backup)" in text
        assert "(none were created)" in text

    def test_paths_are_shell_quoted(self):
        res = MigrationResult(state=MigrationState.ABORTED, exit_code=2, created_units=[
            GeneratedUnit(Path("/tmp/odd dir/10-eth0.network"), "x", UnitKind.NETWORK, "eth0"),
        ])
        text = "\n".join(rollback_commands(res, interfaces_file=IFACES, resolv_conf=RESOLV))
        assert "rm -f '/tmp/odd dir/10-eth0.network'" in text


@pytest.mark.unit
class TestPrintSummary:
    def test_committed(self):
        out = io.StringIO()
        print_summary(_result(), interfaces_file=IFACES, resolv_conf=RESOLV, stream=out)
        text = out.getvalue()

        assert "✓ Migration complete" in text
        assert "✓ /etc/systemd/network/10-eth0.network" in text
        assert "Rollback Instructions" in text

    def test_rolled_back_labels_files(self):
        out = io.StringIO()
        print_summary(_result(MigrationState.ROLLED_BACK, 6), interfaces_file=IFACES, resolv_conf=RESOLV, stream=out)
        text = out.getvalue()
        assert "rolled back" in text
        assert "removed during rollback" in text

    def test_findings_listed(self):
        out = io.StringIO()
        res = _result(findings=[UnsupportedFinding("eth0", "mtu")])
        print_summary(res, interfaces_file=IFACES, resolv_conf=RESOLV, stream=out)
        assert "⚠ eth0: mtu" in out.getvalue()

    def test_skipped_has_no_rollback(self):
        out = io.StringIO()
        res = MigrationResult(state=MigrationState.INIT, exit_code=0, skipped_reason="No /etc/network/interfaces found")
        print_summary(res, interfaces_file=IFACES, resolv_conf=RESOLV, stream=out)
        text = out.getvalue()
        assert "Migration skipped" in text
        assert "No /etc/network/interfaces found" in text
        assert "Rollback Instructions" not in text

    def test_dry_run_lists_planned(self):
        out = io.StringIO()
        res = MigrationResult(state=MigrationState.INIT, exit_code=0, planned_units=_result().created_units)
        print_summary(res, interfaces_file=IFACES, resolv_conf=RESOLV, stream=out)
        text = out.getvalue()
        assert "Dry run" in text
        assert "Would create:" in text
        assert "/etc/systemd/network/20-br0.netdev" in text


@pytest.mark.unit
class TestJsonReport:
    def test_build_report_is_json_native(self):
        rep = build_report(_result(findings=[UnsupportedFinding("eth0", "pre-up script")]), interfaces_file=IFACES)

        assert rep["state"] == "Committed"
        assert rep["units"][1] == {"path": "/etc/systemd/network/20-br0.netdev", "kind": "virtual-device", "interface": "br0"}
        assert rep["backups"][0]["original"] == "/etc/network/interfaces"
        assert rep["findings"] == [{"interface": "eth0", "keyword": "pre-up script"}]
        assert rep["interfaces_file"] == "/etc/network/interfaces"
        json.dumps(rep)

    def test_write_json_report(self, tmp_path):
        path = write_json_report(tmp_path / "report.json", _result(MigrationState.ROLLED_BACK, 6))
        data = json.loads(path.read_text(encoding="utf-8"))
        assert data["exit_code"] == 6
        assert data["state"] == "RolledBack"
        assert data["tool"] == "ifupdown2networkd"

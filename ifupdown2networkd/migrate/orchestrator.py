# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
# ifupdown2networkd/migrate/orchestrator.py
"""
The migration state machine.

    Init -> BackedUp -> Generated -> Warned -> NewEnabled -> Verified -> Committed
                                                    \\-> RolledBack
    (any non-terminal state) -> Aborted

The new stack is brought up and verified before the legacy service is
touched; networking.service is only stopped once systemd-networkd has at
least one routable/configured link.
"""

from __future__ import annotations

import logging
import sys
import time
from typing import Callable, Dict, List, Optional, TextIO, Tuple

from ..config.settings import MigrationSettings
from ..core.backup import BackupManager
from ..core.exceptions import (
    ExitCode,
    GenerationError,
    MigratorError,
    PreconditionError,
    ServiceError,
    StateTransitionError,
)
from ..core.logger import Log
from ..core.run_lock import RunLock
from ..core.utils import Runner, U, make_runner
from .classifier import classify_interfaces
from .detector import detect_unsupported
from .generator import UnitGenerator
from .model import (
    TRANSITIONS,
    GeneratedUnit,
    InterfaceRecord,
    MigrationResult,
    MigrationState,
    RawStanza,
    UnsupportedFinding,
)
from .parser import InterfaceConfigParser
from .preconditions import PreconditionChecker
from .report import print_summary, write_json_report
from .resolver import ResolvConfManager
from .services import (
    LEGACY_SERVICE,
    NETWORK_MANAGER_SERVICE,
    NETWORKD_SERVICE,
    RESOLVED_SERVICE,
    ServiceController,
)
from .source import IfqueryConfigSource, LegacyConfigSource
from .stanza import StanzaIndex
from .verifier import ConnectivityVerifier
from .writer import UnitWriter

Confirm = Callable[[str], bool]

NEW_SERVICES: Tuple[str, ...] = (NETWORKD_SERVICE, RESOLVED_SERVICE)


def _decline(_question: str) -> bool:
    return False


def _accept(_question: str) -> bool:
    return True


class MigrationOrchestrator:
    """
    One migration run. Collaborators that touch the host (legacy config
    source, command runner, sleep, clocks, confirmation) are injectable.
    """

    def __init__(
        self,
        logger: logging.Logger,
        settings: MigrationSettings,
        *,
        source: Optional[LegacyConfigSource] = None,
        runner: Optional[Runner] = None,
        confirm: Optional[Confirm] = None,
        sleep: Callable[[float], None] = time.sleep,
        clock: Optional[Callable[[], str]] = None,
        backup_clock: Callable[[], str] = U.now_ts,
        stdout: Optional[TextIO] = None,
        platform: str = sys.platform,
        which: Callable[[str], Optional[str]] = U.which,
        is_root: Callable[[], bool] = U.is_root,
    ):
        self.logger = logger
        self.settings = settings
        self.stdout = stdout or sys.stdout
        self.runner = runner or make_runner(logger)

        if settings.assume_yes:
            self.confirm: Confirm = _accept
        else:
            self.confirm = confirm or _decline

        self.source: LegacyConfigSource = source or IfqueryConfigSource(
            logger, settings.interfaces_file, runner=self.runner
        )
        self.services = ServiceController(logger, self.runner)
        self.backups = BackupManager(logger, clock=backup_clock)
        self.writer = UnitWriter(logger, settings.networkd_dir, backups=self.backups)
        self.generator = UnitGenerator(
            settings.networkd_dir,
            priority_standard=settings.priority_standard,
            priority_bridge=settings.priority_bridge,
            source_label=str(settings.interfaces_file),
            clock=clock,
        )
        self.verifier = ConnectivityVerifier(
            logger,
            self.services,
            runner=self.runner,
            attempts=settings.verify_attempts,
            delay_s=settings.verify_delay,
            sleep=sleep,
        )
        self.resolver = ResolvConfManager(
            logger,
            self.backups,
            resolv_conf=settings.resolv_conf,
            stub=settings.resolved_stub,
        )
        self.preconditions = PreconditionChecker(
            logger,
            interfaces_file=settings.interfaces_file,
            networkd_dir=settings.networkd_dir,
            runner=self.runner,
            which=which,
            platform=platform,
            is_root=is_root,
            allow_container=settings.allow_container,
            confirm=self.confirm,
            dry_run=settings.dry_run,
        )

        self.state = MigrationState.INIT
        self.history: List[MigrationState] = [self.state]
        self.findings: List[UnsupportedFinding] = []
        self.planned: List[GeneratedUnit] = []

    # ------------------------------------------------------------------
    # State machine
    # ------------------------------------------------------------------

    def _advance(self, new: MigrationState) -> None:
        allowed = TRANSITIONS.get(self.state, frozenset())
        if new not in allowed:
            raise StateTransitionError(
                msg=f"Illegal state transition {self.state.value} -> {new.value}",
                context={"from": self.state.value, "to": new.value},
            )
        Log.trace(self.logger, "state %s -> %s", self.state.value, new.value)
        self.state = new
        self.history.append(new)

    def _result(
        self,
        exit_code: int,
        *,
        skipped_reason: Optional[str] = None,
        error: Optional[str] = None,
    ) -> MigrationResult:
        return MigrationResult(
            state=self.state,
            exit_code=exit_code,
            created_units=self.writer.created,
            planned_units=list(self.planned),
            backups=self.backups.records,
            findings=list(self.findings),
            resolv_conf_symlinked=self.resolver.symlinked,
            skipped_reason=skipped_reason,
            error=error,
            history=list(self.history),
        )

    def _abort(self, exit_code: int, *, reason: Optional[str] = None, error: Optional[str] = None) -> MigrationResult:
        if not self.state.terminal:
            self._advance(MigrationState.ABORTED)
        return self._result(exit_code, skipped_reason=reason, error=error)

    # ------------------------------------------------------------------
    # Entry point
    # ------------------------------------------------------------------

    def run(self) -> MigrationResult:
        Log.banner(self.logger, "Migrate ifupdown to systemd-networkd")

        try:
            self.preconditions.check()
        except PreconditionError as e:
            self.logger.info("Skipping migration: %s", e.msg)
            result = self._result(e.code, skipped_reason=e.msg)
            self._finish(result)
            return result

        if self.settings.dry_run:
            result = self._dry_run()
            self._finish(result)
            return result

        with RunLock(self.logger, self.settings.lock_file):
            try:
                result = self._migrate()
            except StateTransitionError:
                raise
            except MigratorError as e:
                Log.fail(self.logger, e.user_message(include_context=True))
                result = self._abort(e.code, error=e.user_message())

        self._finish(result)
        return result

    def _finish(self, result: MigrationResult) -> None:
        print_summary(
            result,
            interfaces_file=self.settings.interfaces_file,
            resolv_conf=self.settings.resolv_conf,
            stream=self.stdout,
        )
        if self.settings.report is not None:
            try:
                path = write_json_report(self.settings.report, result, dry_run=self.settings.dry_run)
                self.logger.info("📄 Report written: %s", path)
            except OSError as e:
                self.logger.error("Could not write report %s: %s", self.settings.report, e)

    # ------------------------------------------------------------------
    # Steps
    # ------------------------------------------------------------------

    def _plan(self) -> Tuple[List[InterfaceRecord], Dict[str, RawStanza], List[GeneratedUnit]]:
        """
        Discover, parse, classify, detect and render. Nothing is written here,
        so ambiguous input or a bad netmask stops the run before any file
        exists.
        """
        names = self.source.list_interfaces()
        self.logger.info("Found %d interface(s): %s", len(names), ", ".join(names) or "-")

        index = StanzaIndex.build(self.settings.interfaces_file, self.logger)
        parser = InterfaceConfigParser(self.logger, self.source, index)
        records = classify_interfaces([parser.parse(n) for n in names])

        stanzas: Dict[str, RawStanza] = {}
        for rec in records:
            stanza = index.get(rec.name)
            if stanza.is_empty:
                Log.bind(self.logger, iface=rec.name).warning("No stanza found in %s", self.settings.interfaces_file)
            stanzas[rec.name] = stanza

        self.findings = detect_unsupported(records, list(stanzas.values()))

        units: List[GeneratedUnit] = []
        for rec in records:
            units.extend(self.generator.generate(rec, stanzas[rec.name]))
        return records, stanzas, units

    def _dry_run(self) -> MigrationResult:
        Log.step(self.logger, "Dry run: previewing generated units")
        try:
            _records, _stanzas, units = self._plan()
        except MigratorError as e:
            Log.fail(self.logger, e.user_message(include_context=True))
            return self._result(e.code, skipped_reason="Dry run failed", error=e.user_message())

        self.planned = units
        for u in units:
            print(f"# ---- {u.path} ({u.kind.value}) ----", file=self.stdout)
            print(u.content, file=self.stdout)
        self._report_findings()
        return self._result(ExitCode.OK, skipped_reason="Dry run: no files written, no services touched")

    def _report_findings(self) -> None:
        if not self.findings:
            return
        Log.warn(self.logger, "The following configurations are NOT automatically migrated:")
        for f in self.findings:
            self.logger.warning("   ⚠ %s", f)
        self.logger.warning(
            "Add them manually to the generated .network files; see systemd.network(5) for syntax."
        )

    def _migrate(self) -> MigrationResult:
        # Init -> BackedUp
        Log.step(self.logger, "Backing up current configuration")
        self.backups.backup(self.settings.interfaces_file)
        self._advance(MigrationState.BACKED_UP)

        # BackedUp -> Generated
        Log.step(self.logger, "Generating systemd-networkd units")
        _records, _stanzas, units = self._plan()
        if not units:
            return self._abort(ExitCode.OK, reason="No interfaces to migrate")
        try:
            self.writer.write_all(units)
        except GenerationError as e:
            Log.fail(self.logger, e.user_message(include_context=True))
            self.logger.error("Files already written are left in place for inspection")
            return self._abort(e.code, error=e.user_message())
        self._advance(MigrationState.GENERATED)

        # Generated -> Warned
        if self.findings:
            self._report_findings()
            if not self.confirm("Continue with migration anyway?"):
                self.logger.info(
                    "Migration cancelled. Generated files are in %s; services were not switched.",
                    self.settings.networkd_dir,
                )
                return self._abort(ExitCode.ABORTED, reason="Operator declined to continue")
        self._advance(MigrationState.WARNED)

        self._configure_resolv_conf()

        # Warned -> NewEnabled (new stack first; legacy untouched)
        Log.step(self.logger, "Enabling systemd-networkd services")
        try:
            failed = self.services.enable_and_start(NEW_SERVICES)
        except ServiceError as e:
            self._advance(MigrationState.NEW_ENABLED)
            Log.fail(self.logger, e.user_message(include_context=True))
            self._rollback()
            return self._result(e.code, error=e.user_message())
        for unit in failed:
            Log.warn(self.logger, f"Could not start {unit}; verification decides")
        self._advance(MigrationState.NEW_ENABLED)

        # NewEnabled -> Verified | RolledBack
        Log.step(self.logger, "Verifying systemd-networkd configuration")
        vr = self.verifier.verify()
        if not vr.ok:
            Log.fail(self.logger, "New networking failed connectivity test")
            self._rollback()
            self.logger.info("Old networking remains active")
            return self._result(ExitCode.ROLLED_BACK, error="systemd-networkd verification failed")
        self._advance(MigrationState.VERIFIED)

        # Verified -> Committed
        Log.step(self.logger, "Disabling old networking services")
        self._disable_legacy()
        self._advance(MigrationState.COMMITTED)
        Log.ok(self.logger, "Migration complete")
        return self._result(ExitCode.OK)

    def _configure_resolv_conf(self) -> None:
        if not self.settings.symlink_resolv_conf:
            self.logger.info("resolv.conf symlink disabled by configuration")
            return
        question = f"Symlink {self.settings.resolv_conf} -> {self.settings.resolved_stub}?"
        if self.resolver.already_linked():
            self.logger.info("%s already points at the systemd-resolved stub", self.settings.resolv_conf)
            return
        if not self.confirm(question):
            Log.warn(self.logger, "Skipped resolv.conf symlink; DNS may need manual configuration")
            return
        self.resolver.link()

    def _rollback(self) -> None:
        Log.warn(self.logger, "Rolling back to old networking")
        self.services.stop_and_disable(NEW_SERVICES)
        removed = self.writer.remove_created()
        self.logger.info("Removed %d config file(s)", len(removed))
        if self.resolver.symlinked:
            self.resolver.restore()
        self._advance(MigrationState.ROLLED_BACK)
        Log.ok(self.logger, "Rolled back to old networking")

    def _disable_legacy(self) -> None:
        self.services.stop_and_disable([LEGACY_SERVICE])
        if not self.settings.disable_network_manager:
            return
        nm = NETWORK_MANAGER_SERVICE
        if self.services.is_active(nm) or self.services.is_enabled(nm):
            self.logger.info("Stopping and disabling %s", nm)
            self.services.stop_and_disable([nm])
        else:
            self.logger.debug("%s is not active/enabled", nm)

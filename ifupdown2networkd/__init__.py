# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
# ifupdown2networkd/__init__.py
"""
ifupdown2networkd - migrate /etc/network/interfaces to systemd-networkd

Converts ifupdown stanzas into .network / .netdev units, brings up
systemd-networkd next to the running networking.service, verifies it and
only then retires the legacy service. A failed verification rolls back.

Usage as a library:

    from ifupdown2networkd.config.settings import MigrationSettings
    from ifupdown2networkd.core.logger import Log
    from ifupdown2networkd.migrate.orchestrator import MigrationOrchestrator

    logger = Log.setup(verbose=1)
    result = MigrationOrchestrator(logger, MigrationSettings(dry_run=True)).run()
"""

__version__ = "0.1.0"

__all__ = ["__version__"]

# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
# ifupdown2networkd/cli/help_texts.py
from __future__ import annotations

# NOTE:
# Pure help text used by the argparse epilog. Keep it copy/paste runnable.

YAML_EXAMPLE = r"""# ifupdown2networkd configuration example (YAML)
#
# Run:
#   sudo ifupdown2networkd --config migrate.yaml
#
# Merge multiple configs (later overrides earlier), CLI flags override both:
#   sudo ifupdown2networkd --config base.yaml --config site.yaml --verify-attempts 10
#
# Keys (all optional):
interfaces_file: /etc/network/interfaces
networkd_dir: /etc/systemd/network
resolv_conf: /etc/resolv.conf
resolved_stub: /run/systemd/resolve/stub-resolv.conf
priority_standard: 10        # prefix for standard interfaces and bridge ports
priority_bridge: 20          # prefix for bridge .netdev/.network (must sort after)
verify_attempts: 5
verify_delay: 2.0            # seconds, slept before every attempt
symlink_resolv_conf: true
disable_network_manager: true
assume_yes: false            # same as --yes
allow_container: false
dry_run: false
lock_file: /run/ifupdown2networkd.lock
report: /var/log/ifupdown2networkd-report.json
verbose: 1
log_file: /var/log/ifupdown2networkd.log
json_logs: false
"""

FEATURE_SUMMARY = r"""  • DHCP (v4, v6, both), static IPv4/IPv6, gateways, DNS servers and search domains
  • Linux bridges: .netdev + bridge .network + one port .network per member
  • Original stanza kept as comments at the end of every .network unit
  • bond/vlan/wpa/ppp/mtu/hwaddress and up/down hook scripts are reported, never dropped
  • New stack verified before networking.service is stopped; automatic rollback on failure
  • --dry-run prints the units without writing anything
"""

EXIT_CODES = r"""  0   migrated, or nothing to do / dry run
  1   unexpected error (also: another run holds the lock)
  2   aborted by the operator
  3   a unit file could not be written
  4   ambiguous input (bridge membership, invalid netmask)
  5   systemctl could not enable the new services (rolled back)
  6   verification failed (rolled back)
  130 interrupted
"""

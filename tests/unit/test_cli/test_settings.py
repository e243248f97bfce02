# SPDX-License-Identifier: LGPL-3.0-or-later
import argparse
import unittest
from pathlib import Path

from ifupdown2networkd.config.settings import MigrationSettings


class TestMigrationSettings(unittest.TestCase):
    def test_defaults(self):
        s = MigrationSettings()
        self.assertEqual(s.interfaces_file, Path("/etc/network/interfaces"))
        self.assertEqual(s.networkd_dir, Path("/etc/systemd/network"))
        self.assertEqual(s.resolv_conf, Path("/etc/resolv.conf"))
        self.assertEqual((s.priority_standard, s.priority_bridge), (10, 20))
        self.assertIsNone(s.report)

    def test_priority_order_enforced(self):
        with self.assertRaises(ValueError):
            MigrationSettings(priority_standard=20, priority_bridge=20)
        with self.assertRaises(ValueError):
            MigrationSettings(priority_standard=30, priority_bridge=20)

    def test_verify_limits_enforced(self):
        with self.assertRaises(ValueError):
            MigrationSettings(verify_attempts=0)
        with self.assertRaises(ValueError):
            MigrationSettings(verify_delay=-0.5)

    def test_from_args(self):
        ns = argparse.Namespace(
            interfaces_file="/tmp/interfaces",
            networkd_dir="/tmp/network",
            priority_standard="15",
            priority_bridge=25,
            verify_attempts=3,
            verify_delay="0",
            dry_run=True,
            report="/tmp/report.json",
            symlink_resolv_conf=False,
        )
        s = MigrationSettings.from_args(ns)
        self.assertEqual(s.interfaces_file, Path("/tmp/interfaces"))
        self.assertEqual(s.priority_standard, 15)
        self.assertEqual(s.verify_delay, 0.0)
        self.assertTrue(s.dry_run)
        self.assertFalse(s.symlink_resolv_conf)
        self.assertTrue(s.disable_network_manager)
        self.assertEqual(s.report, Path("/tmp/report.json"))

    def test_from_args_missing_attributes_use_defaults(self):
        s = MigrationSettings.from_args(argparse.Namespace())
        self.assertEqual(s, MigrationSettings())


if __name__ == "__main__":
    unittest.main()

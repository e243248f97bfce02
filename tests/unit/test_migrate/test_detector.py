# SPDX-License-Identifier: LGPL-3.0-or-later
from __future__ import annotations

import pytest

from ifupdown2networkd.migrate.detector import detect_record, detect_unsupported
from ifupdown2networkd.migrate.model import (
    FamilyConfig,
    InterfaceRecord,
    InterfaceRole,
    RawStanza,
    UnsupportedFinding,
)


def _rec(name, method="static", options=(), inet6=None):
    return InterfaceRecord(name=name, role=InterfaceRole.STANDARD, inet=FamilyConfig("inet", method, tuple(options)), inet6=inet6)


@pytest.mark.unit
class TestDetector:
    def test_scenario_d_pre_up_reported_once(self):
        # ifquery echoes the hook as an option too; it must still be reported once
        rec = _rec(
            "eth0",
            options=[
                ("address", "10.0.0.2"),
                ("pre-up", "/usr/local/bin/fw.sh"),
                ("mtu", "9000"),
                ("hwaddress", "ether 00:11:22:33:44:55"),
                ("bond-mode", "active-backup"),
            ],
        )
        stanza = RawStanza(
            "eth0",
            (
                "auto eth0",
                "iface eth0 inet static",
                "    address 10.0.0.2",
                "    pre-up /usr/local/bin/fw.sh",
                "    mtu 9000",
                "    hwaddress ether 00:11:22:33:44:55",
                "    bond-mode active-backup",
            ),
        )
        findings = detect_unsupported([rec], [stanza])
        keywords = [f.keyword for f in findings]
        assert keywords.count("pre-up script") == 1
        assert "pre-up" not in keywords
        assert {"mtu", "hwaddress", "bond-mode"} <= set(keywords)

    def test_all_hooks_detected(self):
        lines = ["iface eth0 inet dhcp"] + [f"    {h} echo x" for h in ("pre-up", "up", "post-up", "pre-down", "down", "post-down")]
        found = detect_record(_rec("eth0", "dhcp"), RawStanza("eth0", tuple(lines)))
        assert [f.keyword for f in found] == [
            "pre-up script",
            "up script",
            "post-up script",
            "pre-down script",
            "down script",
            "post-down script",
        ]

    def test_non_indented_hook_word_ignored(self):
        found = detect_record(_rec("eth0", "dhcp"), RawStanza("eth0", ("up eth0",)))
        assert found == []

    def test_prefix_match_case_insensitive(self):
        rec = _rec("wlan0", "dhcp", options=[("WPA-Driver", "wext"), ("wireless-essid", "x"), ("vlan-raw-device", "eth0")])
        assert [f.keyword for f in detect_record(rec, RawStanza("wlan0"))] == ["wpa-driver", "wireless-essid", "vlan-raw-device"]

    def test_inet6_options_scanned(self):
        rec = _rec("eth0", "dhcp", inet6=FamilyConfig("inet6", "static", (("mtu", "1400"),)))
        assert detect_record(rec, RawStanza("eth0")) == [UnsupportedFinding("eth0", "mtu")]

    def test_unsupported_methods(self):
        rec = _rec("ppp0", "ppp", options=[("provider", "dsl")])
        found = detect_record(rec, RawStanza("ppp0"))
        assert UnsupportedFinding("ppp0", "inet method ppp") in found
        assert UnsupportedFinding("ppp0", "provider") in found

    def test_same_keyword_on_two_interfaces_kept(self):
        a = _rec("eth0", options=[("mtu", "9000")])
        b = _rec("eth1", options=[("mtu", "9000")])
        assert detect_unsupported([a, b], []) == [UnsupportedFinding("eth0", "mtu"), UnsupportedFinding("eth1", "mtu")]

    def test_exact_duplicates_suppressed(self):
        rec = _rec("eth0", options=[("mtu", "9000"), ("mtu", "1500")])
        assert detect_unsupported([rec], []) == [UnsupportedFinding("eth0", "mtu")]

    def test_supported_config_clean(self):
        rec = _rec("eth0", options=[("address", "10.0.0.2"), ("netmask", "255.0.0.0"), ("gateway", "10.0.0.1"), ("dns-nameservers", "1.1.1.1")])
        assert detect_unsupported([rec], [RawStanza("eth0", ("iface eth0 inet static",))]) == []

    def test_finding_str(self):
        assert str(UnsupportedFinding("eth0", "mtu")) == "eth0: mtu"

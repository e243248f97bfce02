# SPDX-License-Identifier: LGPL-3.0-or-later
from __future__ import annotations

import subprocess

import pytest

from fakes.fake_logger import FakeLogger
from fakes.fake_runner import FakeRunner
from fakes.fake_source import FakeConfigSource
from ifupdown2networkd.migrate.parser import InterfaceConfigParser, parse_inet6_stanza
from ifupdown2networkd.migrate.source import IfqueryConfigSource, parse_ifquery_output
from ifupdown2networkd.migrate.stanza import StanzaIndex

INTERFACES = """\
auto eth0
iface eth0 inet static
    address 10.0.0.2
    netmask 255.255.255.0
    mtu 9000

iface eth0 inet6 static
    address 2001:db8::2
    netmask 64

    gateway 2001:db8::1
    # a comment
    DNS-Nameservers 2001:4860:4860::8888
iface eth1 inet dhcp
"""


@pytest.fixture
def index(tmp_path):
    p = tmp_path / "interfaces"
    p.write_text(INTERFACES, encoding="utf-8")
    return StanzaIndex.build(p, FakeLogger())


@pytest.mark.unit
class TestParseInet6:
    def test_collects_indented_key_values(self, index):
        fam = parse_inet6_stanza("eth0", index)
        assert fam.family == "inet6"
        assert fam.method == "static"
        assert fam.get("address") == "2001:db8::2"
        assert fam.get("netmask") == "64"
        assert fam.get("gateway") == "2001:db8::1"

    def test_keys_lowercased_comments_skipped(self, index):
        fam = parse_inet6_stanza("eth0", index)
        assert fam.get("dns-nameservers") == "2001:4860:4860::8888"
        assert all(not k.startswith("#") for k in fam.keys())

    def test_block_ends_at_next_stanza(self, index):
        fam = parse_inet6_stanza("eth0", index)
        assert "iface" not in fam.keys()

    def test_absent_inet6_returns_none(self, index):
        assert parse_inet6_stanza("eth1", index) is None


@pytest.mark.unit
class TestInterfaceConfigParser:
    def test_method_key_stripped_from_options(self, index):
        src = FakeConfigSource({"eth0": [("method", "static"), ("address", "10.0.0.2"), ("mtu", "9000")]})
        cfg = InterfaceConfigParser(FakeLogger(), src, index).parse("eth0")
        assert cfg.inet.method == "static"
        assert cfg.inet.keys() == ["address", "mtu"]
        assert cfg.inet6 is not None and cfg.inet6.method == "static"

    def test_method_falls_back_to_iface_line(self, index):
        # classic ifquery prints only the options
        src = FakeConfigSource({"eth1": []})
        cfg = InterfaceConfigParser(FakeLogger(), src, index).parse("eth1")
        assert cfg.inet.method == "dhcp"
        assert cfg.inet6 is None

    def test_unknown_interface_method_none(self, index):
        src = FakeConfigSource({})
        cfg = InterfaceConfigParser(FakeLogger(), src, index).parse("eth5")
        assert cfg.inet.method == "none"
        assert cfg.inet.options == ()

    def test_unknown_keys_pass_through(self, index):
        src = FakeConfigSource({"eth0": [("method", "static"), ("x-custom", "1")]})
        cfg = InterfaceConfigParser(FakeLogger(), src, index).parse("eth0")
        assert cfg.inet.get("x-custom") == "1"


@pytest.mark.unit
class TestIfquerySource:
    def test_parse_output(self):
        out = parse_ifquery_output("Address: 10.0.0.2\nnetmask: 255.0.0.0\njunk\n\ndns-nameservers: 1.1.1.1 8.8.8.8\n")
        assert out == [
            ("address", "10.0.0.2"),
            ("netmask", "255.0.0.0"),
            ("dns-nameservers", "1.1.1.1 8.8.8.8"),
        ]

    def test_value_may_contain_colons(self):
        assert parse_ifquery_output("address: 2001:db8::1\n") == [("address", "2001:db8::1")]

    def test_list_interfaces_merges_auto_and_hotplug(self, tmp_path):
        f = tmp_path / "interfaces"
        runner = FakeRunner()
        runner.on("ifquery", f"--interfaces={f}", "-l", stdout="lo\neth0\nbr0\n")
        runner.on("ifquery", f"--interfaces={f}", "-l", "--allow=hotplug", stdout="eth1\neth0\n")
        src = IfqueryConfigSource(FakeLogger(), f, runner=runner)
        assert src.list_interfaces() == ["br0", "eth0", "eth1"]

    def test_query_is_cached_and_tolerates_failure(self, tmp_path):
        f = tmp_path / "interfaces"
        runner = FakeRunner()
        runner.on("ifquery", f"--interfaces={f}", "eth0", stdout="address: 10.0.0.2\n")
        runner.on("ifquery", f"--interfaces={f}", "eth9", rc=1, stderr="unknown interface")
        src = IfqueryConfigSource(FakeLogger(), f, runner=runner)

        assert src.query_interface("eth0") == [("address", "10.0.0.2")]
        assert src.query_interface("eth0") == [("address", "10.0.0.2")]
        assert runner.count("ifquery", f"--interfaces={f}", "eth0") == 1
        assert src.query_interface("eth9") == []

    def test_runner_returns_completed_process(self, tmp_path):
        runner = FakeRunner()
        cp = runner(["ifquery", "-l"])
        assert isinstance(cp, subprocess.CompletedProcess)
        assert cp.returncode == 0

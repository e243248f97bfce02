# SPDX-License-Identifier: LGPL-3.0-or-later
from __future__ import annotations

import pytest

from fakes.fake_logger import FakeLogger
from fakes.fake_runner import FakeRunner
from ifupdown2networkd.migrate.services import ServiceController
from ifupdown2networkd.migrate.verifier import ConnectivityVerifier, count_configured_links

ROUTABLE = "  1 lo   loopback carrier    unmanaged\n  2 eth0 ether    routable    configured\n"
CONFIGURING = "  1 lo   loopback carrier    unmanaged\n  2 eth0 ether    no-carrier  configuring\n"
NETWORKCTL = ("networkctl", "--no-pager", "--no-legend", "list")


def _verifier(runner, attempts=5, delay=2.0):
    sleeps = []
    logger = FakeLogger()
    v = ConnectivityVerifier(
        logger,
        ServiceController(logger, runner),
        runner=runner,
        attempts=attempts,
        delay_s=delay,
        sleep=sleeps.append,
    )
    return v, sleeps


@pytest.mark.unit
class TestCountConfiguredLinks:
    @pytest.mark.parametrize(
        "listing,n",
        [
            ("", 0),
            (CONFIGURING, 0),
            (ROUTABLE, 1),
            ("  3 br0 bridge degraded configured\n", 0),
            ("  3 br0 bridge configured unmanaged\n", 0),
            ("  3 br0 bridge configured configured\n", 1),
            ("  2 eth0 ether routable\n", 0),
            ("  2 eth0 ether ROUTABLE configured\n  3 eth1 ether routable configured\n", 2),
            ("garbage\n\n", 0),
        ],
    )
    def test_rows(self, listing, n):
        assert count_configured_links(listing) == n


@pytest.mark.unit
class TestConnectivityVerifier:
    def test_succeeds_first_attempt(self):
        runner = FakeRunner().on(*NETWORKCTL, stdout=ROUTABLE)
        v, sleeps = _verifier(runner)
        res = v.verify()

        assert res.ok
        assert res.attempts == 1
        assert res.configured_links == 1
        assert sleeps == [2.0]

    def test_succeeds_after_retries(self):
        runner = FakeRunner().on_sequence(
            *NETWORKCTL, outputs=[(0, CONFIGURING), (0, CONFIGURING), (0, ROUTABLE)]
        )
        v, sleeps = _verifier(runner, delay=0.5)
        res = v.verify()

        assert res.ok
        assert res.attempts == 3
        assert sleeps == [0.5, 0.5, 0.5]

    def test_fails_after_all_attempts(self):
        runner = FakeRunner().on(*NETWORKCTL, stdout=CONFIGURING)
        v, sleeps = _verifier(runner, attempts=5)
        res = v.verify()

        assert not res.ok
        assert res.attempts == 5
        assert len(sleeps) == 5
        assert runner.count(*NETWORKCTL) == 5

    def test_inactive_service_skips_networkctl(self):
        runner = FakeRunner().on("systemctl", "is-active", rc=3).on(*NETWORKCTL, stdout=ROUTABLE)
        v, _ = _verifier(runner, attempts=2)
        res = v.verify()

        assert not res.ok
        assert not res.service_active
        assert not runner.called(*NETWORKCTL)
        assert len(res.notes) == 2

    def test_networkctl_error_counts_as_attempt(self):
        runner = FakeRunner().on_sequence(*NETWORKCTL, outputs=[(1, ""), (0, ROUTABLE)])
        v, _ = _verifier(runner)
        res = v.verify()
        assert res.ok
        assert res.attempts == 2
        assert "networkctl rc=1" in res.notes[0]

    def test_rejects_zero_attempts(self):
        with pytest.raises(ValueError):
            _verifier(FakeRunner(), attempts=0)

    def test_links_held_by_legacy_stack_do_not_count(self):
        # networking.service keeps running during verification
        listing = "  2 eth0 ether routable unmanaged\n  3 docker0 bridge routable unmanaged\n"
        assert count_configured_links(listing) == 0

    def test_legacy_routable_links_cannot_pass_verification(self):
        legacy = "  1 lo loopback carrier unmanaged\n  2 eth0 ether routable unmanaged\n"
        runner = FakeRunner().on(*NETWORKCTL, stdout=legacy)
        v, _ = _verifier(runner, attempts=3)
        res = v.verify()

        assert not res.ok
        assert res.attempts == 3
        assert res.configured_links == 0

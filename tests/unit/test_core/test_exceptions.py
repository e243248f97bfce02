# SPDX-License-Identifier: LGPL-3.0-or-later
"""Tests for the exception hierarchy and CLI formatting."""
from __future__ import annotations

import pytest

from ifupdown2networkd.core.exceptions import (
    AmbiguousBridgeMembershipError,
    AmbiguousInputError,
    ExitCode,
    Fatal,
    GenerationError,
    InvalidNetmaskError,
    MigratorError,
    PreconditionError,
    ServiceError,
    StateTransitionError,
    format_exception_for_cli,
)


@pytest.mark.unit
class TestExceptionHierarchy:
    def test_base_exception_creation(self):
        err = MigratorError(code=1, msg="Test error")
        assert err.code == 1
        assert err.msg == "Test error"
        assert err.cause is None
        assert err.context == {}

    def test_fatal_positional(self):
        err = Fatal(2, "Fatal error")
        assert isinstance(err, MigratorError)
        assert err.code == 2
        assert str(err) == "Fatal error"

    @pytest.mark.parametrize(
        "cls,code",
        [
            (PreconditionError, ExitCode.OK),
            (GenerationError, ExitCode.GENERATION_FAILED),
            (AmbiguousInputError, ExitCode.AMBIGUOUS_INPUT),
            (AmbiguousBridgeMembershipError, ExitCode.AMBIGUOUS_INPUT),
            (InvalidNetmaskError, ExitCode.AMBIGUOUS_INPUT),
            (ServiceError, ExitCode.SERVICE_FAILED),
            (StateTransitionError, ExitCode.STATE_MACHINE),
        ],
    )
    def test_default_codes(self, cls, code):
        assert cls(msg="x").code == code

    def test_netmask_error_is_ambiguous_input(self):
        assert issubclass(InvalidNetmaskError, AmbiguousInputError)
        assert issubclass(AmbiguousBridgeMembershipError, AmbiguousInputError)

    def test_with_context_and_to_dict(self):
        err = GenerationError(msg="write failed").with_context(path="/etc/systemd/network/10-eth0.network")
        d = err.to_dict()
        assert d["type"] == "GenerationError"
        assert d["code"] == 3
        assert d["context"]["path"].endswith("10-eth0.network")

    def test_code_clamped(self):
        assert MigratorError(code=999, msg="x").code == 255
        assert MigratorError(code="nope", msg="x").code == 1

    def test_message_one_lined(self):
        assert MigratorError(msg="a\nb\n  c").msg == "a b c"


@pytest.mark.unit
class TestFormatForCli:
    def test_verbosity_levels(self):
        err = ServiceError(msg="enable failed", cause=RuntimeError("boom"), context={"unit": "systemd-networkd.service"})
        assert format_exception_for_cli(err) == "enable failed"
        assert "unit='systemd-networkd.service'" in format_exception_for_cli(err, verbose=1)
        assert "RuntimeError: boom" in format_exception_for_cli(err, verbose=2)

    def test_foreign_exception(self):
        assert format_exception_for_cli(ValueError("bad")) == "bad"
        assert format_exception_for_cli(ValueError("bad"), verbose=2) == "ValueError: bad"

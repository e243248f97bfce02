# SPDX-License-Identifier: LGPL-3.0-or-later
# ifupdown2networkd/core/exceptions.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional


def _safe_int(x: Any, default: int = 1) -> int:
    try:
        return int(x)
    except Exception:
        return default


def _clamp_exit_code(code: int) -> int:
    # Exit codes are 0..255.
    if code < 0:
        return 1
    if code > 255:
        return 255
    return code


def _one_line(s: str, limit: int = 600) -> str:
    s = (s or "").strip().replace("\r", " ").replace("\n", " ")
    s = " ".join(s.split())
    return s if len(s) <= limit else (s[: limit - 3] + "...")


def _format_context_compact(ctx: Dict[str, Any]) -> str:
    return ", ".join(f"{k}={ctx.get(k)!r}" for k in sorted(ctx.keys()))


class ExitCode:
    OK = 0
    UNEXPECTED = 1
    ABORTED = 2
    GENERATION_FAILED = 3
    AMBIGUOUS_INPUT = 4
    SERVICE_FAILED = 5
    ROLLED_BACK = 6
    STATE_MACHINE = 70
    INTERRUPTED = 130


@dataclass(eq=False)
class MigratorError(Exception):
    """
    Base project error with:
      - stable fields for reporting/JSON
      - readable __str__ (what users see)
      - safe code handling (never crashes on int())
    """
    code: int = ExitCode.UNEXPECTED
    msg: str = "error"
    cause: Optional[BaseException] = None
    context: Optional[Dict[str, Any]] = None

    def __post_init__(self) -> None:
        self.code = _clamp_exit_code(_safe_int(self.code, default=1))
        self.msg = _one_line(self.msg) or self.__class__.__name__
        if self.context is None:
            self.context = {}
        super().__init__(self.msg)
        self.args = (self.msg,)

    def with_context(self, **ctx: Any) -> "MigratorError":
        if self.context is None:
            self.context = {}
        self.context.update(ctx)
        return self

    def user_message(self, *, include_context: bool = False, include_cause: bool = False) -> str:
        """
        Human-friendly message for CLI output/logs.
        """
        parts = [self.msg or self.__class__.__name__]

        if include_context and self.context:
            parts.append(f"[{_one_line(_format_context_compact(self.context))}]")

        if include_cause and self.cause is not None:
            parts.append(f"(cause: {type(self.cause).__name__}: {_one_line(str(self.cause))})")

        return " ".join(parts)

    def __str__(self) -> str:
        return self.user_message(include_context=False, include_cause=False)

    def to_dict(self, *, include_cause: bool = False) -> Dict[str, Any]:
        d: Dict[str, Any] = {
            "type": self.__class__.__name__,
            "code": self.code,
            "message": self.msg,
            "context": self.context or {},
        }
        if include_cause and self.cause is not None:
            d["cause"] = {"type": type(self.cause).__name__, "message": _one_line(str(self.cause))}
        return d


class Fatal(MigratorError):
    """
    User-facing fatal error (exit code should be honored by top-level main()).
    """
    pass


@dataclass(eq=False)
class PreconditionError(MigratorError):
    """
    The host is not a migration candidate. Not an error for the host:
    the run is skipped with an informational message.
    """
    code: int = ExitCode.OK


@dataclass(eq=False)
class GenerationError(MigratorError):
    """A unit file could not be written."""
    code: int = ExitCode.GENERATION_FAILED


@dataclass(eq=False)
class AmbiguousInputError(MigratorError):
    """Input that has no single valid interpretation. Rejected before generation."""
    code: int = ExitCode.AMBIGUOUS_INPUT


class AmbiguousBridgeMembershipError(AmbiguousInputError):
    pass


class InvalidNetmaskError(AmbiguousInputError):
    pass


@dataclass(eq=False)
class ServiceError(MigratorError):
    """systemctl refused a verb the migration depends on."""
    code: int = ExitCode.SERVICE_FAILED


@dataclass(eq=False)
class StateTransitionError(MigratorError):
    code: int = ExitCode.STATE_MACHINE


@dataclass(eq=False)
class RunLockError(MigratorError):
    code: int = ExitCode.UNEXPECTED


def format_exception_for_cli(e: BaseException, *, verbose: int = 0) -> str:
    """
    One-liner output for CLI.

    verbose=0: just message
    verbose=1: message + compact context (if any)
    verbose>=2: message + context + cause
    """
    if isinstance(e, MigratorError):
        return e.user_message(
            include_context=(verbose >= 1),
            include_cause=(verbose >= 2),
        )

    if verbose >= 2:
        return f"{type(e).__name__}: {_one_line(str(e))}"
    return _one_line(str(e)) or type(e).__name__

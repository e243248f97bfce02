# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
# ifupdown2networkd/cli/argument_parser.py
from __future__ import annotations

import argparse
import sys
from typing import Any, Dict, Optional, Sequence, Tuple

from ..config.config_loader import Config
from ..config.settings import INTERFACES_FILE, LOCK_FILE, NETWORKD_DIR
from ..core.logger import Log, c
from ..core.utils import U
from ..migrate.generator import PRIORITY_BRIDGE, PRIORITY_STANDARD
from ..migrate.resolver import RESOLV_CONF, RESOLVED_STUB
from ..migrate.verifier import DEFAULT_ATTEMPTS, DEFAULT_DELAY_S
from .help_texts import EXIT_CODES, FEATURE_SUMMARY, YAML_EXAMPLE


class HelpFormatter(argparse.RawDescriptionHelpFormatter, argparse.ArgumentDefaultsHelpFormatter):
    """Raw epilog plus default values in option help."""


def _build_epilog() -> str:
    return (
        c("YAML example:\n", "cyan", ["bold"])
        + c(YAML_EXAMPLE, "cyan")
        + "\n"
        + c("Feature summary:\n", "cyan", ["bold"])
        + c(FEATURE_SUMMARY, "cyan")
        + "\n"
        + c("Exit codes:\n", "cyan", ["bold"])
        + EXIT_CODES
    )


def _add_global_config_logging(p: argparse.ArgumentParser) -> None:
    # ------------------------------------------------------------------
    # Global config/logging (two-phase parse relies on these)
    # ------------------------------------------------------------------
    from .. import __version__

    p.add_argument(
        "--config",
        action="append",
        default=[],
        help="YAML/JSON config file or directory (repeatable; later overrides earlier).",
    )
    p.add_argument("--dump-config", action="store_true", help="Print merged config and exit.")
    p.add_argument("--dump-args", action="store_true", help="Print final parsed args and exit.")
    p.add_argument("--version", action="version", version=__version__)
    p.add_argument("-v", "--verbose", action="count", default=0, help="Verbosity: -v, -vv, -vvv (trace)")
    p.add_argument("-q", "--quiet", action="count", default=0, help="Less output: -q warnings, -qq errors")
    p.add_argument("--log-file", dest="log_file", default=None, help="Also write logs to this file.")
    p.add_argument("--json-logs", dest="json_logs", action="store_true", help="Emit NDJSON log lines.")
    p.add_argument("--no-color", dest="color", action="store_false", help="Disable coloured log output.")


def _add_paths(p: argparse.ArgumentParser) -> None:
    g = p.add_argument_group("Paths")
    g.add_argument("--interfaces-file", dest="interfaces_file", default=str(INTERFACES_FILE),
                   help="ifupdown interfaces(5) file to migrate.")
    g.add_argument("--networkd-dir", dest="networkd_dir", default=str(NETWORKD_DIR),
                   help="Directory the .network/.netdev units are written to.")
    g.add_argument("--resolv-conf", dest="resolv_conf", default=str(RESOLV_CONF), help="resolv.conf path.")
    g.add_argument("--resolved-stub", dest="resolved_stub", default=str(RESOLVED_STUB),
                   help="systemd-resolved stub resolv.conf.")
    g.add_argument("--lock-file", dest="lock_file", default=str(LOCK_FILE), help="Run lock file.")
    g.add_argument("--report", dest="report", default=None, help="Write a JSON summary to this path.")


def _add_generation(p: argparse.ArgumentParser) -> None:
    g = p.add_argument_group("Unit generation")
    g.add_argument("--priority-standard", dest="priority_standard", type=int, default=PRIORITY_STANDARD,
                   help="File name prefix for standard interfaces and bridge ports.")
    g.add_argument("--priority-bridge", dest="priority_bridge", type=int, default=PRIORITY_BRIDGE,
                   help="File name prefix for bridge devices (must be higher than --priority-standard).")


def _add_cutover(p: argparse.ArgumentParser) -> None:
    g = p.add_argument_group("Cutover")
    g.add_argument("--dry-run", dest="dry_run", action="store_true",
                   help="Print the units that would be written; touch nothing.")
    g.add_argument("-y", "--yes", dest="assume_yes", action="store_true",
                   help="Answer yes to the unsupported-features and resolv.conf prompts.")
    g.add_argument("--allow-container", dest="allow_container", action="store_true",
                   help="Run inside a container without asking.")
    g.add_argument("--verify-attempts", dest="verify_attempts", type=int, default=DEFAULT_ATTEMPTS,
                   help="networkd status polls before rolling back.")
    g.add_argument("--verify-delay", dest="verify_delay", type=float, default=DEFAULT_DELAY_S,
                   help="Seconds to wait before each poll.")
    g.add_argument("--no-resolv-symlink", dest="symlink_resolv_conf", action="store_false",
                   help="Leave /etc/resolv.conf alone.")
    g.add_argument("--keep-network-manager", dest="disable_network_manager", action="store_false",
                   help="Do not stop/disable NetworkManager after a successful migration.")


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="ifupdown2networkd",
        description=c("ifupdown2networkd: migrate /etc/network/interfaces to systemd-networkd", "green", ["bold"]),
        formatter_class=HelpFormatter,
        epilog=_build_epilog(),
    )
    _add_global_config_logging(p)
    _add_paths(p)
    _add_generation(p)
    _add_cutover(p)
    return p


def _build_preparser() -> argparse.ArgumentParser:
    pre = argparse.ArgumentParser(add_help=False)
    pre.add_argument("--config", action="append", default=[])
    pre.add_argument("-v", "--verbose", action="count", default=0)
    pre.add_argument("-q", "--quiet", action="count", default=0)
    pre.add_argument("--log-file", dest="log_file", default=None)
    pre.add_argument("--json-logs", dest="json_logs", action="store_true")
    pre.add_argument("--dump-config", action="store_true")
    pre.add_argument("--dump-args", action="store_true")
    return pre


def _load_merged_config(logger: Any, cfgs: Sequence[str]) -> Dict[str, Any]:
    if not cfgs:
        return {}
    expanded = Config.expand_configs(logger, list(cfgs))
    return Config.load_many(logger, expanded)


def validate_args(parser: argparse.ArgumentParser, args: argparse.Namespace) -> None:
    if args.priority_standard >= args.priority_bridge:
        parser.error("--priority-standard must be lower than --priority-bridge")
    if args.verify_attempts < 1:
        parser.error("--verify-attempts must be >= 1")
    if args.verify_delay < 0:
        parser.error("--verify-delay must be >= 0")


def parse_args_with_config(
    argv: Optional[Sequence[str]] = None,
    logger: Any = None,
) -> Tuple[argparse.Namespace, Dict[str, Any], Any]:
    """
    Flow:
      Phase 0: parse ONLY the flags needed to locate config and set up logging
      Phase 1: load+merge config files
      Phase 2: apply config as defaults onto the parser
      Phase 3: full parse (CLI overrides config)
      Phase 4: validate
    """
    if argv is None:
        argv = sys.argv[1:]
    argv = list(argv)

    parser = build_parser()

    pre = _build_preparser()
    args0, _rest = pre.parse_known_args(argv)

    own_logger = logger is None
    if own_logger:
        logger = Log.setup(
            args0.verbose,
            args0.log_file,
            quiet=args0.quiet,
            json_logs=args0.json_logs,
        )

    conf = _load_merged_config(logger, args0.config or [])

    if args0.dump_config:
        print(U.json_dump(conf))
        raise SystemExit(0)

    Config.apply_as_defaults(logger, parser, conf)

    args = parser.parse_args(argv)

    if args0.dump_args:
        print(U.json_dump(vars(args)))
        raise SystemExit(0)

    validate_args(parser, args)

    # YAML may raise verbosity or add a log file the pre-parse could not see.
    if own_logger and (
        args.verbose != args0.verbose or args.log_file != args0.log_file or args.json_logs != args0.json_logs
        or not args.color
    ):
        logger = Log.setup(
            args.verbose,
            args.log_file,
            quiet=args.quiet,
            color=args.color,
            json_logs=args.json_logs,
        )

    return args, conf, logger

# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
# ifupdown2networkd/config/config_loader.py
"""
YAML/JSON config files applied as argparse defaults.

Files are merged in the order given (later wins, dicts merge recursively).
The merged mapping only sets parser defaults, so anything on the command
line still overrides it.
"""

from __future__ import annotations

import argparse
import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Sequence

import yaml

from ..core.utils import U

CONFIG_SUFFIXES = (".yaml", ".yml", ".json")


def _normalize_key(k: Any) -> str:
    return str(k).strip().replace("-", "_")


def _normalize(obj: Any) -> Any:
    if isinstance(obj, dict):
        return {_normalize_key(k): _normalize(v) for k, v in obj.items()}
    if isinstance(obj, list):
        return [_normalize(x) for x in obj]
    return obj


def deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    out = dict(base)
    for k, v in override.items():
        if isinstance(v, dict) and isinstance(out.get(k), dict):
            out[k] = deep_merge(out[k], v)
        else:
            out[k] = v
    return out


class Config:
    @staticmethod
    def expand_configs(logger: logging.Logger, paths: Sequence[str]) -> List[Path]:
        """
        Expand `--config` values: files stay as they are, directories
        contribute their *.yaml / *.yml / *.json files in sorted order.
        """
        out: List[Path] = []
        for raw in paths:
            p = Path(os.path.expanduser(str(raw)))
            if p.is_dir():
                found = sorted(x for x in p.iterdir() if x.is_file() and x.suffix.lower() in CONFIG_SUFFIXES)
                logger.debug("Config dir %s: %d file(s)", p, len(found))
                out.extend(found)
            elif p.is_file():
                out.append(p)
            else:
                U.die(logger, f"Config file not found: {p}", 2)
        return out

    @staticmethod
    def load_one(logger: logging.Logger, path: Path) -> Dict[str, Any]:
        try:
            text = Path(path).read_text(encoding="utf-8")
        except OSError as e:
            U.die(logger, f"Cannot read config {path}: {e}", 2)
        try:
            if Path(path).suffix.lower() == ".json":
                data = json.loads(text) if text.strip() else {}
            else:
                data = yaml.safe_load(text) or {}
        except (yaml.YAMLError, json.JSONDecodeError) as e:
            U.die(logger, f"Invalid config {path}: {e}", 2)
        if not isinstance(data, dict):
            U.die(logger, f"Config {path} must contain a mapping at the top level", 2)
        logger.debug("Loaded config %s (%d key(s))", path, len(data))
        return _normalize(data)

    @staticmethod
    def load_many(logger: logging.Logger, paths: Sequence[Path]) -> Dict[str, Any]:
        conf: Dict[str, Any] = {}
        for p in paths:
            conf = deep_merge(conf, Config.load_one(logger, p))
        return conf

    @staticmethod
    def apply_as_defaults(logger: logging.Logger, parser: argparse.ArgumentParser, conf: Dict[str, Any]) -> None:
        """
        Push known keys into the parser as defaults. Unknown keys are
        reported and ignored.
        """
        dests = {a.dest for a in parser._actions}
        known = {k: v for k, v in conf.items() if k in dests}
        unknown = sorted(k for k in conf if k not in dests)
        if unknown:
            logger.warning("Ignoring unknown config key(s): %s", ", ".join(unknown))
        if known:
            parser.set_defaults(**known)
            logger.debug("Applied config defaults: %s", ", ".join(sorted(known)))

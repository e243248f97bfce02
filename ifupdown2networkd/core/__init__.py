# SPDX-License-Identifier: LGPL-3.0-or-later
# ifupdown2networkd/core/__init__.py
from .exceptions import ExitCode, Fatal, MigratorError
from .logger import Log

__all__ = ["ExitCode", "Fatal", "MigratorError", "Log"]

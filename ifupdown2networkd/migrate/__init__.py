# SPDX-License-Identifier: LGPL-3.0-or-later
# ifupdown2networkd/migrate/__init__.py
# No imports here: config.settings imports migrate submodules directly.

# SPDX-License-Identifier: LGPL-3.0-or-later
class FakeConfigSource:
    """
    LegacyConfigSource returning fixtures instead of running ifquery.

    `interfaces` maps name -> list of (key, value) pairs, exactly what
    `ifquery <name>` would print as `key: value` lines.
    """

    def __init__(self, interfaces, listed=None):
        self.interfaces = {k: list(v) for k, v in interfaces.items()}
        self.listed = list(listed) if listed is not None else list(self.interfaces)
        self.queries = []

    def list_interfaces(self):
        return sorted({n for n in self.listed if n != "lo"})

    def query_interface(self, name):
        self.queries.append(name)
        return list(self.interfaces.get(name, []))

# SPDX-License-Identifier: LGPL-3.0-or-later
from __future__ import annotations

import json
from unittest.mock import Mock

import pytest

from ifupdown2networkd.core.exceptions import RunLockError
from ifupdown2networkd.core.run_lock import RunLock


@pytest.mark.unit
class TestRunLock:
    def test_second_acquire_fails_fast(self, tmp_path):
        path = tmp_path / "run" / "migrate.lock"
        first = RunLock(Mock(), path)
        first.acquire()
        try:
            with pytest.raises(RunLockError) as ei:
                RunLock(Mock(), path).acquire()
            assert ei.value.code == 1
            assert "pid" in ei.value.context["holder"]
        finally:
            first.release()

    def test_release_allows_reacquire(self, tmp_path):
        path = tmp_path / "migrate.lock"
        with RunLock(Mock(), path) as lock:
            assert lock.held
            body = json.loads(path.read_text(encoding="utf-8"))
            assert isinstance(body["pid"], int)
        assert not lock.held

        again = RunLock(Mock(), path)
        again.acquire()
        assert again.held
        again.release()

    def test_release_is_idempotent(self, tmp_path):
        lock = RunLock(Mock(), tmp_path / "x.lock")
        lock.release()
        lock.acquire()
        lock.release()
        lock.release()
        assert not lock.held

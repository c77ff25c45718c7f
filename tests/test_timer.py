"""Tests for photoquiz.core.timer – per-question countdown."""

from __future__ import annotations

import pytest

from photoquiz.core.timer import DEFAULT_TIME_LIMIT, CountdownTimer


class TestCountdownTimer:
    def test_default_budget(self):
        assert DEFAULT_TIME_LIMIT == 15
        assert CountdownTimer().budget == 15

    def test_not_armed_initially(self):
        t = CountdownTimer()
        assert not t.armed
        assert t.tick() is False
        assert t.remaining == 15

    def test_expires_on_last_tick(self):
        t = CountdownTimer(3)
        t.arm()
        assert [t.tick() for _ in range(3)] == [False, False, True]
        assert t.remaining == 0
        assert not t.armed

    def test_fires_once(self):
        t = CountdownTimer(1)
        t.arm()
        assert t.tick() is True
        assert t.tick() is False

    def test_cancel_ignores_ticks(self):
        t = CountdownTimer(2)
        t.arm()
        t.tick()
        t.cancel()
        assert t.tick() is False
        assert t.remaining == 1

    def test_rearm_resets(self):
        t = CountdownTimer(5)
        t.arm()
        t.tick()
        t.tick()
        t.arm()
        assert t.remaining == 5

    def test_invalid_budget(self):
        with pytest.raises(ValueError):
            CountdownTimer(0)

"""Tests for photoquiz.core.unlock – unlock gating by predecessor progress."""

from __future__ import annotations

import itertools
from dataclasses import dataclass

import pytest

from photoquiz.core.unlock import UNLOCK_THRESHOLD, initial_unlocks, reevaluate


@dataclass
class Row:
    progress: int
    unlocked: bool = False


class TestReevaluate:
    def test_threshold_is_fifty(self):
        assert UNLOCK_THRESHOLD == 50

    def test_three_games_lock_on(self):
        rows = [Row(60), Row(0), Row(0)]
        assert reevaluate(rows, lock_enabled=True) == [True, True, False]

    def test_exactly_threshold_unlocks(self):
        assert reevaluate([Row(50), Row(0)], True) == [True, True]

    def test_just_below_threshold(self):
        assert reevaluate([Row(49), Row(0)], True) == [True, False]

    def test_lock_off_unlocks_all(self):
        assert reevaluate([Row(0), Row(0), Row(0)], False) == [True, True, True]

    def test_never_relocks(self):
        rows = [Row(0, True), Row(0, True), Row(0, True)]
        assert reevaluate(rows, True) == [True, True, True]

    def test_chain_needs_each_predecessor(self):
        rows = [Row(100), Row(20), Row(100), Row(0)]
        assert reevaluate(rows, True) == [True, True, False, True]

    def test_empty(self):
        assert reevaluate([], True) == []

    def test_pure(self):
        rows = [Row(60), Row(0)]
        reevaluate(rows, True)
        assert rows[1].unlocked is False

    @pytest.mark.parametrize(
        "progress,lock",
        list(itertools.product([(0, 0), (49, 0), (50, 100), (100, 100)], [True, False])),
    )
    def test_first_always_unlocked(self, progress, lock):
        rows = [Row(p) for p in progress]
        assert reevaluate(rows, lock)[0] is True


class TestInitialUnlocks:
    def test_lock_on(self):
        assert initial_unlocks([60, 0, 0], True) == [True, True, False]

    def test_lock_off(self):
        assert initial_unlocks([0, 0], False) == [True, True]

    def test_single(self):
        assert initial_unlocks([0], True) == [True]

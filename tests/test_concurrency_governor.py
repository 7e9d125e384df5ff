"""Tests for the backpressure governor."""

from __future__ import annotations

import pytest

from core.governor import ConcurrencyGovernor


def test_single_slot_rejects_second_request() -> None:
    governor = ConcurrencyGovernor(limit=1)

    assert governor.try_acquire() is True
    assert governor.try_acquire() is False
    assert governor.in_flight == 1
    assert governor.rejected == 1

    governor.release()
    assert governor.in_flight == 0
    assert governor.try_acquire() is True


def test_slot_releases_on_exception() -> None:
    governor = ConcurrencyGovernor(limit=1)

    with pytest.raises(ValueError):
        with governor.slot() as acquired:
            assert acquired
            assert governor.in_flight == 1
            raise ValueError("work failed")

    assert governor.in_flight == 0


def test_rejected_slot_does_not_release_held_slot() -> None:
    governor = ConcurrencyGovernor(limit=1)

    with governor.slot() as outer:
        with governor.slot() as inner:
            assert outer is True
            assert inner is False
        assert governor.in_flight == 1

    assert governor.in_flight == 0


def test_limit_two_accepts_two() -> None:
    governor = ConcurrencyGovernor(limit=2)

    assert [governor.try_acquire() for _ in range(3)] == [True, True, False]
    assert 0 <= governor.in_flight <= governor.limit


def test_release_without_slot_raises() -> None:
    governor = ConcurrencyGovernor()

    with pytest.raises(RuntimeError):
        governor.release()


def test_limit_must_be_positive() -> None:
    with pytest.raises(ValueError):
        ConcurrencyGovernor(limit=0)

"""Tests for clock utilities."""

import time

import pytest

from dispersal.core.clock import Clock, SimClock, SystemClock, create_clock


class TestSystemClock:
    def test_now_is_epoch(self):
        assert abs(SystemClock().now() - time.time()) < 1.0

    def test_implements_protocol(self):
        assert isinstance(SystemClock(), Clock)


class TestSimClock:
    def test_starts_at_epoch(self):
        clock = SimClock(start_epoch=500.0)
        assert clock.now() == 500.0
        assert clock.start_epoch == 500.0

    def test_advance(self):
        clock = SimClock(start_epoch=0.0)
        clock.advance(2.5)
        clock.advance(0.5)
        assert clock.now() == 3.0

    def test_advance_negative_raises(self):
        with pytest.raises(ValueError):
            SimClock().advance(-1.0)

    def test_set_time(self):
        clock = SimClock(start_epoch=100.0)
        clock.set_time(250.0)
        assert clock.now() == 250.0

    def test_set_time_before_start_raises(self):
        with pytest.raises(ValueError):
            SimClock(start_epoch=100.0).set_time(50.0)

    def test_implements_protocol(self):
        assert isinstance(SimClock(), Clock)


class TestCreateClock:
    def test_default_is_system(self):
        assert isinstance(create_clock(), SystemClock)

    def test_realtime(self):
        assert isinstance(create_clock({"mode": "realtime"}), SystemClock)

    def test_simulated(self):
        clock = create_clock({"mode": "simulated", "start_epoch": 42.0})
        assert isinstance(clock, SimClock)
        assert clock.now() == 42.0

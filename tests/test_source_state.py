from __future__ import annotations

import pytest

from geostream.models.position import PositionSample, Provider
from geostream.state.source import SourceState

from tests._fakes import ManualClock


def _sample() -> PositionSample:
    return PositionSample(latitude=48.85, longitude=2.35, provider=Provider.GPS)


def test_new_state_is_neither_valid_nor_recent(clock: ManualClock) -> None:
    state = SourceState(Provider.GPS, clock=clock)
    assert not state.is_valid()
    assert not state.is_recent()
    assert state.last_sample is None
    assert state.last_arrival is None


def test_update_records_sample_and_arrival_time(clock: ManualClock) -> None:
    state = SourceState(Provider.GPS, clock=clock)
    sample = _sample()
    state.update(sample)

    assert state.last_sample is sample
    assert state.last_arrival == clock.now
    assert state.is_valid()
    assert state.is_recent()


def test_recency_expires_at_window_boundary(clock: ManualClock) -> None:
    state = SourceState(Provider.GPS, clock=clock, recency_window=30.0)
    state.update(_sample())

    clock.advance(29.999)
    assert state.is_recent()
    clock.advance(0.001)
    assert not state.is_recent()
    assert state.is_valid()


@pytest.mark.parametrize("elapsed", [0.0, 10.0, 29.0, 30.0, 31.0, 3600.0])
def test_recent_implies_valid(clock: ManualClock, elapsed: float) -> None:
    state = SourceState(Provider.NETWORK, clock=clock)
    assert not state.is_recent() or state.is_valid()
    state.update(_sample())
    clock.advance(elapsed)
    assert not state.is_recent() or state.is_valid()


def test_queries_have_no_side_effects(clock: ManualClock) -> None:
    state = SourceState(Provider.GPS, clock=clock)
    state.update(_sample())
    arrival = state.last_arrival
    clock.advance(5)
    state.is_valid()
    state.is_recent()
    assert state.last_arrival == arrival


def test_reset_clears_sample_and_arrival(clock: ManualClock) -> None:
    state = SourceState(Provider.GPS, clock=clock)
    state.update(_sample())
    state.reset()
    assert state.last_sample is None
    assert state.last_arrival is None
    assert not state.is_valid()

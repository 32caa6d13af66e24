"""Deterministic source selection policy.

This module intentionally contains *no* I/O, locking or logging. Both
functions are pure given their inputs (and the sources' clock).
"""

from __future__ import annotations

from geostream.models.position import PositionSample, Provider
from geostream.state.source import SourceState


def select_best(precise: SourceState, coarse: SourceState) -> SourceState | None:
    """Pick the source whose latest sample best represents the current position.

    Policy, in order:
    - A recent precise sample always wins; without any coarse sample the
      precise one is used even when stale.
    - Without a precise sample, the coarse one is used regardless of age.
    - Otherwise the most recently arrived sample wins, coarse on a tie.

    Returns ``None`` when no source has produced anything yet.
    """
    if precise.is_recent() or not coarse.is_valid():
        return precise if precise.is_valid() else None
    if not precise.is_valid():
        return coarse
    precise_at = precise.last_arrival
    coarse_at = coarse.last_arrival
    if precise_at is not None and coarse_at is not None and precise_at > coarse_at:
        return precise
    return coarse


def _native_time(sample: PositionSample) -> float:
    return sample.time if sample.time is not None else float("-inf")


def resolve_initial(
    last_precise: PositionSample | None,
    last_coarse: PositionSample | None,
) -> PositionSample:
    """Choose a bootstrap sample from the providers' last known locations.

    If both are known the newer one by native timestamp wins, precise on a
    tie. Only the coordinates and native time are carried over, tagged
    :attr:`Provider.INITIAL` so they are never mistaken for live data. With
    nothing known the dummy sample is returned.
    """
    if last_precise is not None and last_coarse is not None:
        chosen = last_precise if _native_time(last_precise) >= _native_time(last_coarse) else last_coarse
    elif last_precise is not None:
        chosen = last_precise
    elif last_coarse is not None:
        chosen = last_coarse
    else:
        return PositionSample.dummy()
    return PositionSample(
        latitude=chosen.latitude,
        longitude=chosen.longitude,
        time=chosen.time,
        provider=Provider.INITIAL,
    )

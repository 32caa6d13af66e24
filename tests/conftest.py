from __future__ import annotations

import pytest

from tests._fakes import FakeLocationService, ManualClock


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock()


@pytest.fixture
def service() -> FakeLocationService:
    return FakeLocationService()

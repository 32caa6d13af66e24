"""Tests for position sample parsing."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from geostream.models.position import ArbitrationResult, PositionSample, Provider


class TestProvider:
    def test_live_providers(self) -> None:
        assert Provider.GPS.is_live
        assert Provider.NETWORK.is_live
        assert not Provider.INITIAL.is_live
        assert not Provider.DUMMY.is_live

    def test_string_values(self) -> None:
        assert Provider("gps") is Provider.GPS
        assert str(Provider.NETWORK) == "network"


class TestPositionSample:
    def test_parses_aliases_and_strings(self) -> None:
        sample = PositionSample.model_validate(
            {"lat": "52.370216", "lon": "4.895168", "timestamp": 1_700_000_000_123, "provider": "gps"}
        )
        assert sample.latitude == pytest.approx(52.370216)
        assert sample.longitude == pytest.approx(4.895168)
        assert sample.time == pytest.approx(1_700_000_000.123)
        assert sample.provider is Provider.GPS

    def test_native_precision_is_kept(self) -> None:
        sample = PositionSample(latitude=52.37021612345678, longitude=4.89516812345678, provider=Provider.GPS)
        assert sample.latitude == 52.37021612345678
        assert sample.longitude == 4.89516812345678

    def test_optional_fields_coerce_placeholders(self) -> None:
        sample = PositionSample.model_validate(
            {"latitude": 1, "longitude": 2, "accuracy": "--", "speed": "", "heading": "90.5", "time": 0}
        )
        assert sample.accuracy is None
        assert sample.speed is None
        assert sample.bearing == 90.5
        assert sample.time is None

    @pytest.mark.parametrize(
        "payload",
        [
            {"longitude": 2.0},
            {"latitude": "--", "longitude": 2.0},
            {"latitude": 91.0, "longitude": 2.0},
            {"latitude": 1.0, "longitude": -180.5},
        ],
    )
    def test_invalid_coordinates_rejected(self, payload: dict[str, object]) -> None:
        with pytest.raises(ValidationError):
            PositionSample.model_validate(payload)

    def test_is_frozen(self) -> None:
        sample = PositionSample(latitude=1.0, longitude=2.0, provider=Provider.GPS)
        with pytest.raises(ValidationError):
            sample.latitude = 3.0  # type: ignore[misc]

    def test_dummy(self) -> None:
        dummy = PositionSample.dummy()
        assert (dummy.latitude, dummy.longitude) == (0.0, 0.0)
        assert dummy.provider is Provider.DUMMY
        assert not dummy.is_live

    def test_with_provider_returns_retagged_copy(self) -> None:
        sample = PositionSample(latitude=1.0, longitude=2.0, provider=Provider.GPS, time=1_700_000_000)
        retagged = sample.with_provider(Provider.INITIAL)
        assert retagged is not sample
        assert retagged.provider is Provider.INITIAL
        assert (retagged.latitude, retagged.longitude, retagged.time) == (1.0, 2.0, sample.time)
        assert sample.provider is Provider.GPS


def test_arbitration_result_delegates_to_sample() -> None:
    sample = PositionSample(latitude=1.0, longitude=2.0, provider=Provider.NETWORK)
    result = ArbitrationResult(sample=sample, as_of=3)
    assert result.sample is sample
    assert (result.latitude, result.longitude) == (1.0, 2.0)
    assert result.provider is Provider.NETWORK
    assert result.is_live

"""Position sample and arbitration result models."""

from __future__ import annotations

from enum import StrEnum
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from geostream._constants import DUMMY_LATITUDE, DUMMY_LONGITUDE
from geostream._normalize import normalize_timestamp_seconds, safe_float


class Provider(StrEnum):
    """Provenance of a position sample."""

    GPS = "gps"
    NETWORK = "network"
    INITIAL = "initial"
    DUMMY = "dummy"

    @property
    def is_live(self) -> bool:
        """Whether samples with this tag come from a running sensor."""
        return self in (Provider.GPS, Provider.NETWORK)


#: Live providers, precise first.
LIVE_PROVIDERS: tuple[Provider, Provider] = (Provider.GPS, Provider.NETWORK)


class PositionSample(BaseModel):
    """A single position reading.

    Coordinates are kept at the sensor's native precision; the arbitration
    core never rounds, averages or otherwise derives them.

    Parameters
    ----------
    latitude : float
        Latitude in degrees.
    longitude : float
        Longitude in degrees.
    provider : Provider
        Which source produced the sample, or a bootstrap tag.
    time : float or None
        Native sensor timestamp in epoch seconds.  Millisecond epochs
        are normalised on input.
    accuracy : float or None
        Reported horizontal accuracy in metres.
    altitude : float or None
        Altitude in metres.
    bearing : float or None
        Heading in degrees.
    speed : float or None
        Ground speed in m/s.
    """

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
    )

    latitude: float = Field(ge=-90.0, le=90.0, validation_alias=AliasChoices("latitude", "lat"))
    longitude: float = Field(
        ge=-180.0,
        le=180.0,
        validation_alias=AliasChoices("longitude", "lng", "lon"),
    )
    provider: Provider = Provider.DUMMY
    time: float | None = Field(default=None, validation_alias=AliasChoices("time", "timestamp", "ts"))
    accuracy: float | None = None
    altitude: float | None = None
    bearing: float | None = Field(default=None, validation_alias=AliasChoices("bearing", "heading", "course"))
    speed: float | None = None

    @field_validator("latitude", "longitude", mode="before")
    @classmethod
    def _coerce_coordinate(cls, value: Any) -> Any:
        parsed = safe_float(value)
        # Let pydantic report the missing/invalid value.
        return value if parsed is None else parsed

    @field_validator("accuracy", "altitude", "bearing", "speed", mode="before")
    @classmethod
    def _coerce_optional(cls, value: Any) -> float | None:
        return safe_float(value)

    @field_validator("time", mode="before")
    @classmethod
    def _coerce_time(cls, value: Any) -> float | None:
        return normalize_timestamp_seconds(value)

    @classmethod
    def dummy(cls) -> PositionSample:
        """Sentinel used when nothing at all is known about the position."""
        return cls(latitude=DUMMY_LATITUDE, longitude=DUMMY_LONGITUDE, provider=Provider.DUMMY)

    @property
    def is_live(self) -> bool:
        return self.provider.is_live

    def with_provider(self, provider: Provider) -> PositionSample:
        """Return a copy of this sample carrying a different provenance tag."""
        return self.model_copy(update={"provider": provider})


class ArbitrationResult(BaseModel):
    """A value emitted by :class:`geostream.stream.ArbitrationStream`.

    ``as_of`` increases by one with every emission of a given stream and
    only serves to tell successive results apart.
    """

    model_config = ConfigDict(frozen=True)

    sample: PositionSample
    as_of: int = Field(ge=0)

    @property
    def latitude(self) -> float:
        return self.sample.latitude

    @property
    def longitude(self) -> float:
        return self.sample.longitude

    @property
    def provider(self) -> Provider:
        return self.sample.provider

    @property
    def is_live(self) -> bool:
        return self.sample.is_live

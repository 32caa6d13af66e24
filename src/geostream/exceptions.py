"""Custom exception hierarchy for geostream."""

from __future__ import annotations


class GeoStreamError(Exception):
    """Base exception for all geostream errors."""


class GeoStreamConfigError(GeoStreamError):
    """Invalid or missing configuration."""


class SubscriptionUnavailableError(GeoStreamError):
    """A location provider cannot be subscribed to (e.g. absent on this device)."""

    def __init__(self, message: str, *, provider: str = "") -> None:
        self.provider = provider
        super().__init__(message)


class LocationQueryError(GeoStreamError):
    """Looking up the last known location of a provider failed."""

    def __init__(self, message: str, *, provider: str = "") -> None:
        self.provider = provider
        super().__init__(message)


class PayloadDecodeError(GeoStreamError):
    """A transported payload could not be decoded into a position sample."""

    def __init__(self, message: str, *, topic: str = "") -> None:
        self.topic = topic
        super().__init__(message)

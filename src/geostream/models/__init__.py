"""Pydantic models for position samples and arbitration results."""

from geostream.models.position import LIVE_PROVIDERS, ArbitrationResult, PositionSample, Provider

__all__ = [
    "LIVE_PROVIDERS",
    "ArbitrationResult",
    "PositionSample",
    "Provider",
]

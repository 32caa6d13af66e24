"""geostream - Arbitrated stream of the best known position from two location sources."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("geostream")
except PackageNotFoundError:
    __version__ = "0+local"
from geostream.bootstrap import find_initial_location
from geostream.config import MqttSettings, StreamConfig
from geostream.exceptions import (
    GeoStreamConfigError,
    GeoStreamError,
    LocationQueryError,
    PayloadDecodeError,
    SubscriptionUnavailableError,
)
from geostream.lifecycle import LifecycleState, SensorLifecycleManager
from geostream.models import ArbitrationResult, PositionSample, Provider
from geostream.service import LocationService, UpdateCallback
from geostream.state.policy import resolve_initial, select_best
from geostream.state.source import SourceState
from geostream.stream import ArbitrationStream, Subscription

__all__ = [
    "__version__",
    "ArbitrationResult",
    "ArbitrationStream",
    "GeoStreamConfigError",
    "GeoStreamError",
    "LifecycleState",
    "LocationQueryError",
    "LocationService",
    "MqttSettings",
    "PayloadDecodeError",
    "PositionSample",
    "Provider",
    "SensorLifecycleManager",
    "SourceState",
    "StreamConfig",
    "Subscription",
    "SubscriptionUnavailableError",
    "UpdateCallback",
    "find_initial_location",
    "resolve_initial",
    "select_best",
]

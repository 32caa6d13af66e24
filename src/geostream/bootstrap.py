"""Initial location lookup performed when a stream activates."""

from __future__ import annotations

import logging

from geostream.models.position import PositionSample, Provider
from geostream.service import LocationService
from geostream.state.policy import resolve_initial

_logger = logging.getLogger(__name__)


def _last_known(service: LocationService, provider: Provider) -> PositionSample | None:
    try:
        return service.get_last_known_location(provider)
    except Exception:
        # Only consequence is a worse initial location; never fail the stream for it.
        _logger.error("Error when retrieving last known %s location", provider, exc_info=True)
        return None


def find_initial_location(service: LocationService) -> PositionSample:
    """Resolve a usable initial sample from the service's cached locations.

    Each provider is queried independently; a provider whose lookup fails
    is treated as having no cached location. Always returns a sample, the
    dummy one when nothing is known.
    """
    last_gps = _last_known(service, Provider.GPS)
    last_network = _last_known(service, Provider.NETWORK)
    if last_gps is None and last_network is None:
        _logger.info("No last known location available")
    initial = resolve_initial(last_gps, last_network)
    _logger.debug("Initial location resolved provider=%s", initial.provider)
    return initial

"""Start/stop management of the two sensor subscriptions."""

from __future__ import annotations

import logging
from enum import StrEnum

from geostream.models.position import Provider
from geostream.service import LocationService, UpdateCallback

_logger = logging.getLogger(__name__)

# Network first: it usually produces a fix long before GPS does.
_SUBSCRIBE_ORDER: tuple[Provider, Provider] = (Provider.NETWORK, Provider.GPS)


class LifecycleState(StrEnum):
    INACTIVE = "inactive"
    ACTIVE = "active"


class SensorLifecycleManager:
    """Two-state machine owning the sensor subscriptions of a stream.

    A provider that cannot be subscribed is logged and skipped; it simply
    never produces data until the next activation.
    """

    def __init__(self, service: LocationService) -> None:
        self._service = service
        self._state = LifecycleState.INACTIVE
        self._subscribed: set[Provider] = set()

    @property
    def state(self) -> LifecycleState:
        return self._state

    @property
    def is_active(self) -> bool:
        return self._state is LifecycleState.ACTIVE

    @property
    def subscribed(self) -> frozenset[Provider]:
        """Providers whose subscription succeeded during the current activation."""
        return frozenset(self._subscribed)

    def activate(self, callback: UpdateCallback) -> bool:
        """Subscribe to both providers. Returns ``False`` when already active."""
        if self._state is LifecycleState.ACTIVE:
            return False
        self._state = LifecycleState.ACTIVE
        _logger.debug("Starting the %s listeners", " and ".join(_SUBSCRIBE_ORDER))
        for provider in _SUBSCRIBE_ORDER:
            try:
                self._service.request_updates(provider, callback)
            except Exception:
                _logger.warning("There is no location provider %s", provider, exc_info=True)
                continue
            self._subscribed.add(provider)
        return True

    def deactivate(self) -> bool:
        """Unsubscribe from both providers. Returns ``False`` when already inactive."""
        if self._state is LifecycleState.INACTIVE:
            return False
        self._state = LifecycleState.INACTIVE
        _logger.debug("Stopping the %s listeners", " and ".join(_SUBSCRIBE_ORDER))
        for provider in _SUBSCRIBE_ORDER:
            try:
                self._service.remove_updates(provider)
            except Exception:
                _logger.debug("Removing %s updates failed", provider, exc_info=True)
        self._subscribed.clear()
        return True

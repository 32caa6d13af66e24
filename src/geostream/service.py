"""Contract of the platform location service the stream is built on."""

from __future__ import annotations

from collections.abc import Callable
from typing import Protocol

from geostream.models.position import PositionSample, Provider

#: Signature of sensor update callbacks: ``callback(provider, sample)``.
UpdateCallback = Callable[[Provider, PositionSample], None]


class LocationService(Protocol):
    """Platform collaborator giving access to the two live providers.

    Callbacks registered with :meth:`request_updates` may be invoked from
    any thread.
    """

    def get_last_known_location(self, provider: Provider) -> PositionSample | None:
        """Return the provider's cached location, or ``None``. May raise."""
        ...

    def request_updates(self, provider: Provider, callback: UpdateCallback) -> None:
        """Start delivering *provider* updates to *callback*. Raises on failure."""
        ...

    def remove_updates(self, provider: Provider) -> None:
        """Stop delivering *provider* updates. Must be idempotent."""
        ...

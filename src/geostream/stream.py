"""Arbitrated stream of best-known positions.

Owns:
- the reference-counted activation gate (first observer starts the sensors,
  last observer stops them after ``stop_delay``)
- the two :class:`SourceState` instances, mutated only on the stream's loop
- delivery of :class:`ArbitrationResult` values to observers
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import AsyncIterator, Callable
from types import TracebackType

from geostream.bootstrap import find_initial_location
from geostream.config import StreamConfig
from geostream.exceptions import GeoStreamError
from geostream.lifecycle import LifecycleState, SensorLifecycleManager
from geostream.models.position import ArbitrationResult, PositionSample, Provider
from geostream.service import LocationService
from geostream.state.policy import select_best
from geostream.state.source import SourceState

_logger = logging.getLogger(__name__)

Observer = Callable[[ArbitrationResult], None]


class Subscription:
    """Handle returned by :meth:`ArbitrationStream.subscribe`.

    Usable as a context manager; leaving the block cancels it.
    """

    def __init__(
        self,
        stream: ArbitrationStream,
        observer: Observer,
        *,
        on_close: Callable[[], None] | None = None,
    ) -> None:
        self._stream = stream
        self.observer = observer
        self._on_close = on_close
        self._active = True

    @property
    def active(self) -> bool:
        return self._active

    def cancel(self) -> None:
        """Stop receiving results. Safe to call more than once."""
        if not self._active:
            return
        self._active = False
        self._stream._remove(self)

    def _close(self) -> None:
        self._active = False
        if self._on_close is not None:
            self._on_close()

    def __enter__(self) -> Subscription:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.cancel()


class ArbitrationStream:
    """Single ordered stream of the best known position.

    Observers are plain callables invoked on the stream's event loop. The
    loop is taken from the first :meth:`subscribe` call unless given
    explicitly; ``subscribe``, :meth:`Subscription.cancel` and :meth:`close`
    must run on that loop. Sensor callbacks may fire from any thread, they
    are handed over to the loop in arrival order.

    One instance per process is enough: observers can be added at will.

    Usage::

        stream = ArbitrationStream(service)
        async for result in stream.results():
            print(result.latitude, result.longitude, result.provider)
    """

    def __init__(
        self,
        service: LocationService,
        config: StreamConfig | None = None,
        *,
        loop: asyncio.AbstractEventLoop | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._service = service
        self._config = config or StreamConfig()
        self._loop = loop
        self._gps = SourceState(Provider.GPS, clock=clock, recency_window=self._config.recency_window)
        self._network = SourceState(Provider.NETWORK, clock=clock, recency_window=self._config.recency_window)
        self._sources: dict[Provider, SourceState] = {
            Provider.GPS: self._gps,
            Provider.NETWORK: self._network,
        }
        self._lifecycle = SensorLifecycleManager(service)
        self._observers: list[Subscription] = []
        self._stop_handle: asyncio.TimerHandle | None = None
        self._latest: ArbitrationResult | None = None
        self._last_sample: PositionSample | None = None
        self._sequence = 0
        self._starting = False

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    @property
    def latest(self) -> ArbitrationResult | None:
        """Most recently emitted result, if any."""
        return self._latest

    @property
    def state(self) -> LifecycleState:
        return self._lifecycle.state

    @property
    def is_active(self) -> bool:
        return self._lifecycle.is_active

    @property
    def observer_count(self) -> int:
        return len(self._observers)

    @property
    def precise(self) -> SourceState:
        return self._gps

    @property
    def coarse(self) -> SourceState:
        return self._network

    # ------------------------------------------------------------------
    # Observers
    # ------------------------------------------------------------------

    def subscribe(self, observer: Observer) -> Subscription:
        """Register *observer* and return its subscription.

        The first observer activates the stream: it receives the bootstrap
        location right away, then every arbitrated update. Observers
        joining an active stream first receive the latest result.
        """
        return self._subscribe(observer)

    async def results(self) -> AsyncIterator[ArbitrationResult]:
        """Iterate over results; unsubscribes when iteration stops.

        Iteration ends when the stream is closed.
        """
        queue: asyncio.Queue[ArbitrationResult | None] = asyncio.Queue()
        subscription = self._subscribe(queue.put_nowait, on_close=lambda: queue.put_nowait(None))
        try:
            while True:
                result = await queue.get()
                if result is None:
                    return
                yield result
        finally:
            subscription.cancel()

    def close(self) -> None:
        """Drop every observer, release the sensors and forget all samples."""
        observers = list(self._observers)
        self._observers.clear()
        for subscription in observers:
            subscription._close()
        self._cancel_pending_stop()
        self._lifecycle.deactivate()
        for source in self._sources.values():
            source.reset()
        self._latest = None
        self._last_sample = None

    def _remove(self, subscription: Subscription) -> None:
        try:
            self._observers.remove(subscription)
        except ValueError:
            return
        if self._observers:
            return
        self._schedule_stop()

    def _subscribe(self, observer: Observer, *, on_close: Callable[[], None] | None = None) -> Subscription:
        self._bind_loop()
        subscription = Subscription(self, observer, on_close=on_close)
        self._observers.append(subscription)
        self._cancel_pending_stop()
        if not self._starting and not self._lifecycle.is_active:
            self._start()
        elif self._latest is not None:
            self._deliver(subscription, self._latest)
        return subscription

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def _schedule_stop(self) -> None:
        delay = self._config.stop_delay
        if delay <= 0 or self._loop is None:
            self._stop()
            return
        _logger.debug("Last observer gone, stopping sensors in %.1fs", delay)
        self._stop_handle = self._loop.call_later(delay, self._stop)

    def _bind_loop(self) -> asyncio.AbstractEventLoop:
        try:
            running = asyncio.get_running_loop()
        except RuntimeError:
            if self._loop is None:
                raise
            return self._loop
        if self._loop is None:
            self._loop = running
        elif running is not self._loop:
            raise GeoStreamError("ArbitrationStream is bound to another event loop")
        return self._loop

    def _cancel_pending_stop(self) -> None:
        handle = self._stop_handle
        self._stop_handle = None
        if handle is not None:
            handle.cancel()

    def _start(self) -> None:
        # Observers may subscribe or cancel while receiving the bootstrap value.
        self._starting = True
        try:
            self._publish(find_initial_location(self._service))
            self._lifecycle.activate(self._on_sensor_update)
        finally:
            self._starting = False
        if not self._observers and self._stop_handle is None:
            self._schedule_stop()

    def _stop(self) -> None:
        self._stop_handle = None
        if self._observers:
            return
        self._lifecycle.deactivate()

    # ------------------------------------------------------------------
    # Updates
    # ------------------------------------------------------------------

    def _on_sensor_update(self, provider: Provider, sample: PositionSample) -> None:
        """Sensor callback; may be invoked from any thread."""
        loop = self._loop
        if loop is None:
            _logger.debug("Dropping %s update received before the stream was bound to a loop", provider)
            return
        try:
            loop.call_soon_threadsafe(self._handle_update, provider, sample)
        except RuntimeError:
            _logger.debug("Dropping %s update, event loop is closed", provider)

    def _handle_update(self, provider: Provider, sample: PositionSample) -> None:
        if not self._lifecycle.is_active:
            _logger.debug("Ignoring %s update on inactive stream", provider)
            return
        source = self._sources.get(provider)
        if source is None:
            _logger.warning("Ignoring update from unexpected provider %r", provider)
            return
        if sample.provider != provider:
            sample = sample.with_provider(provider)
        source.update(sample)

        best = select_best(self._gps, self._network)
        if best is None or best.last_sample is None:
            return
        if best.last_sample is self._last_sample and not self._config.emit_repeats:
            return
        self._publish(best.last_sample)

    def _publish(self, sample: PositionSample) -> None:
        result = ArbitrationResult(sample=sample, as_of=self._sequence)
        self._sequence += 1
        self._latest = result
        self._last_sample = sample
        _logger.debug(
            "Emitting position as_of=%d provider=%s observers=%d",
            result.as_of,
            sample.provider,
            len(self._observers),
        )
        for subscription in list(self._observers):
            self._deliver(subscription, result)

    def _deliver(self, subscription: Subscription, result: ArbitrationResult) -> None:
        if not subscription.active:
            return
        try:
            subscription.observer(result)
        except Exception:
            _logger.error("Position observer %r failed", subscription.observer, exc_info=True)

"""MQTT-backed location service.

Each live provider publishes JSON position objects on
``<topic_prefix>/<provider>``. Retained messages double as the providers'
last known locations.
"""

from __future__ import annotations

import json
import logging
import threading
from collections.abc import Iterable
from typing import Any, cast

import paho.mqtt.client as mqtt
from pydantic import ValidationError

from geostream.config import MqttSettings
from geostream.exceptions import PayloadDecodeError, SubscriptionUnavailableError
from geostream.models.position import LIVE_PROVIDERS, PositionSample, Provider
from geostream.service import UpdateCallback


def decode_position_payload(payload: bytes, provider: Provider, *, topic: str = "") -> PositionSample:
    """Decode an MQTT payload into a sample tagged with *provider*."""
    try:
        parsed = json.loads(payload.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise PayloadDecodeError(f"Position payload is not JSON: {exc}", topic=topic) from exc
    if not isinstance(parsed, dict):
        raise PayloadDecodeError("Position payload is not a JSON object", topic=topic)
    parsed["provider"] = provider
    try:
        return PositionSample.model_validate(parsed)
    except ValidationError as exc:
        raise PayloadDecodeError(f"Invalid position payload: {exc}", topic=topic) from exc


def _build_client(settings: MqttSettings) -> mqtt.Client:
    client = mqtt.Client(
        callback_api_version=cast(Any, mqtt).CallbackAPIVersion.VERSION2,
        client_id=settings.client_id,
    )
    if settings.username:
        client.username_pw_set(settings.username, settings.password)
    if settings.tls:
        client.tls_set()
    return client


class MqttLocationService:
    """Threaded paho-mqtt client implementing :class:`LocationService`.

    Update callbacks run on paho's network thread.
    """

    def __init__(
        self,
        settings: MqttSettings | None = None,
        *,
        providers: Iterable[Provider] = LIVE_PROVIDERS,
        client: mqtt.Client | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self._settings = settings or MqttSettings()
        self._providers = frozenset(providers)
        self._topics: dict[str, Provider] = {self._settings.topic_for(p): p for p in self._providers}
        self._client = client
        self._logger = logger or logging.getLogger(__name__)
        self._lock = threading.Lock()
        self._last_known: dict[Provider, PositionSample] = {}
        self._callbacks: dict[Provider, UpdateCallback] = {}
        self._running = False

    @property
    def is_running(self) -> bool:
        """Whether the MQTT network loop is running."""
        return self._running

    @property
    def providers(self) -> frozenset[Provider]:
        return self._providers

    # ------------------------------------------------------------------
    # Connection
    # ------------------------------------------------------------------

    def start(self) -> None:
        """Connect to the broker and subscribe to every provider topic."""
        if self._running:
            return
        settings = self._settings
        client = self._client or _build_client(settings)
        client.enable_logger(self._logger)
        client.on_connect = self._on_connect
        client.on_message = self._on_message
        client.on_disconnect = self._on_disconnect
        self._logger.debug(
            "MQTT location service start host=%s port=%s topics=%s",
            settings.host,
            settings.port,
            sorted(self._topics),
        )
        client.connect(settings.host, settings.port, keepalive=settings.keepalive)
        client.loop_start()
        self._client = client
        self._running = True

    def stop(self) -> None:
        """Disconnect and stop the network loop. Safe to call when stopped."""
        client = self._client
        was_running = self._running
        self._running = False
        if client is None or not was_running:
            return
        try:
            client.disconnect()
        finally:
            client.loop_stop()
            self._logger.debug("MQTT network loop stopped")

    def __enter__(self) -> MqttLocationService:
        self.start()
        return self

    def __exit__(self, *_exc: object) -> None:
        self.stop()

    # ------------------------------------------------------------------
    # LocationService
    # ------------------------------------------------------------------

    def get_last_known_location(self, provider: Provider) -> PositionSample | None:
        with self._lock:
            return self._last_known.get(provider)

    def request_updates(self, provider: Provider, callback: UpdateCallback) -> None:
        if provider not in self._providers:
            raise SubscriptionUnavailableError(
                f"Location provider {provider} is not published on this broker",
                provider=str(provider),
            )
        with self._lock:
            self._callbacks[provider] = callback

    def remove_updates(self, provider: Provider) -> None:
        with self._lock:
            self._callbacks.pop(provider, None)

    # ------------------------------------------------------------------
    # paho callbacks
    # ------------------------------------------------------------------

    def _on_connect(
        self,
        client: mqtt.Client,
        _userdata: Any,
        _flags: Any,
        reason_code: Any,
        _properties: Any,
    ) -> None:
        if reason_code.value != 0:
            self._logger.warning("MQTT connect failed: %s", reason_code)
            return
        for topic in sorted(self._topics):
            self._logger.debug("MQTT subscribing topic=%s", topic)
            client.subscribe(topic, qos=0)

    def _on_disconnect(
        self,
        _client: mqtt.Client,
        _userdata: Any,
        _disconnect_flags: Any,
        reason_code: Any,
        _properties: Any,
    ) -> None:
        if self._running:
            self._logger.debug("MQTT disconnected: %s", reason_code)

    def _on_message(self, _client: mqtt.Client, _userdata: Any, msg: mqtt.MQTTMessage) -> None:
        provider = self._topics.get(msg.topic)
        if provider is None:
            return
        try:
            sample = decode_position_payload(msg.payload, provider, topic=msg.topic)
        except PayloadDecodeError:
            self._logger.debug("MQTT position payload dropped topic=%s", msg.topic, exc_info=True)
            return
        with self._lock:
            self._last_known[provider] = sample
            callback = self._callbacks.get(provider)
        if callback is not None and not msg.retain:
            callback(provider, sample)

"""Stream configuration for geostream."""

from __future__ import annotations

import dataclasses
import os
from typing import Any

from geostream._constants import MQTT_DEFAULT_PORT, MQTT_TOPIC_PREFIX, RECENCY_WINDOW_S, STOP_DELAY_S
from geostream.exceptions import GeoStreamConfigError


def _env_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "no", "n", "off"}:
        return False
    return default


def _env_number(env_key: str, value: str, cast: type[float] | type[int]) -> float | int:
    try:
        return cast(value)
    except ValueError as exc:
        raise GeoStreamConfigError(f"{env_key} must be numeric, got {value!r}") from exc


@dataclasses.dataclass(frozen=True)
class MqttSettings:
    """Broker connection used by :class:`geostream.mqtt.MqttLocationService`.

    Updates for a provider are read from ``<topic_prefix>/<provider>``.
    """

    host: str = "localhost"
    port: int = MQTT_DEFAULT_PORT
    topic_prefix: str = MQTT_TOPIC_PREFIX
    client_id: str = "geostream"
    keepalive: int = 60
    username: str | None = None
    password: str | None = None
    tls: bool = False

    def topic_for(self, provider: str) -> str:
        return f"{self.topic_prefix.rstrip('/')}/{provider}"


@dataclasses.dataclass(frozen=True)
class StreamConfig:
    """Arbitration stream configuration.

    Parameters
    ----------
    recency_window : float
        Seconds during which a precise sample takes precedence over any
        coarse one, regardless of arrival order.
    stop_delay : float
        Seconds the sensors keep running after the last observer leaves.
        An observer arriving within this delay reuses the running
        subscriptions, which bounds how often the bootstrap/subscription
        cycle restarts. ``0`` stops immediately.
    emit_repeats : bool
        Emit on every update that yields a selection, even when the
        selected sample was already emitted.
    mqtt : MqttSettings
        Broker settings for the MQTT location service.
    """

    recency_window: float = RECENCY_WINDOW_S
    stop_delay: float = STOP_DELAY_S
    emit_repeats: bool = False
    mqtt: MqttSettings = dataclasses.field(default_factory=MqttSettings)

    def __post_init__(self) -> None:
        if self.recency_window <= 0:
            raise GeoStreamConfigError(f"recency_window must be positive, got {self.recency_window}")
        if self.stop_delay < 0:
            raise GeoStreamConfigError(f"stop_delay must not be negative, got {self.stop_delay}")
        if not 0 < self.mqtt.port < 65536:
            raise GeoStreamConfigError(f"mqtt port out of range: {self.mqtt.port}")

    @classmethod
    def from_env(cls, **overrides: Any) -> StreamConfig:
        """Create configuration from ``GEOSTREAM_*`` environment variables.

        Explicit keyword arguments override environment values. ``mqtt``
        may be given as a :class:`MqttSettings` or as a dict of fields.
        """
        env = os.environ

        mqtt_kwargs: dict[str, Any] = {}
        _ENV_MQTT_MAP = {
            "GEOSTREAM_MQTT_HOST": "host",
            "GEOSTREAM_MQTT_TOPIC_PREFIX": "topic_prefix",
            "GEOSTREAM_MQTT_CLIENT_ID": "client_id",
            "GEOSTREAM_MQTT_USERNAME": "username",
            "GEOSTREAM_MQTT_PASSWORD": "password",
        }
        for env_key, field_name in _ENV_MQTT_MAP.items():
            val = env.get(env_key)
            if val is not None:
                mqtt_kwargs[field_name] = val
        for env_key, field_name in (("GEOSTREAM_MQTT_PORT", "port"), ("GEOSTREAM_MQTT_KEEPALIVE", "keepalive")):
            val = env.get(env_key)
            if val is not None:
                mqtt_kwargs[field_name] = _env_number(env_key, val, int)
        if "GEOSTREAM_MQTT_TLS" in env:
            mqtt_kwargs["tls"] = _env_bool(env.get("GEOSTREAM_MQTT_TLS"), False)

        mqtt_overrides = overrides.pop("mqtt", None)
        if isinstance(mqtt_overrides, dict):
            mqtt_kwargs.update(mqtt_overrides)
        elif isinstance(mqtt_overrides, MqttSettings):
            mqtt_kwargs = dataclasses.asdict(mqtt_overrides)

        config_kwargs: dict[str, Any] = {"mqtt": MqttSettings(**mqtt_kwargs)}

        for env_key, field_name in (
            ("GEOSTREAM_RECENCY_WINDOW", "recency_window"),
            ("GEOSTREAM_STOP_DELAY", "stop_delay"),
        ):
            val = env.get(env_key)
            if val is not None and field_name not in overrides:
                config_kwargs[field_name] = _env_number(env_key, val, float)

        if "emit_repeats" not in overrides:
            config_kwargs["emit_repeats"] = _env_bool(env.get("GEOSTREAM_EMIT_REPEATS"), False)

        config_kwargs.update(overrides)

        return cls(**config_kwargs)

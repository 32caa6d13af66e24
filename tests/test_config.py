from __future__ import annotations

import pytest

from geostream.config import MqttSettings, StreamConfig
from geostream.exceptions import GeoStreamConfigError


def test_defaults() -> None:
    config = StreamConfig()
    assert config.recency_window == 30.0
    assert config.stop_delay == 2.5
    assert config.emit_repeats is False
    assert config.mqtt.topic_for("gps") == "location/gps"


def test_from_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("GEOSTREAM_RECENCY_WINDOW", "45")
    monkeypatch.setenv("GEOSTREAM_STOP_DELAY", "0")
    monkeypatch.setenv("GEOSTREAM_EMIT_REPEATS", "yes")
    monkeypatch.setenv("GEOSTREAM_MQTT_HOST", "broker.local")
    monkeypatch.setenv("GEOSTREAM_MQTT_PORT", "8883")
    monkeypatch.setenv("GEOSTREAM_MQTT_TLS", "on")
    monkeypatch.setenv("GEOSTREAM_MQTT_TOPIC_PREFIX", "car/42/")

    config = StreamConfig.from_env()

    assert config.recency_window == 45.0
    assert config.stop_delay == 0.0
    assert config.emit_repeats is True
    assert config.mqtt.host == "broker.local"
    assert config.mqtt.port == 8883
    assert config.mqtt.tls is True
    assert config.mqtt.topic_for("network") == "car/42/network"


def test_overrides_win_over_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("GEOSTREAM_STOP_DELAY", "5")
    monkeypatch.setenv("GEOSTREAM_MQTT_HOST", "broker.local")

    config = StreamConfig.from_env(stop_delay=1.0, mqtt={"port": 1884})

    assert config.stop_delay == 1.0
    assert config.mqtt.host == "broker.local"
    assert config.mqtt.port == 1884


def test_mqtt_settings_instance_override() -> None:
    settings = MqttSettings(host="other")
    assert StreamConfig.from_env(mqtt=settings).mqtt == settings


@pytest.mark.parametrize(
    "kwargs",
    [
        {"recency_window": 0},
        {"stop_delay": -1},
        {"mqtt": MqttSettings(port=70000)},
    ],
)
def test_invalid_values_rejected(kwargs: dict[str, object]) -> None:
    with pytest.raises(GeoStreamConfigError):
        StreamConfig(**kwargs)  # type: ignore[arg-type]


def test_non_numeric_env_rejected(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("GEOSTREAM_RECENCY_WINDOW", "soon")
    with pytest.raises(GeoStreamConfigError, match="GEOSTREAM_RECENCY_WINDOW"):
        StreamConfig.from_env()

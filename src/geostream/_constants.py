"""Internal constants shared across the library."""

#: Seconds after which a sample no longer takes precedence over the other source.
RECENCY_WINDOW_S: float = 30.0

#: Grace period (seconds) before sensors are released once the last observer leaves.
STOP_DELAY_S: float = 2.5

#: Coordinates of the bootstrap sentinel used when no location is known at all.
DUMMY_LATITUDE: float = 0.0
DUMMY_LONGITUDE: float = 0.0

MQTT_DEFAULT_PORT = 1883
MQTT_TOPIC_PREFIX = "location"

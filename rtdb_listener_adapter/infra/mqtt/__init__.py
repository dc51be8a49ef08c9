"""MQTT 통신 인프라 (Query 구현)."""

from rtdb_listener_adapter.infra.mqtt.mqtt_client import MqttClient
from rtdb_listener_adapter.infra.mqtt.mqtt_database import (
    MqttDatabase,
    MqttQuery,
)

__all__ = ["MqttClient", "MqttDatabase", "MqttQuery"]

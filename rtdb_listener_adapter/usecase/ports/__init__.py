"""유스케이스 포트 인터페이스 (ABC).

infra 레이어에서 구현해야 하는 추상 인터페이스를 정의한다.
"""

from rtdb_listener_adapter.usecase.ports.config_port import (
    AppConfig,
    ConfigPort,
    DatabaseConfig,
    MqttConfig,
)
from rtdb_listener_adapter.usecase.ports.listeners import (
    ChildEventListener,
    ValueEventListener,
)
from rtdb_listener_adapter.usecase.ports.query import DataSnapshot, Query

__all__ = [
    "AppConfig",
    "ChildEventListener",
    "ConfigPort",
    "DataSnapshot",
    "DatabaseConfig",
    "MqttConfig",
    "Query",
    "ValueEventListener",
]

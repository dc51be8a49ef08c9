"""공통 테스트 fixture."""

from dataclasses import dataclass
from unittest.mock import MagicMock

import pytest

from rtdb_listener_adapter.domain.entities.database_error import DatabaseError
from rtdb_listener_adapter.domain.enums import ErrorCode
from rtdb_listener_adapter.infra.memory import InMemoryDatabase
from rtdb_listener_adapter.infra.snapshot import JsonDataSnapshot
from rtdb_listener_adapter.usecase.ports.config_port import (
    AppConfig,
    DatabaseConfig,
    MqttConfig,
)
from rtdb_listener_adapter.usecase.ports.query import Query


@dataclass
class User:
    """스냅샷 변환 테스트용 사용자 모델."""

    display_name: str
    status: str = ""
    age: int | None = None


@pytest.fixture
def user_type():
    return User


@pytest.fixture
def sample_users():
    return {
        "alice": {"displayName": "Alice", "status": "online", "age": 31},
        "bob": {"displayName": "Bob", "status": "away"},
    }


@pytest.fixture
def database(sample_users):
    return InMemoryDatabase({"users": sample_users})


@pytest.fixture
def users(database):
    return database.reference("users")


@pytest.fixture
def alice_snapshot(sample_users):
    return JsonDataSnapshot("alice", sample_users["alice"])


@pytest.fixture
def permission_denied():
    return DatabaseError.from_code(ErrorCode.PERMISSION_DENIED)


@pytest.fixture
def mock_query():
    """등록된 리스너를 직접 호출해 이벤트를 흉내낼 수 있는 Query."""
    query = MagicMock(spec=Query)
    query.add_value_event_listener.side_effect = lambda listener: listener
    query.add_child_event_listener.side_effect = lambda listener: listener
    return query


@pytest.fixture
def sample_config():
    return AppConfig(
        mqtt=MqttConfig(broker_host="localhost", broker_port=1883),
        database=DatabaseConfig(topic_prefix="test", qos=1),
    )

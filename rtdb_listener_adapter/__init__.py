"""실시간 데이터베이스 리스너 어댑터.

필요한 핸들러만 지정해 전체 리스너 인터페이스를 구현한 객체를 만들고,
단건 읽기를 Future 또는 에러 우선 콜백으로 노출한다.
"""

from rtdb_listener_adapter.domain.entities.database_error import DatabaseError
from rtdb_listener_adapter.domain.enums import ErrorCode
from rtdb_listener_adapter.domain.exceptions import (
    AdapterError,
    DatabaseException,
    InvalidHandlerError,
    ListenerConfigurationError,
    UnknownHandlerError,
    ValueCoercionError,
)
from rtdb_listener_adapter.usecase.listener_builder import (
    ChildEventListenerBuilder,
    ValueEventListenerBuilder,
)
from rtdb_listener_adapter.usecase.ports.listeners import (
    ChildEventListener,
    ValueEventListener,
)
from rtdb_listener_adapter.usecase.ports.query import DataSnapshot, Query
from rtdb_listener_adapter.usecase.query_extension import (
    add_child_event_listener,
    add_value_event_listener,
    build_child_listener,
    build_value_listener,
    on_child_added,
    on_child_changed,
    on_child_moved,
    on_child_removed,
    on_value_changed,
    read_value_once,
    read_value_once_async,
    remove_event_listener,
)

__all__ = [
    "AdapterError",
    "ChildEventListener",
    "ChildEventListenerBuilder",
    "DataSnapshot",
    "DatabaseError",
    "DatabaseException",
    "ErrorCode",
    "InvalidHandlerError",
    "ListenerConfigurationError",
    "Query",
    "UnknownHandlerError",
    "ValueCoercionError",
    "ValueEventListener",
    "ValueEventListenerBuilder",
    "add_child_event_listener",
    "add_value_event_listener",
    "build_child_listener",
    "build_value_listener",
    "on_child_added",
    "on_child_changed",
    "on_child_moved",
    "on_child_removed",
    "on_value_changed",
    "read_value_once",
    "read_value_once_async",
    "remove_event_listener",
]

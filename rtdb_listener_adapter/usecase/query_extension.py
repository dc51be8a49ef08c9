"""쿼리 확장 함수.

Query에 리스너 스펙을 바로 등록하는 편의 함수 모음.
반환값은 리스너 핸들이며, 해제는 호출자가 remove_event_listener로
직접 해야 한다.

    listener = on_child_added(
        users, lambda snapshot, previous: print(snapshot.key)
    )
    ...
    remove_event_listener(users, listener)
"""

from __future__ import annotations

from collections.abc import Callable
import logging

from rtdb_listener_adapter.usecase.listener_builder import (
    ChildEventListenerBuilder,
    Handler,
    ValueEventListenerBuilder,
    build_child_listener,
    build_value_listener,
)
from rtdb_listener_adapter.usecase.ports.listeners import (
    ChildEventListener,
    ValueEventListener,
)
from rtdb_listener_adapter.usecase.ports.query import Query
from rtdb_listener_adapter.usecase.single_read import (
    read_value_once,
    read_value_once_async,
)

logger = logging.getLogger(__name__)

__all__ = [
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


def add_value_event_listener(
    query: Query,
    configure: Callable[[ValueEventListenerBuilder], object] | None = None,
    /,
    **handlers: Handler,
) -> ValueEventListener:
    """값 리스너 스펙을 빌드하여 쿼리에 등록한다.

    Args:
        query: 구독할 위치.
        configure: 빌더를 받아 슬롯을 설정하는 블록.
        **handlers: 슬롯 이름 → 핸들러.

    Returns:
        리스너 핸들.
    """
    return query.add_value_event_listener(
        build_value_listener(configure, **handlers)
    )


def add_child_event_listener(
    query: Query,
    configure: Callable[[ChildEventListenerBuilder], object] | None = None,
    /,
    **handlers: Handler,
) -> ChildEventListener:
    """자식 리스너 스펙을 빌드하여 쿼리에 등록한다.

    Args:
        query: 구독할 위치.
        configure: 빌더를 받아 슬롯을 설정하는 블록.
        **handlers: 슬롯 이름 → 핸들러.

    Returns:
        리스너 핸들.
    """
    return query.add_child_event_listener(
        build_child_listener(configure, **handlers)
    )


def on_value_changed(query: Query, handler: Handler) -> ValueEventListener:
    """값 변경 이벤트만 받는 리스너를 등록한다. handler(snapshot)."""
    return query.add_value_event_listener(
        ValueEventListenerBuilder.create().on_data_change(handler).build()
    )


def on_child_added(query: Query, handler: Handler) -> ChildEventListener:
    """자식 추가 이벤트만 받는 리스너를 등록한다."""
    return query.add_child_event_listener(
        ChildEventListenerBuilder.create().on_child_added(handler).build()
    )


def on_child_changed(query: Query, handler: Handler) -> ChildEventListener:
    """자식 변경 이벤트만 받는 리스너를 등록한다."""
    return query.add_child_event_listener(
        ChildEventListenerBuilder.create().on_child_changed(handler).build()
    )


def on_child_moved(query: Query, handler: Handler) -> ChildEventListener:
    """자식 이동 이벤트만 받는 리스너를 등록한다."""
    return query.add_child_event_listener(
        ChildEventListenerBuilder.create().on_child_moved(handler).build()
    )


def on_child_removed(query: Query, handler: Handler) -> ChildEventListener:
    """자식 삭제 이벤트만 받는 리스너를 등록한다. handler(snapshot)."""
    return query.add_child_event_listener(
        ChildEventListenerBuilder.create().on_child_removed(handler).build()
    )


def remove_event_listener(
    query: Query, listener: ValueEventListener | ChildEventListener
) -> None:
    """등록된 리스너 핸들을 해제한다."""
    query.remove_event_listener(listener)
    logger.debug('Listener removed: %s', type(listener).__name__)

"""리스너 스펙 빌더.

필요한 핸들러 슬롯만 지정하면 원격 시스템이 요구하는 전체 리스너
인터페이스를 구현한 객체를 만든다. 지정하지 않은 슬롯의 이벤트는
아무 동작 없이 무시된다.

    listener = ValueEventListenerBuilder.create(
        lambda spec: spec.on_data_change(render).on_cancelled(report)
    ).build()
    query.add_value_event_listener(listener)
    ...
    query.remove_event_listener(listener)
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass
import logging
from types import MappingProxyType
from typing import Any, ClassVar, Generic, Self, TypeVar

from rtdb_listener_adapter.domain.entities.database_error import DatabaseError
from rtdb_listener_adapter.domain.enums import ListenerFamily
from rtdb_listener_adapter.domain.exceptions import (
    InvalidHandlerError,
    UnknownHandlerError,
)
from rtdb_listener_adapter.usecase.ports.listeners import (
    ChildEventListener,
    ValueEventListener,
)
from rtdb_listener_adapter.usecase.ports.query import DataSnapshot

logger = logging.getLogger(__name__)

Handler = Callable[..., Any]
ListenerT = TypeVar('ListenerT', ValueEventListener, ChildEventListener)

VALUE_SLOTS: tuple[str, ...] = ('on_data_change', 'on_cancelled')
CHILD_SLOTS: tuple[str, ...] = (
    'on_child_added',
    'on_child_changed',
    'on_child_moved',
    'on_child_removed',
    'on_cancelled',
)


@dataclass(frozen=True, eq=False)
class _SparseListener:
    """슬롯별 핸들러로 이벤트를 위임하는 리스너 공통 구현.

    Args:
        handlers: 슬롯 이름 → 핸들러. 빌드 시점의 읽기 전용 사본.
    """

    handlers: Mapping[str, Handler]

    def _dispatch(self, slot: str, *args: Any) -> Any:
        handler = self.handlers.get(slot)
        if handler is None:
            return None
        return handler(*args)


@dataclass(frozen=True, eq=False)
class SparseValueEventListener(_SparseListener, ValueEventListener):
    """일부 슬롯만 채워진 ValueEventListener."""

    def on_data_change(self, snapshot: DataSnapshot) -> Any:
        return self._dispatch('on_data_change', snapshot)

    def on_cancelled(self, error: DatabaseError) -> Any:
        return self._dispatch('on_cancelled', error)


@dataclass(frozen=True, eq=False)
class SparseChildEventListener(_SparseListener, ChildEventListener):
    """일부 슬롯만 채워진 ChildEventListener."""

    def on_child_added(
        self, snapshot: DataSnapshot, previous_child_name: str | None
    ) -> Any:
        return self._dispatch('on_child_added', snapshot, previous_child_name)

    def on_child_changed(
        self, snapshot: DataSnapshot, previous_child_name: str | None
    ) -> Any:
        return self._dispatch(
            'on_child_changed', snapshot, previous_child_name
        )

    def on_child_moved(
        self, snapshot: DataSnapshot, previous_child_name: str | None
    ) -> Any:
        return self._dispatch('on_child_moved', snapshot, previous_child_name)

    def on_child_removed(self, snapshot: DataSnapshot) -> Any:
        return self._dispatch('on_child_removed', snapshot)

    def on_cancelled(self, error: DatabaseError) -> Any:
        return self._dispatch('on_cancelled', error)


class _ListenerBuilder(Generic[ListenerT]):
    """리스너 스펙 빌더 공통 구현.

    슬롯 설정은 체이닝 가능하며 같은 슬롯을 다시 설정하면 마지막 값이
    남는다. 여러 스레드에서 동시에 설정하는 것은 지원하지 않는다.
    """

    family: ClassVar[ListenerFamily]
    slots: ClassVar[tuple[str, ...]]
    _listener_class: ClassVar[type[_SparseListener]]

    def __init__(self) -> None:
        self._handlers: dict[str, Handler] = {}

    @classmethod
    def create(
        cls,
        configure: Callable[[Self], object] | None = None,
        /,
        **handlers: Handler,
    ) -> Self:
        """빌더를 생성한다.

        Args:
            configure: 빌더를 인자로 받아 슬롯을 설정하는 블록.
            **handlers: 슬롯 이름 → 핸들러. 블록 실행 후 적용된다.

        Returns:
            설정이 적용된 빌더.

        Raises:
            UnknownHandlerError: 알 수 없는 슬롯 이름을 사용한 경우.
            InvalidHandlerError: 핸들러가 호출 가능하지 않은 경우.
        """
        builder = cls()
        if configure is not None:
            configure(builder)
        for name, handler in handlers.items():
            builder._set(name, handler)
        return builder

    def build(self) -> ListenerT:
        """현재 슬롯 구성으로 불변 리스너 객체를 만든다.

        빌드 이후의 빌더 변경은 이미 만든 리스너에 영향을 주지 않는다.
        """
        listener = self._listener_class(
            handlers=MappingProxyType(dict(self._handlers))
        )
        logger.debug(
            'Built %s listener (slots=%s)',
            self.family, ','.join(self._handlers) or '-',
        )
        return listener  # type: ignore[return-value]

    def on_cancelled(self, handler: Handler) -> Self:
        """구독 취소 핸들러를 지정한다. handler(error)."""
        return self._set('on_cancelled', handler)

    def _set(self, slot: str, handler: Handler) -> Self:
        if slot not in self.slots:
            raise UnknownHandlerError(self.family, slot, self.slots)
        if not callable(handler):
            raise InvalidHandlerError(
                f'{self.family} listener handler {slot!r} must be '
                f'callable, got {type(handler).__name__}'
            )
        if slot in self._handlers:
            logger.debug(
                'Overwriting %s handler on %s listener spec',
                slot, self.family,
            )
        self._handlers[slot] = handler
        return self

    def __getattr__(self, name: str) -> Any:
        # 정상 조회에 실패한 속성만 여기로 온다
        if name.startswith('on_'):
            raise UnknownHandlerError(self.family, name, self.slots)
        raise AttributeError(
            f'{type(self).__name__!r} object has no attribute {name!r}'
        )


class ValueEventListenerBuilder(_ListenerBuilder[ValueEventListener]):
    """ValueEventListener 스펙 빌더."""

    family = ListenerFamily.VALUE
    slots = VALUE_SLOTS
    _listener_class = SparseValueEventListener

    def on_data_change(self, handler: Handler) -> Self:
        """값 변경 핸들러를 지정한다. handler(snapshot)."""
        return self._set('on_data_change', handler)


class ChildEventListenerBuilder(_ListenerBuilder[ChildEventListener]):
    """ChildEventListener 스펙 빌더."""

    family = ListenerFamily.CHILD
    slots = CHILD_SLOTS
    _listener_class = SparseChildEventListener

    def on_child_added(self, handler: Handler) -> Self:
        """자식 추가 핸들러. handler(snapshot, previous_child_name)."""
        return self._set('on_child_added', handler)

    def on_child_changed(self, handler: Handler) -> Self:
        """자식 변경 핸들러. handler(snapshot, previous_child_name)."""
        return self._set('on_child_changed', handler)

    def on_child_moved(self, handler: Handler) -> Self:
        """자식 이동 핸들러. handler(snapshot, previous_child_name)."""
        return self._set('on_child_moved', handler)

    def on_child_removed(self, handler: Handler) -> Self:
        """자식 삭제 핸들러. handler(snapshot)."""
        return self._set('on_child_removed', handler)


def build_value_listener(
    configure: Callable[[ValueEventListenerBuilder], object] | None = None,
    /,
    **handlers: Handler,
) -> ValueEventListener:
    """슬롯 구성으로 ValueEventListener를 바로 만든다."""
    return ValueEventListenerBuilder.create(configure, **handlers).build()


def build_child_listener(
    configure: Callable[[ChildEventListenerBuilder], object] | None = None,
    /,
    **handlers: Handler,
) -> ChildEventListener:
    """슬롯 구성으로 ChildEventListener를 바로 만든다."""
    return ChildEventListenerBuilder.create(configure, **handlers).build()

"""쿼리/스냅샷 포트 인터페이스.

원격 실시간 데이터베이스의 구독 대상(Query)과 데이터 스냅샷을
추상화한다. infra 레이어의 바인딩(인메모리, MQTT)이 구현한다.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterator
from typing import Any, TypeVar, overload

from rtdb_listener_adapter.usecase.ports.listeners import (
    ChildEventListener,
    ValueEventListener,
)

T = TypeVar('T')

ValueListenerT = TypeVar('ValueListenerT', bound=ValueEventListener)
ChildListenerT = TypeVar('ChildListenerT', bound=ChildEventListener)


class DataSnapshot(ABC):
    """특정 시점의 위치 데이터."""

    @property
    @abstractmethod
    def key(self) -> str | None:
        """스냅샷 위치의 마지막 경로 세그먼트. 루트면 None."""

    @abstractmethod
    def exists(self) -> bool:
        """위치에 데이터가 있으면 True."""

    @overload
    def get_value(self, value_type: None = None) -> Any: ...

    @overload
    def get_value(self, value_type: type[T]) -> T | None: ...

    @abstractmethod
    def get_value(self, value_type: Any = None) -> Any:
        """스냅샷 값을 반환한다.

        Args:
            value_type: 변환 대상 타입. None이면 원시 값을 그대로 반환.

        Returns:
            원시 값 또는 value_type으로 변환된 값.

        Raises:
            ValueCoercionError: value_type으로 변환할 수 없는 경우.
        """

    @abstractmethod
    def has_children(self) -> bool:
        """자식 노드가 하나 이상이면 True."""

    @property
    @abstractmethod
    def children(self) -> Iterator[DataSnapshot]:
        """자식 스냅샷을 정렬 순서대로 순회한다."""

    @abstractmethod
    def child(self, path: str) -> DataSnapshot:
        """상대 경로의 자식 스냅샷을 반환한다. 없으면 빈 스냅샷."""


class Query(ABC):
    """구독/단건 읽기 대상 위치."""

    @abstractmethod
    def add_value_event_listener(
        self, listener: ValueListenerT
    ) -> ValueListenerT:
        """값 변경 리스너를 등록한다.

        Returns:
            remove_event_listener에 전달할 리스너 핸들 (인자 그대로).
        """

    @abstractmethod
    def add_child_event_listener(
        self, listener: ChildListenerT
    ) -> ChildListenerT:
        """자식 이벤트 리스너를 등록한다.

        Returns:
            remove_event_listener에 전달할 리스너 핸들 (인자 그대로).
        """

    @abstractmethod
    def remove_event_listener(
        self, listener: ValueEventListener | ChildEventListener
    ) -> None:
        """등록된 리스너를 해제한다. 미등록 핸들은 무시한다."""

    @abstractmethod
    def add_listener_for_single_value_event(
        self, listener: ValueEventListener
    ) -> None:
        """한 번만 호출되고 스스로 해제되는 값 리스너를 등록한다."""

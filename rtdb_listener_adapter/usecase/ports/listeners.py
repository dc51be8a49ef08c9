"""이벤트 리스너 포트 인터페이스.

원격 실시간 데이터베이스가 구독 등록 시 요구하는 전체 리스너
인터페이스를 정의한다. 구독 API는 모든 메서드를 구현한 객체만 받는다.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from rtdb_listener_adapter.domain.entities.database_error import (
        DatabaseError,
    )
    from rtdb_listener_adapter.usecase.ports.query import DataSnapshot


class ValueEventListener(ABC):
    """위치의 값 변경 이벤트 리스너 인터페이스."""

    @abstractmethod
    def on_data_change(self, snapshot: DataSnapshot) -> Any:
        """위치의 데이터가 바뀔 때마다 호출된다.

        Args:
            snapshot: 변경 시점의 데이터 스냅샷.
        """

    @abstractmethod
    def on_cancelled(self, error: DatabaseError) -> Any:
        """구독이 원격 시스템에 의해 취소되었을 때 호출된다.

        Args:
            error: 취소 사유.
        """


class ChildEventListener(ABC):
    """위치의 자식 노드 이벤트 리스너 인터페이스."""

    @abstractmethod
    def on_child_added(
        self, snapshot: DataSnapshot, previous_child_name: str | None
    ) -> Any:
        """자식 노드가 추가되었을 때 호출된다.

        Args:
            snapshot: 추가된 자식의 스냅샷.
            previous_child_name: 정렬상 앞선 자식의 키. 첫 자식이면 None.
        """

    @abstractmethod
    def on_child_changed(
        self, snapshot: DataSnapshot, previous_child_name: str | None
    ) -> Any:
        """자식 노드의 값이 바뀌었을 때 호출된다."""

    @abstractmethod
    def on_child_moved(
        self, snapshot: DataSnapshot, previous_child_name: str | None
    ) -> Any:
        """자식 노드의 정렬 위치가 바뀌었을 때 호출된다."""

    @abstractmethod
    def on_child_removed(self, snapshot: DataSnapshot) -> Any:
        """자식 노드가 삭제되었을 때 호출된다.

        Args:
            snapshot: 삭제 직전 자식의 스냅샷.
        """

    @abstractmethod
    def on_cancelled(self, error: DatabaseError) -> Any:
        """구독이 원격 시스템에 의해 취소되었을 때 호출된다."""

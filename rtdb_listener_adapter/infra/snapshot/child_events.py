"""자식 이벤트 생성.

위치 값의 이전/이후 상태를 비교하여 ChildEventListener에 전달할
이벤트를 만든다. 이벤트 순서는 삭제, 추가, 변경 순이다.
자식은 키 순서로 정렬되므로 정렬 위치가 바뀌는(moved) 경우는 없다.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from rtdb_listener_adapter.domain.enums import ChildEventType
from rtdb_listener_adapter.infra.snapshot.json_snapshot import (
    JsonDataSnapshot,
    ordered_children,
)
from rtdb_listener_adapter.usecase.ports.listeners import ChildEventListener


@dataclass(frozen=True)
class ChildChange:
    """단일 자식 이벤트.

    Args:
        event_type: 이벤트 유형.
        snapshot: 자식 스냅샷. 삭제 이벤트면 삭제 직전 값.
        previous_child_name: 정렬상 앞선 자식 키. 삭제 이벤트는 None.
    """

    event_type: ChildEventType
    snapshot: JsonDataSnapshot
    previous_child_name: str | None = None


def diff_children(old: Any, new: Any) -> list[ChildChange]:
    """두 값의 자식 차이를 이벤트 목록으로 변환한다."""
    old_children = dict(ordered_children(old))
    new_ordered = ordered_children(new)
    new_keys = {key for key, _ in new_ordered}

    removed = [
        ChildChange(ChildEventType.REMOVED, JsonDataSnapshot(key, value))
        for key, value in old_children.items()
        if key not in new_keys
    ]
    added: list[ChildChange] = []
    changed: list[ChildChange] = []
    previous: str | None = None
    for key, value in new_ordered:
        if key not in old_children:
            added.append(ChildChange(
                ChildEventType.ADDED, JsonDataSnapshot(key, value), previous,
            ))
        elif old_children[key] != value:
            changed.append(ChildChange(
                ChildEventType.CHANGED, JsonDataSnapshot(key, value), previous,
            ))
        previous = key
    return removed + added + changed


def dispatch_child_changes(
    listener: ChildEventListener, changes: list[ChildChange]
) -> None:
    """이벤트 목록을 리스너 메서드 호출로 전달한다."""
    for change in changes:
        if change.event_type is ChildEventType.REMOVED:
            listener.on_child_removed(change.snapshot)
        elif change.event_type is ChildEventType.ADDED:
            listener.on_child_added(
                change.snapshot, change.previous_child_name
            )
        else:
            listener.on_child_changed(
                change.snapshot, change.previous_child_name
            )

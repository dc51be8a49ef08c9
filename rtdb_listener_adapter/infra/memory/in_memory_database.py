"""인메모리 실시간 데이터베이스 바인딩.

JSON 트리를 메모리에 보관하고 Query 포트를 구현한다.
쓰기는 호출한 스레드에서 동기적으로 리스너에 전달된다.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass
import logging
import threading
from typing import Any

from rtdb_listener_adapter.domain.entities.database_error import DatabaseError
from rtdb_listener_adapter.domain.enums import ErrorCode, ListenerFamily
from rtdb_listener_adapter.infra.snapshot.child_events import (
    diff_children,
    dispatch_child_changes,
)
from rtdb_listener_adapter.infra.snapshot.json_snapshot import (
    JsonDataSnapshot,
    split_path,
    value_at,
)
from rtdb_listener_adapter.usecase.ports.listeners import (
    ChildEventListener,
    ValueEventListener,
)
from rtdb_listener_adapter.usecase.ports.query import (
    ChildListenerT,
    Query,
    ValueListenerT,
)

logger = logging.getLogger(__name__)

Path = tuple[str, ...]


@dataclass(frozen=True, eq=False)
class _Registration:
    path: Path
    listener: ValueEventListener | ChildEventListener
    family: ListenerFamily


def _related(a: Path, b: Path) -> bool:
    """한 경로가 다른 경로의 조상이거나 같으면 True."""
    n = min(len(a), len(b))
    return a[:n] == b[:n]


def _normalize(value: Any) -> Any:
    """None 자식과 빈 컨테이너를 제거한 사본을 만든다."""
    if isinstance(value, dict):
        result = {}
        for k, v in value.items():
            child = _normalize(v)
            if child is not None:
                result[str(k)] = child
        return result or None
    if isinstance(value, (list, tuple)):
        items = [_normalize(v) for v in value]
        return items if any(v is not None for v in items) else None
    return copy.deepcopy(value)


def _write(node: Any, parts: Path, value: Any) -> Any:
    """node의 경로에 value를 쓴 새 트리를 반환한다. 기존 트리는 유지된다."""
    if not parts:
        return value
    if isinstance(node, dict):
        children = dict(node)
    elif isinstance(node, list):
        children = {str(i): v for i, v in enumerate(node) if v is not None}
    else:
        children = {}
    head, rest = parts[0], parts[1:]
    child = _write(children.get(head), rest, value)
    if child is None:
        children.pop(head, None)
    else:
        children[head] = child
    return children or None


def _is_under(path: Path, root: Path) -> bool:
    return path[:len(root)] == root


class InMemoryDatabase:
    """Query 포트의 인메모리 구현체.

    값 리스너는 등록 즉시 현재 값을, 자식 리스너는 기존 자식마다
    on_child_added를 받는다. deny_read로 지정한 경로의 리스너는
    on_cancelled를 받고 해제된다.
    """

    def __init__(self, initial: Any = None) -> None:
        self._lock = threading.Lock()
        self._root: Any = _normalize(initial)
        self._registrations: list[_Registration] = []
        self._denied: dict[Path, DatabaseError] = {}

    def reference(self, path: str = '') -> InMemoryQuery:
        """경로의 Query를 반환한다."""
        return InMemoryQuery(self, split_path(path))

    def get(self, path: str = '') -> Any:
        """경로의 현재 값 사본을 반환한다."""
        with self._lock:
            return copy.deepcopy(value_at(self._root, split_path(path)))

    def set_value(self, path: str, value: Any) -> None:
        """경로에 값을 쓰고 영향을 받는 리스너에 이벤트를 전달한다.

        None을 쓰면 해당 위치가 삭제된다.
        """
        parts = split_path(path)
        with self._lock:
            old_root = self._root
            self._root = _write(old_root, parts, _normalize(value))
            new_root = self._root
            affected = [
                r for r in self._registrations if _related(r.path, parts)
            ]
        logger.debug(
            'Set /%s (affected listeners=%d)', '/'.join(parts), len(affected)
        )

        # 자식 이벤트를 값 이벤트보다 먼저 전달
        for reg in affected:
            if reg.family is ListenerFamily.CHILD and self._is_active(reg):
                changes = diff_children(
                    value_at(old_root, reg.path),
                    value_at(new_root, reg.path),
                )
                dispatch_child_changes(reg.listener, changes)
        for reg in affected:
            if reg.family is ListenerFamily.VALUE and self._is_active(reg):
                old = value_at(old_root, reg.path)
                new = value_at(new_root, reg.path)
                if old != new:
                    reg.listener.on_data_change(_snapshot(reg.path, new))

    def remove_value(self, path: str) -> None:
        """경로의 값을 삭제한다."""
        self.set_value(path, None)

    def deny_read(
        self, path: str, code: ErrorCode = ErrorCode.PERMISSION_DENIED
    ) -> None:
        """경로와 하위 경로의 읽기를 거부한다.

        기존 리스너는 on_cancelled를 받고 해제되며, 이후 등록은 즉시
        취소된다.
        """
        parts = split_path(path)
        error = DatabaseError.from_code(code, details=f'/{"/".join(parts)}')
        with self._lock:
            self._denied[parts] = error
            cancelled = [
                r for r in self._registrations if _is_under(r.path, parts)
            ]
            self._registrations = [
                r for r in self._registrations if r not in cancelled
            ]
        logger.info(
            'Read denied at /%s (cancelled listeners=%d)',
            '/'.join(parts), len(cancelled),
        )
        for reg in cancelled:
            reg.listener.on_cancelled(error)

    def allow_read(self, path: str) -> None:
        """deny_read로 거부한 경로의 읽기를 다시 허용한다."""
        with self._lock:
            self._denied.pop(split_path(path), None)

    def listener_count(self, path: str | None = None) -> int:
        """등록된 리스너 수. path를 주면 해당 경로만 센다."""
        with self._lock:
            if path is None:
                return len(self._registrations)
            parts = split_path(path)
            return sum(1 for r in self._registrations if r.path == parts)

    # -- Query 구현에서 사용 --

    def _register(
        self,
        path: Path,
        listener: ValueEventListener | ChildEventListener,
        family: ListenerFamily,
        persistent: bool = True,
    ) -> None:
        with self._lock:
            error = self._denial_for(path)
            if error is None:
                current = value_at(self._root, path)
                if persistent:
                    self._registrations.append(
                        _Registration(path, listener, family)
                    )
        if error is not None:
            logger.debug('Registration at /%s denied', '/'.join(path))
            listener.on_cancelled(error)
            return

        logger.debug(
            'Registered %s listener at /%s (persistent=%s)',
            family, '/'.join(path), persistent,
        )
        if family is ListenerFamily.CHILD:
            dispatch_child_changes(listener, diff_children(None, current))
        else:
            listener.on_data_change(_snapshot(path, current))

    def _unregister(
        self,
        path: Path,
        listener: ValueEventListener | ChildEventListener,
    ) -> None:
        with self._lock:
            before = len(self._registrations)
            self._registrations = [
                r for r in self._registrations
                if not (r.path == path and r.listener is listener)
            ]
            removed = before - len(self._registrations)
        if not removed:
            logger.debug(
                'Listener not registered at /%s, ignoring', '/'.join(path)
            )

    def _is_active(self, reg: _Registration) -> bool:
        # 앞선 핸들러가 해제한 리스너에는 전달하지 않는다
        with self._lock:
            return reg in self._registrations

    def _denial_for(self, path: Path) -> DatabaseError | None:
        for denied, error in self._denied.items():
            if _is_under(path, denied):
                return error
        return None


def _snapshot(path: Path, value: Any) -> JsonDataSnapshot:
    return JsonDataSnapshot(path[-1] if path else None, value)


class InMemoryQuery(Query):
    """InMemoryDatabase의 한 위치.

    Args:
        database: 소속 데이터베이스.
        path: 위치 경로 세그먼트.
    """

    def __init__(self, database: InMemoryDatabase, path: Path) -> None:
        self._database = database
        self._path = path

    @property
    def path(self) -> str:
        """'/'로 시작하는 위치 경로."""
        return '/' + '/'.join(self._path)

    def child(self, path: str) -> InMemoryQuery:
        """상대 경로의 Query를 반환한다."""
        return InMemoryQuery(self._database, self._path + split_path(path))

    def set_value(self, value: Any) -> None:
        """이 위치에 값을 쓴다."""
        self._database.set_value(self.path, value)

    def add_value_event_listener(
        self, listener: ValueListenerT
    ) -> ValueListenerT:
        self._database._register(self._path, listener, ListenerFamily.VALUE)
        return listener

    def add_child_event_listener(
        self, listener: ChildListenerT
    ) -> ChildListenerT:
        self._database._register(self._path, listener, ListenerFamily.CHILD)
        return listener

    def remove_event_listener(
        self, listener: ValueEventListener | ChildEventListener
    ) -> None:
        self._database._unregister(self._path, listener)

    def add_listener_for_single_value_event(
        self, listener: ValueEventListener
    ) -> None:
        self._database._register(
            self._path, listener, ListenerFamily.VALUE, persistent=False
        )

    def __repr__(self) -> str:
        return f'InMemoryQuery({self.path!r})'



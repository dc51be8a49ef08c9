"""JSON 트리 기반 DataSnapshot 구현체."""

from __future__ import annotations

from collections.abc import Iterator
import copy
import re
from typing import Any

from rtdb_listener_adapter.infra.snapshot.value_marshaller import (
    marshal_value,
)
from rtdb_listener_adapter.usecase.ports.query import DataSnapshot

_INVALID_KEY_RE = re.compile(r'[.#$\[\]]')
_INT_KEY_RE = re.compile(r'-?(0|[1-9][0-9]{0,9})')


def split_path(path: str) -> tuple[str, ...]:
    """'/'로 구분된 위치 경로를 세그먼트로 나눈다.

    Raises:
        ValueError: 세그먼트에 '.', '#', '$', '[', ']'가 포함된 경우.
    """
    parts = tuple(p for p in path.split('/') if p)
    for part in parts:
        if _INVALID_KEY_RE.search(part):
            raise ValueError(
                f'Invalid path {path!r}: segment {part!r} contains '
                f"one of '.', '#', '$', '[', ']'"
            )
    return parts


def child_sort_key(key: str) -> tuple[int, int, str]:
    """자식 키 정렬 기준. 정수 키가 먼저(수치순), 나머지는 사전순."""
    if _INT_KEY_RE.fullmatch(key) and -2**31 <= int(key) < 2**31:
        return (0, int(key), key)
    return (1, 0, key)


def ordered_children(value: Any) -> list[tuple[str, Any]]:
    """값의 자식들을 (키, 값) 쌍으로 정렬하여 반환한다."""
    if isinstance(value, dict):
        items = [(str(k), v) for k, v in value.items() if v is not None]
    elif isinstance(value, list):
        items = [(str(i), v) for i, v in enumerate(value) if v is not None]
    else:
        return []
    return sorted(items, key=lambda item: child_sort_key(item[0]))


def value_at(root: Any, parts: tuple[str, ...]) -> Any:
    """트리에서 경로의 값을 찾는다. 없으면 None."""
    node = root
    for part in parts:
        if isinstance(node, dict):
            node = node.get(part)
        elif (
            isinstance(node, list)
            and part.isdigit()
            and int(part) < len(node)
        ):
            node = node[int(part)]
        else:
            return None
        if node is None:
            return None
    return node


class JsonDataSnapshot(DataSnapshot):
    """디코딩된 JSON 값을 감싼 스냅샷.

    Args:
        key: 위치의 마지막 경로 세그먼트. 루트면 None.
        value: 디코딩된 JSON 값.
    """

    def __init__(self, key: str | None, value: Any) -> None:
        self._key = key
        self._value = value

    @property
    def key(self) -> str | None:
        return self._key

    def exists(self) -> bool:
        return self._value is not None

    def get_value(self, value_type: Any = None) -> Any:
        # 핸들러가 반환값을 수정해도 공유 트리에 영향이 없도록 복사
        return marshal_value(copy.deepcopy(self._value), value_type)

    def has_children(self) -> bool:
        return bool(ordered_children(self._value))

    @property
    def children(self) -> Iterator[DataSnapshot]:
        for key, value in ordered_children(self._value):
            yield JsonDataSnapshot(key, value)

    def child(self, path: str) -> DataSnapshot:
        parts = split_path(path)
        if not parts:
            return self
        return JsonDataSnapshot(parts[-1], value_at(self._value, parts))

    def __repr__(self) -> str:
        return f'JsonDataSnapshot(key={self._key!r}, value={self._value!r})'

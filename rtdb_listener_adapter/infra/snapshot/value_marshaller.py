"""스냅샷 값 변환.

디코딩된 JSON 값(dict/list/str/int/float/bool/None)을 요청된
파이썬 타입으로 변환한다. camelCase 키는 dataclass 필드의
snake_case 이름으로 매핑된다.
"""

from __future__ import annotations

from dataclasses import MISSING, fields, is_dataclass
from enum import Enum
import logging
import re
import types
from typing import Any, Union, get_args, get_origin, get_type_hints

from rtdb_listener_adapter.domain.exceptions import ValueCoercionError

logger = logging.getLogger(__name__)

_CAMEL_RE = re.compile(r'([A-Z])')
_INDEX_RE = re.compile(r'0|[1-9][0-9]*', re.ASCII)


def _camel_to_snake(name: str) -> str:
    """camelCase → snake_case 변환."""
    return _CAMEL_RE.sub(r'_\1', name).lower()


def _type_name(tp: Any) -> str:
    return getattr(tp, '__name__', None) or repr(tp)


def _fail(value: Any, tp: Any, path: str) -> ValueCoercionError:
    return ValueCoercionError(
        f'{path or "<root>"}: cannot convert {type(value).__name__} '
        f'to {_type_name(tp)}'
    )


def _join(path: str, key: Any) -> str:
    return f'{path}.{key}' if path else str(key)


def marshal_value(value: Any, value_type: Any = None) -> Any:
    """값을 value_type으로 변환한다.

    Args:
        value: 디코딩된 JSON 값.
        value_type: 변환 대상 타입. None 또는 Any면 원시 값 그대로.

    Returns:
        변환된 값. value가 None이면 타입과 무관하게 None.

    Raises:
        ValueCoercionError: 변환할 수 없는 경우.
    """
    if value_type is None or value_type is Any:
        return value
    return _coerce(value, value_type, '')


def _coerce(value: Any, tp: Any, path: str) -> Any:
    if tp is Any:
        return value
    if value is None:
        return None

    origin = get_origin(tp)
    args = get_args(tp)

    if origin in (Union, types.UnionType):
        for arg in args:
            if arg is type(None):
                continue
            try:
                return _coerce(value, arg, path)
            except ValueCoercionError:
                continue
        raise _fail(value, tp, path)

    if tp is bool:
        if isinstance(value, bool):
            return value
        raise _fail(value, tp, path)
    if tp is int:
        if isinstance(value, bool):
            raise _fail(value, tp, path)
        if isinstance(value, int):
            return value
        if isinstance(value, float) and value.is_integer():
            return int(value)
        raise _fail(value, tp, path)
    if tp is float:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise _fail(value, tp, path)
        return float(value)
    if tp is str:
        if isinstance(value, str):
            return value
        raise _fail(value, tp, path)

    if tp is list or origin is list:
        item_type = args[0] if args else Any
        return [
            _coerce(item, item_type, _join(path, i))
            for i, item in enumerate(_as_sequence(value, tp, path))
        ]
    if tp is tuple or origin is tuple:
        return _coerce_tuple(value, tp, args, path)
    if tp is dict or origin is dict:
        if not isinstance(value, dict):
            raise _fail(value, tp, path)
        item_type = args[1] if len(args) == 2 else Any
        return {
            k: _coerce(v, item_type, _join(path, k))
            for k, v in value.items()
        }

    if isinstance(tp, type) and issubclass(tp, Enum):
        try:
            return tp(value)
        except ValueError:
            raise _fail(value, tp, path) from None
    if isinstance(tp, type) and is_dataclass(tp):
        return _coerce_dataclass(value, tp, path)
    if isinstance(tp, type) and isinstance(value, tp):
        return value
    raise _fail(value, tp, path)


def _as_sequence(value: Any, tp: Any, path: str) -> list[Any]:
    """list 또는 배열처럼 저장된 dict를 리스트로 변환한다.

    dict는 모든 키가 ASCII 10진 인덱스이고 0..max 인덱스 중 절반
    넘게 채워져 있을 때만 배열로 본다. 빠진 인덱스는 None.
    """
    if isinstance(value, list):
        return value
    if isinstance(value, dict) and value and all(
        isinstance(k, str) and _INDEX_RE.fullmatch(k) for k in value
    ):
        size = max(int(k) for k in value) + 1
        if len(value) * 2 > size:
            result: list[Any] = [None] * size
            for k, v in value.items():
                result[int(k)] = v
            return result
    raise _fail(value, tp, path)


def _coerce_tuple(
    value: Any, tp: Any, args: tuple[Any, ...], path: str
) -> tuple[Any, ...]:
    items = _as_sequence(value, tp, path)
    if not args:
        return tuple(items)
    if len(args) == 2 and args[1] is Ellipsis:
        return tuple(
            _coerce(item, args[0], _join(path, i))
            for i, item in enumerate(items)
        )
    if len(args) != len(items):
        raise _fail(value, tp, path)
    return tuple(
        _coerce(item, arg, _join(path, i))
        for i, (item, arg) in enumerate(zip(items, args))
    )


def _coerce_dataclass(value: Any, tp: type, path: str) -> Any:
    """JSON 객체를 dataclass로 변환한다."""
    if not isinstance(value, dict):
        raise _fail(value, tp, path)

    hints = get_type_hints(tp)
    init_fields = {f.name: f for f in fields(tp) if f.init}
    kwargs: dict[str, Any] = {}
    for raw_key, raw_value in value.items():
        name = raw_key if raw_key in init_fields else _camel_to_snake(raw_key)
        if name not in init_fields:
            logger.warning(
                'No field for %r found on %s, ignoring',
                raw_key, tp.__name__,
            )
            continue
        kwargs[name] = _coerce(
            raw_value, hints.get(name, Any), _join(path, raw_key)
        )

    missing = [
        name for name, f in init_fields.items()
        if name not in kwargs
        and f.default is MISSING
        and f.default_factory is MISSING
    ]
    if missing:
        raise ValueCoercionError(
            f'{path or "<root>"}: missing field(s) for {tp.__name__}: '
            f'{", ".join(missing)}'
        )
    return tp(**kwargs)

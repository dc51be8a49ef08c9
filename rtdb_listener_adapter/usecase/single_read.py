"""단건 값 읽기 브리지.

원격 시스템의 일회성 값 리스너 등록을 Future 또는 에러 우선 콜백
(error, value) 형태로 노출한다. 두 형태 모두 같은 SettleOnce 셀을
거쳐 결과가 정확히 한 번만 전달된다.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from concurrent.futures import Future
import logging
import threading
from typing import Any, TypeVar, overload

from rtdb_listener_adapter.domain.entities.database_error import DatabaseError
from rtdb_listener_adapter.usecase.ports.listeners import ValueEventListener
from rtdb_listener_adapter.usecase.ports.query import DataSnapshot, Query

logger = logging.getLogger(__name__)

T = TypeVar('T')

ReadCallback = Callable[[BaseException | None, Any], object]


class SettleOnce:
    """결과를 한 번만 전달하는 셀.

    Args:
        sink: 결과 수신자 (error, value). 둘 중 하나만 의미를 가진다.
    """

    def __init__(self, sink: ReadCallback) -> None:
        self._sink = sink
        self._lock = threading.Lock()
        self._settled = False

    @property
    def settled(self) -> bool:
        """결과가 이미 전달되었으면 True."""
        return self._settled

    def settle(self, error: BaseException | None, value: Any = None) -> bool:
        """결과를 전달한다.

        이미 전달된 셀이면 무시한다. sink에서 발생한 예외는 호출자에게
        그대로 전파된다.

        Returns:
            이번 호출로 결과가 전달되었으면 True.
        """
        with self._lock:
            if self._settled:
                logger.debug('Single read already settled, ignoring')
                return False
            self._settled = True
        self._sink(error, value)
        return True


class SingleValueListener(ValueEventListener):
    """일회성 읽기용 ValueEventListener.

    Args:
        cell: 결과를 전달할 셀.
        value_type: 스냅샷 값 변환 대상 타입. None이면 원시 값.
    """

    def __init__(
        self, cell: SettleOnce, value_type: type | None = None
    ) -> None:
        self._cell = cell
        self._value_type = value_type

    def on_data_change(self, snapshot: DataSnapshot) -> None:
        try:
            value = snapshot.get_value(self._value_type)
        except Exception as exc:
            self._cell.settle(exc)
            return
        self._cell.settle(None, value)

    def on_cancelled(self, error: DatabaseError) -> None:
        self._cell.settle(error.to_exception())


def _future_sink(future: Future) -> ReadCallback:
    def sink(error: BaseException | None, value: Any) -> None:
        if error is not None:
            future.set_exception(error)
        else:
            future.set_result(value)
    return sink


@overload
def read_value_once(
    query: Query,
    value_type: None = None,
    callback: None = None,
) -> Future[Any]: ...


@overload
def read_value_once(
    query: Query,
    value_type: type[T],
    callback: None = None,
) -> Future[T | None]: ...


@overload
def read_value_once(
    query: Query,
    value_type: type | None,
    callback: ReadCallback,
) -> None: ...


def read_value_once(
    query: Query,
    value_type: type | None = None,
    callback: ReadCallback | None = None,
) -> Future[Any] | None:
    """쿼리 위치의 값을 한 번 읽는다.

    callback이 없으면 Future를 반환하고, 있으면 callback(None, value)
    또는 callback(error, None)을 정확히 한 번 호출한다.

    Args:
        query: 읽을 위치.
        value_type: 값 변환 대상 타입. None이면 원시 값.
        callback: 에러 우선 콜백.

    Returns:
        callback이 없으면 결과 Future, 있으면 None.
    """
    future: Future[Any] | None = None
    if callback is None:
        future = Future()
        future.set_running_or_notify_cancel()
        sink = _future_sink(future)
    else:
        sink = callback

    query.add_listener_for_single_value_event(
        SingleValueListener(SettleOnce(sink), value_type)
    )
    logger.debug(
        'Single value read registered (value_type=%s, mode=%s)',
        getattr(value_type, '__name__', value_type),
        'future' if future is not None else 'callback',
    )
    return future


async def read_value_once_async(
    query: Query, value_type: type | None = None
) -> Any:
    """read_value_once의 asyncio awaitable 형태."""
    return await asyncio.wrap_future(read_value_once(query, value_type))

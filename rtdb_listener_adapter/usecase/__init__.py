"""실시간 데이터베이스 어댑터 유스케이스 레이어.

리스너 스펙 빌더와 단건 읽기 브리지를 정의한다.
domain 레이어와 포트만 의존하며, infra 레이어 의존성은 없다.
"""

from rtdb_listener_adapter.usecase.listener_builder import (
    ChildEventListenerBuilder,
    ValueEventListenerBuilder,
)
from rtdb_listener_adapter.usecase.single_read import (
    SettleOnce,
    SingleValueListener,
    read_value_once,
)

__all__ = [
    "ChildEventListenerBuilder",
    "SettleOnce",
    "SingleValueListener",
    "ValueEventListenerBuilder",
    "read_value_once",
]

"""실시간 데이터베이스 어댑터 열거형 정의."""

from enum import IntEnum, StrEnum


class ErrorCode(IntEnum):
    """실시간 데이터베이스 에러 코드.

    원격 시스템이 구독 취소/읽기 실패 시 전달하는 코드와 같은 값을 쓴다.
    """

    DATA_STALE = -1
    OPERATION_FAILED = -2
    PERMISSION_DENIED = -3
    DISCONNECTED = -4
    EXPIRED_TOKEN = -6
    INVALID_TOKEN = -7
    MAX_RETRIES = -8
    OVERRIDDEN_BY_SET = -9
    UNAVAILABLE = -10
    USER_CODE_EXCEPTION = -11
    NETWORK_ERROR = -24
    WRITE_CANCELED = -25
    UNKNOWN_ERROR = -999


class ListenerFamily(StrEnum):
    """리스너 인터페이스 종류."""

    VALUE = 'value'
    CHILD = 'child'


class ChildEventType(StrEnum):
    """자식 노드 이벤트 유형."""

    ADDED = 'added'
    CHANGED = 'changed'
    REMOVED = 'removed'

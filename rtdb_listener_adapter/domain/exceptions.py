"""실시간 데이터베이스 어댑터 도메인 예외 정의."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from rtdb_listener_adapter.domain.enums import ErrorCode


class AdapterError(Exception):
    """어댑터 기본 예외."""


class ListenerConfigurationError(AdapterError):
    """리스너 스펙 구성이 잘못된 경우."""


class UnknownHandlerError(ListenerConfigurationError, AttributeError):
    """등록되지 않은 핸들러 이름으로 슬롯을 설정하려 할 때.

    Args:
        family: 리스너 종류 이름 (e.g. 'value').
        name: 잘못된 핸들러 이름.
        known: 허용되는 핸들러 이름 목록.
    """

    def __init__(
        self, family: str, name: str, known: tuple[str, ...]
    ) -> None:
        super().__init__(
            f'Unknown {family} listener handler {name!r}; '
            f'expected one of: {", ".join(known)}'
        )
        self.family = family
        self.name = name
        self.known = known


class InvalidHandlerError(ListenerConfigurationError, TypeError):
    """호출 불가능한 객체를 핸들러로 지정한 경우."""


class DatabaseException(AdapterError):
    """원격 시스템이 보고한 취소/실패를 나타내는 예외.

    Args:
        code: 에러 코드.
        message: 에러 메시지.
        details: 추가 상세 정보.
    """

    def __init__(
        self, code: ErrorCode, message: str, details: str = ''
    ) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.details = details


class ValueCoercionError(AdapterError, TypeError):
    """스냅샷 값을 요청된 타입으로 변환하지 못한 경우."""


class MqttConnectionError(AdapterError):
    """MQTT 브로커 연결 실패 시."""

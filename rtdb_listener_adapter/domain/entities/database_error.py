"""원격 시스템 에러 엔티티."""

from __future__ import annotations

from dataclasses import dataclass

from rtdb_listener_adapter.domain.enums import ErrorCode
from rtdb_listener_adapter.domain.exceptions import DatabaseException

_DEFAULT_MESSAGES: dict[ErrorCode, str] = {
    ErrorCode.DATA_STALE: (
        'The transaction needs to be run again with current data'
    ),
    ErrorCode.OPERATION_FAILED: (
        'The server indicated that this operation failed'
    ),
    ErrorCode.PERMISSION_DENIED: (
        'This client does not have permission to perform this operation'
    ),
    ErrorCode.DISCONNECTED: (
        'The operation had to be aborted due to a network disconnect'
    ),
    ErrorCode.EXPIRED_TOKEN: 'The supplied auth token has expired',
    ErrorCode.INVALID_TOKEN: 'The supplied auth token was invalid',
    ErrorCode.MAX_RETRIES: 'The transaction had too many retries',
    ErrorCode.OVERRIDDEN_BY_SET: (
        'The transaction was overridden by a subsequent set'
    ),
    ErrorCode.UNAVAILABLE: 'The service is unavailable',
    ErrorCode.USER_CODE_EXCEPTION: (
        'User code called from the database runloop threw an exception'
    ),
    ErrorCode.NETWORK_ERROR: (
        'The operation could not be performed due to a network error'
    ),
    ErrorCode.WRITE_CANCELED: 'The write was canceled by the user',
    ErrorCode.UNKNOWN_ERROR: 'An unknown error occurred',
}


@dataclass(frozen=True)
class DatabaseError:
    """구독 취소 또는 단건 읽기 실패 정보.

    Args:
        code: 에러 코드.
        message: 에러 메시지.
        details: 추가 상세 정보.
    """

    code: ErrorCode
    message: str
    details: str = ''

    @classmethod
    def from_code(cls, code: ErrorCode, details: str = '') -> DatabaseError:
        """에러 코드의 기본 메시지로 DatabaseError를 생성한다."""
        return cls(
            code=code,
            message=_DEFAULT_MESSAGES.get(
                code, _DEFAULT_MESSAGES[ErrorCode.UNKNOWN_ERROR]
            ),
            details=details,
        )

    def to_exception(self) -> DatabaseException:
        """실패를 전달할 수 있는 예외 객체로 변환한다."""
        return DatabaseException(self.code, self.message, self.details)

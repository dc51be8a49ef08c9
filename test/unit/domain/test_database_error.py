"""DatabaseError 및 도메인 예외 단위 테스트."""

import dataclasses

import pytest

from rtdb_listener_adapter.domain.entities.database_error import DatabaseError
from rtdb_listener_adapter.domain.enums import ErrorCode
from rtdb_listener_adapter.domain.exceptions import (
    AdapterError,
    DatabaseException,
    UnknownHandlerError,
    ValueCoercionError,
)


class TestDatabaseError:
    def test_from_code_uses_default_message(self):
        error = DatabaseError.from_code(ErrorCode.PERMISSION_DENIED)

        assert error.code == ErrorCode.PERMISSION_DENIED
        assert "permission" in error.message
        assert error.details == ""

    def test_from_code_keeps_details(self):
        error = DatabaseError.from_code(
            ErrorCode.DISCONNECTED, details="/users"
        )

        assert error.details == "/users"

    def test_to_exception(self):
        error = DatabaseError(
            code=ErrorCode.UNAVAILABLE, message="down", details="retry"
        )

        exc = error.to_exception()

        assert isinstance(exc, DatabaseException)
        assert isinstance(exc, AdapterError)
        assert exc.code == ErrorCode.UNAVAILABLE
        assert exc.details == "retry"
        assert str(exc) == "down"

    def test_is_frozen(self):
        error = DatabaseError.from_code(ErrorCode.UNKNOWN_ERROR)

        with pytest.raises(dataclasses.FrozenInstanceError):
            error.code = ErrorCode.DATA_STALE


class TestErrorCode:
    def test_values_match_remote_codes(self):
        assert ErrorCode.PERMISSION_DENIED == -3
        assert ErrorCode.NETWORK_ERROR == -24
        assert ErrorCode.UNKNOWN_ERROR == -999


class TestExceptionHierarchy:
    def test_unknown_handler_error_message(self):
        exc = UnknownHandlerError(
            "value", "on_bogus", ("on_data_change", "on_cancelled")
        )

        assert isinstance(exc, AttributeError)
        assert "on_bogus" in str(exc)
        assert "on_data_change, on_cancelled" in str(exc)

    def test_value_coercion_error_is_type_error(self):
        assert issubclass(ValueCoercionError, TypeError)
        assert issubclass(ValueCoercionError, AdapterError)

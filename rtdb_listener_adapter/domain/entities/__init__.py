"""실시간 데이터베이스 도메인 엔티티."""

from rtdb_listener_adapter.domain.entities.database_error import DatabaseError

__all__ = ["DatabaseError"]

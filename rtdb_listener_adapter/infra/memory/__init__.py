"""인메모리 데이터베이스 인프라 (Query 구현)."""

from rtdb_listener_adapter.infra.memory.in_memory_database import (
    InMemoryDatabase,
    InMemoryQuery,
)

__all__ = ["InMemoryDatabase", "InMemoryQuery"]

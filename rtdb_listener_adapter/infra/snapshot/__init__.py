"""스냅샷/값 변환 인프라 (DataSnapshot 구현)."""

from rtdb_listener_adapter.infra.snapshot.json_snapshot import (
    JsonDataSnapshot,
    split_path,
)
from rtdb_listener_adapter.infra.snapshot.value_marshaller import (
    marshal_value,
)

__all__ = ["JsonDataSnapshot", "marshal_value", "split_path"]

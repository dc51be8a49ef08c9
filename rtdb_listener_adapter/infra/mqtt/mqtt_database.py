"""MQTT 기반 실시간 데이터베이스 바인딩.

위치 경로 하나가 MQTT 토픽 하나에 대응하며, 토픽의 retained JSON
페이로드가 그 위치의 값이다. 하위 토픽은 독립된 위치로 취급한다.

    rtdb/users/alice  ->  {"displayName": "Alice", "status": "online"}

같은 토픽의 리스너들은 MQTT 구독 하나를 공유하고, 리스너 호출은
paho 네트워크 스레드에서 이뤄진다.

MQTT에는 "retained 메시지 없음" 통지가 없다. SUBACK 이후에
retained 메시지가 도착하므로 SUBACK 시점에는 값이 없는지 알 수 없다.
따라서 값이 한 번도 발행되지 않은 위치의 일회성 읽기는 다음 발행까지
완료되지 않는다. 기한이 필요하면 호출자가 Future에 timeout을 건다.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import json
import logging
import threading
from typing import Any

from rtdb_listener_adapter.domain.entities.database_error import DatabaseError
from rtdb_listener_adapter.domain.enums import ErrorCode, ListenerFamily
from rtdb_listener_adapter.infra.mqtt.mqtt_client import MqttClient
from rtdb_listener_adapter.infra.snapshot.child_events import (
    diff_children,
    dispatch_child_changes,
)
from rtdb_listener_adapter.infra.snapshot.json_snapshot import (
    JsonDataSnapshot,
    split_path,
)
from rtdb_listener_adapter.usecase.ports.listeners import (
    ChildEventListener,
    ValueEventListener,
)
from rtdb_listener_adapter.usecase.ports.query import (
    ChildListenerT,
    Query,
    ValueListenerT,
)

logger = logging.getLogger(__name__)

Path = tuple[str, ...]


@dataclass(frozen=True, eq=False)
class _Registration:
    listener: ValueEventListener | ChildEventListener
    family: ListenerFamily
    once: bool = False


@dataclass
class _TopicState:
    """토픽별 최신 값과 리스너 목록."""

    path: Path
    value: Any = None
    has_value: bool = False
    registrations: list[_Registration] = field(default_factory=list)


def _decode(payload: bytes) -> Any:
    """페이로드를 JSON 값으로 디코딩한다. 빈 페이로드는 None."""
    if not payload:
        return None
    return json.loads(payload.decode('utf-8'))


class MqttDatabase:
    """Query 포트의 MQTT 구현체.

    Args:
        client: MQTT 클라이언트.
        topic_prefix: 위치 경로 앞에 붙는 토픽 prefix.
        qos: 구독/발행 QoS 레벨.
    """

    def __init__(
        self, client: MqttClient, topic_prefix: str = 'rtdb', qos: int = 1
    ) -> None:
        self._client = client
        self._prefix = '/'.join(p for p in topic_prefix.split('/') if p)
        self._qos = qos
        self._lock = threading.Lock()
        self._topics: dict[str, _TopicState] = {}

    def reference(self, path: str = '') -> MqttQuery:
        """경로의 Query를 반환한다.

        Raises:
            ValueError: 경로가 유효하지 않거나 MQTT 와일드카드를 포함한 경우.
        """
        parts = split_path(path)
        if any('+' in part for part in parts):
            raise ValueError(f'Invalid path {path!r}: contains "+"')
        return MqttQuery(self, parts)

    def topic_for(self, parts: Path) -> str:
        """경로 세그먼트의 MQTT 토픽."""
        topic = '/'.join((self._prefix, *parts) if self._prefix else parts)
        if not topic:
            raise ValueError('Root location requires a topic prefix')
        return topic

    def set_value(
        self, parts: Path, value: Any, wait_timeout: float | None = None
    ) -> bool:
        """위치에 값을 retained 메시지로 발행한다. None이면 삭제.

        Returns:
            발행에 성공했으면 True.
        """
        payload = '' if value is None else json.dumps(
            value, ensure_ascii=False
        )
        return self._client.publish(
            self.topic_for(parts),
            payload,
            qos=self._qos,
            retain=True,
            wait_timeout=wait_timeout,
        )

    # -- Query 구현에서 사용 --

    def _register(
        self,
        parts: Path,
        listener: ValueEventListener | ChildEventListener,
        family: ListenerFamily,
        once: bool = False,
    ) -> None:
        topic = self.topic_for(parts)
        with self._lock:
            state = self._topics.get(topic)
            new_topic = state is None
            if state is None:
                state = self._topics[topic] = _TopicState(parts)
            has_value, value = state.has_value, state.value
            if not (once and has_value):
                state.registrations.append(
                    _Registration(listener, family, once)
                )

        logger.debug(
            'Registered %s listener on %s (once=%s)', family, topic, once
        )
        if new_topic:
            self._client.subscribe(
                topic,
                self._on_payload,
                qos=self._qos,
                on_failure=self._on_subscribe_failed,
            )
        if not has_value:
            return
        if family is ListenerFamily.CHILD:
            dispatch_child_changes(listener, diff_children(None, value))
        else:
            listener.on_data_change(_snapshot(parts, value))

    def _unregister(
        self,
        parts: Path,
        listener: ValueEventListener | ChildEventListener,
    ) -> None:
        topic = self.topic_for(parts)
        with self._lock:
            state = self._topics.get(topic)
            if state is None or not any(
                r.listener is listener for r in state.registrations
            ):
                logger.debug(
                    'Listener not registered on %s, ignoring', topic
                )
                return
            state.registrations = [
                r for r in state.registrations if r.listener is not listener
            ]
            drop_topic = not state.registrations
            if drop_topic:
                del self._topics[topic]
        if drop_topic:
            self._client.unsubscribe(topic)
            logger.debug('Last listener removed, unsubscribed %s', topic)

    def _on_payload(self, topic: str, payload: bytes) -> None:
        try:
            value = _decode(payload)
        except ValueError:
            logger.warning('Malformed JSON payload on %s, ignoring', topic)
            return

        with self._lock:
            state = self._topics.get(topic)
            if state is None:
                return
            old, had_value = state.value, state.has_value
            state.value, state.has_value = value, True
            registrations = list(state.registrations)
            # 일회성 리스너는 호출 전에 해제
            state.registrations = [
                r for r in registrations if not r.once
            ]
            drop_topic = not state.registrations
            if drop_topic:
                del self._topics[topic]
            parts = state.path
        if drop_topic:
            self._client.unsubscribe(topic)

        unchanged = had_value and old == value
        for reg in registrations:
            if reg.family is ListenerFamily.CHILD:
                dispatch_child_changes(
                    reg.listener,
                    diff_children(old if had_value else None, value),
                )
        for reg in registrations:
            if reg.family is ListenerFamily.VALUE and (
                reg.once or not unchanged
            ):
                reg.listener.on_data_change(_snapshot(parts, value))

    def _on_subscribe_failed(self, topic: str) -> None:
        with self._lock:
            state = self._topics.pop(topic, None)
        if state is None:
            return
        error = DatabaseError.from_code(
            ErrorCode.PERMISSION_DENIED,
            details=f'Subscription to {topic} refused by broker',
        )
        logger.info(
            'Cancelling %d listener(s) on %s',
            len(state.registrations), topic,
        )
        for reg in state.registrations:
            reg.listener.on_cancelled(error)


def _snapshot(parts: Path, value: Any) -> JsonDataSnapshot:
    return JsonDataSnapshot(parts[-1] if parts else None, value)


class MqttQuery(Query):
    """MqttDatabase의 한 위치.

    Args:
        database: 소속 데이터베이스.
        path: 위치 경로 세그먼트.
    """

    def __init__(self, database: MqttDatabase, path: Path) -> None:
        self._database = database
        self._path = path

    @property
    def topic(self) -> str:
        """이 위치의 MQTT 토픽."""
        return self._database.topic_for(self._path)

    def child(self, path: str) -> MqttQuery:
        """상대 경로의 Query를 반환한다."""
        return self._database.reference(
            '/'.join(self._path + split_path(path))
        )

    def set_value(
        self, value: Any, wait_timeout: float | None = None
    ) -> bool:
        """이 위치에 값을 쓴다. 발행에 성공했으면 True."""
        return self._database.set_value(self._path, value, wait_timeout)

    def add_value_event_listener(
        self, listener: ValueListenerT
    ) -> ValueListenerT:
        self._database._register(self._path, listener, ListenerFamily.VALUE)
        return listener

    def add_child_event_listener(
        self, listener: ChildListenerT
    ) -> ChildListenerT:
        self._database._register(self._path, listener, ListenerFamily.CHILD)
        return listener

    def remove_event_listener(
        self, listener: ValueEventListener | ChildEventListener
    ) -> None:
        self._database._unregister(self._path, listener)

    def add_listener_for_single_value_event(
        self, listener: ValueEventListener
    ) -> None:
        self._database._register(
            self._path, listener, ListenerFamily.VALUE, once=True
        )

    def __repr__(self) -> str:
        return f'MqttQuery({self.topic!r})'

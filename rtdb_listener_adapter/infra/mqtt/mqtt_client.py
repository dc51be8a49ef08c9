"""paho-mqtt 래퍼 클라이언트.

MQTT 연결 관리, 자동 재연결, 구독 실패 통지 등
paho-mqtt의 저수준 API를 캡슐화한다.
"""

from __future__ import annotations

from collections.abc import Callable
import logging
import threading
from typing import Any

import paho.mqtt.client as mqtt

from rtdb_listener_adapter.domain.exceptions import MqttConnectionError
from rtdb_listener_adapter.usecase.ports.config_port import MqttConfig

logger = logging.getLogger(__name__)

MessageCallback = Callable[[str, bytes], None]
FailureCallback = Callable[[str], None]


class MqttClient:
    """paho-mqtt 래퍼.

    Args:
        config: MQTT 브로커 접속 설정.
        client_id: MQTT 클라이언트 ID.
    """

    def __init__(self, config: MqttConfig, client_id: str = '') -> None:
        self._config = config
        self._client = mqtt.Client(
            callback_api_version=mqtt.CallbackAPIVersion.VERSION2,
            client_id=client_id,
            protocol=mqtt.MQTTv311,
        )
        self._lock = threading.Lock()
        self._connected = False
        self._connected_event = threading.Event()

        if config.username:
            self._client.username_pw_set(
                config.username, config.password or None
            )

        self._client.on_connect = self._on_connect
        self._client.on_disconnect = self._on_disconnect
        self._client.on_message = self._on_message
        self._client.on_subscribe = self._on_subscribe

        self._client.reconnect_delay_set(
            min_delay=1,
            max_delay=config.reconnect_max_delay_sec,
        )

        # {topic: (callback, qos)}
        self._subscriptions: dict[str, tuple[MessageCallback, int]] = {}
        self._failure_callbacks: dict[str, FailureCallback] = {}
        # SUBACK 대기 중인 요청: {mid: topic}
        self._pending_subacks: dict[int, str] = {}

    @property
    def is_connected(self) -> bool:
        """MQTT 브로커 연결 여부."""
        return self._connected

    def wait_until_connected(self, timeout: float) -> bool:
        """브로커 연결이 성립할 때까지 기다린다.

        Returns:
            timeout 안에 연결되었으면 True.
        """
        return self._connected_event.wait(timeout)

    def connect(self) -> None:
        """MQTT 브로커에 연결한다.

        Raises:
            MqttConnectionError: 브로커에 접속할 수 없는 경우.
        """
        logger.info(
            'MQTT connecting to %s:%d',
            self._config.broker_host,
            self._config.broker_port,
        )
        try:
            self._client.connect(
                host=self._config.broker_host,
                port=self._config.broker_port,
                keepalive=self._config.keepalive_sec,
            )
        except OSError as exc:
            raise MqttConnectionError(
                f'Cannot connect to MQTT broker '
                f'{self._config.broker_host}:{self._config.broker_port}: '
                f'{exc}'
            ) from exc
        self._client.loop_start()

    def disconnect(self) -> None:
        """MQTT 브로커 연결을 종료한다."""
        logger.info('MQTT disconnecting')
        self._client.loop_stop()
        self._client.disconnect()
        self._connected = False
        self._connected_event.clear()

    def publish(
        self,
        topic: str,
        payload: str,
        qos: int = 0,
        retain: bool = False,
        wait_timeout: float | None = None,
    ) -> bool:
        """메시지를 발행한다.

        Args:
            topic: MQTT 토픽.
            payload: JSON 페이로드 문자열. 빈 문자열이면 retained 삭제.
            qos: QoS 레벨.
            retain: Retained 플래그.
            wait_timeout: 지정하면 전송 완료까지 최대 이 시간(초) 대기.

        Returns:
            전송 요청이 큐에 들어갔으면 True. wait_timeout을 지정한
            경우에는 시간 안에 전송이 완료되었을 때만 True.
        """
        with self._lock:
            result = self._client.publish(
                topic, payload.encode('utf-8'), qos=qos, retain=retain
            )
            if result.rc != mqtt.MQTT_ERR_SUCCESS:
                logger.error(
                    'MQTT publish failed: topic=%s, rc=%d', topic, result.rc
                )
                return False
        if wait_timeout is None:
            return True
        result.wait_for_publish(timeout=wait_timeout)
        if not result.is_published():
            logger.error(
                'MQTT publish not completed within %.1fs: topic=%s',
                wait_timeout, topic,
            )
            return False
        return True

    def subscribe(
        self,
        topic: str,
        callback: MessageCallback,
        qos: int = 0,
        on_failure: FailureCallback | None = None,
    ) -> None:
        """토픽을 구독한다.

        연결 전이면 연결 성공 시 구독 요청을 보낸다.

        Args:
            topic: 구독할 MQTT 토픽.
            callback: 메시지 수신 콜백 (topic, payload).
            qos: QoS 레벨.
            on_failure: 브로커가 구독을 거부했을 때 호출할 콜백 (topic).
        """
        with self._lock:
            self._subscriptions[topic] = (callback, qos)
            if on_failure is not None:
                self._failure_callbacks[topic] = on_failure
            if self._connected:
                self._request_subscribe(topic, qos)
            logger.info('MQTT subscribe requested: %s (qos=%d)', topic, qos)

    def unsubscribe(self, topic: str) -> None:
        """토픽 구독을 해제한다.

        Args:
            topic: 해제할 MQTT 토픽.
        """
        with self._lock:
            self._subscriptions.pop(topic, None)
            self._failure_callbacks.pop(topic, None)
            if self._connected:
                self._client.unsubscribe(topic)

    def _request_subscribe(self, topic: str, qos: int) -> None:
        """구독 요청을 보내고 SUBACK 대기 목록에 기록한다. lock 보유 상태."""
        rc, mid = self._client.subscribe(topic, qos=qos)
        if rc == mqtt.MQTT_ERR_SUCCESS and mid is not None:
            self._pending_subacks[mid] = topic
        else:
            logger.warning('MQTT subscribe not sent: %s (rc=%s)', topic, rc)

    def _on_connect(
        self,
        client: mqtt.Client,
        userdata: object,
        flags: Any,
        reason_code: Any,
        properties: Any = None,
    ) -> None:
        """연결 성공 콜백."""
        if reason_code.is_failure:
            logger.error('MQTT connection failed: %s', reason_code)
            return

        self._connected = True
        self._connected_event.set()
        logger.info('MQTT connected to broker')
        # 재연결 시 기존 구독 복원
        with self._lock:
            for topic, (_, qos) in self._subscriptions.items():
                self._request_subscribe(topic, qos)
                logger.debug('MQTT re-subscribed: %s (qos=%d)', topic, qos)

    def _on_disconnect(
        self,
        client: mqtt.Client,
        userdata: object,
        flags: Any,
        reason_code: Any,
        properties: Any = None,
    ) -> None:
        """연결 해제 콜백."""
        self._connected = False
        self._connected_event.clear()
        if reason_code.is_failure:
            logger.warning(
                'MQTT unexpected disconnect: %s, auto-reconnecting',
                reason_code,
            )

    def _on_subscribe(
        self,
        client: mqtt.Client,
        userdata: object,
        mid: int,
        reason_code_list: list[Any],
        properties: Any = None,
    ) -> None:
        """SUBACK 수신 콜백."""
        with self._lock:
            topic = self._pending_subacks.pop(mid, None)
            if topic is None:
                return
            if not any(rc.is_failure for rc in reason_code_list):
                logger.debug('MQTT subscription granted: %s', topic)
                return
            self._subscriptions.pop(topic, None)
            on_failure = self._failure_callbacks.pop(topic, None)

        logger.warning('MQTT subscription refused: %s', topic)
        if on_failure is not None:
            try:
                on_failure(topic)
            except Exception:
                logger.exception(
                    'Error in MQTT subscribe failure handler: topic=%s', topic
                )

    def _on_message(
        self,
        client: mqtt.Client,
        userdata: object,
        msg: mqtt.MQTTMessage,
    ) -> None:
        """메시지 수신 콜백."""
        with self._lock:
            entry = self._subscriptions.get(msg.topic)

        if entry is not None:
            callback, _ = entry
            try:
                callback(msg.topic, msg.payload)
            except Exception:
                logger.exception(
                    'Error in MQTT message handler: topic=%s', msg.topic
                )
        else:
            logger.debug('No handler for topic: %s', msg.topic)

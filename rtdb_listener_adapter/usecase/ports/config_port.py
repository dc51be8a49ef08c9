"""설정 포트 인터페이스.

애플리케이션 설정의 로딩을 추상화한다.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field


@dataclass(frozen=True)
class MqttConfig:
    """MQTT 브로커 접속 설정.

    Args:
        broker_host: 브로커 호스트 주소.
        broker_port: 브로커 포트 번호.
        keepalive_sec: 연결 유지 간격 (초).
        reconnect_max_delay_sec: 재연결 최대 대기 시간 (초).
        username: 인증 사용자명. 빈 문자열이면 인증 없음.
        password: 인증 비밀번호.
    """

    broker_host: str = 'localhost'
    broker_port: int = 1883
    keepalive_sec: int = 60
    reconnect_max_delay_sec: int = 60
    username: str = ''
    password: str = ''


@dataclass(frozen=True)
class DatabaseConfig:
    """MQTT 바인딩 데이터베이스 설정.

    Args:
        topic_prefix: 위치 경로 앞에 붙는 토픽 prefix.
        qos: 구독 QoS 레벨.
        client_id: MQTT 클라이언트 ID.
    """

    topic_prefix: str = 'rtdb'
    qos: int = 1
    client_id: str = ''


@dataclass(frozen=True)
class AppConfig:
    """애플리케이션 전체 설정.

    Args:
        mqtt: MQTT 브로커 설정.
        database: 데이터베이스 바인딩 설정.
        log_level: 로깅 레벨 이름.
    """

    mqtt: MqttConfig = field(default_factory=MqttConfig)
    database: DatabaseConfig = field(default_factory=DatabaseConfig)
    log_level: str = 'INFO'


class ConfigPort(ABC):
    """설정 로더 인터페이스."""

    @abstractmethod
    def load(self) -> AppConfig:
        """설정을 로드한다.

        Returns:
            로드된 AppConfig. 누락된 항목은 기본값.
        """

"""YAML 파일 기반 설정 로더 구현체."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml

from rtdb_listener_adapter.usecase.ports.config_port import (
    AppConfig,
    ConfigPort,
    DatabaseConfig,
    MqttConfig,
)

logger = logging.getLogger(__name__)

_DEFAULT_CONFIG_PATH = (
    Path(__file__).resolve().parent.parent.parent
    / "config"
    / "default_params.yaml"
)


class YamlConfigLoader(ConfigPort):
    """ConfigPort의 YAML 파일 구현체.

    YAML 파일에서 설정을 읽어 AppConfig로 변환한다.
    파일이 없으면 기본값을 사용한다.

    Args:
        config_path: YAML 설정 파일 경로. None이면 기본 경로 사용.
    """

    def __init__(self, config_path: Path | str | None = None) -> None:
        self._path = Path(config_path) if config_path else _DEFAULT_CONFIG_PATH

    def load(self) -> AppConfig:
        """YAML 파일에서 설정을 로드한다."""
        params = self._extract_params(self._read_yaml())

        mqtt_data = params.get("mqtt") or {}
        database_data = params.get("database") or {}

        config = AppConfig(
            mqtt=MqttConfig(
                broker_host=mqtt_data.get("broker_host", "localhost"),
                broker_port=int(mqtt_data.get("broker_port", 1883)),
                keepalive_sec=int(mqtt_data.get("keepalive_sec", 60)),
                reconnect_max_delay_sec=int(
                    mqtt_data.get("reconnect_max_delay_sec", 60)
                ),
                username=mqtt_data.get("username", ""),
                password=mqtt_data.get("password", ""),
            ),
            database=DatabaseConfig(
                topic_prefix=database_data.get("topic_prefix", "rtdb"),
                qos=int(database_data.get("qos", 1)),
                client_id=database_data.get("client_id", ""),
            ),
            log_level=str(params.get("log_level", "INFO")).upper(),
        )

        logger.info("Config loaded from %s", self._path)
        return config

    def _read_yaml(self) -> dict[str, Any]:
        """YAML 파일을 dict로 읽는다."""
        if not self._path.exists():
            logger.warning(
                "Config file not found: %s, using defaults", self._path
            )
            return {}

        with open(self._path, encoding="utf-8") as f:
            data = yaml.safe_load(f)

        if not isinstance(data, dict):
            logger.warning("Invalid YAML format, using defaults")
            return {}

        return data

    def _extract_params(self, raw: dict[str, Any]) -> dict[str, Any]:
        """최상위 rtdb_listener_adapter 키가 있으면 그 아래를 사용한다."""
        node_data = raw.get("rtdb_listener_adapter", raw)
        if isinstance(node_data, dict):
            return node_data
        return {}

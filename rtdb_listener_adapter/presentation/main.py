"""rtdb_listen 진입점.

MQTT 바인딩 위의 위치를 구독하거나 한 번 읽어 출력한다.

실행: rtdb_listen -c config.yaml watch users/alice
      rtdb_listen -c config.yaml children users
      rtdb_listen -c config.yaml set users/alice '{"status": "online"}'
      rtdb_listen -c config.yaml get users/alice --as dict
"""

from __future__ import annotations

import argparse
from concurrent.futures import TimeoutError as FutureTimeoutError
import json
import logging
import sys
import threading
from typing import Any

from rtdb_listener_adapter.domain.entities.database_error import DatabaseError
from rtdb_listener_adapter.domain.exceptions import (
    AdapterError,
    MqttConnectionError,
)
from rtdb_listener_adapter.infra.config import YamlConfigLoader
from rtdb_listener_adapter.infra.mqtt import (
    MqttClient,
    MqttDatabase,
    MqttQuery,
)
from rtdb_listener_adapter.usecase.ports.query import DataSnapshot
from rtdb_listener_adapter.usecase.query_extension import (
    add_child_event_listener,
    add_value_event_listener,
    read_value_once,
    remove_event_listener,
)

logger = logging.getLogger(__name__)

_CONNECT_TIMEOUT_SEC = 10.0

_VALUE_TYPES: dict[str, type] = {
    'str': str,
    'int': int,
    'float': float,
    'bool': bool,
    'dict': dict,
    'list': list,
}


def _dump(value: Any) -> str:
    return json.dumps(value, ensure_ascii=False, sort_keys=True)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='rtdb_listen',
        description='Listen to realtime database locations over MQTT',
    )
    parser.add_argument(
        '-c', '--config_file', type=str, default=None,
        help='Path to the config.yaml file (default: bundled defaults)',
    )
    sub = parser.add_subparsers(dest='command', required=True)

    watch = sub.add_parser('watch', help='Print every value change')
    watch.add_argument('path')

    children = sub.add_parser('children', help='Print child events')
    children.add_argument('path')

    get = sub.add_parser('get', help='Read a value once and exit')
    get.add_argument('path')
    get.add_argument(
        '--as', dest='value_type', choices=sorted(_VALUE_TYPES),
        default=None, help='Coerce the value to this type',
    )
    get.add_argument(
        '--timeout', type=float, default=10.0,
        help='Seconds to wait for the value, default: 10',
    )

    set_ = sub.add_parser('set', help='Write a JSON value (retained)')
    set_.add_argument('path')
    set_.add_argument('value', help='JSON text, e.g. \'{"status": "online"}\'')
    return parser


def _get(query: MqttQuery, value_type: str | None, timeout: float) -> int:
    future = read_value_once(
        query, _VALUE_TYPES[value_type] if value_type else None
    )
    try:
        value = future.result(timeout=timeout)
    except FutureTimeoutError:
        logger.error(
            'No value received from %s within %.1fs '
            '(no retained value at this location?)',
            query.topic, timeout,
        )
        return 1
    except AdapterError as exc:
        logger.error('Read failed: %s', exc)
        return 1
    print(_dump(value))
    return 0


def _set(query: MqttQuery, text: str) -> int:
    try:
        value = json.loads(text)
    except ValueError:
        logger.error('Value is not valid JSON: %s', text)
        return 2
    if not query.set_value(value, wait_timeout=_CONNECT_TIMEOUT_SEC):
        logger.error('Value was not published to %s', query.topic)
        return 1
    return 0


def _listen(query: MqttQuery, children: bool) -> int:
    stop = threading.Event()
    failed = threading.Event()

    def cancelled(error: DatabaseError) -> None:
        logger.error('Listener cancelled: %s (%s)', error.message,
                     error.details)
        failed.set()
        stop.set()

    def show(event: str):
        def handler(snapshot: DataSnapshot, *_: Any) -> None:
            print(f'{event} {snapshot.key}: {_dump(snapshot.get_value())}')
        return handler

    if children:
        listener = add_child_event_listener(
            query,
            on_child_added=show('added'),
            on_child_changed=show('changed'),
            on_child_removed=show('removed'),
            on_cancelled=cancelled,
        )
    else:
        listener = add_value_event_listener(
            query, on_data_change=show('value'), on_cancelled=cancelled
        )

    try:
        while not stop.wait(0.5):
            pass
    except KeyboardInterrupt:
        logger.info('Keyboard interrupt received')
    finally:
        remove_event_listener(query, listener)
    return 1 if failed.is_set() else 0


def main(argv: list[str] | None = None) -> int:
    """CLI를 실행한다.

    Args:
        argv: 커맨드 라인 인자 (프로그램 이름 제외).

    Returns:
        종료 코드.
    """
    args = _build_parser().parse_args(argv)
    config = YamlConfigLoader(args.config_file).load()

    logging.basicConfig(
        level=getattr(logging, config.log_level, logging.INFO),
        format='[%(name)s] %(levelname)s: %(message)s',
    )

    client = MqttClient(config.mqtt, client_id=config.database.client_id)
    database = MqttDatabase(
        client, config.database.topic_prefix, config.database.qos
    )
    try:
        query = database.reference(args.path)
    except ValueError as exc:
        logger.error('%s', exc)
        return 2

    try:
        client.connect()
    except MqttConnectionError as exc:
        logger.error('%s', exc)
        return 1
    if not client.wait_until_connected(_CONNECT_TIMEOUT_SEC):
        logger.error(
            'MQTT broker did not accept the connection within %.0fs',
            _CONNECT_TIMEOUT_SEC,
        )
        client.disconnect()
        return 1

    try:
        if args.command == 'get':
            return _get(query, args.value_type, args.timeout)
        if args.command == 'set':
            return _set(query, args.value)
        return _listen(query, children=args.command == 'children')
    finally:
        client.disconnect()


if __name__ == '__main__':
    sys.exit(main())

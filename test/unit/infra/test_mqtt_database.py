"""MqttDatabase 유닛 테스트."""

import json
from unittest.mock import MagicMock

import pytest

from rtdb_listener_adapter.domain.enums import ErrorCode
from rtdb_listener_adapter.domain.exceptions import DatabaseException
from rtdb_listener_adapter.infra.mqtt.mqtt_client import MqttClient
from rtdb_listener_adapter.infra.mqtt.mqtt_database import MqttDatabase
from rtdb_listener_adapter.usecase.ports.listeners import (
    ChildEventListener,
    ValueEventListener,
)
from rtdb_listener_adapter.usecase.single_read import read_value_once


@pytest.fixture
def mqtt_client():
    return MagicMock(spec=MqttClient)


@pytest.fixture
def db(mqtt_client):
    return MqttDatabase(mqtt_client, topic_prefix='/rtdb/', qos=1)


def _deliver(mqtt_client, topic, value):
    """구독 콜백으로 retained 메시지 수신을 흉내낸다."""
    callback = mqtt_client.subscribe.call_args[0][1]
    payload = b'' if value is None else json.dumps(value).encode('utf-8')
    callback(topic, payload)


def _refuse(mqtt_client, topic):
    on_failure = mqtt_client.subscribe.call_args[1]['on_failure']
    on_failure(topic)


class TestTopics:
    """위치 경로와 토픽 매핑 테스트."""

    def test_topic_for_path(self, db):
        assert db.reference('users/alice').topic == 'rtdb/users/alice'

    def test_child_topic(self, db):
        assert db.reference('users').child('bob').topic == 'rtdb/users/bob'

    def test_root_requires_prefix(self, mqtt_client):
        db = MqttDatabase(mqtt_client, topic_prefix='')

        with pytest.raises(ValueError):
            db.reference('').topic

    @pytest.mark.parametrize('path', ['users/+', 'a.b'])
    def test_invalid_paths(self, db, path):
        with pytest.raises(ValueError):
            db.reference(path)


class TestSetValue:
    """retained 발행 테스트."""

    def test_publishes_retained_json(self, db, mqtt_client):
        db.reference('users/alice').set_value({'status': 'online'})

        mqtt_client.publish.assert_called_once_with(
            'rtdb/users/alice',
            '{"status": "online"}',
            qos=1,
            retain=True,
            wait_timeout=None,
        )

    @pytest.mark.parametrize('published', [True, False])
    def test_returns_publish_result(self, db, mqtt_client, published):
        mqtt_client.publish.return_value = published

        assert db.reference('n').set_value(1) is published

    def test_none_clears_retained(self, db, mqtt_client):
        db.reference('users/alice').set_value(None, wait_timeout=3.0)

        args, kwargs = mqtt_client.publish.call_args
        assert args == ('rtdb/users/alice', '')
        assert kwargs['wait_timeout'] == 3.0


class TestValueListeners:
    """값 리스너 테스트."""

    def test_subscribes_once_per_topic(self, db, mqtt_client):
        ref = db.reference('users/alice')

        ref.add_value_event_listener(MagicMock(spec=ValueEventListener))
        ref.add_value_event_listener(MagicMock(spec=ValueEventListener))

        mqtt_client.subscribe.assert_called_once()
        assert mqtt_client.subscribe.call_args[0][0] == 'rtdb/users/alice'
        assert mqtt_client.subscribe.call_args[1]['qos'] == 1

    def test_payload_dispatched(self, db, mqtt_client):
        listener = MagicMock(spec=ValueEventListener)
        db.reference('users/alice').add_value_event_listener(listener)

        _deliver(mqtt_client, 'rtdb/users/alice', {'status': 'online'})

        snapshot = listener.on_data_change.call_args[0][0]
        assert snapshot.key == 'alice'
        assert snapshot.get_value() == {'status': 'online'}

    def test_cached_value_on_late_register(self, db, mqtt_client):
        ref = db.reference('users/alice')
        ref.add_value_event_listener(MagicMock(spec=ValueEventListener))
        _deliver(mqtt_client, 'rtdb/users/alice', 'online')

        late = MagicMock(spec=ValueEventListener)
        ref.add_value_event_listener(late)

        assert late.on_data_change.call_args[0][0].get_value() == 'online'

    def test_unchanged_payload_is_silent(self, db, mqtt_client):
        listener = MagicMock(spec=ValueEventListener)
        db.reference('n').add_value_event_listener(listener)

        _deliver(mqtt_client, 'rtdb/n', 1)
        _deliver(mqtt_client, 'rtdb/n', 1)

        listener.on_data_change.assert_called_once()

    def test_empty_payload_is_no_value(self, db, mqtt_client):
        listener = MagicMock(spec=ValueEventListener)
        db.reference('n').add_value_event_listener(listener)

        _deliver(mqtt_client, 'rtdb/n', None)

        assert not listener.on_data_change.call_args[0][0].exists()

    def test_malformed_payload_is_skipped(self, db, mqtt_client, caplog):
        listener = MagicMock(spec=ValueEventListener)
        db.reference('n').add_value_event_listener(listener)

        mqtt_client.subscribe.call_args[0][1]('rtdb/n', b'{not json')

        listener.on_data_change.assert_not_called()
        assert 'Malformed JSON' in caplog.text

    def test_remove_last_listener_unsubscribes(self, db, mqtt_client):
        ref = db.reference('n')
        first = ref.add_value_event_listener(
            MagicMock(spec=ValueEventListener)
        )
        second = ref.add_value_event_listener(
            MagicMock(spec=ValueEventListener)
        )

        ref.remove_event_listener(first)
        mqtt_client.unsubscribe.assert_not_called()
        ref.remove_event_listener(second)

        mqtt_client.unsubscribe.assert_called_once_with('rtdb/n')

    def test_remove_unknown_listener_is_noop(self, db, mqtt_client):
        db.reference('n').remove_event_listener(
            MagicMock(spec=ValueEventListener)
        )

        mqtt_client.unsubscribe.assert_not_called()


class TestChildListeners:
    """자식 리스너 테스트."""

    def test_object_payload_diffed_into_child_events(self, db, mqtt_client):
        listener = MagicMock(spec=ChildEventListener)
        db.reference('users').add_child_event_listener(listener)

        _deliver(mqtt_client, 'rtdb/users', {'alice': 1, 'bob': 2})
        _deliver(mqtt_client, 'rtdb/users', {'bob': 3, 'carol': 4})

        added = [
            (c[0][0].key, c[0][1])
            for c in listener.on_child_added.call_args_list
        ]
        assert added == [('alice', None), ('bob', 'alice'), ('carol', 'bob')]
        assert listener.on_child_removed.call_args[0][0].key == 'alice'
        assert listener.on_child_changed.call_args[0][0].key == 'bob'


class TestSingleRead:
    """일회성 리스너 테스트."""

    def test_once_listener_removed_after_first_value(self, db, mqtt_client):
        future = read_value_once(db.reference('n'), int)

        _deliver(mqtt_client, 'rtdb/n', 5.0)

        assert future.result(timeout=0) == 5
        mqtt_client.unsubscribe.assert_called_once_with('rtdb/n')

    def test_pending_until_first_publish(self, db, mqtt_client):
        """retained 값이 없는 위치의 읽기는 다음 발행까지 대기한다."""
        future = read_value_once(db.reference('empty'))

        assert not future.done()
        mqtt_client.unsubscribe.assert_not_called()

        _deliver(mqtt_client, 'rtdb/empty', 'first')

        assert future.result(timeout=0) == 'first'

    def test_once_listener_served_from_cache(self, db, mqtt_client):
        ref = db.reference('n')
        ref.add_value_event_listener(MagicMock(spec=ValueEventListener))
        _deliver(mqtt_client, 'rtdb/n', 7)

        assert read_value_once(ref).result(timeout=0) == 7
        assert mqtt_client.subscribe.call_count == 1


class TestSubscribeRefused:
    """브로커 구독 거부 테스트."""

    def test_listeners_cancelled(self, db, mqtt_client):
        value_listener = MagicMock(spec=ValueEventListener)
        child_listener = MagicMock(spec=ChildEventListener)
        ref = db.reference('secret')
        ref.add_value_event_listener(value_listener)
        ref.add_child_event_listener(child_listener)

        _refuse(mqtt_client, 'rtdb/secret')

        error = value_listener.on_cancelled.call_args[0][0]
        assert error.code == ErrorCode.PERMISSION_DENIED
        child_listener.on_cancelled.assert_called_once_with(error)

    def test_single_read_rejected(self, db, mqtt_client):
        future = read_value_once(db.reference('secret'))

        _refuse(mqtt_client, 'rtdb/secret')

        assert isinstance(future.exception(timeout=0), DatabaseException)

    def test_new_registration_resubscribes(self, db, mqtt_client):
        ref = db.reference('secret')
        ref.add_value_event_listener(MagicMock(spec=ValueEventListener))
        _refuse(mqtt_client, 'rtdb/secret')

        ref.add_value_event_listener(MagicMock(spec=ValueEventListener))

        assert mqtt_client.subscribe.call_count == 2

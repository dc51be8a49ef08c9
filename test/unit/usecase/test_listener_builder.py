"""리스너 스펙 빌더 단위 테스트."""

import dataclasses
from unittest.mock import MagicMock

import pytest

from rtdb_listener_adapter.domain.exceptions import (
    InvalidHandlerError,
    ListenerConfigurationError,
    UnknownHandlerError,
)
from rtdb_listener_adapter.usecase.listener_builder import (
    ChildEventListenerBuilder,
    ValueEventListenerBuilder,
    build_child_listener,
    build_value_listener,
)
from rtdb_listener_adapter.usecase.ports.listeners import (
    ChildEventListener,
    ValueEventListener,
)


class TestEmptySpec:
    """슬롯이 비어 있는 리스너 테스트."""

    def test_value_listener_ignores_all_events(
        self, alice_snapshot, permission_denied
    ):
        """빈 값 리스너는 모든 이벤트를 조용히 무시한다."""
        listener = ValueEventListenerBuilder.create().build()

        assert isinstance(listener, ValueEventListener)
        assert listener.on_data_change(alice_snapshot) is None
        assert listener.on_cancelled(permission_denied) is None

    def test_child_listener_ignores_all_events(
        self, alice_snapshot, permission_denied
    ):
        """빈 자식 리스너는 모든 이벤트를 조용히 무시한다."""
        listener = ChildEventListenerBuilder.create().build()

        assert isinstance(listener, ChildEventListener)
        assert listener.on_child_added(alice_snapshot, None) is None
        assert listener.on_child_changed(alice_snapshot, "a") is None
        assert listener.on_child_moved(alice_snapshot, "a") is None
        assert listener.on_child_removed(alice_snapshot) is None
        assert listener.on_cancelled(permission_denied) is None


class TestDispatch:
    """설정된 슬롯으로의 위임 테스트."""

    def test_value_handler_receives_arguments(self, alice_snapshot):
        """on_data_change 핸들러가 스냅샷을 그대로 받는다."""
        handler = MagicMock(return_value="rendered")
        listener = ValueEventListenerBuilder.create().on_data_change(
            handler
        ).build()

        result = listener.on_data_change(alice_snapshot)

        handler.assert_called_once_with(alice_snapshot)
        assert result == "rendered"

    def test_cancelled_handler_receives_error(self, permission_denied):
        """on_cancelled 핸들러가 에러를 그대로 받는다."""
        handler = MagicMock()
        listener = build_value_listener(on_cancelled=handler)

        listener.on_cancelled(permission_denied)

        handler.assert_called_once_with(permission_denied)

    @pytest.mark.parametrize(
        "slot",
        ["on_child_added", "on_child_changed", "on_child_moved"],
    )
    def test_child_handler_receives_previous_name(
        self, slot, alice_snapshot
    ):
        """자식 핸들러가 (snapshot, previous_child_name)을 받는다."""
        handler = MagicMock(return_value=42)
        listener = build_child_listener(**{slot: handler})

        result = getattr(listener, slot)(alice_snapshot, "aaron")

        handler.assert_called_once_with(alice_snapshot, "aaron")
        assert result == 42

    def test_child_removed_receives_snapshot_only(self, alice_snapshot):
        """on_child_removed 핸들러는 스냅샷만 받는다."""
        handler = MagicMock()
        listener = build_child_listener(on_child_removed=handler)

        listener.on_child_removed(alice_snapshot)

        handler.assert_called_once_with(alice_snapshot)

    def test_unset_slot_does_not_touch_set_slot(self, alice_snapshot):
        """다른 슬롯의 이벤트는 설정된 핸들러를 호출하지 않는다."""
        added = MagicMock()
        listener = build_child_listener(on_child_added=added)

        listener.on_child_removed(alice_snapshot)
        listener.on_child_changed(alice_snapshot, None)

        added.assert_not_called()

    def test_handler_exception_propagates(self, alice_snapshot):
        """핸들러 예외는 잡지 않고 그대로 전파한다."""
        def boom(snapshot):
            raise RuntimeError("boom")

        listener = build_value_listener(on_data_change=boom)

        with pytest.raises(RuntimeError, match="boom"):
            listener.on_data_change(alice_snapshot)


class TestConfigurationBlock:
    """설정 블록(configure) 테스트."""

    def test_block_sets_slots(self, alice_snapshot, permission_denied):
        """블록에서 체이닝으로 여러 슬롯을 설정한다."""
        changed = MagicMock()
        cancelled = MagicMock()

        listener = ValueEventListenerBuilder.create(
            lambda spec: spec.on_data_change(changed).on_cancelled(cancelled)
        ).build()
        listener.on_data_change(alice_snapshot)
        listener.on_cancelled(permission_denied)

        changed.assert_called_once_with(alice_snapshot)
        cancelled.assert_called_once_with(permission_denied)

    def test_block_and_keywords_combine(self, alice_snapshot):
        """블록과 키워드 인자를 함께 쓰면 키워드가 나중에 적용된다."""
        first = MagicMock()
        second = MagicMock()

        listener = build_child_listener(
            lambda spec: spec.on_child_added(first),
            on_child_added=second,
        )
        listener.on_child_added(alice_snapshot, None)

        first.assert_not_called()
        second.assert_called_once_with(alice_snapshot, None)

    def test_unknown_method_in_block_fails(self):
        """블록 안의 오타 메서드는 UnknownHandlerError를 낸다."""
        with pytest.raises(UnknownHandlerError) as exc_info:
            ValueEventListenerBuilder.create(
                lambda spec: spec.on_data_changed(print)
            )

        assert exc_info.value.name == "on_data_changed"
        assert "on_data_change" in str(exc_info.value)

    def test_child_slot_on_value_builder_fails(self):
        """값 빌더에 자식 슬롯을 설정하면 실패한다."""
        with pytest.raises(UnknownHandlerError):
            ValueEventListenerBuilder.create(
                lambda spec: spec.on_child_added(print)
            )

    def test_unknown_keyword_fails(self):
        """알 수 없는 키워드 슬롯은 실패한다."""
        with pytest.raises(ListenerConfigurationError):
            build_child_listener(on_child_add=print)

    def test_unknown_handler_is_attribute_error(self):
        """UnknownHandlerError는 AttributeError로도 잡힌다."""
        builder = ChildEventListenerBuilder.create()

        with pytest.raises(AttributeError):
            builder.on_data_change(print)

    def test_non_handler_attribute_raises_plain_attribute_error(self):
        """on_ 으로 시작하지 않는 속성은 일반 AttributeError다."""
        builder = ValueEventListenerBuilder.create()

        with pytest.raises(AttributeError) as exc_info:
            builder.missing_attribute

        assert not isinstance(exc_info.value, UnknownHandlerError)

    def test_non_callable_handler_fails(self):
        """호출 불가능한 핸들러는 InvalidHandlerError를 낸다."""
        with pytest.raises(InvalidHandlerError):
            ValueEventListenerBuilder.create().on_data_change("not callable")

    def test_failed_block_produces_no_listener(self):
        """실패한 블록 이후의 build는 실행되지 않는다."""
        built = []

        def configure(spec):
            spec.on_data_change(print)
            spec.on_bogus(print)

        with pytest.raises(UnknownHandlerError):
            built.append(ValueEventListenerBuilder.create(configure).build())

        assert built == []


class TestBuilderSemantics:
    """빌더 재사용/불변성 테스트."""

    def test_last_write_wins(self, alice_snapshot):
        """같은 슬롯을 다시 설정하면 마지막 핸들러가 남는다."""
        first = MagicMock()
        second = MagicMock()

        listener = ValueEventListenerBuilder.create().on_data_change(
            first
        ).on_data_change(second).build()
        listener.on_data_change(alice_snapshot)

        first.assert_not_called()
        second.assert_called_once_with(alice_snapshot)

    def test_build_twice_gives_independent_listeners(self, alice_snapshot):
        """두 번 빌드하면 서로 다른 핸들이 같은 핸들러를 공유한다."""
        handler = MagicMock()
        builder = ValueEventListenerBuilder.create().on_data_change(handler)

        first = builder.build()
        second = builder.build()
        first.on_data_change(alice_snapshot)
        second.on_data_change(alice_snapshot)

        assert first is not second
        assert first != second
        assert len({first, second}) == 2
        assert handler.call_count == 2

    def test_builder_changes_after_build_do_not_leak(self, alice_snapshot):
        """빌드 이후의 빌더 변경은 기존 리스너에 영향이 없다."""
        original = MagicMock()
        replacement = MagicMock()
        builder = ValueEventListenerBuilder.create().on_data_change(original)

        listener = builder.build()
        builder.on_data_change(replacement)
        listener.on_data_change(alice_snapshot)

        original.assert_called_once_with(alice_snapshot)
        replacement.assert_not_called()

    def test_built_listener_is_frozen(self):
        """빌드된 리스너의 슬롯은 바꿀 수 없다."""
        listener = build_value_listener(on_data_change=print)

        with pytest.raises(dataclasses.FrozenInstanceError):
            listener.handlers = {}
        with pytest.raises(TypeError):
            listener.handlers["on_data_change"] = repr

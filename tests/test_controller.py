"""Tests for the SelectController façade."""

import asyncio
from unittest.mock import MagicMock

import pytest

from picklist.config import ControllerConfig
from picklist.controller import SelectController
from picklist.core.async_resource import AsyncStatus
from tests.conftest import GatedFetch, make_key, settle


class TestSynchronousUse:
    def test_end_to_end_keyboard_selection(self):
        controller = SelectController(["Apple", "Orange", "Banana"])
        controller.toggle()
        controller.handle_key(make_key("ArrowDown"))
        controller.handle_key(make_key("Enter"))
        assert controller.state.selected_item == "Orange"
        assert controller.state.is_open is False

    def test_pointer_selection(self, fruits):
        controller = SelectController(fruits)
        controller.toggle()
        controller.select_item("Banana")
        assert controller.state.selected_item == "Banana"
        assert controller.state.highlighted_index == 2
        assert controller.state.is_open is False

    def test_attributes_follow_state(self, fruits):
        controller = SelectController(fruits, config=ControllerConfig(id_prefix="fruit"))
        assert controller.attributes.expanded is False
        controller.toggle()
        controller.handle_key("ArrowDown")
        attrs = controller.attributes
        assert attrs.expanded is True
        assert attrs.active_descendant == "fruit-option-1"
        assert attrs.option_by_id(attrs.active_descendant)["label"] == "Orange"

    def test_handle_key_reports_handled(self, fruits):
        controller = SelectController(fruits)
        assert controller.handle_key("ArrowDown") is False
        assert controller.handle_key("Enter") is True

    def test_escape_releases_focus(self, fruits):
        release = MagicMock()
        controller = SelectController(fruits, release_focus=release)
        controller.toggle()
        controller.handle_key("Escape")
        assert controller.state.is_open is False
        release.assert_called_once_with()

    def test_escape_focus_release_can_be_disabled(self, fruits):
        release = MagicMock()
        config = ControllerConfig(release_focus_on_escape=False)
        controller = SelectController(fruits, config=config, release_focus=release)
        controller.toggle()
        controller.handle_key("Escape")
        assert controller.state.is_open is False
        release.assert_not_called()

    def test_custom_labels_and_equality(self):
        rows = [{"id": 1, "name": "one"}, {"id": 2, "name": "two"}]
        config = ControllerConfig(item_label=lambda r: r["name"], item_eq=lambda a, b: a["id"] == b["id"])
        controller = SelectController(rows, config=config)
        controller.select_item({"id": 2})
        assert controller.label_for(controller.state.selected_item) == "two"
        assert controller.items_equal({"id": 1}, rows[0])

    def test_auto_close_without_loop_is_inert(self, fruits):
        controller = SelectController(fruits, config=ControllerConfig(auto_close_after=0.01))
        controller.toggle()
        assert controller.state.is_open is True
        assert controller._timer is None


class TestSubscription:
    def test_listener_called_on_change(self, fruits):
        controller = SelectController(fruits)
        listener = MagicMock()
        controller.subscribe(listener)
        controller.toggle()
        listener.assert_called_once_with(controller)

    def test_no_notification_for_noop(self, fruits):
        controller = SelectController(fruits)
        listener = MagicMock()
        controller.subscribe(listener)
        controller.handle_key("ArrowDown")
        controller.select_item("Durian")
        controller.close()
        listener.assert_not_called()

    def test_unsubscribe(self, fruits):
        controller = SelectController(fruits)
        listener = MagicMock()
        unsubscribe = controller.subscribe(listener)
        unsubscribe()
        unsubscribe()
        controller.toggle()
        listener.assert_not_called()


class TestAsyncItems:
    async def test_bound_operation_supplies_items(self, fruits):
        fetch = GatedFetch(data=fruits)
        controller = SelectController(operation=fetch)
        assert controller.async_state.status is AsyncStatus.LOADING
        assert controller.state.items == ()
        fetch.release()
        await controller.wait_for_items()
        assert controller.async_state.data == tuple(fruits)
        assert controller.state.items == tuple(fruits)
        assert controller.state.highlighted_index == 0
        controller.dispose()

    async def test_controller_stays_responsive_while_loading(self, fruits):
        fetch = GatedFetch(data=["Kiwi"])
        controller = SelectController(fruits, operation=fetch)
        controller.toggle()
        controller.handle_key("ArrowDown")
        assert controller.state.highlighted_index == 1
        assert controller.async_state.is_loading
        fetch.release()
        await controller.wait_for_items()
        assert controller.state.items == ("Kiwi",)
        assert controller.state.highlighted_index == 0
        controller.dispose()

    async def test_failed_refresh_keeps_last_good_items(self, fruits):
        controller = SelectController()
        good = GatedFetch(data=fruits)
        good.release()
        controller.bind(good)
        await controller.wait_for_items()
        controller.select_item("Orange")

        bad = GatedFetch(error=ConnectionError("offline"))
        bad.release()
        controller.bind(bad)
        state = await controller.wait_for_items()
        assert state.status is AsyncStatus.FAILURE
        assert state.error.message == "offline"
        assert controller.state.items == tuple(fruits)
        assert controller.state.selected_item == "Orange"
        controller.dispose()

    async def test_refresh_reruns_operation(self, fruits):
        fetch = GatedFetch(data=fruits)
        fetch.release()
        controller = SelectController(operation=fetch)
        await controller.wait_for_items()
        controller.refresh()
        await controller.wait_for_items()
        assert fetch.calls == 2
        controller.dispose()

    async def test_listeners_see_async_transitions(self, fruits):
        fetch = GatedFetch(data=fruits)
        controller = SelectController()
        seen = []
        controller.subscribe(lambda c: seen.append(c.async_state.status))
        controller.bind(fetch)
        fetch.release()
        await controller.wait_for_items()
        assert seen[0] is AsyncStatus.LOADING
        assert seen[-1] is AsyncStatus.SUCCESS
        controller.dispose()

    async def test_items_present_when_success_is_observed(self, fruits):
        fetch = GatedFetch(data=fruits)
        controller = SelectController()
        items_at_success = []

        def listener(c):
            if c.async_state.status is AsyncStatus.SUCCESS:
                items_at_success.append(c.state.items)

        controller.subscribe(listener)
        controller.bind(fetch)
        fetch.release()
        await controller.wait_for_items()
        assert items_at_success == [tuple(fruits)]
        controller.dispose()

    async def test_stale_fetch_does_not_replace_items(self):
        slow = GatedFetch(data=["D1"])
        fast = GatedFetch(data=["D2"])
        controller = SelectController()
        controller.bind(slow)
        controller.bind(fast)
        fast.release()
        await controller.wait_for_items()
        slow.release()
        await settle()
        assert controller.async_state.data == ("D2",)
        assert controller.state.items == ("D2",)
        controller.dispose()


class TestAutoClose:
    async def test_open_list_closes_after_delay(self, fruits):
        controller = SelectController(fruits, config=ControllerConfig(auto_close_after=0.02))
        controller.toggle()
        assert controller.state.is_open is True
        await asyncio.sleep(0.08)
        assert controller.state.is_open is False
        assert controller._timer is None

    async def test_close_cancels_timer(self, fruits):
        controller = SelectController(fruits, config=ControllerConfig(auto_close_after=0.02))
        listener = MagicMock()
        controller.toggle()
        controller.subscribe(listener)
        controller.toggle()
        assert controller._timer is None
        await asyncio.sleep(0.05)
        listener.assert_called_once_with(controller)

    async def test_keys_restart_timer(self, fruits):
        controller = SelectController(fruits, config=ControllerConfig(auto_close_after=0.05))
        controller.toggle()
        first = controller._timer
        controller.handle_key("ArrowDown")
        assert controller._timer is not first
        assert first.cancelled()
        controller.dispose()

    async def test_dispose_cancels_timer(self, fruits):
        controller = SelectController(fruits, config=ControllerConfig(auto_close_after=0.02))
        controller.toggle()
        timer = controller._timer
        controller.dispose()
        assert timer.cancelled()
        await asyncio.sleep(0.05)
        assert controller.state.is_open is True


class TestTeardown:
    async def test_dispose_discards_pending_fetch(self, fruits):
        fetch = GatedFetch(data=["late"])
        controller = SelectController(fruits, operation=fetch)
        listener = MagicMock()
        controller.subscribe(listener)
        await settle()
        controller.dispose()
        fetch.release()
        await settle()
        assert controller.state.items == tuple(fruits)
        listener.assert_not_called()

    def test_intents_after_dispose_are_ignored(self, fruits):
        controller = SelectController(fruits)
        controller.dispose()
        controller.toggle()
        assert controller.handle_key("Enter") is False
        assert controller.state.is_open is False
        assert controller.disposed is True

    def test_context_manager_disposes(self, fruits):
        with SelectController(fruits) as controller:
            controller.toggle()
        assert controller.disposed is True

    async def test_async_context_manager_disposes(self, fruits):
        async with SelectController(fruits, operation=GatedFetch(data=["x"])) as controller:
            assert controller.async_state.is_loading
        assert controller.disposed is True

    def test_dispose_is_idempotent(self, fruits):
        controller = SelectController(fruits)
        controller.dispose()
        controller.dispose()
        assert controller.disposed is True


@pytest.mark.parametrize("key_name", ["Enter", "Space", " "])
def test_open_keys(fruits, key_name):
    controller = SelectController(fruits)
    controller.handle_key(key_name)
    assert controller.state.is_open is True

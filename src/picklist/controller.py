"""Controller façade — the only surface a presentation layer touches.

Composes the selection machine, keyboard navigator, attribute deriver and
async item binder behind one object. Presentation code reads ``state``,
``async_state`` and ``attributes``, forwards intents (``toggle``,
``select_item``, ``handle_key``) and re-renders when a subscribed listener
fires. The controller never draws anything.

// [LAW:one-way-deps] Depends on picklist.core and picklist.config only.
// [LAW:single-enforcer] _transition is the sole path that mutates selection
//   state, keeps the auto-close timer in step and notifies listeners.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Iterable
from typing import Any

from picklist.config import ControllerConfig
from picklist.core.accessibility import AccessibilityAttributes, derive_attributes
from picklist.core.async_resource import AsyncResource, AsyncState, Operation
from picklist.core.keyboard import KeyboardNavigator
from picklist.core.selection import SelectionMachine, SelectionState

logger = logging.getLogger(__name__)

Listener = Callable[["SelectController"], None]


class SelectController:
    """Headless dropdown/combobox controller.

    Args:
        items: initial item list (replaced by the bound operation's result).
        config: enumerated options; defaults to ControllerConfig().
        operation: optional fetch operation, bound immediately. Binding needs
            a running event loop.
        release_focus: called when Escape dismisses the list; presentation
            layers usually pass their blur method.
    """

    def __init__(
        self,
        items: Iterable[Any] = (),
        *,
        config: ControllerConfig | None = None,
        operation: Operation | None = None,
        release_focus: Callable[[], None] | None = None,
    ):
        self.config = config or ControllerConfig()
        self.release_focus = release_focus
        self._machine = SelectionMachine(items, item_eq=self.config.item_eq)
        self._keyboard = KeyboardNavigator(self._machine, release_focus=self._release_focus)
        self._resource = AsyncResource(
            on_success=self._apply_items,
            on_change=self._on_async_change,
            name=f"{self.config.id_prefix}-items",
        )
        self._listeners: list[Listener] = []
        self._timer: asyncio.TimerHandle | None = None
        self._disposed = False
        if operation is not None:
            self.bind(operation)

    # -- Reads ---------------------------------------------------------------

    @property
    def state(self) -> SelectionState:
        return self._machine.state

    @property
    def async_state(self) -> AsyncState:
        return self._resource.state

    @property
    def attributes(self) -> AccessibilityAttributes:
        return derive_attributes(
            self._machine.state,
            id_prefix=self.config.id_prefix,
            item_label=self.config.item_label,
            item_eq=self.config.item_eq,
        )

    @property
    def disposed(self) -> bool:
        return self._disposed

    def label_for(self, item: Any) -> str:
        return self.config.item_label(item)

    def items_equal(self, a: Any, b: Any) -> bool:
        eq = self.config.item_eq
        return eq(a, b) if eq is not None else a == b

    # -- Intents -------------------------------------------------------------

    def toggle(self) -> None:
        self._transition(self._machine.toggle)

    def open(self) -> None:
        self._transition(self._machine.open)

    def close(self) -> None:
        self._transition(self._machine.close)

    def select_item(self, item: Any) -> None:
        self._transition(self._machine.select_item, item)

    def handle_key(self, event) -> bool:
        """Keyboard entry point. Returns True when the key was consumed."""
        if self._disposed:
            return False
        handled = self._transition(self._keyboard.handle_key, event)
        if handled and self._machine.is_open:
            self._restart_timer()
        return bool(handled)

    # -- Async items ---------------------------------------------------------

    def bind(self, operation: Operation) -> None:
        """Bind the fetch operation; a new reference supersedes the old one."""
        self._resource.bind(operation)

    def refresh(self) -> None:
        self._resource.refresh()

    async def wait_for_items(self) -> AsyncState:
        return await self._resource.wait()

    def _apply_items(self, data: tuple) -> None:
        self._transition(self._machine.set_items, data)

    def _on_async_change(self, state: AsyncState) -> None:
        logger.debug("async status -> %s", state.status.value)
        self._notify()

    # -- Subscription --------------------------------------------------------

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a change listener. Returns a callable that unsubscribes."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self)

    # -- Transition plumbing -------------------------------------------------

    def _transition(self, fn: Callable[..., Any], *args: Any) -> Any:
        if self._disposed:
            return None
        before = self._state_key()
        result = fn(*args)
        self._sync_timer()
        if self._state_key() != before:
            self._notify()
        return result

    def _state_key(self) -> tuple:
        s = self._machine.state
        return (s.is_open, s.highlighted_index, s.has_selection, id(s.selected_item), id(s.items))

    def _release_focus(self) -> None:
        if self.config.release_focus_on_escape and self.release_focus is not None:
            self.release_focus()

    # -- Auto-close timer ----------------------------------------------------

    def _sync_timer(self) -> None:
        if not self._machine.is_open:
            self._cancel_timer()
        elif self._timer is None:
            self._start_timer()

    def _start_timer(self) -> None:
        delay = self.config.auto_close_after
        if delay is None:
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.debug("no running loop; auto-close disabled for this open")
            return
        self._timer = loop.call_later(delay, self._auto_close)

    def _restart_timer(self) -> None:
        self._cancel_timer()
        self._start_timer()

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _auto_close(self) -> None:
        self._timer = None
        logger.debug("auto-close after %.2fs", self.config.auto_close_after)
        self._transition(self._machine.close)

    # -- Teardown ------------------------------------------------------------

    def dispose(self) -> None:
        """Release the timer and drop any pending fetch result."""
        if self._disposed:
            return
        self._cancel_timer()
        self._resource.close()
        self._listeners.clear()
        self._disposed = True

    def __enter__(self) -> SelectController:
        return self

    def __exit__(self, *exc_info) -> None:
        self.dispose()

    async def __aenter__(self) -> SelectController:
        return self

    async def __aexit__(self, *exc_info) -> None:
        self.dispose()

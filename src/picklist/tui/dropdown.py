"""Textual dropdown — one presentation of the headless SelectController.

Renders the trigger row and, while open, one row per option. All behavior
lives in the controller: keys are forwarded to handle_key, clicks become
toggle/select_item, and every controller notification triggers a refresh.

// [LAW:one-way-deps] Reads the controller façade only; never the machine.
// [LAW:dataflow-not-control-flow] render() always builds from the current
//   state snapshot and attribute mapping; open/closed varies rows, not code paths.
"""

from __future__ import annotations

from typing import Any, ClassVar

from rich.style import Style
from rich.text import Text
from textual import events
from textual.message import Message
from textual.widget import Widget

from picklist.controller import SelectController
from picklist.core.async_resource import AsyncStatus

_ARROW_CLOSED = "\u25be"  # ▾
_ARROW_OPEN = "\u25b4"  # ▴
_CHECK = "\u2713"  # ✓

_STATUS_SUFFIX: dict[AsyncStatus, str] = {
    AsyncStatus.IDLE: "",
    AsyncStatus.LOADING: " \u2026",  # …
    AsyncStatus.SUCCESS: "",
    AsyncStatus.FAILURE: " !",
}


class Dropdown(Widget, can_focus=True):
    """Single-select dropdown driven by a SelectController.

    The widget owns no selection state of its own. It registers its blur as
    the controller's focus-release hook so Escape gives up focus. With
    ``owns_controller`` the controller is disposed when the widget unmounts.
    """

    ALLOW_SELECT: ClassVar[bool] = False

    DEFAULT_CSS = """
    Dropdown {
        width: auto;
        min-width: 16;
        height: auto;
        background: $panel-lighten-2;
        color: $text;
    }

    Dropdown:hover {
        background: $surface-darken-1;
    }

    Dropdown:focus {
        text-style: bold;
        background: $surface-darken-1;
    }

    Dropdown.-open {
        background: $accent;
    }
    """

    class Changed(Message):
        """Posted when the committed selection changes.

        Attributes:
            dropdown: The Dropdown that changed.
            item: The newly selected item (None when cleared).
        """

        def __init__(self, dropdown: Dropdown, item: Any) -> None:
            self.dropdown = dropdown
            self.item = item
            super().__init__()

        @property
        def control(self) -> Dropdown:
            """The Dropdown widget that posted this message."""
            return self.dropdown

    def __init__(
        self,
        controller: SelectController,
        *,
        placeholder: str = "Select…",
        owns_controller: bool = False,
        name: str | None = None,
        id: str | None = None,
        classes: str | None = None,
        disabled: bool = False,
    ) -> None:
        super().__init__(name=name, id=id, classes=classes, disabled=disabled)
        self.controller = controller
        self.placeholder = placeholder
        self.owns_controller = owns_controller
        self._unsubscribe = None
        self._last_selection = self._selection_key()
        if controller.release_focus is None:
            controller.release_focus = self.blur

    # -- Lifecycle -----------------------------------------------------------

    def on_mount(self) -> None:
        self._unsubscribe = self.controller.subscribe(self._on_controller_change)

    def on_unmount(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        if self.owns_controller:
            self.controller.dispose()

    def _selection_key(self) -> tuple[bool, Any]:
        state = self.controller.state
        return state.has_selection, state.selected_item

    def _selection_changed(self, key: tuple[bool, Any]) -> bool:
        (had, old), (has, new) = self._last_selection, key
        if had != has:
            return True
        return has and not self.controller.items_equal(old, new)

    def _on_controller_change(self, controller: SelectController) -> None:
        key = self._selection_key()
        if self._selection_changed(key):
            self._last_selection = key
            self.post_message(self.Changed(self, key[1] if key[0] else None))
        self.refresh(layout=True)

    # -- Rendering -----------------------------------------------------------

    def trigger_label(self) -> str:
        state = self.controller.state
        label = (
            self.controller.label_for(state.selected_item)
            if state.has_selection
            else self.placeholder
        )
        arrow = _ARROW_OPEN if state.is_open else _ARROW_CLOSED
        return f" {label}{_STATUS_SUFFIX[self.controller.async_state.status]} {arrow} "

    def render(self) -> Text:
        state = self.controller.state
        attrs = self.controller.attributes
        self.set_class(state.is_open, "-open")

        text = Text(self.trigger_label())
        if not state.is_open:
            return text

        if not attrs.options:
            empty = "loading…" if self.controller.async_state.is_loading else "no items"
            text.append(f"\n   ({empty}) ", style=Style(dim=True))
            return text

        reverse = Style(reverse=True)
        for option in attrs.options:
            mark = _CHECK if option["aria-selected"] == "true" else " "
            style = reverse if option["data-highlighted"] == "true" else Style.null()
            text.append("\n")
            text.append(f" {mark} {option['label']} ", style=style)
        return text

    # -- Event handlers ------------------------------------------------------

    def on_key(self, event: events.Key) -> None:
        if self.disabled:
            return
        self.controller.handle_key(event)

    def on_click(self, event: events.Click) -> None:
        """Row 0 toggles the list; option rows commit that option."""
        if self.disabled:
            return
        state = self.controller.state
        row = event.y
        if row <= 0 or not state.is_open:
            self.controller.toggle()
            return
        index = row - 1
        if index < len(state.items):
            self.controller.select_item(state.items[index])

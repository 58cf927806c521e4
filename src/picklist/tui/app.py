"""Demo Textual application hosting one Dropdown.

The app only wires things together: it binds the fetch operation when the
event loop is up, mirrors controller state into a status line and remembers
the last committed label in the settings file. The dropdown owns the
controller and disposes it when it unmounts.
"""

from __future__ import annotations

import logging

from textual.app import App, ComposeResult
from textual.widgets import Static

import picklist.io.settings
from picklist.controller import SelectController
from picklist.core.async_resource import AsyncStatus, Operation
from picklist.tui.dropdown import Dropdown

logger = logging.getLogger(__name__)


class PicklistApp(App):
    """Full-screen demo: a dropdown plus a status line. ``q`` quits."""

    CSS = """
    Screen {
        padding: 1 2;
    }

    #status {
        margin-top: 1;
        color: $text-muted;
    }
    """

    def __init__(
        self,
        controller: SelectController,
        *,
        operation: Operation | None = None,
        title: str = "picklist",
        remember_selection: bool = True,
    ) -> None:
        super().__init__()
        self.controller = controller
        self._operation = operation
        self._title = title
        self._remember_selection = remember_selection

    def compose(self) -> ComposeResult:
        yield Static(self._title, id="title")
        yield Dropdown(self.controller, id="dropdown", owns_controller=True)
        yield Static("", id="status")

    def on_mount(self) -> None:
        self.controller.subscribe(lambda _c: self._update_status())
        if self._operation is not None:
            self.controller.bind(self._operation)
        self.query_one(Dropdown).focus()
        self._update_status()

    def status_text(self) -> str:
        async_state = self.controller.async_state
        state = self.controller.state
        if async_state.status is AsyncStatus.FAILURE:
            fetch = f"fetch failed: {async_state.error}"
        else:
            fetch = async_state.status.value
        selected = self.controller.label_for(state.selected_item) if state.has_selection else "-"
        return f"items: {len(state.items)}  fetch: {fetch}  selected: {selected}"

    def _update_status(self) -> None:
        self.query_one("#status", Static).update(self.status_text())

    def on_dropdown_changed(self, message: Dropdown.Changed) -> None:
        if message.item is None:
            return
        label = self.controller.label_for(message.item)
        logger.info("selected %s", label)
        if self._remember_selection:
            picklist.io.settings.save_last_selection(label)

    def on_key(self, event) -> None:
        if event.key == "q":
            event.prevent_default()
            self.exit()

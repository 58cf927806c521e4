"""Keyboard navigation — one key event, at most one machine transition.

Key dispatch is data: a keymap per open/closed phase names the machine
operation to run. Anything not in the active keymap passes through untouched.

// [LAW:one-source-of-truth] PHASE_KEYMAP is the only key→operation table.
// [LAW:dataflow-not-control-flow] handle_key always normalizes then looks up;
//   the keymap decides, not a branch ladder.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from enum import Enum, auto

from picklist.core.selection import SelectionMachine

logger = logging.getLogger(__name__)


class Phase(Enum):
    CLOSED = auto()
    OPEN = auto()


# DOM-style names and Textual names collapse onto Textual's spelling.
KEY_ALIASES: dict[str, str] = {
    "Enter": "enter",
    "Return": "enter",
    "return": "enter",
    " ": "space",
    "Space": "space",
    "Spacebar": "space",
    "ArrowDown": "down",
    "Down": "down",
    "ArrowUp": "up",
    "Up": "up",
    "Escape": "escape",
    "Esc": "escape",
    "esc": "escape",
}

PHASE_KEYMAP: dict[Phase, dict[str, str]] = {
    Phase.CLOSED: {
        "enter": "open",
        "space": "open",
    },
    Phase.OPEN: {
        "enter": "select_highlighted",
        "space": "select_highlighted",
        "down": "move_highlight_next",
        "up": "move_highlight_previous",
        "escape": "dismiss",
    },
}


def normalize_key(event) -> str | None:
    """Return the canonical key name for an event or raw key string.

    Accepts plain strings and objects with a ``key`` attribute (Textual's
    ``events.Key``). Anything else yields None.
    """
    raw = event if isinstance(event, str) else getattr(event, "key", None)
    if not isinstance(raw, str) or not raw:
        return None
    return KEY_ALIASES.get(raw, raw)


def _suppress_default(event) -> None:
    for name in ("stop", "prevent_default"):
        method = getattr(event, name, None)
        if callable(method):
            method()


class KeyboardNavigator:
    """Maps key events onto a SelectionMachine.

    ``release_focus`` is called after Escape closes the list, so the trigger
    element can give up input focus.
    """

    def __init__(
        self,
        machine: SelectionMachine,
        *,
        release_focus: Callable[[], None] | None = None,
    ):
        self._machine = machine
        self.release_focus = release_focus

    def action_for(self, event) -> str | None:
        """Name of the operation the event would trigger, or None."""
        key = normalize_key(event)
        if key is None:
            return None
        phase = Phase.OPEN if self._machine.is_open else Phase.CLOSED
        return PHASE_KEYMAP[phase].get(key)

    def handle_key(self, event) -> bool:
        """Apply the event. Returns True when the key was handled."""
        action = self.action_for(event)
        if action is None:
            return False
        _suppress_default(event)
        logger.debug("key %r -> %s", normalize_key(event), action)
        if action == "dismiss":
            self._dismiss()
        else:
            getattr(self._machine, action)()
        return True

    def _dismiss(self) -> None:
        self._machine.close()
        if self.release_focus is not None:
            self.release_focus()

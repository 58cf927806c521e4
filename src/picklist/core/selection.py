"""Selection state machine — open/closed, highlight and committed selection.

All transitions are total and synchronous. Out-of-range input is clamped,
never rejected, so no call order can leave the machine in a state that
violates the highlight invariant.

// [LAW:one-source-of-truth] SelectionMachine owns the mutable fields;
//   SelectionState is the read-only snapshot handed to everyone else.
// [LAW:single-enforcer] _clamp_highlight is the sole highlight bounds check.
"""

from __future__ import annotations

import logging
import operator
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Any

logger = logging.getLogger(__name__)

NO_HIGHLIGHT = -1

ItemEq = Callable[[Any, Any], bool]


@dataclass(frozen=True)
class SelectionState:
    """Snapshot of the selection machine.

    highlighted_index is NO_HIGHLIGHT exactly when items is empty (and before
    the first non-empty item list arrives).
    """

    is_open: bool = False
    items: tuple = ()
    highlighted_index: int = NO_HIGHLIGHT
    selected_item: Any = None
    has_selection: bool = False

    @property
    def highlighted_item(self) -> Any:
        """Item under the highlight, or None when there is none."""
        if 0 <= self.highlighted_index < len(self.items):
            return self.items[self.highlighted_index]
        return None


class SelectionMachine:
    """Mutable owner of one SelectionState.

    Items are compared with ``item_eq`` (``==`` by default) so callers can
    supply an identity or key-based equality contract.

    A machine built with initial items starts with highlight 0, not the
    sentinel: a non-empty list never holds ``NO_HIGHLIGHT``.
    """

    def __init__(self, items: Iterable = (), *, item_eq: ItemEq | None = None):
        self._eq: ItemEq = item_eq or operator.eq
        self._is_open = False
        self._items: tuple = ()
        self._highlighted = NO_HIGHLIGHT
        self._selected: Any = None
        self._has_selection = False
        self.set_items(items)

    # -- Reads ---------------------------------------------------------------

    @property
    def state(self) -> SelectionState:
        return SelectionState(
            is_open=self._is_open,
            items=self._items,
            highlighted_index=self._highlighted,
            selected_item=self._selected,
            has_selection=self._has_selection,
        )

    @property
    def is_open(self) -> bool:
        return self._is_open

    def index_of(self, item: Any) -> int:
        """Index of ``item`` under the equality contract, or NO_HIGHLIGHT."""
        for idx, candidate in enumerate(self._items):
            if self._eq(candidate, item):
                return idx
        return NO_HIGHLIGHT

    # -- Transitions ---------------------------------------------------------

    def open(self) -> None:
        if self._is_open:
            return
        self._is_open = True
        if self._highlighted == NO_HIGHLIGHT and self._items:
            self._highlighted = 0
        logger.debug("opened (highlight=%d)", self._highlighted)

    def close(self) -> None:
        self._is_open = False
        # Reopening resumes at the committed item when there is one.
        if self._has_selection:
            idx = self.index_of(self._selected)
            if idx != NO_HIGHLIGHT:
                self._highlighted = idx

    def toggle(self) -> None:
        if self._is_open:
            self.close()
        else:
            self.open()

    def move_highlight_next(self) -> None:
        self._move_highlight(+1)

    def move_highlight_previous(self) -> None:
        self._move_highlight(-1)

    def _move_highlight(self, delta: int) -> None:
        total = len(self._items)
        if not total:
            return
        self._highlighted = (self._highlighted + delta) % total

    def select_highlighted(self) -> None:
        if not 0 <= self._highlighted < len(self._items):
            return
        self._selected = self._items[self._highlighted]
        self._has_selection = True
        logger.debug("selected index %d", self._highlighted)
        self.close()

    def select_item(self, item: Any) -> None:
        idx = self.index_of(item)
        if idx == NO_HIGHLIGHT:
            logger.debug("select_item ignored: %r not in current items", item)
            return
        self._selected = self._items[idx]
        self._has_selection = True
        self._highlighted = idx
        self.close()

    def set_items(self, new_items: Iterable) -> None:
        self._items = tuple(new_items)
        if self._has_selection:
            idx = self.index_of(self._selected)
            if idx == NO_HIGHLIGHT:
                self._selected = None
                self._has_selection = False
            else:
                self._selected = self._items[idx]
        self._clamp_highlight()
        logger.debug(
            "items replaced (count=%d, highlight=%d)", len(self._items), self._highlighted
        )

    def _clamp_highlight(self) -> None:
        if not self._items:
            self._highlighted = NO_HIGHLIGHT
            return
        self._highlighted = min(max(self._highlighted, 0), len(self._items) - 1)

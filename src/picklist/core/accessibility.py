"""ARIA-style attributes derived from a SelectionState.

Pure derivation, recomputed on every read. Highlight (keyboard focus within
the list) and committed selection are reported separately per option.
"""

from __future__ import annotations

import operator
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any

from picklist.core.selection import SelectionState

ROLE_TRIGGER = "combobox"
ROLE_LISTBOX = "listbox"
ROLE_OPTION = "option"


def _flag(value: bool) -> str:
    return "true" if value else "false"


def listbox_id(id_prefix: str) -> str:
    return f"{id_prefix}-listbox"


def option_id(id_prefix: str, index: int) -> str:
    return f"{id_prefix}-option-{index}"


@dataclass(frozen=True)
class AccessibilityAttributes:
    """Read-only attribute mappings for the trigger, listbox and each option."""

    trigger: Mapping[str, str]
    listbox: Mapping[str, str]
    options: tuple[Mapping[str, str], ...]

    @property
    def expanded(self) -> bool:
        return self.trigger["aria-expanded"] == "true"

    @property
    def active_descendant(self) -> str | None:
        return self.trigger.get("aria-activedescendant")

    def option_by_id(self, element_id: str) -> Mapping[str, str] | None:
        for option in self.options:
            if option["id"] == element_id:
                return option
        return None


def derive_attributes(
    state: SelectionState,
    *,
    id_prefix: str = "picklist",
    item_label: Callable[[Any], str] = str,
    item_eq: Callable[[Any, Any], bool] | None = None,
) -> AccessibilityAttributes:
    eq = item_eq or operator.eq
    in_range = 0 <= state.highlighted_index < len(state.items)

    trigger = {
        "role": ROLE_TRIGGER,
        "aria-haspopup": ROLE_LISTBOX,
        "aria-controls": listbox_id(id_prefix),
        "aria-expanded": _flag(state.is_open),
    }
    if state.is_open and in_range:
        trigger["aria-activedescendant"] = option_id(id_prefix, state.highlighted_index)

    listbox = {"role": ROLE_LISTBOX, "id": listbox_id(id_prefix)}
    if not state.is_open:
        listbox["hidden"] = "true"

    options = tuple(
        MappingProxyType(
            {
                "role": ROLE_OPTION,
                "id": option_id(id_prefix, idx),
                "label": item_label(item),
                "aria-selected": _flag(state.has_selection and eq(item, state.selected_item)),
                "data-highlighted": _flag(idx == state.highlighted_index),
            }
        )
        for idx, item in enumerate(state.items)
    )

    return AccessibilityAttributes(
        trigger=MappingProxyType(trigger),
        listbox=MappingProxyType(listbox),
        options=options,
    )

"""Enumerated controller configuration.

// [LAW:one-source-of-truth] ControllerConfig is the only knob set a
//   controller reads; no untyped pass-through options.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any

logger = logging.getLogger(__name__)

SETTINGS_KEY = "controller"


@dataclass(frozen=True)
class ControllerConfig:
    """Per-controller options.

    id_prefix: prefix for derived element ids (listbox, options).
    item_label: display text for an item (used for option labels).
    item_eq: equality contract between items; ``==`` when None.
    auto_close_after: seconds of inactivity before an open list closes
        itself; None disables the timer.
    release_focus_on_escape: whether Escape also asks the trigger to blur.
    """

    id_prefix: str = "picklist"
    item_label: Callable[[Any], str] = str
    item_eq: Callable[[Any, Any], bool] | None = None
    auto_close_after: float | None = None
    release_focus_on_escape: bool = True

    @classmethod
    def from_settings(cls, settings: Mapping[str, Any], **overrides) -> ControllerConfig:
        """Build a config from the ``controller`` section of the settings file.

        Unknown keys and values of the wrong type are ignored.
        """
        section = settings.get(SETTINGS_KEY) or {}
        if not isinstance(section, Mapping):
            logger.warning("ignoring malformed %r settings section", SETTINGS_KEY)
            section = {}

        values: dict[str, Any] = {}
        prefix = section.get("id_prefix")
        if isinstance(prefix, str) and prefix:
            values["id_prefix"] = prefix
        delay = section.get("auto_close_after")
        if isinstance(delay, (int, float)) and not isinstance(delay, bool) and delay > 0:
            values["auto_close_after"] = float(delay)
        release = section.get("release_focus_on_escape")
        if isinstance(release, bool):
            values["release_focus_on_escape"] = release

        values.update(overrides)
        return cls(**values)

    def to_settings(self) -> dict[str, Any]:
        """JSON-serializable form of the persisted fields."""
        return {
            "id_prefix": self.id_prefix,
            "auto_close_after": self.auto_close_after,
            "release_focus_on_escape": self.release_focus_on_escape,
        }

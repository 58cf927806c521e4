"""Headless dropdown/combobox controller.

Re-exports the public API:
    from picklist import SelectController, ControllerConfig, ...
"""

from picklist.config import ControllerConfig
from picklist.controller import SelectController
from picklist.core.accessibility import AccessibilityAttributes, derive_attributes
from picklist.core.async_resource import AsyncResource, AsyncState, AsyncStatus, ErrorInfo
from picklist.core.keyboard import KeyboardNavigator, normalize_key
from picklist.core.selection import NO_HIGHLIGHT, SelectionMachine, SelectionState

__all__ = [
    "AccessibilityAttributes",
    "AsyncResource",
    "AsyncState",
    "AsyncStatus",
    "ControllerConfig",
    "ErrorInfo",
    "KeyboardNavigator",
    "NO_HIGHLIGHT",
    "SelectController",
    "SelectionMachine",
    "SelectionState",
    "derive_attributes",
    "normalize_key",
]

"""Textual in-process test harness for picklist.

Re-exports all public API for convenient imports:
    from tests.harness import run_app, press_and_settle, MessageCapture
"""

from tests.harness.app_runner import run_app
from tests.harness.interactions import (
    press_and_settle,
    press_sequence,
    click_and_settle,
    dropdown_text,
)
from tests.harness.messages import MessageCapture

__all__ = [
    "run_app",
    "press_and_settle",
    "press_sequence",
    "click_and_settle",
    "dropdown_text",
    "MessageCapture",
]

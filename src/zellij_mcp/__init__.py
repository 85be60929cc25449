"""Drive a zellij session from an agent without stealing the user's focus."""

from .focus import get_focused_tab_name, parse_focused_tab_name, with_focus_preservation
from .runner import (
    ActionError,
    CommandOptions,
    CommandResult,
    CommandTimeoutError,
    SpawnError,
    ZellijError,
    ZellijRunner,
)

__version__ = "0.1.0"

__all__ = [
    "ActionError",
    "CommandOptions",
    "CommandResult",
    "CommandTimeoutError",
    "SpawnError",
    "ZellijError",
    "ZellijRunner",
    "get_focused_tab_name",
    "parse_focused_tab_name",
    "with_focus_preservation",
]

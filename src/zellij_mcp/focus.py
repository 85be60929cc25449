"""Keep the user's focused tab in place around actions that move it."""

from __future__ import annotations

import logging
import re
from typing import Awaitable, Callable, Optional, TypeVar

from .runner import CommandOptions, ZellijRunner

T = TypeVar("T")

LOGGER = logging.getLogger(__name__)

# A tab entry whose name attribute is followed by focus=true before its body opens.
_FOCUSED_TAB = re.compile(
    r'\btab\s+name="((?:[^"\\]|\\.)+)"(?:[^{"]|"(?:[^"\\]|\\.)*")*?\bfocus=true\b'
)
_ESCAPE = re.compile(r"\\(.)")
_ESCAPES = {"n": "\n", "r": "\r", "t": "\t", "b": "\b", "f": "\f"}


def _unescape(value: str) -> str:
    return _ESCAPE.sub(lambda m: _ESCAPES.get(m.group(1), m.group(1)), value)


def parse_focused_tab_name(layout: str) -> Optional[str]:
    """Return the name of the focused tab in a ``dump-layout`` output.

    Attributes other than ``name`` and ``focus`` may sit between the two, but
    ``name`` must come first. Zellij marks at most one tab as focused; if a
    dump ever carries several, the first in document order wins. Escaped
    quotes in the name are decoded and an empty name never matches. Returns
    ``None`` when no tab is marked.
    """

    match = _FOCUSED_TAB.search(layout)
    if match is None:
        return None
    return _unescape(match.group(1))


async def get_focused_tab_name(
    runner: ZellijRunner, options: Optional[CommandOptions] = None
) -> Optional[str]:
    layout = await runner.action_or_throw(["dump-layout"], options)
    return parse_focused_tab_name(layout)


async def with_focus_preservation(
    runner: ZellijRunner,
    action: Callable[[], Awaitable[T]],
    preserve: bool,
    options: Optional[CommandOptions] = None,
) -> T:
    """Run *action* and put focus back on the tab that had it beforehand.

    With ``preserve`` false the action runs alone and focus stays wherever it
    lands. Otherwise the focused tab is read first; a failure there aborts
    before the action runs. If the action raises, focus is left as is and the
    error propagates. Concurrent calls against one session are not
    serialized and their restores may race.
    """

    if not preserve:
        return await action()

    original_tab = await get_focused_tab_name(runner, options)
    LOGGER.debug("Focused tab before action: %r", original_tab)

    result = await action()

    if original_tab is not None:
        try:
            await runner.action_or_throw(["go-to-tab-name", original_tab], options)
        except Exception:
            LOGGER.warning(
                "Action completed but focus could not be restored to tab %r",
                original_tab,
            )
            raise
    return result


__all__ = ["get_focused_tab_name", "parse_focused_tab_name", "with_focus_preservation"]

# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Status indicator reflecting the analysis state of the active document."""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Final, Protocol

from rich.console import Console
from rich.text import Text

DEFAULT_APP_NAME: Final[str] = "PMD+"
PROBLEMS_COMMAND: Final[str] = "workbench.actions.view.problems"
SUPPORTED_LANGUAGES: Final[frozenset[str]] = frozenset({"apex", "visualforce", "html"})

_ICON_PATTERN: Final[re.Pattern[str]] = re.compile(r"\$\((?P<name>[\w~-]+)\)\s*")


class StatusState(str, Enum):
    """Textual states the indicator can display."""

    THINKING = "thinking"
    ERRORS = "errors"
    OK = "ok"


_STATE_TEMPLATES: Final[dict[StatusState, str]] = {
    StatusState.THINKING: "$(sync~spin) {app} is thinking...",
    StatusState.ERRORS: "$(alert) {app} found error(s).",
    StatusState.OK: "$(check) {app} is OK.",
}


@dataclass(frozen=True, slots=True)
class StatusSnapshot:
    """Immutable view of the indicator handed to renderers."""

    state: StatusState
    text: str
    visible: bool
    command: str = PROBLEMS_COMMAND


class StatusRenderer(Protocol):
    """Receive every change made to a :class:`StatusIndicator`."""

    def render(self, snapshot: StatusSnapshot) -> None:
        """Display ``snapshot``."""
        ...


class StatusIndicator:
    """Status item with independent text and visibility.

    :meth:`thinking`, :meth:`errors` and :meth:`ok` only change the text;
    :meth:`show`, :meth:`hide` and :meth:`toggle` only change visibility.
    """

    def __init__(
        self,
        app_name: str = DEFAULT_APP_NAME,
        *,
        renderer: StatusRenderer | None = None,
        visible: bool = False,
    ) -> None:
        self.app_name = app_name
        self._renderer = renderer
        self._state = StatusState.OK
        self._visible = visible

    @property
    def state(self) -> StatusState:
        return self._state

    @property
    def visible(self) -> bool:
        return self._visible

    @property
    def text(self) -> str:
        """Return the display text for the current state."""

        return _STATE_TEMPLATES[self._state].format(app=self.app_name)

    @property
    def command(self) -> str:
        return PROBLEMS_COMMAND

    def snapshot(self) -> StatusSnapshot:
        return StatusSnapshot(state=self._state, text=self.text, visible=self._visible)

    def thinking(self) -> None:
        self._set_state(StatusState.THINKING)

    def errors(self) -> None:
        self._set_state(StatusState.ERRORS)

    def ok(self) -> None:
        self._set_state(StatusState.OK)

    def show(self) -> None:
        """Make a hidden indicator visible with its text reset to the OK state."""

        if self._visible:
            return
        self._state = StatusState.OK
        self._set_visible(True)

    def hide(self) -> None:
        if not self._visible:
            return
        self._set_visible(False)

    def toggle(self, visible: bool) -> None:
        """Show or hide the indicator depending on ``visible``."""

        if visible:
            self.show()
        else:
            self.hide()

    def update_for_language(self, language_id: str | None) -> None:
        """Show the indicator for supported languages and hide it otherwise."""

        self.toggle(language_id is not None and language_id.lower() in SUPPORTED_LANGUAGES)

    def _set_state(self, state: StatusState) -> None:
        self._state = state
        self._notify()

    def _set_visible(self, visible: bool) -> None:
        self._visible = visible
        self._notify()

    def _notify(self) -> None:
        if self._renderer is not None:
            self._renderer.render(self.snapshot())


def strip_icons(text: str) -> str:
    """Remove ``$(icon)`` placeholders from status text."""

    return _ICON_PATTERN.sub("", text)


_STATE_STYLES: Final[dict[StatusState, str]] = {
    StatusState.THINKING: "cyan",
    StatusState.ERRORS: "red",
    StatusState.OK: "green",
}


@dataclass(slots=True)
class RichStatusRenderer:
    """Print status transitions to a rich console, skipping repeats."""

    console: Console
    color: bool = True
    _last: str | None = None

    def render(self, snapshot: StatusSnapshot) -> None:
        if not snapshot.visible:
            self._last = None
            return
        message = strip_icons(snapshot.text)
        if message == self._last:
            return
        self._last = message
        text = Text(message)
        if self.color:
            text.stylize(_STATE_STYLES[snapshot.state])
        self.console.print(text)


__all__ = [
    "PROBLEMS_COMMAND",
    "SUPPORTED_LANGUAGES",
    "RichStatusRenderer",
    "StatusIndicator",
    "StatusRenderer",
    "StatusSnapshot",
    "StatusState",
    "strip_icons",
]

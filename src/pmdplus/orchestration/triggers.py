# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Translate editor document events into orchestrated runs."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Final

from ..errors import ConfigError, ConfigurationError
from ..models import RunOutcome
from ..status import SUPPORTED_LANGUAGES, StatusIndicator
from .orchestrator import Orchestrator

LOGGER: Final[logging.Logger] = logging.getLogger(__name__)


class DocumentEvent(str, Enum):
    """Editor events that may start an analysis run."""

    OPEN = "open"
    SAVE = "save"
    CHANGE = "change"


@dataclass(frozen=True, slots=True)
class TextDocument:
    """Minimal view of an editor document."""

    path: Path
    language_id: str

    @property
    def is_supported(self) -> bool:
        return self.language_id.lower() in SUPPORTED_LANGUAGES


class Debouncer:
    """Run an async action once calls stop arriving for ``delay`` seconds.

    Each :meth:`trigger` restarts the timer, so a burst of triggers results in
    a single invocation after the last one.
    """

    def __init__(self, delay: float, action: Callable[[], Awaitable[object]]) -> None:
        self.delay = delay
        self._action = action
        self._task: asyncio.Task[None] | None = None

    @property
    def pending(self) -> bool:
        return self._task is not None and not self._task.done()

    def trigger(self) -> None:
        self.cancel()
        self._task = asyncio.get_running_loop().create_task(self._fire())
        self._task.add_done_callback(_log_failure)

    def cancel(self) -> None:
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None

    async def wait(self) -> None:
        """Wait for the currently scheduled invocation, if any, to finish."""

        task = self._task
        if task is None:
            return
        try:
            await task
        except asyncio.CancelledError:
            if not task.cancelled():
                raise

    async def _fire(self) -> None:
        await asyncio.sleep(self.delay)
        await self._action()


def _log_failure(task: asyncio.Task[None]) -> None:
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        LOGGER.error("PMD+ debounced run failed: %s", exc, exc_info=exc)


class EditorEventRouter:
    """Gate document events on settings and language, then start runs.

    Change events go through a debouncer that is created the first time a
    document changes and reused for every later change of that document.
    """

    def __init__(self, orchestrator: Orchestrator, *, status: StatusIndicator | None = None) -> None:
        self._orchestrator = orchestrator
        self._status = status
        self._debouncers: dict[Path, Debouncer] = {}

    def should_run(self, event: DocumentEvent, document: TextDocument) -> bool:
        """Return ``True`` when ``event`` on ``document`` should trigger a run."""

        if not document.is_supported:
            return False
        settings = self._orchestrator.settings
        return {
            DocumentEvent.OPEN: settings.run_on_file_open,
            DocumentEvent.SAVE: settings.run_on_file_save,
            DocumentEvent.CHANGE: settings.run_on_file_change,
        }[event]

    async def on_did_open(self, document: TextDocument) -> RunOutcome | None:
        if not self.should_run(DocumentEvent.OPEN, document):
            return None
        return await self._run(document)

    async def on_did_save(self, document: TextDocument) -> RunOutcome | None:
        if not self.should_run(DocumentEvent.SAVE, document):
            return None
        return await self._run(document)

    def on_did_change(self, document: TextDocument) -> None:
        """Schedule a debounced run for ``document``."""

        if not self.should_run(DocumentEvent.CHANGE, document):
            return
        debouncer = self.debouncer_for(document)
        debouncer.delay = self._orchestrator.settings.on_file_change_debounce / 1000
        debouncer.trigger()

    def on_did_close(self, document: TextDocument) -> None:
        debouncer = self._debouncers.pop(document.path, None)
        if debouncer is not None:
            debouncer.cancel()

    def on_active_editor_changed(self, document: TextDocument | None) -> None:
        """Show the status indicator only for supported languages."""

        if self._status is not None:
            self._status.update_for_language(document.language_id if document is not None else None)

    def debouncer_for(self, document: TextDocument) -> Debouncer:
        debouncer = self._debouncers.get(document.path)
        if debouncer is None:
            debouncer = Debouncer(
                self._orchestrator.settings.on_file_change_debounce / 1000,
                lambda: self._run(document),
            )
            self._debouncers[document.path] = debouncer
        return debouncer

    def close(self) -> None:
        for debouncer in self._debouncers.values():
            debouncer.cancel()
        self._debouncers.clear()

    async def _run(self, document: TextDocument) -> RunOutcome | None:
        try:
            return await self._orchestrator.run(document.path)
        except (ConfigurationError, ConfigError) as exc:
            LOGGER.warning("PMD+ skipped %s: %s", document.path, exc)
            return None


__all__ = ["Debouncer", "DocumentEvent", "EditorEventRouter", "TextDocument"]

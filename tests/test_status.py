# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for the status indicator."""

from __future__ import annotations

import io

from rich.console import Console

from pmdplus.status import (
    PROBLEMS_COMMAND,
    RichStatusRenderer,
    StatusIndicator,
    StatusSnapshot,
    StatusState,
    strip_icons,
)


class RecordingRenderer:
    def __init__(self) -> None:
        self.snapshots: list[StatusSnapshot] = []

    def render(self, snapshot: StatusSnapshot) -> None:
        self.snapshots.append(snapshot)


def test_state_texts() -> None:
    status = StatusIndicator()

    status.thinking()
    assert status.text == "$(sync~spin) PMD+ is thinking..."
    status.errors()
    assert status.text == "$(alert) PMD+ found error(s)."
    status.ok()
    assert status.text == "$(check) PMD+ is OK."
    assert status.command == PROBLEMS_COMMAND


def test_state_changes_never_touch_visibility() -> None:
    status = StatusIndicator()

    status.errors()
    assert not status.visible
    status.show()
    status.thinking()
    assert status.visible


def test_show_resets_hidden_indicator_to_ok() -> None:
    renderer = RecordingRenderer()
    status = StatusIndicator(renderer=renderer)
    status.errors()

    status.show()

    assert status.visible
    assert status.state is StatusState.OK
    assert renderer.snapshots[-1] == StatusSnapshot(state=StatusState.OK, text=status.text, visible=True)


def test_show_on_visible_indicator_keeps_state() -> None:
    renderer = RecordingRenderer()
    status = StatusIndicator(renderer=renderer, visible=True)
    status.errors()

    status.show()
    status.update_for_language("apex")

    assert status.state is StatusState.ERRORS
    assert len(renderer.snapshots) == 1


def test_hide_on_hidden_indicator_does_not_render() -> None:
    renderer = RecordingRenderer()
    status = StatusIndicator(renderer=renderer)

    status.hide()
    status.update_for_language("python")

    assert renderer.snapshots == []


def test_update_for_language() -> None:
    status = StatusIndicator()

    status.update_for_language("apex")
    assert status.visible
    status.update_for_language("python")
    assert not status.visible
    status.update_for_language("VisualForce")
    assert status.visible
    status.update_for_language(None)
    assert not status.visible


def test_toggle() -> None:
    status = StatusIndicator(visible=True)

    status.toggle(False)
    status.toggle(False)

    assert not status.visible


def test_strip_icons() -> None:
    assert strip_icons("$(sync~spin) PMD+ is thinking...") == "PMD+ is thinking..."


def test_rich_renderer_prints_visible_transitions_once() -> None:
    buffer = io.StringIO()
    renderer = RichStatusRenderer(console=Console(file=buffer, no_color=True), color=False)
    status = StatusIndicator(renderer=renderer, visible=True)

    status.thinking()
    status.thinking()
    status.errors()
    status.hide()
    status.ok()

    assert buffer.getvalue().splitlines() == ["PMD+ is thinking...", "PMD+ found error(s)."]

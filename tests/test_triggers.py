# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for editor event routing and debouncing."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

import pytest
from conftest import Workspace

from pmdplus.cancellation import CancellationToken
from pmdplus.config import PmdPlusSettings
from pmdplus.config.models import RunConfiguration
from pmdplus.diagnostics import InMemoryDiagnosticStore
from pmdplus.models import DiagnosticBatch
from pmdplus.orchestration import Debouncer, DocumentEvent, EditorEventRouter, Orchestrator, TextDocument
from pmdplus.status import StatusIndicator


class CountingRunner:
    def __init__(self) -> None:
        self.targets: list[Path] = []

    async def execute(self, target: Path, config: RunConfiguration, token: CancellationToken | None = None) -> str:
        self.targets.append(target)
        return ""


class EmptyParser:
    async def parse(self, raw_text: str, config: RunConfiguration) -> DiagnosticBatch:
        return {}


def _router(workspace: Workspace, **settings: object) -> tuple[EditorEventRouter, CountingRunner, StatusIndicator]:
    runner = CountingRunner()
    status = StatusIndicator()
    orchestrator = Orchestrator(
        PmdPlusSettings.model_validate({"path_to_pmd_executable": str(workspace.pmd_home), **settings}),
        workspace_root=workspace.root,
        store=InMemoryDiagnosticStore(),
        status=status,
        runner=runner,
        parser=EmptyParser(),
    )
    return EditorEventRouter(orchestrator, status=status), runner, status


def _apex(workspace: Workspace, name: str = "A.cls") -> TextDocument:
    return TextDocument(path=workspace.root / name, language_id="apex")


@pytest.mark.asyncio
async def test_debouncer_coalesces_bursts() -> None:
    calls: list[int] = []

    async def action() -> None:
        calls.append(1)

    debouncer = Debouncer(0.05, action)
    for _ in range(5):
        debouncer.trigger()
        await asyncio.sleep(0.01)
    await debouncer.wait()

    assert calls == [1]
    assert not debouncer.pending


@pytest.mark.asyncio
async def test_debouncer_logs_failed_runs(caplog: pytest.LogCaptureFixture) -> None:
    async def action() -> None:
        raise RuntimeError("store unavailable")

    debouncer = Debouncer(0, action)
    with caplog.at_level(logging.ERROR, logger="pmdplus.orchestration.triggers"):
        debouncer.trigger()
        with pytest.raises(RuntimeError):
            await debouncer.wait()
        await asyncio.sleep(0)

    assert "PMD+ debounced run failed: store unavailable" in caplog.text


@pytest.mark.asyncio
async def test_open_and_save_respect_settings(workspace: Workspace) -> None:
    router, runner, _status = _router(workspace, runOnFileSave=False)
    document = _apex(workspace)

    assert await router.on_did_open(document) is not None
    assert await router.on_did_save(document) is None
    assert runner.targets == [document.path]


@pytest.mark.asyncio
async def test_unsupported_language_is_ignored(workspace: Workspace) -> None:
    router, runner, _status = _router(workspace)

    assert await router.on_did_open(TextDocument(path=workspace.root / "x.py", language_id="python")) is None
    assert runner.targets == []
    assert not router.should_run(DocumentEvent.OPEN, TextDocument(path=Path("a.js"), language_id="javascript"))


@pytest.mark.asyncio
async def test_change_events_are_debounced_per_document(workspace: Workspace) -> None:
    router, runner, _status = _router(workspace, runOnFileChange=True, onFileChangeDebounce=20)
    document = _apex(workspace)

    for _ in range(4):
        router.on_did_change(document)
    debouncer = router.debouncer_for(document)
    await debouncer.wait()

    assert runner.targets == [document.path]
    assert router.debouncer_for(document) is debouncer


@pytest.mark.asyncio
async def test_change_events_disabled_by_default(workspace: Workspace) -> None:
    router, _runner, _status = _router(workspace)
    document = _apex(workspace)

    router.on_did_change(document)

    assert not router.debouncer_for(document).pending


@pytest.mark.asyncio
async def test_close_cancels_pending_run(workspace: Workspace) -> None:
    router, runner, _status = _router(workspace, runOnFileChange=True, onFileChangeDebounce=50)
    document = _apex(workspace)

    router.on_did_change(document)
    router.on_did_close(document)
    await asyncio.sleep(0.1)

    assert runner.targets == []


@pytest.mark.asyncio
async def test_configuration_errors_are_logged_not_raised(workspace: Workspace) -> None:
    router, runner, _status = _router(workspace, rulesets=["missing.xml"])

    assert await router.on_did_open(_apex(workspace)) is None
    assert runner.targets == []


def test_active_editor_drives_status_visibility(workspace: Workspace) -> None:
    router, _runner, status = _router(workspace)

    router.on_active_editor_changed(_apex(workspace))
    assert status.visible
    router.on_active_editor_changed(TextDocument(path=Path("notes.md"), language_id="markdown"))
    assert not status.visible
    router.on_active_editor_changed(None)
    assert not status.visible

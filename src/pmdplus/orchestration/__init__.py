# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Run orchestration, per-target registry and editor triggers."""

from __future__ import annotations

from .orchestrator import Orchestrator, OrchestratorHooks, ProgressSink, RunContext
from .registry import RunRegistry
from .triggers import Debouncer, DocumentEvent, EditorEventRouter, TextDocument

__all__ = [
    "Debouncer",
    "DocumentEvent",
    "EditorEventRouter",
    "Orchestrator",
    "OrchestratorHooks",
    "ProgressSink",
    "RunContext",
    "RunRegistry",
    "TextDocument",
]

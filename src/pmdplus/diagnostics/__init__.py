# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Diagnostic storage and presentation."""

from __future__ import annotations

from .rendering import diagnostics_to_json, dump_diagnostics
from .store import DiagnosticStore, InMemoryDiagnosticStore

__all__ = ["DiagnosticStore", "InMemoryDiagnosticStore", "diagnostics_to_json", "dump_diagnostics"]

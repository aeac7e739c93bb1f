# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Core data models shared across the pmdplus package."""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Final

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .severity import Severity

DIAGNOSTIC_SOURCE: Final[str] = "PMD+"
CSV_FIELDS: Final[tuple[str, ...]] = (
    "problem",
    "package",
    "file",
    "priority",
    "line",
    "description",
    "rule_set",
    "rule",
)


class ViolationRecord(BaseModel):
    """One row of PMD CSV output."""

    model_config = ConfigDict(frozen=True)

    problem: str
    package: str
    file: str
    priority: int
    line: int
    description: str
    rule_set: str
    rule: str

    @field_validator("priority", "line", mode="before")
    @classmethod
    def _coerce_int(cls, value: str | int) -> int:
        """Accept integers rendered as text, tolerating surrounding whitespace."""

        if isinstance(value, str):
            return int(value.strip())
        return value

    @property
    def zero_based_line(self) -> int:
        """Return the violation line converted to a 0-based index."""

        return self.line - 1


class Position(BaseModel):
    """Zero-based line/character position inside a source file."""

    model_config = ConfigDict(frozen=True)

    line: int = Field(ge=0)
    character: int = Field(ge=0)


class DiagnosticRange(BaseModel):
    """Half-open span between two :class:`Position` values."""

    model_config = ConfigDict(frozen=True)

    start: Position
    end: Position


class DiagnosticCode(BaseModel):
    """Rule identifier paired with its documentation URL."""

    model_config = ConfigDict(frozen=True)

    value: str
    target: str


class Diagnostic(BaseModel):
    """Immutable diagnostic committed to the diagnostic store."""

    model_config = ConfigDict(frozen=True)

    file: str
    range: DiagnosticRange
    message: str
    severity: Severity
    code: DiagnosticCode
    source: str = DIAGNOSTIC_SOURCE


DiagnosticBatch = dict[str, list[Diagnostic]]


class RunState(str, Enum):
    """Lifecycle states of a single orchestrated run."""

    IDLE = "idle"
    VALIDATING = "validating"
    RUNNING = "running"
    COMMITTING = "committing"
    CLEARING = "clearing"


class RunOutcome(BaseModel):
    """Summary returned to callers once a run settles."""

    model_config = ConfigDict(validate_assignment=True)

    target: Path
    state: RunState = RunState.IDLE
    committed_files: list[str] = Field(default_factory=list)
    issue_count: int = 0
    cancelled: bool = False
    error: str | None = None

    @property
    def cleared(self) -> bool:
        """Return ``True`` when the run ended by clearing the target."""

        return self.state is RunState.CLEARING


__all__ = [
    "CSV_FIELDS",
    "DIAGNOSTIC_SOURCE",
    "Diagnostic",
    "DiagnosticBatch",
    "DiagnosticCode",
    "DiagnosticRange",
    "Position",
    "RunOutcome",
    "RunState",
    "ViolationRecord",
]

# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Severity related types and helpers."""

from __future__ import annotations

from enum import Enum
from typing import Final


class Severity(str, Enum):
    """Severity levels assigned to PMD diagnostics."""

    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


DEFAULT_ERROR_THRESHOLD: Final[int] = 2
DEFAULT_WARN_THRESHOLD: Final[int] = 4


def classify_priority(
    priority: int,
    *,
    error_threshold: int = DEFAULT_ERROR_THRESHOLD,
    warn_threshold: int = DEFAULT_WARN_THRESHOLD,
) -> Severity:
    """Map a PMD rule priority onto a :class:`Severity`.

    PMD priorities run from 1 (most severe) to 5. Every integer maps to exactly
    one severity, including values outside that range, and thresholds are not
    required to be ordered.

    Args:
        priority: Priority reported by PMD for the violation.
        error_threshold: Highest priority still reported as an error.
        warn_threshold: Highest priority still reported as a warning.

    Returns:
        Severity: Classified severity for ``priority``.
    """

    if priority <= error_threshold:
        return Severity.ERROR
    if priority <= warn_threshold:
        return Severity.WARNING
    return Severity.INFO


_SEVERITY_TO_SARIF_LEVEL: Final[dict[Severity, str]] = {
    Severity.ERROR: "error",
    Severity.WARNING: "warning",
    Severity.INFO: "note",
}


def severity_to_sarif(severity: Severity) -> str:
    """Map :class:`Severity` to a SARIF reporting level."""

    return _SEVERITY_TO_SARIF_LEVEL.get(severity, "warning")


__all__ = [
    "DEFAULT_ERROR_THRESHOLD",
    "DEFAULT_WARN_THRESHOLD",
    "Severity",
    "classify_priority",
    "severity_to_sarif",
]

# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Helpers for rendering stored diagnostics on the console and as JSON."""

from __future__ import annotations

import json
from collections.abc import Iterable, Mapping, Sequence
from typing import Any, Final

from rich.text import Text

from ..logging import pmdplus_console
from ..models import Diagnostic
from ..severity import Severity, severity_to_sarif

LOCATION_SEPARATOR: Final[str] = ":"


def severity_color(sev: Severity) -> str:
    """Return the rich colour name associated with a severity level."""

    return {
        Severity.ERROR: "red",
        Severity.WARNING: "yellow",
        Severity.INFO: "cyan",
    }.get(sev, "yellow")


def raw_location(diagnostic: Diagnostic) -> str:
    """Return ``file:line:column`` using 1-based numbers for display."""

    start = diagnostic.range.start
    return LOCATION_SEPARATOR.join((diagnostic.file, str(start.line + 1), str(start.character + 1)))


def format_diagnostic_line(diagnostic: Diagnostic, location: str, location_width: int, *, color: bool) -> Text:
    """Return a formatted diagnostic line for console output."""

    severity_text = Text(diagnostic.severity.value)
    if color:
        severity_text.stylize(severity_color(diagnostic.severity))
    line = Text("  ")
    line.append_text(severity_text)
    line.append(" ")
    line.append(location.ljust(location_width) if location_width else location, style="bold" if color else None)
    line.append(" ")
    line.append(diagnostic.message)
    line.append(" [")
    line.append(diagnostic.code.value, style="magenta" if color else None)
    line.append("]")
    return line


def dump_diagnostics(diags: Iterable[Diagnostic], *, color: bool = True, emoji: bool = True) -> None:
    """Print formatted diagnostics, aligning their locations."""

    collected = list(diags)
    if not collected:
        return

    locations = [raw_location(diag) for diag in collected]
    location_width = max((len(loc) for loc in locations), default=0)
    console = pmdplus_console(color=color, emoji=emoji)

    for diag, location in zip(collected, locations, strict=True):
        console.print(format_diagnostic_line(diag, location, location_width, color=color))


def diagnostic_to_dict(diagnostic: Diagnostic) -> dict[str, Any]:
    """Return a JSON-friendly mapping for ``diagnostic``."""

    payload = diagnostic.model_dump(mode="json")
    payload["level"] = severity_to_sarif(diagnostic.severity)
    return payload


def diagnostics_to_json(batch: Mapping[str, Sequence[Diagnostic]], *, indent: int | None = 2) -> str:
    """Serialise diagnostics grouped by file into a JSON document."""

    payload = {
        "files": [
            {"file": path, "diagnostics": [diagnostic_to_dict(diag) for diag in diagnostics]}
            for path, diagnostics in batch.items()
        ],
        "total": sum(len(diagnostics) for diagnostics in batch.values()),
    }
    return json.dumps(payload, indent=indent)


__all__ = [
    "diagnostic_to_dict",
    "diagnostics_to_json",
    "dump_diagnostics",
    "format_diagnostic_line",
    "raw_location",
    "severity_color",
]

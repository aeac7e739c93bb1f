# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Diagnostic store boundary and its in-memory implementation."""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from typing import Protocol

from ..models import Diagnostic
from ..severity import Severity


class DiagnosticStore(Protocol):
    """Per-file diagnostic collection owned by the host."""

    def set(self, path: str, diagnostics: Sequence[Diagnostic]) -> None:
        """Replace the diagnostics recorded for ``path``."""
        ...

    def delete(self, path: str) -> None:
        """Remove every diagnostic recorded for ``path``."""
        ...

    def clear(self) -> None:
        """Remove every diagnostic in the store."""
        ...


class InMemoryDiagnosticStore:
    """Dictionary-backed store preserving commit order."""

    def __init__(self) -> None:
        self._entries: dict[str, list[Diagnostic]] = {}

    def set(self, path: str, diagnostics: Sequence[Diagnostic]) -> None:
        self._entries.pop(path, None)
        self._entries[path] = list(diagnostics)

    def delete(self, path: str) -> None:
        """Remove ``path`` from the store.

        A directory target also drops every file recorded beneath it, matching
        how an editor clears a folder that no longer reports problems.
        """

        prefix = path.rstrip("/\\")
        for key in list(self._entries):
            if key == path or key.startswith((prefix + "/", prefix + "\\")):
                del self._entries[key]

    def clear(self) -> None:
        self._entries.clear()

    def get(self, path: str) -> list[Diagnostic]:
        return list(self._entries.get(path, ()))

    def files(self) -> list[str]:
        return list(self._entries)

    def items(self) -> Iterator[tuple[str, list[Diagnostic]]]:
        for path, diagnostics in self._entries.items():
            yield path, list(diagnostics)

    def all(self) -> list[Diagnostic]:
        return [diagnostic for diagnostics in self._entries.values() for diagnostic in diagnostics]

    def count(self, severity: Severity | None = None) -> int:
        """Return how many diagnostics are stored, optionally for one severity."""

        return sum(1 for diagnostic in self.all() if severity is None or diagnostic.severity is severity)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, path: object) -> bool:
        return path in self._entries


__all__ = ["DiagnosticStore", "InMemoryDiagnosticStore"]

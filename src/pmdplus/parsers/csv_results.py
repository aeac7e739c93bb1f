# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Parse PMD CSV reports into per-file diagnostic batches."""

from __future__ import annotations

import asyncio
import csv
import io
import logging
from collections.abc import Iterator, Sequence
from pathlib import Path
from typing import Final

from pydantic import ValidationError

from ..config.models import RunConfiguration
from ..errors import ParseError
from ..models import (
    CSV_FIELDS,
    Diagnostic,
    DiagnosticBatch,
    DiagnosticCode,
    DiagnosticRange,
    Position,
    ViolationRecord,
)
from ..output import OutputChannel
from ..severity import classify_priority
from ..workspace import read_ignore_file, workspace_relative

LOGGER: Final[logging.Logger] = logging.getLogger(__name__)

RULE_DOCS_URL: Final[str] = "https://pmd.github.io/latest/pmd_rules_apex_{ruleset}.html#{rule}"


def rule_documentation_url(rule_set: str, rule: str) -> str:
    """Return the PMD documentation URL for ``rule`` in ``rule_set``."""

    return RULE_DOCS_URL.format(ruleset=rule_set.replace(" ", "").lower(), rule=rule.lower())


def format_message(record: ViolationRecord) -> str:
    """Return the diagnostic message for ``record``."""

    return f"{record.description} (rule: {record.rule})"


def tokenize(raw_text: str) -> list[list[str]]:
    """Split ``raw_text`` into CSV rows, dropping the header row.

    Rows keep whatever column count PMD produced; blank lines are skipped.

    Raises:
        ParseError: If the text is not valid CSV (for example an unterminated
            quoted field).
    """

    try:
        rows = [row for row in csv.reader(io.StringIO(raw_text), strict=True) if row]
    except csv.Error as exc:
        raise ParseError(f"Failed to parse PMD results: {exc}") from exc
    return rows[1:]


def _record_from_row(row: Sequence[str]) -> ViolationRecord | None:
    payload = dict(zip(CSV_FIELDS, row, strict=False))
    try:
        return ViolationRecord.model_validate(payload)
    except (ValidationError, ValueError) as exc:
        LOGGER.debug("Skipping PMD row %r: %s", list(row), exc)
        return None


def iter_records(raw_text: str) -> Iterator[ViolationRecord]:
    """Yield every row of ``raw_text`` that forms a complete violation record."""

    for row in tokenize(raw_text):
        record = _record_from_row(row)
        if record is not None:
            yield record


def first_non_whitespace(line: str) -> int:
    """Return the index of the first non-whitespace character in ``line``."""

    return len(line) - len(line.lstrip())


class _SourceCache:
    """Read each referenced source file once per parse call."""

    def __init__(self) -> None:
        self._lines: dict[str, list[str] | None] = {}

    async def line(self, path: str, index: int) -> str | None:
        if path not in self._lines:
            self._lines[path] = await asyncio.to_thread(self._read_lines, path)
        lines = self._lines[path]
        if lines is None or not 0 <= index < len(lines):
            return None
        return lines[index]

    @staticmethod
    def _read_lines(path: str) -> list[str] | None:
        try:
            return Path(path).read_text(encoding="utf-8", errors="replace").splitlines()
        except OSError as exc:
            LOGGER.debug("Unable to read %s: %s", path, exc)
            return None


class PmdCsvResultParser:
    """Convert PMD CSV output into ordered :class:`Diagnostic` lists per file."""

    def __init__(self, *, channel: OutputChannel | None = None) -> None:
        self._channel = channel or OutputChannel()

    async def parse(self, raw_text: str, config: RunConfiguration) -> DiagnosticBatch:
        """Parse ``raw_text`` produced by PMD for the run described by ``config``.

        Args:
            raw_text: CSV report emitted by ``pmd check --format csv``.
            config: Run configuration supplying thresholds and ignore rules.

        Returns:
            DiagnosticBatch: Diagnostics keyed by file in first-seen order.
            Files whose rows were all dropped do not appear.

        Raises:
            ParseError: If ``raw_text`` cannot be tokenised at all.
        """

        try:
            records = list(iter_records(raw_text))
        except ParseError as exc:
            self._channel.append_line(f"Error parsing PMD results: {exc}")
            raise

        ignored = set(await asyncio.to_thread(read_ignore_file, config.workspace_root, config.ignore_file))
        sources = _SourceCache()
        batch: DiagnosticBatch = {}
        count = 0
        for record in records:
            if self._is_ignored(record.file, ignored, config):
                continue
            diagnostic = await self._create_diagnostic(record, config, sources)
            if diagnostic is None:
                continue
            count += 1
            batch.setdefault(record.file, []).append(diagnostic)
        self._channel.append_line(f"PMD+ found {count} issues.")
        return batch

    @staticmethod
    def _is_ignored(file: str, ignored: set[str], config: RunConfiguration) -> bool:
        if any(marker in file for marker in config.ignored_markers):
            return True
        if file in ignored:
            return True
        relative = workspace_relative(file, config.workspace_root)
        return relative is not None and relative in ignored

    async def _create_diagnostic(
        self,
        record: ViolationRecord,
        config: RunConfiguration,
        sources: _SourceCache,
    ) -> Diagnostic | None:
        line_index = record.zero_based_line
        source_line = await sources.line(record.file, line_index)
        if source_line is None:
            LOGGER.debug("No source line %s in %s; dropping %s", record.line, record.file, record.rule)
            return None
        start = Position(line=line_index, character=first_non_whitespace(source_line))
        end = Position(line=line_index, character=len(source_line))
        return Diagnostic(
            file=record.file,
            range=DiagnosticRange(start=start, end=end),
            message=format_message(record),
            severity=classify_priority(
                record.priority,
                error_threshold=config.error_threshold,
                warn_threshold=config.warn_threshold,
            ),
            code=DiagnosticCode(
                value=record.rule,
                target=rule_documentation_url(record.rule_set, record.rule),
            ),
        )


__all__ = [
    "PmdCsvResultParser",
    "first_non_whitespace",
    "format_message",
    "iter_records",
    "rule_documentation_url",
    "tokenize",
]

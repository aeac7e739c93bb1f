# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for the PMD CSV result parser."""

from __future__ import annotations

import threading
from pathlib import Path

import pytest
from conftest import CSV_HEADER, Workspace, csv_report, csv_row

from pmdplus.errors import ParseError
from pmdplus.output import OutputChannel
from pmdplus.parsers import PmdCsvResultParser, rule_documentation_url
from pmdplus.parsers import csv_results
from pmdplus.parsers.csv_results import first_non_whitespace, tokenize
from pmdplus.severity import Severity

SOURCE = "public class Account {\n    System.debug('x');\n\tInteger i = 0;   \n}\n"


def test_rule_documentation_url() -> None:
    url = rule_documentation_url("Best Practices", "AvoidDebugStatements")

    assert url == "https://pmd.github.io/latest/pmd_rules_apex_bestpractices.html#avoiddebugstatements"


def test_first_non_whitespace() -> None:
    assert first_non_whitespace("    System.debug('x');") == 4
    assert first_non_whitespace("\tx") == 1
    assert first_non_whitespace("   ") == 3


def test_tokenize_skips_header_and_blank_lines() -> None:
    rows = tokenize(f"{CSV_HEADER}\n\n" + '"1","","a.cls","3","1","desc, with comma","Design","Rule"\n')

    assert rows == [["1", "", "a.cls", "3", "1", "desc, with comma", "Design", "Rule"]]


def test_tokenize_rejects_malformed_csv() -> None:
    with pytest.raises(ParseError):
        tokenize(f'{CSV_HEADER}\n"1","","a.cls","3","1","unterminated\n')


@pytest.mark.asyncio
async def test_parse_builds_diagnostics(workspace: Workspace) -> None:
    source = workspace.write("force-app/classes/Account.cls", SOURCE)
    channel = OutputChannel()
    report = csv_report(
        csv_row(source, priority=1, line=2),
        csv_row(source, priority=3, line=3, rule_set="Code Style", rule="VariableNamingConventions"),
        csv_row(source, priority=5, line=1),
    )

    batch = await PmdCsvResultParser(channel=channel).parse(report, workspace.run_config())

    diagnostics = batch[str(source)]
    assert [diag.severity for diag in diagnostics] == [Severity.ERROR, Severity.WARNING, Severity.INFO]
    first = diagnostics[0]
    assert first.range.start.line == 1
    assert first.range.start.character == 4
    assert first.range.end.character == len("    System.debug('x');")
    assert first.message == "Avoid debug statements (rule: AvoidDebugStatements)"
    assert first.source == "PMD+"
    assert first.code.value == "AvoidDebugStatements"
    assert first.code.target.endswith("pmd_rules_apex_bestpractices.html#avoiddebugstatements")
    assert diagnostics[1].range.start.character == 1
    assert channel.lines[-1] == "PMD+ found 3 issues."


@pytest.mark.asyncio
async def test_header_only_report_yields_empty_batch(workspace: Workspace) -> None:
    batch = await PmdCsvResultParser().parse(csv_report(), workspace.run_config())

    assert batch == {}


@pytest.mark.asyncio
async def test_files_keep_first_seen_order(workspace: Workspace) -> None:
    first = workspace.write("b/First.cls", SOURCE)
    second = workspace.write("a/Second.cls", SOURCE)
    report = csv_report(csv_row(first), csv_row(second), csv_row(first, line=2))

    batch = await PmdCsvResultParser().parse(report, workspace.run_config())

    assert list(batch) == [str(first), str(second)]
    assert len(batch[str(first)]) == 2


@pytest.mark.asyncio
async def test_ignored_files_are_excluded_from_batch_and_count(workspace: Workspace) -> None:
    kept = workspace.write("force-app/Kept.cls", SOURCE)
    ignored = workspace.write("force-app/Ignored.cls", SOURCE)
    absolute_ignored = workspace.write("force-app/AbsIgnored.cls", SOURCE)
    generated = workspace.write(".sfdx/tools/Generated.cls", SOURCE)
    workspace.write(".forceignore", f"# generated\nforce-app/Ignored.cls\n{absolute_ignored}\n")
    channel = OutputChannel()
    report = csv_report(csv_row(kept), csv_row(ignored), csv_row(absolute_ignored), csv_row(generated))

    batch = await PmdCsvResultParser(channel=channel).parse(report, workspace.run_config())

    assert list(batch) == [str(kept)]
    assert channel.lines[-1] == "PMD+ found 1 issues."


@pytest.mark.asyncio
async def test_ignore_file_is_read_off_the_event_loop(workspace: Workspace, monkeypatch: pytest.MonkeyPatch) -> None:
    source = workspace.write("force-app/A.cls", SOURCE)
    threads: list[threading.Thread] = []

    def _read(workspace_root: Path, filename: str) -> list[str]:
        threads.append(threading.current_thread())
        return []

    monkeypatch.setattr(csv_results, "read_ignore_file", _read)

    batch = await PmdCsvResultParser().parse(csv_report(csv_row(source)), workspace.run_config())

    assert list(batch) == [str(source)]
    assert threads
    assert threads[0] is not threading.main_thread()


@pytest.mark.asyncio
async def test_unresolvable_rows_are_dropped(workspace: Workspace) -> None:
    source = workspace.write("force-app/A.cls", SOURCE)
    missing = workspace.root / "force-app" / "Missing.cls"
    report = csv_report(
        csv_row(source, line=99),
        csv_row(missing),
        '"1","","short-row"',
        f'"1","","{source}","high","1","desc","Design","Rule"',
        csv_row(source, line=1),
    )

    batch = await PmdCsvResultParser().parse(report, workspace.run_config())

    assert list(batch) == [str(source)]
    assert len(batch[str(source)]) == 1


@pytest.mark.asyncio
async def test_custom_thresholds_apply(workspace: Workspace) -> None:
    source = workspace.write("A.cls", SOURCE)
    config = workspace.run_config(error_threshold=3, warn_threshold=3)

    batch = await PmdCsvResultParser().parse(csv_report(csv_row(source, priority=3)), config)

    assert batch[str(source)][0].severity is Severity.ERROR


@pytest.mark.asyncio
async def test_parsing_is_deterministic(workspace: Workspace) -> None:
    one = workspace.write("One.cls", SOURCE)
    two = workspace.write("Two.cls", SOURCE)
    report = csv_report(csv_row(two, line=2), csv_row(one), csv_row(two))
    parser = PmdCsvResultParser()

    first = await parser.parse(report, workspace.run_config())
    second = await parser.parse(report, workspace.run_config())

    assert first == second


@pytest.mark.asyncio
async def test_parse_error_is_logged_and_raised(workspace: Workspace) -> None:
    channel = OutputChannel()

    with pytest.raises(ParseError):
        await PmdCsvResultParser(channel=channel).parse(f'{CSV_HEADER}\n"1","unterminated\n', workspace.run_config())

    assert channel.lines[-1].startswith("Error parsing PMD results:")

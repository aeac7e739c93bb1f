# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Shared pytest fixtures."""

from __future__ import annotations

import os
import stat
import sys
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

import pytest

from pmdplus.config.models import RunConfiguration

FAKE_PMD_SCRIPT = """#!/bin/sh
if [ -n "$FAKE_PMD_ARGS" ]; then printf '%s\\n' "$@" > "$FAKE_PMD_ARGS"; fi
if [ -n "$FAKE_PMD_ENV" ]; then printf '%s\\n%s\\n' "$CLASSPATH" "$PATH" > "$FAKE_PMD_ENV"; fi
if [ -n "$FAKE_PMD_STDERR" ]; then printf '%s' "$FAKE_PMD_STDERR" >&2; fi
if [ -n "$FAKE_PMD_OUTPUT" ]; then cat "$FAKE_PMD_OUTPUT"; fi
if [ -n "$FAKE_PMD_KIB" ]; then exec dd if=/dev/zero bs=1024 count="$FAKE_PMD_KIB" 2>/dev/null; fi
if [ -n "$FAKE_PMD_SLEEP" ]; then exec sleep "$FAKE_PMD_SLEEP"; fi
exit "${FAKE_PMD_EXIT:-0}"
"""

CSV_HEADER = '"Problem","Package","File","Priority","Line","Description","Rule set","Rule"'

posix_only = pytest.mark.skipif(sys.platform == "win32", reason="fake PMD launcher is a POSIX shell script")


def csv_row(
    file: Path | str,
    *,
    priority: int = 3,
    line: int = 1,
    description: str = "Avoid debug statements",
    rule_set: str = "Best Practices",
    rule: str = "AvoidDebugStatements",
    problem: int = 1,
) -> str:
    """Return one PMD CSV data row."""

    return f'"{problem}","","{file}","{priority}","{line}","{description}","{rule_set}","{rule}"'


def csv_report(*rows: str) -> str:
    """Return a full PMD CSV report including the header."""

    return "\n".join((CSV_HEADER, *rows)) + "\n"


@dataclass(slots=True)
class Workspace:
    """Temporary workspace with a default ruleset and a fake PMD install."""

    root: Path
    pmd_home: Path
    ruleset: Path

    def write(self, relative: str, content: str) -> Path:
        path = self.root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        return path

    def run_config(self, **overrides: object) -> RunConfiguration:
        values: dict[str, object] = {
            "workspace_root": self.root,
            "executable_path": self.pmd_home,
            "rulesets": (self.ruleset,),
            "cache_path": self.root / ".pmdcache",
        }
        values.update(overrides)
        return RunConfiguration.model_validate(values)

    def settings_file(self, body: str) -> Path:
        return self.write(".pmdplus.toml", body)


@pytest.fixture
def workspace(tmp_path: Path) -> Workspace:
    """Return a workspace whose default ruleset exists and whose PMD launcher is fake."""

    root = tmp_path / "workspace"
    ruleset = root / "rulesets" / "apex_ruleset.xml"
    ruleset.parent.mkdir(parents=True)
    ruleset.write_text("<ruleset/>\n", encoding="utf-8")

    pmd_home = tmp_path / "pmd"
    launcher = pmd_home / "bin" / "pmd"
    launcher.parent.mkdir(parents=True)
    launcher.write_text(FAKE_PMD_SCRIPT, encoding="utf-8")
    launcher.chmod(launcher.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return Workspace(root=root.resolve(), pmd_home=pmd_home.resolve(), ruleset=ruleset.resolve())


@pytest.fixture
def pmd_env(tmp_path: Path) -> Callable[..., dict[str, str]]:
    """Return a factory building an environment that drives the fake launcher."""

    def _build(*, output: str | None = None, **values: str) -> dict[str, str]:
        env = {key: value for key, value in os.environ.items() if not key.startswith("FAKE_PMD_")}
        if output is not None:
            report = tmp_path / "pmd-output.csv"
            report.write_text(output, encoding="utf-8")
            env["FAKE_PMD_OUTPUT"] = str(report)
        env.update({f"FAKE_PMD_{key.upper()}": value for key, value in values.items()})
        return env

    return _build

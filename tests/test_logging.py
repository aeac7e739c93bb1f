# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for console notification helpers."""

from __future__ import annotations

import pytest

from pmdplus import logging as pmd_logging


def test_console_is_shared_per_preferences(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(pmd_logging, "detect_tty", lambda: False)

    first = pmd_logging.pmdplus_console(color=True, emoji=False)

    assert pmd_logging.pmdplus_console(color=True, emoji=False) is first
    assert pmd_logging.pmdplus_console(color=True, emoji=True) is not first
    assert first.no_color is True


def test_emoji_prefix_is_optional() -> None:
    assert pmd_logging.emoji("✅ ", True) == "✅ "
    assert pmd_logging.emoji("✅ ", False) == ""


def test_section_without_colour_prints_plain_header(
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    monkeypatch.setattr(pmd_logging, "detect_tty", lambda: False)
    pmd_logging._cached_console.cache_clear()

    pmd_logging.section("PMD+ diagnostics", use_color=False)

    assert "--- PMD+ diagnostics ---" in capsys.readouterr().out

# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for priority classification."""

from __future__ import annotations

import pytest

from pmdplus.severity import Severity, classify_priority, severity_to_sarif


@pytest.mark.parametrize(
    ("priority", "expected"),
    [
        (1, Severity.ERROR),
        (2, Severity.ERROR),
        (3, Severity.WARNING),
        (4, Severity.WARNING),
        (5, Severity.INFO),
    ],
)
def test_default_thresholds(priority: int, expected: Severity) -> None:
    assert classify_priority(priority) is expected


def test_custom_thresholds_shift_boundaries() -> None:
    assert classify_priority(3, error_threshold=3, warn_threshold=3) is Severity.ERROR
    assert classify_priority(4, error_threshold=3, warn_threshold=3) is Severity.INFO


def test_out_of_range_priorities_are_total() -> None:
    assert classify_priority(0) is Severity.ERROR
    assert classify_priority(-7) is Severity.ERROR
    assert classify_priority(99) is Severity.INFO


def test_unordered_thresholds_prefer_error() -> None:
    # error threshold above warn threshold: nothing is ever a warning
    assert classify_priority(3, error_threshold=4, warn_threshold=2) is Severity.ERROR
    assert classify_priority(5, error_threshold=4, warn_threshold=2) is Severity.INFO


def test_sarif_levels() -> None:
    assert severity_to_sarif(Severity.ERROR) == "error"
    assert severity_to_sarif(Severity.WARNING) == "warning"
    assert severity_to_sarif(Severity.INFO) == "note"

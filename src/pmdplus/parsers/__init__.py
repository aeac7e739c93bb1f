# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Parsers turning PMD reports into diagnostics."""

from __future__ import annotations

from .csv_results import PmdCsvResultParser, rule_documentation_url

__all__ = ["PmdCsvResultParser", "rule_documentation_url"]

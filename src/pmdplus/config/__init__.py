# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Configuration models, loaders and validation for PMD+."""

from __future__ import annotations

from ..errors import ConfigError
from .loader import SettingsLoader, load_settings
from .models import PmdPlusSettings, RunConfiguration
from .validator import (
    BUNDLED_RULESET,
    build_run_configuration,
    resolve_executable_path,
    resolve_ruleset_path,
)

__all__ = [
    "BUNDLED_RULESET",
    "ConfigError",
    "PmdPlusSettings",
    "RunConfiguration",
    "SettingsLoader",
    "build_run_configuration",
    "load_settings",
    "resolve_executable_path",
    "resolve_ruleset_path",
]

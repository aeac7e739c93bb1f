# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Layered settings loading from TOML documents."""

from __future__ import annotations

import tomllib
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any, Final, Protocol

from pydantic import ValidationError

from ..errors import ConfigError
from .models import PmdPlusSettings

PROJECT_CONFIG_NAME: Final[str] = ".pmdplus.toml"
PYPROJECT_NAME: Final[str] = "pyproject.toml"
PYPROJECT_TOOL_KEY: Final[str] = "tool"
PYPROJECT_SECTION_KEY: Final[str] = "pmdplus"


class SettingsSource(Protocol):
    """Provide a fragment of raw settings data."""

    name: str

    def load(self) -> Mapping[str, Any]:
        """Return the raw settings fragment supplied by this source."""
        ...


class TomlSettingsSource:
    """Load settings from a standalone TOML document."""

    def __init__(self, path: Path, *, name: str | None = None) -> None:
        self._path = path
        self.name = name or str(path)

    def load(self) -> Mapping[str, Any]:
        if not self._path.is_file():
            return {}
        try:
            with self._path.open("rb") as handle:
                data = tomllib.load(handle)
        except tomllib.TOMLDecodeError as exc:
            raise ConfigError(f"Invalid TOML in {self._path}: {exc}") from exc
        except OSError as exc:
            raise ConfigError(f"Unable to read {self._path}: {exc}") from exc
        return data


class PyProjectSettingsSource(TomlSettingsSource):
    """Read settings from ``[tool.pmdplus]`` within ``pyproject.toml``."""

    def load(self) -> Mapping[str, Any]:
        data = super().load()
        tool_section = data.get(PYPROJECT_TOOL_KEY)
        if not isinstance(tool_section, Mapping):
            return {}
        section = tool_section.get(PYPROJECT_SECTION_KEY)
        if not isinstance(section, Mapping):
            return {}
        return dict(section)


class SettingsLoader:
    """Apply settings sources with predictable precedence (later wins)."""

    def __init__(self, sources: Sequence[SettingsSource]) -> None:
        self._sources = list(sources)

    @classmethod
    def for_root(cls, workspace_root: Path, *, config_file: Path | None = None) -> SettingsLoader:
        """Build a loader reading ``pyproject.toml`` then ``.pmdplus.toml``.

        Args:
            workspace_root: Workspace directory holding the configuration files.
            config_file: Optional explicit replacement for ``.pmdplus.toml``.

        Returns:
            SettingsLoader: Loader configured with default precedence ordering.
        """

        project_file = config_file if config_file is not None else workspace_root / PROJECT_CONFIG_NAME
        return cls(
            [
                PyProjectSettingsSource(workspace_root / PYPROJECT_NAME),
                TomlSettingsSource(project_file),
            ],
        )

    def load(self) -> PmdPlusSettings:
        """Merge every source and validate the result.

        Returns:
            PmdPlusSettings: Validated settings snapshot.

        Raises:
            ConfigError: If a source cannot be parsed or the merged data is invalid.
        """

        merged: dict[str, Any] = {}
        for source in self._sources:
            merged.update(PmdPlusSettings.canonical_keys(source.load()))
        try:
            return PmdPlusSettings.model_validate(merged)
        except ValidationError as exc:
            raise ConfigError(f"Invalid PMD+ settings: {exc}") from exc


def load_settings(workspace_root: Path, *, config_file: Path | None = None) -> PmdPlusSettings:
    """Return the settings that apply to ``workspace_root``."""

    return SettingsLoader.for_root(workspace_root, config_file=config_file).load()


__all__ = [
    "PROJECT_CONFIG_NAME",
    "PyProjectSettingsSource",
    "SettingsLoader",
    "SettingsSource",
    "TomlSettingsSource",
    "load_settings",
]
